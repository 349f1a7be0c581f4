"""Translate Pydantic errors to user-friendly messages."""

from __future__ import annotations

from pydantic_core import ErrorDetails

# Translation map for Pydantic error types
ERROR_TRANSLATIONS: dict[str, str] = {
    "missing": "This field is required but was not provided",
    "extra_forbidden": "This field is not allowed in this context",
    "string_type": "Must be a string",
    "int_type": "Must be an integer",
    "bool_type": "Must be true or false",
    "bool_parsing": "Must be true or false",
    "enum": "Must be one of the allowed values",
    "literal_error": "Must be one of the allowed values",
    "value_error": "Invalid value",
    "string_pattern_mismatch": "Does not match the required pattern",
    "string_too_short": "String is too short",
    "greater_than_equal": "Value is too small",
    "less_than_equal": "Value is too large",
    "union_tag_invalid": "Unknown variant",
}


def translate_pydantic_error(error: ErrorDetails) -> str:
    """Translate a Pydantic error to a user-friendly message.

    Args:
    ----
        error: The Pydantic error details.

    Returns:
    -------
        User-friendly error message.

    """
    error_type = error["type"]
    ctx = error.get("ctx") or {}

    base_msg = ERROR_TRANSLATIONS.get(error_type, error["msg"])

    if error_type in ("enum", "literal_error"):
        base_msg = f"Must be one of: {ctx.get('expected', 'unknown')}"
    elif error_type == "string_pattern_mismatch":
        base_msg = f"Does not match pattern: {ctx.get('pattern', '')}"
    elif error_type == "string_too_short":
        base_msg = f"Must be at least {ctx.get('min_length', 0)} characters"
    elif error_type == "greater_than_equal":
        base_msg = f"Must be at least {ctx.get('ge', 0)}"
    elif error_type == "less_than_equal":
        base_msg = f"Must be at most {ctx.get('le', 0)}"

    return base_msg


def format_pydantic_location(loc: tuple[str | int, ...]) -> str:
    """Format Pydantic location tuple to readable path.

    Example:
    -------
        ``("merge", "remove_precedence")`` becomes ``merge.remove_precedence``
        and ``("extensions", 2)`` becomes ``extensions[2]``.

    """
    parts: list[str] = []
    for part in loc:
        if isinstance(part, int):
            parts.append(f"[{part}]")
        else:
            if parts:
                parts.append(".")
            parts.append(str(part))

    return "".join(parts)


def get_suggestion_for_error(error: ErrorDetails) -> str | None:
    """Get a suggestion for how to fix the error, if there is a common one."""
    ctx = error.get("ctx") or {}

    suggestions: dict[str, str] = {
        "missing": "Add the required field to your configuration",
        "extra_forbidden": "Remove this field or check for typos",
        "enum": f"Use one of the allowed values: {ctx.get('expected', 'see --help')}",
        "literal_error": f"Use one of the allowed values: {ctx.get('expected', 'see --help')}",
        "string_pattern_mismatch": "Versions are written as MAJOR.MINOR, e.g. 1.3",
    }

    return suggestions.get(error["type"])
