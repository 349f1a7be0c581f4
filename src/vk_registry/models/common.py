"""Common types and validators for Pydantic models."""

from __future__ import annotations

import re
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer


class RegistryModel(BaseModel):
    """Base class for all registry tables.

    Instances are immutable once built so a registry can be shared
    read-only between concurrent consumers.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", use_enum_values=False)


class EntityKind(str, Enum):
    """Kinds of named entities that can be required, removed or aliased."""

    TYPE = "type"
    COMMAND = "command"
    ENUM = "enum"


_C_INT_SUFFIX = re.compile(r"(?i)(ull|ul|ll|u|l)$")


def parse_integer(value: Any) -> int:
    """Parse a value that can be either an integer or a hex/decimal string.

    Args:
    ----
        value: Input value - int, or str such as "0x3B9ACA00", "12" or "-3"

    Returns:
    -------
        Parsed integer value

    Raises:
    ------
        ValueError: If the value cannot be parsed as an integer

    Examples:
    --------
        >>> parse_integer("0x10")
        16
        >>> parse_integer("1000")
        1000
        >>> parse_integer("-2")
        -2

    """
    if value is None:
        raise ValueError("Value cannot be None")

    if isinstance(value, bool):
        raise ValueError(f"Cannot parse bool as integer: {value}")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        text = value.strip()
        negative = text.startswith("-")
        if negative:
            text = text[1:].strip()
        try:
            if text.lower().startswith("0x"):
                parsed = int(text, 16)
            else:
                parsed = int(text, 10)
        except ValueError as e:
            raise ValueError(f"Value '{value}' is not valid base 10 or 16 integer") from e
        return -parsed if negative else parsed

    raise ValueError(f"Cannot parse {type(value).__name__} as integer: {value}")


def strip_c_suffix(text: str) -> str:
    """Remove a C integer literal suffix (U, L, UL, ULL, LL)."""
    return _C_INT_SUFFIX.sub("", text.strip())


def serialize_hex_int(value: int) -> str:
    """Serialize an integer to a hex string (e.g. "0x10DE")."""
    return f"0x{value:X}"


def split_comma_list(value: Any) -> tuple[str, ...]:
    """Split a comma-separated attribute into its stripped, non-empty parts."""
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(",") if part.strip())
    return tuple(value)


# Integer attribute that accepts both "0x10DE" and 4318
HexInt = Annotated[
    int,
    BeforeValidator(parse_integer),
    PlainSerializer(serialize_hex_int, return_type=str),
]

# Comma-separated attribute such as api="vulkan,vulkansc"
CommaList = Annotated[tuple[str, ...], BeforeValidator(split_comma_list)]


def api_matches(apis: tuple[str, ...], api: str | None) -> bool:
    """Return True when an api-restricted entity applies to ``api``.

    Entities without an api list apply to every API; a ``None`` target
    matches everything.
    """
    if not apis or api is None:
        return True
    return api in apis
