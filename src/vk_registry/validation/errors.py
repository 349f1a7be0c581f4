"""Validation error types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class ValidationLocation:
    """Location in the registry document where an issue was found."""

    path: str
    """XPath-like path to the issue (e.g., 'registry/types/type[@name="VkExtent2D"]')."""

    line: int | None = None
    """Line number in the source file (if available)."""

    column: int | None = None
    """Column number in the source file (if available)."""

    def __str__(self) -> str:
        """Format location as string."""
        if self.line is not None:
            if self.column is not None:
                return f"{self.path} (line {self.line}, col {self.column})"
            return f"{self.path} (line {self.line})"
        return self.path


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation issue."""

    code: str
    """Unique error code (e.g., 'E001', 'W001')."""

    message: str
    """Human-readable error message."""

    severity: ValidationSeverity
    """Severity level."""

    location: ValidationLocation | None = None
    """Location in the registry document."""

    suggestion: str | None = None
    """Suggested fix."""

    context: dict[str, Any] = field(default_factory=dict)
    """Additional context for debugging."""

    def __str__(self) -> str:
        """Format issue as string."""
        parts = [f"[{self.code}]", self.severity.value.upper(), self.message]
        if self.location:
            parts.append(f"at {self.location}")
        if self.suggestion:
            parts.append(f"(hint: {self.suggestion})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of a build or validation pass containing all issues."""

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        """Get only error-level issues."""
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        """Get only warning-level issues."""
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    @property
    def infos(self) -> list[ValidationIssue]:
        """Get only info-level issues."""
        return [i for i in self.issues if i.severity == ValidationSeverity.INFO]

    @property
    def is_valid(self) -> bool:
        """Check if there are no errors (warnings are OK)."""
        return len(self.errors) == 0

    def by_code(self, code: str) -> list[ValidationIssue]:
        """Get all issues with the given code."""
        return [i for i in self.issues if i.code == code]

    def add(self, issue: ValidationIssue) -> None:
        """Add an issue to the result."""
        self.issues.append(issue)

    def _add(
        self,
        severity: ValidationSeverity,
        code: str,
        message: str,
        path: str,
        suggestion: str | None,
        context: dict[str, Any],
    ) -> None:
        self.add(
            ValidationIssue(
                code=code,
                message=message,
                severity=severity,
                location=ValidationLocation(path=path),
                suggestion=suggestion,
                context=context,
            )
        )

    def add_error(
        self,
        code: str,
        message: str,
        path: str,
        suggestion: str | None = None,
        **context: Any,
    ) -> None:
        """Add an error issue."""
        self._add(ValidationSeverity.ERROR, code, message, path, suggestion, context)

    def add_warning(
        self,
        code: str,
        message: str,
        path: str,
        suggestion: str | None = None,
        **context: Any,
    ) -> None:
        """Add a warning issue."""
        self._add(ValidationSeverity.WARNING, code, message, path, suggestion, context)

    def add_info(
        self,
        code: str,
        message: str,
        path: str,
        suggestion: str | None = None,
        **context: Any,
    ) -> None:
        """Add an informational issue."""
        self._add(ValidationSeverity.INFO, code, message, path, suggestion, context)

    def merge(self, other: ValidationResult) -> None:
        """Merge another result into this one, skipping issues already present."""
        for issue in other.issues:
            if issue not in self.issues:
                self.issues.append(issue)


class ErrorCodes:
    """Standard validation error codes."""

    # E0xx - Reference (link) errors
    E001_UNDEFINED_TYPE = "E001"
    E002_UNDEFINED_ENUM = "E002"
    E003_UNDEFINED_COMMAND = "E003"
    E004_UNDEFINED_ALIAS_TARGET = "E004"
    E005_UNDEFINED_EXTENSION = "E005"

    # E1xx - Duplicate errors
    E100_DUPLICATE_NAME = "E100"
    E101_CONFLICTING_ENUM_VALUE = "E101"

    # E2xx - Alias errors
    E200_ALIAS_CYCLE = "E200"

    # E3xx - Build (format) errors
    E300_MISSING_ATTRIBUTE = "E300"
    E301_INVALID_INTEGER = "E301"
    E302_INVALID_ATTRIBUTE_VALUE = "E302"
    E303_MISSING_ELEMENT = "E303"
    E304_AMBIGUOUS_ENUM_VALUE = "E304"
    E305_MISSING_EXTENSION_NUMBER = "E305"

    # W0xx - Warnings and notes
    W001_UNRECOGNIZED_ELEMENT = "W001"
    W010_UNSATISFIED_DEPENDENCY = "W010"
    W011_UNSUPPORTED_API = "W011"
    W012_UNKNOWN_EXTENSION = "W012"
    W013_GUARD_MISMATCH = "W013"
    W020_DUPLICATE_EXTENSION_NUMBER = "W020"
    W021_OUTSIDE_SURFACE = "W021"
