"""Validation module for built registries (the cross-reference linker)."""

from vk_registry.validation.errors import (
    ErrorCodes,
    ValidationIssue,
    ValidationLocation,
    ValidationResult,
    ValidationSeverity,
)
from vk_registry.validation.validator import (
    RegistryValidationError,
    RegistryValidator,
    validate_surface,
)

__all__ = [
    "ErrorCodes",
    "RegistryValidationError",
    "RegistryValidator",
    "ValidationIssue",
    "ValidationLocation",
    "ValidationResult",
    "ValidationSeverity",
    "validate_surface",
]
