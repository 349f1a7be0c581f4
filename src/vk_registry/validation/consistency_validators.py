"""Validators for registry consistency checks."""

from __future__ import annotations

from vk_registry.validation.base import BaseValidator, RegistryContext
from vk_registry.validation.errors import ErrorCodes, ValidationResult

# Codes the enum value calculator reports that no other validator covers
ENUM_VALUE_CODES = frozenset(
    {
        ErrorCodes.E101_CONFLICTING_ENUM_VALUE,
        ErrorCodes.E301_INVALID_INTEGER,
        ErrorCodes.E305_MISSING_EXTENSION_NUMBER,
    }
)


class AliasCycleValidator(BaseValidator):
    """Reports every alias chain that loops back on itself."""

    def validate(
        self,
        ctx: RegistryContext,
        result: ValidationResult,
    ) -> None:
        """Build the alias index, collecting one E200 per cycle."""
        ctx.aliases.build_index(result)


class EnumValueValidator(BaseValidator):
    """Validates that every enum constant has exactly one computable value."""

    def validate(
        self,
        ctx: RegistryContext,
        result: ValidationResult,
    ) -> None:
        """Forward conflicts and uncomputable values found by the calculator."""
        for issue in ctx.enum_values.result.issues:
            if issue.code in ENUM_VALUE_CODES:
                result.add(issue)


class UniqueExtensionNumberValidator(BaseValidator):
    """Validates that extension numbers are unique."""

    def validate(
        self,
        ctx: RegistryContext,
        result: ValidationResult,
    ) -> None:
        """Check for duplicate extension numbers."""
        seen_numbers: dict[int, str] = {}

        for extension in ctx.registry.extension_list:
            number = extension.number

            if number in seen_numbers:
                result.add_warning(
                    code=ErrorCodes.W020_DUPLICATE_EXTENSION_NUMBER,
                    message=(
                        f"Extension '{extension.name}' has duplicate number {number}, "
                        f"already used by '{seen_numbers[number]}'"
                    ),
                    path=f'extensions/extension[@name="{extension.name}"]/@number',
                    suggestion="Offset enums of both extensions would collide",
                )
            else:
                seen_numbers[number] = extension.name
