"""Main validator combining all validation rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from vk_registry.models.common import EntityKind
from vk_registry.models.types import TypeCategory
from vk_registry.validation.base import C_BUILTIN_TYPES, CompositeValidator, RegistryContext
from vk_registry.validation.consistency_validators import (
    AliasCycleValidator,
    EnumValueValidator,
    UniqueExtensionNumberValidator,
)
from vk_registry.validation.errors import ErrorCodes, ValidationResult, ValidationSeverity
from vk_registry.validation.reference_validators import (
    AliasTargetValidator,
    CommandReferenceValidator,
    InterfaceReferenceValidator,
    RequiresReferenceValidator,
    TypeReferenceValidator,
)

if TYPE_CHECKING:
    from vk_registry.models.registry import Registry
    from vk_registry.models.resolved import ResolvedRegistry
    from vk_registry.models.types import Declaration
    from vk_registry.resolve.aliases import AliasResolver


class RegistryValidator:
    """Main validator for built registries.

    Combines reference validators (the cross-reference linker) and
    consistency validators (alias cycles, enum values, extension numbers).
    Validates the whole unmerged document; use ``validate_surface`` to check
    one resolved surface.
    """

    def __init__(self, strict: bool = False) -> None:
        """Initialize validator.

        Args:
        ----
            strict: If True, treat warnings as errors.

        """
        self.strict = strict
        self._validator = CompositeValidator(
            [
                # Reference validators
                TypeReferenceValidator(),
                CommandReferenceValidator(),
                RequiresReferenceValidator(),
                AliasTargetValidator(),
                InterfaceReferenceValidator(),
                # Consistency validators
                AliasCycleValidator(),
                EnumValueValidator(),
                UniqueExtensionNumberValidator(),
            ]
        )

    def validate(self, registry: Registry, aliases: AliasResolver | None = None) -> ValidationResult:
        """Validate a registry.

        Args:
        ----
            registry: The registry to validate.
            aliases: Alias resolver to reuse, if one already exists.

        Returns:
        -------
            ValidationResult with all issues found.

        """
        result = ValidationResult()
        self._validator.validate(RegistryContext(registry, aliases), result)
        return result

    def validate_and_raise(self, registry: Registry) -> None:
        """Validate and raise exception if invalid.

        Args:
        ----
            registry: The registry to validate.

        Raises:
        ------
            RegistryValidationError: If validation fails.

        """
        result = self.validate(registry)

        if not result.is_valid:
            raise RegistryValidationError(result)

        if self.strict and result.warnings:
            raise RegistryValidationError(result)


def validate_surface(
    registry: Registry,
    resolved: ResolvedRegistry,
    aliases: AliasResolver | None = None,
) -> ValidationResult:
    """Check that a resolved surface is closed under type references.

    Every type used by an included struct, function pointer or command must
    itself be included; otherwise a ``W021`` warning names the referencing
    entity and the missing type. Platform scalars (types without a
    category) and C builtins are exempt.

    Args:
    ----
        registry: Registry the surface was resolved from.
        resolved: The resolved surface.
        aliases: Alias resolver to reuse.

    Returns:
    -------
        ValidationResult with one warning per missing reference.

    """
    ctx = RegistryContext(registry, aliases)
    result = ValidationResult()
    included = set(resolved.types)

    def check(owner: str, declaration: Declaration, path: str) -> None:
        name = declaration.type_name
        if name in C_BUILTIN_TYPES:
            return
        canonical = ctx.canonical(name)
        entry = registry.get_type(canonical, resolved.api)
        if entry is None or canonical in included:
            return
        if entry.raw_category is None or entry.category is TypeCategory.INCLUDE:
            return
        result.add_warning(
            code=ErrorCodes.W021_OUTSIDE_SURFACE,
            message=f"'{owner}' uses '{name}' which is not part of the resolved surface",
            path=path,
            entity=owner,
            referenced_type=name,
        )

    for name in resolved.names(EntityKind.TYPE):
        entry = registry.get_type(name, resolved.api)
        if entry is None:
            continue
        for member in entry.members:
            if member.api and resolved.api not in member.api:
                continue
            path = f'types/type[@name="{name}"]/member[@name="{member.name}"]'
            check(name, member.declaration, path)
        if entry.funcpointer is not None:
            for declaration in (entry.funcpointer.proto, *entry.funcpointer.params):
                check(name, declaration, f'types/type[@name="{name}"]')

    for name in resolved.names(EntityKind.COMMAND):
        command = registry.get_command(name, resolved.api)
        if command is None or command.proto is None:
            continue
        check(name, command.proto, f'commands/command[@name="{name}"]/proto')
        for param in command.params:
            if param.api and resolved.api not in param.api:
                continue
            path = f'commands/command[@name="{name}"]/param[@name="{param.name}"]'
            check(name, param.declaration, path)

    return result


class RegistryValidationError(Exception):
    """Raised when validation fails."""

    def __init__(self, result: ValidationResult) -> None:
        """Initialize with validation result.

        Args:
        ----
            result: The validation result containing issues.

        """
        self.result = result
        error_count = len(result.errors)
        warning_count = len(result.warnings)

        parts = []
        if error_count:
            parts.append(f"{error_count} error(s)")
        if warning_count:
            parts.append(f"{warning_count} warning(s)")

        message = f"Validation failed: {', '.join(parts)}"
        super().__init__(message)

    def format_issues(self) -> str:
        """Format all issues as a string.

        Returns
        -------
            Formatted string with all issues.

        """
        lines = []

        for issue in self.result.errors:
            lines.append(f"ERROR: {issue}")

        for issue in self.result.warnings:
            lines.append(f"WARNING: {issue}")

        return "\n".join(lines)

    @property
    def errors_only(self) -> list[str]:
        """Get only error messages.

        Returns
        -------
            List of error message strings.

        """
        return [
            str(issue) for issue in self.result.issues if issue.severity == ValidationSeverity.ERROR
        ]
