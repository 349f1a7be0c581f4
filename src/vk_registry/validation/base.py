"""Base validator class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from vk_registry.models.common import EntityKind
from vk_registry.validation.errors import ValidationResult

if TYPE_CHECKING:
    from vk_registry.models.registry import Registry
    from vk_registry.resolve.aliases import AliasResolver
    from vk_registry.resolve.enum_values import EnumValueTable

# C types a registry may use without declaring them
C_BUILTIN_TYPES = frozenset(
    {
        "void",
        "char",
        "int",
        "float",
        "double",
        "size_t",
        "int8_t",
        "uint8_t",
        "int16_t",
        "uint16_t",
        "int32_t",
        "uint32_t",
        "int64_t",
        "uint64_t",
    }
)


class RegistryContext:
    """The registry being validated plus lazily computed helpers.

    Shared by all validators of one run so the alias resolver and the
    enum value table are computed once.
    """

    def __init__(self, registry: Registry, aliases: AliasResolver | None = None) -> None:
        """Initialize the context.

        Args:
        ----
            registry: Registry to validate.
            aliases: Alias resolver to reuse; created on demand when None.

        """
        self.registry = registry
        self._aliases = aliases
        self._enum_values: EnumValueTable | None = None
        self._constants: set[str] | None = None
        self._feature_names: set[str] | None = None

    @property
    def aliases(self) -> AliasResolver:
        """Alias resolver over the registry."""
        if self._aliases is None:
            from vk_registry.resolve.aliases import AliasResolver

            self._aliases = AliasResolver(self.registry)
        return self._aliases

    @property
    def enum_values(self) -> EnumValueTable:
        """Computed enum values."""
        if self._enum_values is None:
            from vk_registry.resolve.enum_values import EnumValueCalculator

            self._enum_values = EnumValueCalculator(self.registry, self.aliases).calculate()
        return self._enum_values

    @property
    def constants(self) -> set[str]:
        """Names of all declared enum constants."""
        if self._constants is None:
            self._constants = self.registry.constant_names()
        return self._constants

    @property
    def interface_names(self) -> set[str]:
        """Names of all features and extensions."""
        if self._feature_names is None:
            self._feature_names = {f.name for f in self.registry.feature_list} | {
                e.name for e in self.registry.extension_list
            }
        return self._feature_names

    def canonical(self, name: str, kind: EntityKind = EntityKind.TYPE) -> str:
        """Resolve an alias, leaving names inside a cycle unchanged."""
        from vk_registry.resolve.aliases import AliasCycleError

        try:
            return self.aliases.resolve(name, kind)
        except AliasCycleError:
            return name

    def type_exists(self, name: str) -> bool:
        """Return True when ``name`` (or its canonical name) is a declared type."""
        if name in C_BUILTIN_TYPES or name in self.registry.types:
            return True
        return self.canonical(name) in self.registry.types

    def command_exists(self, name: str) -> bool:
        """Return True when ``name`` (or its canonical name) is a declared command."""
        if name in self.registry.commands:
            return True
        return self.canonical(name, EntityKind.COMMAND) in self.registry.commands

    def constant_exists(self, name: str) -> bool:
        """Return True when ``name`` (or its canonical name) is a declared enum constant."""
        if name in self.constants:
            return True
        return self.canonical(name, EntityKind.ENUM) in self.constants


class BaseValidator(ABC):
    """Base class for validators."""

    @abstractmethod
    def validate(
        self,
        ctx: RegistryContext,
        result: ValidationResult,
    ) -> None:
        """Validate the registry and add issues to result.

        Args:
        ----
            ctx: The registry under validation and its helpers.
            result: The result object to add issues to.

        """
        ...


class CompositeValidator(BaseValidator):
    """Combines multiple validators."""

    def __init__(self, validators: list[BaseValidator] | None = None) -> None:
        """Initialize with optional list of validators.

        Args:
        ----
            validators: List of validators to combine.

        """
        self.validators = validators or []

    def add(self, validator: BaseValidator) -> None:
        """Add a validator.

        Args:
        ----
            validator: Validator to add.

        """
        self.validators.append(validator)

    def validate(
        self,
        ctx: RegistryContext,
        result: ValidationResult,
    ) -> None:
        """Run all validators.

        Args:
        ----
            ctx: The registry under validation and its helpers.
            result: The result object to add issues to.

        """
        for validator in self.validators:
            validator.validate(ctx, result)
