"""Computation of concrete enum constant values."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from vk_registry.models.common import EntityKind, api_matches, parse_integer, strip_c_suffix
from vk_registry.models.enums import AliasSpec, BitposSpec, LiteralSpec, OffsetSpec
from vk_registry.models.registry import EnumDeclaration, Registry
from vk_registry.resolve.aliases import AliasCycleError, AliasResolver
from vk_registry.validation.errors import ErrorCodes, ValidationResult

logger = logging.getLogger(__name__)

# Extension enums are allocated in blocks of ENUM_RANGE_SIZE starting at ENUM_BASE_VALUE
ENUM_BASE_VALUE = 1_000_000_000
ENUM_RANGE_SIZE = 1000

EnumConstant = int | float | str

_COMPLEMENT = re.compile(r"\(\s*~\s*(\d+)\s*(ULL|UL|U)?\s*\)", re.IGNORECASE)
_FLOAT = re.compile(r"-?(\d+\.\d*|\.\d+)([eE][-+]?\d+)?[fF]?")


def extension_enum_value(extnumber: int, offset: int, negative: bool = False) -> int:
    """Value of an enum allocated at ``offset`` in extension ``extnumber``'s range.

    Examples
    --------
        >>> extension_enum_value(1, 0)
        1000000000
        >>> extension_enum_value(2, 0, negative=True)
        -1000001000

    """
    value = ENUM_BASE_VALUE + (extnumber - 1) * ENUM_RANGE_SIZE + offset
    return -value if negative else value


def parse_enum_literal(text: str) -> EnumConstant:
    """Interpret the ``value`` attribute of an enum.

    Handles decimal and hex integers with C suffixes, ``(~0U)`` style
    unsigned complements, float literals such as ``1000.0F`` and quoted
    strings.

    Raises
    ------
        ValueError: If the literal is not understood.

    """
    value = text.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]

    complement = _COMPLEMENT.fullmatch(value)
    if complement:
        width = 64 if (complement.group(2) or "").upper() == "ULL" else 32
        return ~int(complement.group(1)) & ((1 << width) - 1)

    if _FLOAT.fullmatch(value):
        return float(value.rstrip("fF"))

    if value.startswith("(") and value.endswith(")"):
        value = value[1:-1]
    return parse_integer(strip_c_suffix(value))


@dataclass(frozen=True)
class ComputedEnum:
    """A computed enum constant."""

    name: str
    value: EnumConstant
    container: str | None
    origin: str | None = None
    alias_of: str | None = None
    api: tuple[str, ...] = ()


@dataclass
class EnumValueTable:
    """All computed enum values, by name and by container."""

    values: dict[str, list[ComputedEnum]] = field(default_factory=dict)
    containers: dict[str, list[ComputedEnum]] = field(default_factory=dict)
    result: ValidationResult = field(default_factory=ValidationResult)

    def get(self, name: str, api: str | None = None) -> EnumConstant | None:
        """Value of a constant, or None if it was not computed."""
        entry = self.entry(name, api)
        return entry.value if entry else None

    def entry(self, name: str, api: str | None = None) -> ComputedEnum | None:
        """Computed record of a constant."""
        for candidate in self.values.get(name, ()):
            if api_matches(candidate.api, api):
                return candidate
        return None

    def container_values(self, container: str) -> tuple[ComputedEnum, ...]:
        """Computed values grouped under an enum container, in declaration order."""
        return tuple(self.containers.get(container, ()))

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def __len__(self) -> int:
        return len(self.values)


class EnumValueCalculator:
    """Derive the numeric value of every enum declaration.

    Usage:
        table = EnumValueCalculator(registry).calculate()
        table.get("VK_ERROR_SURFACE_LOST_KHR")  # -1000000000
    """

    def __init__(self, registry: Registry, aliases: AliasResolver | None = None) -> None:
        """Initialize the calculator.

        Args:
        ----
            registry: Registry to compute values for.
            aliases: Alias resolver; one is created when not given.

        """
        self._registry = registry
        self._aliases = aliases or AliasResolver(registry)
        self._table: EnumValueTable | None = None

    def calculate(self) -> EnumValueTable:
        """Compute all values. The table is cached on the calculator.

        Returns
        -------
            EnumValueTable with values and any E101/E301/E305/E004/E200 issues.

        """
        if self._table is not None:
            return self._table

        table = EnumValueTable()
        deferred: list[EnumDeclaration] = []

        for decl in self._registry.enum_declarations():
            spec = decl.value.spec
            if isinstance(spec, AliasSpec):
                deferred.append(decl)
                continue
            value = self._direct_value(decl, table.result)
            if value is not None:
                self._record(table, decl, value, None)

        for decl in deferred:
            self._resolve_alias(table, decl)

        logger.debug("Computed %d enum constants", len(table.values))
        self._table = table
        return table

    def _direct_value(self, decl: EnumDeclaration, result: ValidationResult) -> EnumConstant | None:
        spec = decl.value.spec
        path = _declaration_path(decl)

        if isinstance(spec, LiteralSpec):
            try:
                return parse_enum_literal(spec.value)
            except ValueError:
                result.add_error(
                    ErrorCodes.E301_INVALID_INTEGER,
                    f"Enum '{decl.value.name}' has an unparseable value '{spec.value}'",
                    path,
                )
                return None

        if isinstance(spec, BitposSpec):
            return 1 << spec.bitpos

        if isinstance(spec, OffsetSpec):
            extnumber = spec.extnumber
            if extnumber is None and decl.extension is not None:
                extnumber = decl.extension.number
            if extnumber is None:
                result.add_error(
                    ErrorCodes.E305_MISSING_EXTENSION_NUMBER,
                    f"Enum '{decl.value.name}' uses an offset but no extension number is known",
                    path,
                    suggestion="Add an 'extnumber' attribute",
                )
                return None
            return extension_enum_value(extnumber, spec.offset, spec.negative)

        # Bare references carry no value
        return None

    def _resolve_alias(self, table: EnumValueTable, decl: EnumDeclaration) -> None:
        name = decl.value.name
        path = _declaration_path(decl)
        try:
            canonical = self._aliases.resolve(name, EntityKind.ENUM)
        except AliasCycleError as e:
            table.result.add_error(ErrorCodes.E200_ALIAS_CYCLE, str(e), path)
            return

        api = _effective_api(decl)
        target = table.entry(canonical, api[0] if api else None)
        if target is None:
            table.result.add_error(
                ErrorCodes.E004_UNDEFINED_ALIAS_TARGET,
                f"Enum '{name}' aliases '{decl.value.alias}' which has no value",
                path,
            )
            return
        self._record(table, decl, target.value, canonical)

    def _record(
        self,
        table: EnumValueTable,
        decl: EnumDeclaration,
        value: EnumConstant,
        alias_of: str | None,
    ) -> None:
        name = decl.value.name
        api = _effective_api(decl)
        for existing in table.values.get(name, ()):
            if existing.api and api and not set(existing.api) & set(api):
                continue
            if existing.value != value:
                table.result.add_error(
                    ErrorCodes.E101_CONFLICTING_ENUM_VALUE,
                    f"Enum '{name}' is declared with value {value!r} "
                    f"but was already {existing.value!r}",
                    _declaration_path(decl),
                    first_origin=existing.origin,
                    second_origin=decl.origin,
                )
            # Same value again (e.g. an extension enum re-required by a core version)
            return

        computed = ComputedEnum(
            name=name,
            value=value,
            container=decl.container,
            origin=decl.origin,
            alias_of=alias_of,
            api=api,
        )
        table.values.setdefault(name, []).append(computed)
        if decl.container is not None:
            table.containers.setdefault(decl.container, []).append(computed)


def _effective_api(decl: EnumDeclaration) -> tuple[str, ...]:
    if decl.value.api:
        return decl.value.api
    if decl.block is not None:
        return decl.block.api
    return ()


def _declaration_path(decl: EnumDeclaration) -> str:
    if decl.origin is not None:
        return f'{decl.origin}/enum[@name="{decl.value.name}"]'
    return f'enums[@name="{decl.container}"]/enum[@name="{decl.value.name}"]'
