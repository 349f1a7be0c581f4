"""Alias chain resolution for types, commands and enum constants."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from vk_registry.models.common import EntityKind
from vk_registry.models.registry import Registry
from vk_registry.validation.errors import ErrorCodes, ValidationResult

logger = logging.getLogger(__name__)


class AliasCycleError(Exception):
    """Raised when an alias chain loops back on itself."""

    def __init__(self, chain: list[str], kind: EntityKind) -> None:
        """Initialize AliasCycleError.

        Args:
        ----
            chain: Names visited, ending with the name seen twice.
            kind: Entity kind of the chain.

        """
        self.chain = tuple(chain)
        self.kind = kind
        super().__init__(f"Alias cycle in {kind.value}s: {' -> '.join(chain)}")


@dataclass(frozen=True)
class AliasIndex:
    """Alias name -> canonical name, per entity kind.

    Only names declared as aliases appear; ``canonical`` returns any other
    name unchanged.
    """

    types: dict[str, str] = field(default_factory=dict)
    commands: dict[str, str] = field(default_factory=dict)
    enums: dict[str, str] = field(default_factory=dict)
    cycles: tuple[tuple[str, ...], ...] = ()

    def table(self, kind: EntityKind) -> dict[str, str]:
        """Mapping for one entity kind."""
        if kind is EntityKind.TYPE:
            return self.types
        if kind is EntityKind.COMMAND:
            return self.commands
        return self.enums

    def canonical(self, name: str, kind: EntityKind = EntityKind.TYPE) -> str:
        """Canonical name of ``name``."""
        return self.table(kind).get(name, name)


class AliasResolver:
    """Follow ``alias`` attributes to their canonical declarations.

    The resolver only reads the registry; resolved names are cached on the
    instance.

    Usage:
        resolver = AliasResolver(registry)
        resolver.resolve("VkPhysicalDeviceFeatures2KHR")  # "VkPhysicalDeviceFeatures2"
    """

    def __init__(self, registry: Registry) -> None:
        """Initialize the resolver.

        Args:
        ----
            registry: Registry whose alias declarations are followed.

        """
        self._edges: dict[EntityKind, dict[str, str]] = {kind: {} for kind in EntityKind}
        self._cache: dict[EntityKind, dict[str, str]] = {kind: {} for kind in EntityKind}

        for name, entries in registry.types.items():
            for entry in entries:
                if entry.alias:
                    self._edges[EntityKind.TYPE].setdefault(name, entry.alias)
        for name, entries in registry.commands.items():
            for entry in entries:
                if entry.alias:
                    self._edges[EntityKind.COMMAND].setdefault(name, entry.alias)
        for decl in registry.enum_declarations():
            if decl.value.alias:
                self._edges[EntityKind.ENUM].setdefault(decl.value.name, decl.value.alias)

        logger.debug(
            "Alias edges: %d types, %d commands, %d enums",
            *(len(self._edges[kind]) for kind in EntityKind),
        )

    def alias_target(self, name: str, kind: EntityKind = EntityKind.TYPE) -> str | None:
        """Direct alias target of ``name`` (one hop), if any."""
        return self._edges[kind].get(name)

    def alias_sources(self, kind: EntityKind) -> dict[str, str]:
        """All direct alias declarations of a kind."""
        return dict(self._edges[kind])

    def is_alias(self, name: str, kind: EntityKind = EntityKind.TYPE) -> bool:
        """Return True when ``name`` is declared as an alias."""
        return name in self._edges[kind]

    def resolve(self, name: str, kind: EntityKind = EntityKind.TYPE) -> str:
        """Follow the alias chain starting at ``name``.

        Args:
        ----
            name: Any name; unknown or non-aliased names resolve to themselves.
            kind: Entity kind to look in.

        Returns:
        -------
            The first name of the chain that has no alias.

        Raises:
        ------
            AliasCycleError: If the chain revisits a name.

        """
        cache = self._cache[kind]
        if name in cache:
            return cache[name]

        edges = self._edges[kind]
        chain = [name]
        seen = {name}
        current = name
        while current in edges:
            target = edges[current]
            if target in cache:
                current = cache[target]
                break
            if target in seen:
                raise AliasCycleError([*chain, target], kind)
            chain.append(target)
            seen.add(target)
            current = target

        for visited in chain:
            cache[visited] = current
        return current

    def build_index(self, result: ValidationResult | None = None) -> AliasIndex:
        """Resolve every alias of every kind.

        Cycles do not abort the index; each is recorded once (as ``E200``
        when a result is given) and its members are left out of the index.

        Args:
        ----
            result: Optional result receiving one error per cycle.

        Returns:
        -------
            AliasIndex with all resolvable aliases.

        """
        tables: dict[EntityKind, dict[str, str]] = {kind: {} for kind in EntityKind}
        cycles: list[tuple[str, ...]] = []
        reported: set[frozenset[str]] = set()

        for kind in EntityKind:
            for name in sorted(self._edges[kind]):
                try:
                    tables[kind][name] = self.resolve(name, kind)
                except AliasCycleError as e:
                    loop = frozenset(e.chain[e.chain.index(e.chain[-1]) :])
                    if loop in reported:
                        continue
                    reported.add(loop)
                    cycles.append(e.chain)
                    if result is not None:
                        result.add_error(
                            ErrorCodes.E200_ALIAS_CYCLE,
                            str(e),
                            f"{kind.value}[@name=\"{name}\"]",
                            suggestion="Make one name of the chain a concrete declaration",
                            chain=list(e.chain),
                        )

        return AliasIndex(
            types=tables[EntityKind.TYPE],
            commands=tables[EntityKind.COMMAND],
            enums=tables[EntityKind.ENUM],
            cycles=tuple(cycles),
        )
