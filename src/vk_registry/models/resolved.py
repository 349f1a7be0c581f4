"""Model of a materialized API surface produced by the merger."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from vk_registry.models.common import EntityKind, RegistryModel


class MergeWarning(RegistryModel):
    """A non-fatal event of a merge: skipped extension or guarded block."""

    code: str
    message: str
    source: str
    informational: bool = False


class MergeStepAction(str, Enum):
    """What a merge log entry did to the inclusion set."""

    ADD = "add"
    REMOVE = "remove"
    IGNORE = "ignore"


class MergeStep(RegistryModel):
    """One entry of the ordered merge log."""

    source: str
    action: MergeStepAction
    kind: EntityKind
    name: str
    canonical: str


class ResolvedRegistry(RegistryModel):
    """The inclusion set for one (api, version, extensions) request.

    All name collections are sorted so that equal requests serialize to
    identical output.
    """

    api: str
    version: str | None = None
    features: tuple[str, ...] = ()
    extensions: tuple[str, ...] = ()
    types: tuple[str, ...] = ()
    commands: tuple[str, ...] = ()
    enums: tuple[str, ...] = ()
    enum_values: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    aliases: dict[str, str] = Field(default_factory=dict)
    warnings: tuple[MergeWarning, ...] = ()
    log: tuple[MergeStep, ...] = ()

    def includes(self, kind: EntityKind, name: str) -> bool:
        """Return True when a canonical or alias name is part of the surface."""
        name = self.aliases.get(name, name)
        if kind is EntityKind.TYPE:
            return name in self.types
        if kind is EntityKind.COMMAND:
            return name in self.commands
        return name in self.enums

    def names(self, kind: EntityKind) -> tuple[str, ...]:
        """Included canonical names of a kind."""
        if kind is EntityKind.TYPE:
            return self.types
        if kind is EntityKind.COMMAND:
            return self.commands
        return self.enums
