"""Replay of feature and extension blocks into a materialized API surface."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict

from vk_registry.models.common import EntityKind, api_matches
from vk_registry.models.enums import EnumsKind
from vk_registry.models.features import BlockAction, Extension, Feature, InterfaceBlock, version_key
from vk_registry.models.registry import Registry
from vk_registry.models.resolved import MergeStep, MergeStepAction, MergeWarning, ResolvedRegistry
from vk_registry.resolve.aliases import AliasCycleError, AliasResolver
from vk_registry.resolve.depends import DependsSyntaxError, evaluate_depends
from vk_registry.validation.errors import ErrorCodes

logger = logging.getLogger(__name__)


class RemovePrecedence(str, Enum):
    """How a remove interacts with a later require of the same name."""

    LAST_APPLIED_WINS = "last_applied_wins"
    REMOVE_WINS = "remove_wins"


class MergeOptions(BaseModel):
    """Options for ``FeatureMerger``.

    Attributes
    ----------
        remove_precedence: With ``LAST_APPLIED_WINS`` a name removed by one
            block and required by a later one is included; with
            ``REMOVE_WINS`` it stays removed.
        profile: Only apply blocks whose ``profile`` guard matches; blocks
            of every profile apply when None.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    remove_precedence: RemovePrecedence = RemovePrecedence.LAST_APPLIED_WINS
    profile: str | None = None


@dataclass
class _Surface:
    """Mutable inclusion set the blocks are replayed into."""

    precedence: RemovePrecedence
    included: dict[EntityKind, set[str]] = field(
        default_factory=lambda: {kind: set() for kind in EntityKind}
    )
    removed: dict[EntityKind, set[str]] = field(
        default_factory=lambda: {kind: set() for kind in EntityKind}
    )
    extended: dict[str, dict[str, None]] = field(default_factory=dict)
    # Values declared inside a typed enums block, mapped to that block
    native: dict[str, str] = field(default_factory=dict)
    aliases: dict[str, str] = field(default_factory=dict)
    log: list[MergeStep] = field(default_factory=list)

    def add(self, source: str, kind: EntityKind, name: str, canonical: str) -> bool:
        if self.precedence is RemovePrecedence.REMOVE_WINS and canonical in self.removed[kind]:
            self._log(source, MergeStepAction.IGNORE, kind, name, canonical)
            return False
        self.included[kind].add(canonical)
        self.removed[kind].discard(canonical)
        if name != canonical:
            self.aliases[name] = canonical
        self._log(source, MergeStepAction.ADD, kind, name, canonical)
        return True

    def present(self, kind: EntityKind, canonical: str) -> bool:
        if canonical in self.included[kind]:
            return True
        if kind is not EntityKind.ENUM or canonical in self.removed[kind]:
            return False
        container = self.native.get(canonical)
        return container is not None and container in self.included[EntityKind.TYPE]

    def remove(self, source: str, kind: EntityKind, name: str, canonical: str) -> None:
        if not self.present(kind, canonical):
            # Removing an absent name is a no-op
            self._log(source, MergeStepAction.IGNORE, kind, name, canonical)
            return
        self.included[kind].discard(canonical)
        self.removed[kind].add(canonical)
        self._log(source, MergeStepAction.REMOVE, kind, name, canonical)

    def _log(
        self, source: str, action: MergeStepAction, kind: EntityKind, name: str, canonical: str
    ) -> None:
        self.log.append(
            MergeStep(source=source, action=action, kind=kind, name=name, canonical=canonical)
        )


class FeatureMerger:
    """Materialize the API surface of an (api, version, extensions) request.

    Features up to ``version`` are replayed in ascending version order,
    then the enabled extensions in a canonical order: repeated passes over
    the selection sorted by (number, name), accepting each extension once
    its dependencies are met. The result therefore does not depend on the
    order in which extensions are requested.

    Usage:
        merger = FeatureMerger(registry)
        surface = merger.merge("vulkan", version="1.1", extensions=["VK_KHR_surface"])
    """

    def __init__(
        self,
        registry: Registry,
        aliases: AliasResolver | None = None,
        options: MergeOptions | None = None,
    ) -> None:
        """Initialize the merger.

        Args:
        ----
            registry: Registry whose blocks are replayed.
            aliases: Alias resolver; one is created when not given.
            options: Merge options.

        """
        self._registry = registry
        self._aliases = aliases or AliasResolver(registry)
        self.options = options or MergeOptions()

    def merge(
        self,
        api: str,
        version: str | None = None,
        extensions: tuple[str, ...] | list[str] = (),
    ) -> ResolvedRegistry:
        """Build the inclusion set.

        Args:
        ----
            api: Target API family ("vulkan", "vulkansc", ...).
            version: Highest feature number to include; all features when None.
            extensions: Extension names to enable.

        Returns:
        -------
            ResolvedRegistry with sorted name sets, warnings and merge log.

        """
        warnings: list[MergeWarning] = []
        features = self._select_features(api, version)
        enabled: set[str] = {f.name for f in features}
        accepted = self._accept_extensions(api, features, extensions, enabled, warnings)

        surface = _Surface(self.options.remove_precedence, native=self._native_values(api))
        for feature in features:
            for block in feature.blocks:
                self._apply(block, feature.name, None, api, enabled, surface, warnings)
        for extension in accepted:
            for block in extension.blocks:
                self._apply(block, extension.name, extension, api, enabled, surface, warnings)

        resolved = self._finish(api, version, features, accepted, surface, warnings)
        logger.info(
            "Resolved %s %s with %d extensions: %d types, %d commands, %d enums",
            api,
            version or "(all versions)",
            len(accepted),
            len(resolved.types),
            len(resolved.commands),
            len(resolved.enums),
        )
        return resolved

    def _select_features(self, api: str, version: str | None) -> list[Feature]:
        features = [f for f in self._registry.feature_list if api in f.api]
        if version is not None:
            limit = version_key(version)
            features = [f for f in features if f.version <= limit]
        # sorted() is stable, so equal numbers keep document order
        return sorted(features, key=lambda f: f.version)

    def _accept_extensions(
        self,
        api: str,
        features: list[Feature],
        requested: tuple[str, ...] | list[str],
        enabled: set[str],
        warnings: list[MergeWarning],
    ) -> list[Extension]:
        declared: dict[str, Extension] = {}
        for entry in self._registry.extension_list:
            declared.setdefault(entry.name, entry)
        candidates: list[Extension] = []
        for name in sorted(set(requested)):
            extension = declared.get(name)
            if extension is None:
                warnings.append(
                    MergeWarning(
                        code=ErrorCodes.W012_UNKNOWN_EXTENSION,
                        message=f"Extension '{name}' is not declared in the registry",
                        source=name,
                    )
                )
            elif api not in extension.supported:
                warnings.append(
                    MergeWarning(
                        code=ErrorCodes.W011_UNSUPPORTED_API,
                        message=(
                            f"Extension '{name}' does not support '{api}' "
                            f"(supported: {','.join(extension.supported) or 'none'})"
                        ),
                        source=name,
                    )
                )
            else:
                candidates.append(extension)

        core_version = max((f.version for f in features), default=())
        pending = sorted(candidates, key=lambda e: (e.number, e.name))
        accepted: list[Extension] = []
        progress = True
        while pending and progress:
            progress = False
            waiting: list[Extension] = []
            for extension in pending:
                if self._dependencies_met(extension, enabled, core_version):
                    accepted.append(extension)
                    enabled.add(extension.name)
                    progress = True
                else:
                    waiting.append(extension)
            pending = waiting

        for extension in pending:
            requirement = extension.depends or ",".join(extension.requires) or extension.requires_core
            warnings.append(
                MergeWarning(
                    code=ErrorCodes.W010_UNSATISFIED_DEPENDENCY,
                    message=(
                        f"Extension '{extension.name}' skipped: dependency "
                        f"'{requirement}' is not satisfied"
                    ),
                    source=extension.name,
                )
            )
            logger.debug("Skipping %s: unmet dependency %s", extension.name, requirement)
        return accepted

    def _dependencies_met(
        self, extension: Extension, enabled: set[str], core_version: tuple[int, ...]
    ) -> bool:
        if extension.depends:
            try:
                return evaluate_depends(extension.depends, enabled.__contains__)
            except DependsSyntaxError:
                logger.warning(
                    "Unparseable depends '%s' on %s", extension.depends, extension.name
                )
                return False
        if not all(name in enabled for name in extension.requires):
            return False
        if extension.requires_core:
            return version_key(extension.requires_core) <= core_version
        return True

    def _native_values(self, api: str) -> dict[str, str]:
        native: dict[str, str] = {}
        for name, container in self._registry.enums.items():
            if container.kind is EnumsKind.CONSTANTS:
                continue
            for value in container.values:
                if not value.alias and api_matches(value.api, api):
                    native[value.name] = name
        return native

    def _guard_failure(self, block: InterfaceBlock, api: str, enabled: set[str]) -> str | None:
        """Why a block does not apply, or None when it does."""
        if not api_matches(block.api, api):
            return f"api '{','.join(block.api)}' does not include '{api}'"
        for attribute in ("depends", "extension", "feature"):
            expression = getattr(block, attribute)
            try:
                if not evaluate_depends(expression, enabled.__contains__):
                    return f"{attribute} '{expression}' is not satisfied"
            except DependsSyntaxError:
                return f"{attribute} '{expression}' cannot be parsed"
        profile = self.options.profile
        if block.profile and profile and block.profile != profile:
            return f"profile '{block.profile}' is not '{profile}'"
        return None

    def _canonical(self, name: str, kind: EntityKind) -> str:
        try:
            return self._aliases.resolve(name, kind)
        except AliasCycleError:
            logger.debug("Alias cycle at %s; keeping the name as is", name)
            return name

    def _apply(
        self,
        block: InterfaceBlock,
        source: str,
        extension: Extension | None,
        api: str,
        enabled: set[str],
        surface: _Surface,
        warnings: list[MergeWarning],
    ) -> None:
        reason = self._guard_failure(block, api, enabled)
        if reason is not None:
            warnings.append(
                MergeWarning(
                    code=ErrorCodes.W013_GUARD_MISMATCH,
                    message=f"{block.action.value} block of '{source}' skipped: {reason}",
                    source=source,
                    informational=True,
                )
            )
            return

        for item in block.items:
            canonical = self._canonical(item.name, item.kind)
            if block.action is BlockAction.REMOVE:
                surface.remove(source, item.kind, item.name, canonical)
                continue
            if not surface.add(source, item.kind, item.name, canonical):
                continue
            if item.enum is not None and item.enum.extends and api_matches(item.enum.api, api):
                container = self._canonical(item.enum.extends, EntityKind.TYPE)
                surface.extended.setdefault(container, {})[canonical] = None

    def _finish(
        self,
        api: str,
        version: str | None,
        features: list[Feature],
        accepted: list[Extension],
        surface: _Surface,
        warnings: list[MergeWarning],
    ) -> ResolvedRegistry:
        types = surface.included[EntityKind.TYPE]
        enums = set(surface.included[EntityKind.ENUM])
        removed_enums = surface.removed[EntityKind.ENUM]

        enum_values: dict[str, tuple[str, ...]] = {}
        for name, container in self._registry.enums.items():
            if container.kind is EnumsKind.CONSTANTS:
                own = [v.name for v in container.values if v.name in enums]
            elif name in types:
                # Aliases inside the container add no new value
                own = [
                    v.name
                    for v in container.values
                    if api_matches(v.api, api) and not v.alias and v.name not in removed_enums
                ]
            else:
                continue
            extra = [v for v in surface.extended.get(name, {}) if v in enums]
            values = set(own) | set(extra)
            enums |= values
            if values:
                enum_values[name] = tuple(sorted(values))

        included = {
            EntityKind.TYPE: types,
            EntityKind.COMMAND: surface.included[EntityKind.COMMAND],
            EntityKind.ENUM: enums,
        }
        aliases = {
            alias: canonical
            for alias, canonical in surface.aliases.items()
            if any(canonical in names for names in included.values())
        }

        return ResolvedRegistry(
            api=api,
            version=version,
            features=tuple(f.name for f in features),
            extensions=tuple(sorted(e.name for e in accepted)),
            types=tuple(sorted(types)),
            commands=tuple(sorted(surface.included[EntityKind.COMMAND])),
            enums=tuple(sorted(enums)),
            enum_values=dict(sorted(enum_values.items())),
            aliases=dict(sorted(aliases.items())),
            warnings=tuple(warnings),
            log=tuple(surface.log),
        )
