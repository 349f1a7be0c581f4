"""Main registry to IR transformer."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from vk_registry.ir.registry import IRCommand, IRRegistry
from vk_registry.ir.types import (
    IRAvailability,
    IRAvailabilityKind,
    IRBaseType,
    IRBitmask,
    IRConstant,
    IREnum,
    IREnumValue,
    IRFuncPointer,
    IRHandle,
    IRMember,
    IRStruct,
    IRTypeRef,
)
from vk_registry.models.common import EntityKind, api_matches
from vk_registry.models.enums import EnumsKind, EnumValue
from vk_registry.models.registry import Registry
from vk_registry.models.resolved import MergeStepAction, ResolvedRegistry
from vk_registry.models.types import (
    Declaration,
    FunctionPointer,
    HandleKind,
    TypeCategory,
    TypeEntry,
)
from vk_registry.resolve.aliases import AliasCycleError, AliasResolver
from vk_registry.resolve.enum_values import EnumValueCalculator, EnumValueTable
from vk_registry.transform.options import TransformOptions
from vk_registry.transform.type_converter import declaration_to_member, declaration_to_type_ref
from vk_registry.validation.base import C_BUILTIN_TYPES

logger = logging.getLogger(__name__)

_FLAGS64 = "VkFlags64"


@dataclass
class _Surface:
    """Per-call lookup tables derived from one resolved surface."""

    resolved: ResolvedRegistry
    availability: dict[tuple[EntityKind, str], tuple[IRAvailability, ...]] = field(
        default_factory=dict
    )
    aliases: dict[tuple[EntityKind, str], tuple[str, ...]] = field(default_factory=dict)

    @property
    def api(self) -> str:
        return self.resolved.api


class RegistryToIRTransformer:
    """Transform a resolved surface of a registry to IR format.

    The transformer only reads the registry and its own caches, so
    transforming the same surface twice yields equal IR.

    Usage:
        resolved = registry.resolve("vulkan", "1.1")
        ir_registry = RegistryToIRTransformer(registry).transform(resolved)
    """

    def __init__(
        self,
        registry: Registry,
        options: TransformOptions | None = None,
        aliases: AliasResolver | None = None,
        enum_values: EnumValueTable | None = None,
    ) -> None:
        """Initialize the transformer.

        Args:
        ----
            registry: Registry the surfaces were resolved from.
            options: Transformation options.
            aliases: Alias resolver to reuse.
            enum_values: Precomputed enum values to reuse.

        """
        self._registry = registry
        self._options = options or TransformOptions()
        self._aliases = aliases or AliasResolver(registry)
        self._enum_values = enum_values
        self._constants: dict[str, EnumValue] | None = None

    @property
    def enum_values(self) -> EnumValueTable:
        """Computed enum values of the registry."""
        if self._enum_values is None:
            self._enum_values = EnumValueCalculator(self._registry, self._aliases).calculate()
        return self._enum_values

    @property
    def constants(self) -> dict[str, EnumValue]:
        """First declaration of every enum constant, by name."""
        if self._constants is None:
            self._constants = self._registry.constant_index()
        return self._constants

    def transform(self, resolved: ResolvedRegistry) -> IRRegistry:
        """Transform a ResolvedRegistry to IRRegistry.

        Args:
        ----
            resolved: Output of ``FeatureMerger.merge`` for this registry.

        Returns:
        -------
            IRRegistry with every record sorted by name.

        """
        surface = _Surface(resolved)
        if self._options.include_availability:
            surface.availability = self._collect_availability(resolved)
        if self._options.include_aliases:
            surface.aliases = self._collect_aliases(resolved)

        basetypes: list[IRBaseType] = []
        structs: list[IRStruct] = []
        handles: list[IRHandle] = []
        enums: list[IREnum] = []
        bitmasks: list[IRBitmask] = []
        funcpointers: list[IRFuncPointer] = []

        for name in resolved.types:
            entry = self._registry.get_type(name, surface.api)
            if entry is None or entry.alias:
                continue
            category = entry.category
            if category in (TypeCategory.STRUCT, TypeCategory.UNION):
                structs.append(self._process_struct(entry, surface))
            elif category is TypeCategory.HANDLE:
                handles.append(self._process_handle(entry, surface))
            elif category is TypeCategory.ENUM:
                enums.append(self._process_enum(name, surface))
            elif category is TypeCategory.BITMASK:
                bitmasks.append(self._process_bitmask(entry, surface))
            elif category is TypeCategory.FUNCPOINTER and entry.funcpointer is not None:
                funcpointers.append(self._process_funcpointer(entry, entry.funcpointer, surface))
            elif category is TypeCategory.BASIC:
                basetypes.append(
                    IRBaseType(
                        name=name,
                        underlying=entry.basetype,
                        aliases=surface.aliases.get((EntityKind.TYPE, name), ()),
                        available_in=surface.availability.get((EntityKind.TYPE, name), ()),
                    )
                )

        commands = [
            command
            for name in resolved.commands
            if (command := self._process_command(name, surface)) is not None
        ]

        ir_registry = IRRegistry(
            api=resolved.api,
            version=resolved.version,
            extensions=resolved.extensions,
            basetypes=tuple(basetypes),
            structs=tuple(structs),
            handles=tuple(handles),
            enums=tuple(enums),
            bitmasks=tuple(bitmasks),
            constants=self._process_constants(surface),
            funcpointers=tuple(funcpointers),
            commands=tuple(commands),
        )
        logger.info(
            "Transformed %s: %d structs, %d enums, %d commands",
            resolved.api,
            len(ir_registry.structs),
            len(ir_registry.enums),
            len(ir_registry.commands),
        )
        return ir_registry

    def _collect_availability(
        self, resolved: ResolvedRegistry
    ) -> dict[tuple[EntityKind, str], tuple[IRAvailability, ...]]:
        """Fold the merge log into "available in" markers.

        A removal forgets the markers collected so far.
        """
        features = set(resolved.features)
        markers: dict[tuple[EntityKind, str], dict[IRAvailability, None]] = {}
        for step in resolved.log:
            key = (step.kind, step.canonical)
            if step.action is MergeStepAction.REMOVE:
                markers.pop(key, None)
            elif step.action is MergeStepAction.ADD:
                kind = (
                    IRAvailabilityKind.FEATURE
                    if step.source in features
                    else IRAvailabilityKind.EXTENSION
                )
                markers.setdefault(key, {})[IRAvailability(kind, step.source)] = None
        return {key: tuple(found) for key, found in markers.items()}

    def _collect_aliases(
        self, resolved: ResolvedRegistry
    ) -> dict[tuple[EntityKind, str], tuple[str, ...]]:
        """Group the alias names of the surface under their canonical names."""
        included = {kind: set(resolved.names(kind)) for kind in EntityKind}
        found: dict[tuple[EntityKind, str], set[str]] = {}
        for alias, canonical in resolved.aliases.items():
            for kind in EntityKind:
                if canonical in included[kind] and self._canonical(alias, kind) == canonical:
                    found.setdefault((kind, canonical), set()).add(alias)

        # Aliases declared inside an included container come along with it
        for container_name in resolved.enum_values:
            container = self._registry.get_enum(container_name)
            if container is None:
                continue
            for value in container.values:
                if value.alias and api_matches(value.api, resolved.api):
                    canonical = self._canonical(value.name, EntityKind.ENUM)
                    if canonical != value.name:
                        found.setdefault((EntityKind.ENUM, canonical), set()).add(value.name)

        return {key: tuple(sorted(names)) for key, names in found.items()}

    def _canonical(self, name: str, kind: EntityKind = EntityKind.TYPE) -> str:
        try:
            return self._aliases.resolve(name, kind)
        except AliasCycleError:
            return name

    def _type_ref(self, declaration: Declaration, api: str) -> IRTypeRef:
        canonical = self._canonical(declaration.type_name)
        category = None
        if canonical not in C_BUILTIN_TYPES:
            target = self._registry.get_type(canonical, api)
            if target is not None:
                category = target.category.value
        return declaration_to_type_ref(declaration, canonical, category)

    def _process_struct(self, entry: TypeEntry, surface: _Surface) -> IRStruct:
        """Expand struct or union members."""
        members = tuple(
            declaration_to_member(
                member.declaration,
                self._type_ref(member.declaration, surface.api),
                values=member.values,
            )
            for member in entry.members
            if api_matches(member.api, surface.api)
        )
        return IRStruct(
            name=entry.name,
            is_union=entry.category is TypeCategory.UNION,
            members=members,
            extends=tuple(sorted({self._canonical(name) for name in entry.structextends})),
            returned_only=entry.returnedonly,
            aliases=surface.aliases.get((EntityKind.TYPE, entry.name), ()),
            available_in=surface.availability.get((EntityKind.TYPE, entry.name), ()),
        )

    def _process_handle(self, entry: TypeEntry, surface: _Surface) -> IRHandle:
        return IRHandle(
            name=entry.name,
            dispatchable=entry.handle_kind is HandleKind.DISPATCHABLE,
            parents=tuple(self._canonical(parent) for parent in entry.parent),
            object_type=entry.objtypeenum,
            aliases=surface.aliases.get((EntityKind.TYPE, entry.name), ()),
            available_in=surface.availability.get((EntityKind.TYPE, entry.name), ()),
        )

    def _process_enum(self, name: str, surface: _Surface) -> IREnum:
        """Collect the included values of an enum container with their values.

        Values that could not be computed are left out; the calculator
        already reported them.
        """
        container = self._registry.get_enum(name)
        type_availability = surface.availability.get((EntityKind.TYPE, name), ())

        values: list[IREnumValue] = []
        for value_name in surface.resolved.enum_values.get(name, ()):
            computed = self.enum_values.entry(value_name, surface.api)
            if computed is None:
                continue
            values.append(
                IREnumValue(
                    name=value_name,
                    value=computed.value,
                    aliases=surface.aliases.get((EntityKind.ENUM, value_name), ()),
                    available_in=surface.availability.get(
                        (EntityKind.ENUM, value_name), type_availability
                    ),
                )
            )
        values.sort(key=_value_order)

        return IREnum(
            name=name,
            is_bitmask=container is not None and container.kind is EnumsKind.BITMASK,
            bitwidth=(container.bitwidth if container else None) or 32,
            values=tuple(values),
            aliases=surface.aliases.get((EntityKind.TYPE, name), ()),
            available_in=type_availability,
        )

    def _process_bitmask(self, entry: TypeEntry, surface: _Surface) -> IRBitmask:
        """Create a bitmask with its flag-bits enum inline."""
        flags = None
        backing = entry.backing_enum
        if backing is not None:
            flags = self._process_enum(self._canonical(backing), surface)

        if entry.basetype == _FLAGS64:
            flag_width = 64
        elif flags is not None:
            flag_width = flags.bitwidth
        else:
            flag_width = 32

        return IRBitmask(
            name=entry.name,
            flag_width=flag_width,
            flags=flags,
            aliases=surface.aliases.get((EntityKind.TYPE, entry.name), ()),
            available_in=surface.availability.get((EntityKind.TYPE, entry.name), ()),
        )

    def _process_funcpointer(
        self, entry: TypeEntry, funcpointer: FunctionPointer, surface: _Surface
    ) -> IRFuncPointer:
        return IRFuncPointer(
            name=entry.name,
            return_type=self._type_ref(funcpointer.proto, surface.api),
            params=tuple(
                declaration_to_member(param, self._type_ref(param, surface.api))
                for param in funcpointer.params
            ),
            available_in=surface.availability.get((EntityKind.TYPE, entry.name), ()),
        )

    def _process_command(self, name: str, surface: _Surface) -> IRCommand | None:
        command = self._registry.get_command(name, surface.api)
        if command is None or command.proto is None:
            logger.debug("Command %s has no signature in %s; skipped", name, surface.api)
            return None

        params: list[IRMember] = [
            declaration_to_member(param.declaration, self._type_ref(param.declaration, surface.api))
            for param in command.params
            if api_matches(param.api, surface.api)
        ]
        return IRCommand(
            name=name,
            return_type=self._type_ref(command.proto, surface.api),
            params=tuple(params),
            success_codes=tuple(command.successcodes),
            error_codes=tuple(command.errorcodes),
            queues=tuple(command.queues),
            renderpass=command.renderpass,
            cmdbufferlevel=tuple(command.cmdbufferlevel),
            aliases=surface.aliases.get((EntityKind.COMMAND, name), ()),
            available_in=surface.availability.get((EntityKind.COMMAND, name), ()),
        )

    def _process_constants(self, surface: _Surface) -> tuple[IRConstant, ...]:
        """Collect included enum names that belong to no enum or bitmask type.

        These are the API constants plus extension constants such as
        ``VK_KHR_SURFACE_SPEC_VERSION``.
        """
        typed: set[str] = set()
        for container_name, names in surface.resolved.enum_values.items():
            container = self._registry.get_enum(container_name)
            if container is None or container.kind is not EnumsKind.CONSTANTS:
                typed.update(names)

        constants = []
        for name in surface.resolved.enums:
            if name in typed:
                continue
            computed = self.enum_values.entry(name, surface.api)
            if computed is None:
                continue
            declared = self.constants.get(name)
            constants.append(
                IRConstant(
                    name=name,
                    value=computed.value,
                    c_type=declared.type_suffix if declared else None,
                    aliases=surface.aliases.get((EntityKind.ENUM, name), ()),
                    available_in=surface.availability.get((EntityKind.ENUM, name), ()),
                )
            )
        return tuple(constants)


def _value_order(value: IREnumValue) -> tuple[int, float | str, str]:
    """Sort numeric values by value, anything else after them by name."""
    if isinstance(value.value, (int, float)):
        return (0, value.value, value.name)
    return (1, value.name, value.name)
