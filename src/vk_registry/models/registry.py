"""Root model holding all tables built from a registry document."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, NamedTuple

from pydantic import Field, SerializerFunctionWrapHandler, field_serializer, field_validator

from vk_registry.models.commands import CommandEntry
from vk_registry.models.common import EntityKind, RegistryModel, api_matches
from vk_registry.models.enums import EnumContainer, EnumValue
from vk_registry.models.features import Extension, Feature, InterfaceBlock
from vk_registry.models.metadata import (
    Format,
    Platform,
    SpirvCapability,
    SpirvExtension,
    Tag,
    UnrecognizedElement,
    VendorId,
)
from vk_registry.models.types import TypeEntry

if TYPE_CHECKING:
    from vk_registry.models.resolved import ResolvedRegistry
    from vk_registry.resolve.merger import MergeOptions


class EnumDeclaration(NamedTuple):
    """An enum declaration together with where it was found.

    ``container`` is the ``<enums>`` block or ``extends`` target (None for
    extension-scoped constants such as ``*_SPEC_VERSION``); ``extension``
    is the owning extension when declared in an extension block.
    """

    value: EnumValue
    container: str | None
    origin: str | None
    extension: Extension | None
    block: InterfaceBlock | None


class Registry(RegistryModel):
    """All tables of a parsed registry document.

    Types and commands hold one entry per API variant, in document order.
    The name tables are read-only mappings, so one registry can be shared
    between merges and transforms.

    Example:
    -------
        >>> result = parse_registry(xml_bytes)
        >>> registry = result.registry
        >>> registry.get_type("VkExtent2D").category
        <TypeCategory.STRUCT: 'struct'>

    """

    comments: tuple[str, ...] = ()
    types: Mapping[str, tuple[TypeEntry, ...]] = Field(default_factory=dict, validate_default=True)
    enums: Mapping[str, EnumContainer] = Field(default_factory=dict, validate_default=True)
    commands: Mapping[str, tuple[CommandEntry, ...]] = Field(
        default_factory=dict, validate_default=True
    )
    feature_list: tuple[Feature, ...] = ()
    extension_list: tuple[Extension, ...] = ()
    vendorids: tuple[VendorId, ...] = ()
    platforms: tuple[Platform, ...] = ()
    tags: tuple[Tag, ...] = ()
    formats: tuple[Format, ...] = ()
    spirv_extensions: tuple[SpirvExtension, ...] = ()
    spirv_capabilities: tuple[SpirvCapability, ...] = ()
    unrecognized: tuple[UnrecognizedElement, ...] = ()

    @field_validator("types", "enums", "commands", mode="after")
    @classmethod
    def _read_only(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @field_serializer("types", "enums", "commands", mode="wrap")
    def _serialize_table(
        self, value: Mapping[str, Any], handler: SerializerFunctionWrapHandler
    ) -> Any:
        return handler(dict(value))

    # Lookups

    def get_type(self, name: str, api: str | None = None) -> TypeEntry | None:
        """Return the type declared under ``name`` for ``api``."""
        for entry in self.types.get(name, ()):
            if api_matches(entry.api, api):
                return entry
        return None

    def get_command(self, name: str, api: str | None = None) -> CommandEntry | None:
        """Return the command declared under ``name`` for ``api``."""
        for entry in self.commands.get(name, ()):
            if api_matches(entry.api, api):
                return entry
        return None

    def get_enum(self, name: str) -> EnumContainer | None:
        """Return an enum container by name."""
        return self.enums.get(name)

    def get_constant(self, name: str) -> EnumValue | None:
        """Return the first declaration of an enum constant.

        Looks at ``<enums>`` blocks first, then at the defining items of
        feature and extension blocks.
        """
        for decl in self.enum_declarations():
            if decl.value.name == name and not decl.value.is_reference:
                return decl.value
        return None

    def get_feature(self, name: str) -> Feature | None:
        """Return a feature by name."""
        for feature in self.feature_list:
            if feature.name == name:
                return feature
        return None

    def get_extension(self, name: str) -> Extension | None:
        """Return an extension by name."""
        for extension in self.extension_list:
            if extension.name == name:
                return extension
        return None

    def features(self, api: str | None = None) -> Iterator[Feature]:
        """Iterate features in document order, optionally filtered by api."""
        for feature in self.feature_list:
            if api_matches(feature.api, api):
                yield feature

    def extensions(self) -> Iterator[Extension]:
        """Iterate extensions in document order."""
        yield from self.extension_list

    # Enumerations of declarations

    def enum_declarations(self) -> Iterator[EnumDeclaration]:
        """Iterate every enum declaration of the document.

        Container values come first (in document order), followed by enum
        items of feature blocks and then of extension blocks.
        """
        for container in self.enums.values():
            for value in container.values:
                yield EnumDeclaration(value, container.name, None, None, None)
        for feature in self.feature_list:
            for block in feature.blocks:
                for item in block.items:
                    if item.enum is not None:
                        yield EnumDeclaration(
                            item.enum, item.enum.extends, feature.name, None, block
                        )
        for extension in self.extension_list:
            for block in extension.blocks:
                for item in block.items:
                    if item.enum is not None:
                        yield EnumDeclaration(
                            item.enum, item.enum.extends, extension.name, extension, block
                        )

    def has_name(self, kind: EntityKind, name: str) -> bool:
        """Return True when a name is declared for the given kind."""
        if kind is EntityKind.TYPE:
            return name in self.types
        if kind is EntityKind.COMMAND:
            return name in self.commands
        return self.get_constant(name) is not None

    def constant_names(self) -> set[str]:
        """Names of all declared (non-reference) enum constants."""
        return set(self.constant_index())

    def constant_index(self) -> dict[str, EnumValue]:
        """Map every declared enum constant to its first declaration.

        Walks the document once; callers that look up many names should
        keep the returned dict instead of calling ``get_constant`` per name.
        """
        index: dict[str, EnumValue] = {}
        for decl in self.enum_declarations():
            if not decl.value.is_reference:
                index.setdefault(decl.value.name, decl.value)
        return index

    def resolve(
        self,
        api: str,
        version: str | None = None,
        extensions: tuple[str, ...] | list[str] = (),
        options: MergeOptions | None = None,
    ) -> ResolvedRegistry:
        """Materialize the API surface for a version and extension set.

        Args:
        ----
            api: Target API family, e.g. "vulkan".
            version: Highest feature number to include ("1.2"); all when None.
            extensions: Names of the extensions to enable.
            options: Merge options.

        Returns:
        -------
            The resolved registry.

        """
        from vk_registry.resolve.merger import FeatureMerger, MergeOptions

        merger = FeatureMerger(self, options=options or MergeOptions())
        return merger.merge(api, version=version, extensions=extensions)
