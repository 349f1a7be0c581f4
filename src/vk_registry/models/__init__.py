"""Pydantic models for the tables of an API registry document.

All models are frozen, so a built ``Registry`` is an immutable snapshot
that can be shared between concurrent consumers.

Model Hierarchy:
    Registry (root)
    ├── TypeEntry - per-API variants of every <type>
    ├── EnumContainer - <enums> blocks with their EnumValue entries
    ├── CommandEntry - per-API variants of every <command>
    ├── Feature - core versions with require/remove InterfaceBlocks
    ├── Extension - numbered extensions with InterfaceBlocks
    ├── VendorId, Platform, Tag, Format - metadata
    ├── SpirvExtension, SpirvCapability - SPIR-V enables
    └── UnrecognizedElement - anything the builder does not know

The loader lives in ``vk_registry.models.loader`` (it depends on the
builder and is therefore not imported here).
"""

from vk_registry.models.commands import CommandEntry, CommandParam
from vk_registry.models.common import (
    CommaList,
    EntityKind,
    HexInt,
    RegistryModel,
    api_matches,
    parse_integer,
    serialize_hex_int,
    split_comma_list,
    strip_c_suffix,
)
from vk_registry.models.enums import (
    API_CONSTANTS,
    AliasSpec,
    BitposSpec,
    EnumContainer,
    EnumsKind,
    EnumValue,
    LiteralSpec,
    OffsetSpec,
    ReferenceSpec,
    UnusedRange,
)
from vk_registry.models.features import (
    BlockAction,
    Extension,
    Feature,
    InterfaceBlock,
    InterfaceItem,
    version_key,
)
from vk_registry.models.metadata import (
    Enable,
    Format,
    FormatComponent,
    FormatPlane,
    Platform,
    SpirvCapability,
    SpirvExtension,
    Tag,
    UnrecognizedElement,
    VendorId,
)
from vk_registry.models.registry import EnumDeclaration, Registry
from vk_registry.models.resolved import (
    MergeStep,
    MergeStepAction,
    MergeWarning,
    ResolvedRegistry,
)
from vk_registry.models.types import (
    CATEGORY_MAP,
    Declaration,
    DefineSpec,
    FunctionPointer,
    HandleKind,
    PointerKind,
    TypeCategory,
    TypeEntry,
    TypeMember,
)

__all__ = [
    # Common
    "CommaList",
    "EntityKind",
    "HexInt",
    "RegistryModel",
    "api_matches",
    "parse_integer",
    "serialize_hex_int",
    "split_comma_list",
    "strip_c_suffix",
    # Types
    "CATEGORY_MAP",
    "Declaration",
    "DefineSpec",
    "FunctionPointer",
    "HandleKind",
    "PointerKind",
    "TypeCategory",
    "TypeEntry",
    "TypeMember",
    # Enums
    "API_CONSTANTS",
    "AliasSpec",
    "BitposSpec",
    "EnumContainer",
    "EnumsKind",
    "EnumValue",
    "LiteralSpec",
    "OffsetSpec",
    "ReferenceSpec",
    "UnusedRange",
    # Commands
    "CommandEntry",
    "CommandParam",
    # Features / extensions
    "BlockAction",
    "Extension",
    "Feature",
    "InterfaceBlock",
    "InterfaceItem",
    "version_key",
    # Metadata
    "Enable",
    "Format",
    "FormatComponent",
    "FormatPlane",
    "Platform",
    "SpirvCapability",
    "SpirvExtension",
    "Tag",
    "UnrecognizedElement",
    "VendorId",
    # Registry
    "EnumDeclaration",
    "Registry",
    # Resolved
    "MergeStep",
    "MergeStepAction",
    "MergeWarning",
    "ResolvedRegistry",
]
