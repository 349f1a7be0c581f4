"""Build typed registry tables from a generic element tree."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from pydantic import ValidationError

from vk_registry.builder.declarations import (
    DeclarationError,
    parse_declaration,
    parse_define,
    parse_funcpointer,
)
from vk_registry.models.commands import CommandEntry, CommandParam
from vk_registry.models.common import EntityKind, parse_integer
from vk_registry.models.enums import (
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
from vk_registry.models.registry import Registry
from vk_registry.models.types import (
    CATEGORY_MAP,
    HandleKind,
    TypeCategory,
    TypeEntry,
    TypeMember,
)
from vk_registry.reader import ElementNode, read_document
from vk_registry.validation.errors import ErrorCodes, ValidationResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

HANDLE_MACROS = {
    "VK_DEFINE_HANDLE": HandleKind.DISPATCHABLE,
    "VK_DEFINE_NON_DISPATCHABLE_HANDLE": HandleKind.NON_DISPATCHABLE,
}

ENUM_VALUE_ATTRIBUTES = ("value", "bitpos", "offset", "alias")


class BuildError(Exception):
    """A single entity could not be built.

    Caught per entity by ``RegistryBuilder``; the entity is dropped and
    the error recorded in the build result.
    """

    def __init__(self, code: str, message: str, path: str, suggestion: str | None = None) -> None:
        """Initialize BuildError.

        Args:
        ----
            code: Error code from ``ErrorCodes``.
            message: Human-readable description.
            path: Location of the offending element.
            suggestion: Optional hint for fixing the document.

        """
        self.code = code
        self.path = path
        self.suggestion = suggestion
        super().__init__(message)


@dataclass(frozen=True)
class BuildResult:
    """Registry tables plus every issue found while building them."""

    registry: Registry
    result: ValidationResult


def _element_path(parent: str, node: ElementNode) -> str:
    name = node.get("name")
    if name is not None:
        return f'{parent}/{node.tag}[@name="{name}"]'
    return f"{parent}/{node.tag}"


def _required(node: ElementNode, attribute: str, path: str) -> str:
    value = node.get(attribute)
    if value is None:
        raise BuildError(
            ErrorCodes.E300_MISSING_ATTRIBUTE,
            f"<{node.tag}> is missing required attribute '{attribute}'",
            path,
        )
    return value


def _integer(node: ElementNode, attribute: str, path: str, required: bool = False) -> int | None:
    value = _required(node, attribute, path) if required else node.get(attribute)
    if value is None:
        return None
    try:
        return parse_integer(value)
    except ValueError as e:
        raise BuildError(
            ErrorCodes.E301_INVALID_INTEGER,
            f"<{node.tag}> attribute '{attribute}' is not an integer: '{value}'",
            path,
            suggestion="Use a decimal or 0x-prefixed hexadecimal number",
        ) from e


def _apis_overlap(first: tuple[str, ...], second: tuple[str, ...]) -> bool:
    if not first or not second:
        return True
    return bool(set(first) & set(second))


def _child_text(node: ElementNode, tag: str) -> str | None:
    child = node.find(tag)
    return child.text.strip() if child is not None else None


class RegistryBuilder:
    """Walk a registry element tree and build the typed tables.

    Build errors are aggregated: a broken entity is dropped and reported,
    and building continues with its siblings.

    Usage:
        builder = RegistryBuilder()
        build = builder.build(read_document(xml_bytes))
        if build.result.is_valid:
            registry = build.registry
    """

    def __init__(self) -> None:
        """Initialize the builder."""
        self._reset()

    def _reset(self) -> None:
        self._result = ValidationResult()
        self._comments: list[str] = []
        self._types: dict[str, list[TypeEntry]] = {}
        self._enums: dict[str, EnumContainer] = {}
        self._commands: dict[str, list[CommandEntry]] = {}
        self._features: list[Feature] = []
        self._extensions: list[Extension] = []
        self._extension_names: set[str] = set()
        self._vendorids: list[VendorId] = []
        self._platforms: list[Platform] = []
        self._tags: list[Tag] = []
        self._formats: list[Format] = []
        self._spirv_extensions: list[SpirvExtension] = []
        self._spirv_capabilities: list[SpirvCapability] = []
        self._unrecognized: list[UnrecognizedElement] = []

    def build(self, root: ElementNode) -> BuildResult:
        """Build registry tables from the document root.

        Args:
        ----
            root: Root element returned by ``read_document``.

        Returns:
        -------
            BuildResult with the registry and all build issues.

        """
        self._reset()

        handlers: dict[str, Callable[[ElementNode, str], None]] = {
            "comment": self._comment,
            "platforms": self._platforms_section,
            "tags": self._tags_section,
            "vendorids": self._vendorids_section,
            "types": self._types_section,
            "enums": self._enums_section,
            "commands": self._commands_section,
            "feature": self._feature_section,
            "extensions": self._extensions_section,
            "formats": self._formats_section,
            "spirvextensions": self._spirv_extensions_section,
            "spirvcapabilities": self._spirv_capabilities_section,
        }

        if root.tag != "registry":
            self._result.add_error(
                ErrorCodes.E303_MISSING_ELEMENT,
                f"Expected <registry> as document root, found <{root.tag}>",
                root.tag,
            )
        else:
            for child in root.elements:
                handler = handlers.get(child.tag)
                if handler is None:
                    self._unknown(child, "registry")
                else:
                    handler(child, "registry")

        registry = Registry(
            comments=tuple(self._comments),
            types={name: tuple(entries) for name, entries in self._types.items()},
            enums=dict(self._enums),
            commands={name: tuple(entries) for name, entries in self._commands.items()},
            feature_list=tuple(self._features),
            extension_list=tuple(self._extensions),
            vendorids=tuple(self._vendorids),
            platforms=tuple(self._platforms),
            tags=tuple(self._tags),
            formats=tuple(self._formats),
            spirv_extensions=tuple(self._spirv_extensions),
            spirv_capabilities=tuple(self._spirv_capabilities),
            unrecognized=tuple(self._unrecognized),
        )
        self._check_enum_values(registry)
        logger.info(
            "Built registry: %d types, %d enum blocks, %d commands, %d features, "
            "%d extensions (%d errors)",
            len(registry.types),
            len(registry.enums),
            len(registry.commands),
            len(registry.feature_list),
            len(registry.extension_list),
            len(self._result.errors),
        )
        return BuildResult(registry=registry, result=self._result)

    def _check_enum_values(self, registry: Registry) -> None:
        """Report constants declared twice with different values (E101)."""
        from vk_registry.resolve.enum_values import EnumValueCalculator

        table = EnumValueCalculator(registry).calculate()
        for issue in table.result.by_code(ErrorCodes.E101_CONFLICTING_ENUM_VALUE):
            self._result.add(issue)

    # Error handling

    def _try(self, build: Callable[[ElementNode, str], T], node: ElementNode, parent: str) -> T | None:
        """Run an entity constructor, recording failures instead of raising."""
        try:
            return build(node, parent)
        except BuildError as e:
            self._result.add_error(e.code, str(e), e.path, e.suggestion, tag=node.tag)
        except DeclarationError as e:
            self._result.add_error(e.code, str(e), _element_path(parent, node), tag=node.tag)
        except ValidationError as e:
            details = "; ".join(err["msg"] for err in e.errors())
            self._result.add_error(
                ErrorCodes.E302_INVALID_ATTRIBUTE_VALUE,
                f"Invalid <{node.tag}>: {details}",
                _element_path(parent, node),
                tag=node.tag,
            )
        return None

    def _unknown(self, node: ElementNode, parent: str) -> None:
        path = _element_path(parent, node)
        self._unrecognized.append(
            UnrecognizedElement(
                xpath=path, tag=node.tag, attributes=dict(node.attributes), markup=node.to_xml()
            )
        )
        self._result.add_info(
            ErrorCodes.W001_UNRECOGNIZED_ELEMENT,
            f"Unrecognized element <{node.tag}> preserved",
            path,
        )

    # Metadata sections

    def _comment(self, node: ElementNode, parent: str) -> None:
        self._comments.append(node.text.strip())

    def _platforms_section(self, node: ElementNode, parent: str) -> None:
        path = f"{parent}/platforms"
        for child in node.elements:
            if child.tag == "platform":
                platform = self._try(self._platform, child, path)
                if platform is not None:
                    self._platforms.append(platform)
            else:
                self._unknown(child, path)

    def _platform(self, node: ElementNode, parent: str) -> Platform:
        path = _element_path(parent, node)
        return Platform(
            name=_required(node, "name", path),
            protect=_required(node, "protect", path),
            comment=node.get("comment"),
        )

    def _tags_section(self, node: ElementNode, parent: str) -> None:
        path = f"{parent}/tags"
        for child in node.elements:
            if child.tag == "tag":
                tag = self._try(self._tag, child, path)
                if tag is not None:
                    self._tags.append(tag)
            else:
                self._unknown(child, path)

    def _tag(self, node: ElementNode, parent: str) -> Tag:
        path = _element_path(parent, node)
        return Tag(
            name=_required(node, "name", path),
            author=_required(node, "author", path),
            contact=_required(node, "contact", path),
        )

    def _vendorids_section(self, node: ElementNode, parent: str) -> None:
        path = f"{parent}/vendorids"
        for child in node.elements:
            if child.tag == "vendorid":
                vendor = self._try(self._vendorid, child, path)
                if vendor is not None:
                    self._vendorids.append(vendor)
            else:
                self._unknown(child, path)

    def _vendorid(self, node: ElementNode, parent: str) -> VendorId:
        path = _element_path(parent, node)
        return VendorId(
            name=_required(node, "name", path),
            id=_integer(node, "id", path, required=True),
            comment=node.get("comment"),
        )

    # Types

    def _types_section(self, node: ElementNode, parent: str) -> None:
        path = f"{parent}/types"
        for child in node.elements:
            if child.tag == "type":
                entry = self._try(self._type, child, path)
                if entry is not None:
                    self._types.setdefault(entry.name, []).append(entry)
            elif child.tag != "comment":
                self._unknown(child, path)

    def _type(self, node: ElementNode, parent: str) -> TypeEntry:
        name = node.get("name") or _child_text(node, "name")
        if not name:
            raise BuildError(
                ErrorCodes.E300_MISSING_ATTRIBUTE,
                "<type> has neither a 'name' attribute nor a <name> element",
                f"{parent}/type",
            )
        path = f'{parent}/type[@name="{name}"]'

        raw_category = node.get("category")
        category = CATEGORY_MAP.get(raw_category, TypeCategory.UNKNOWN)
        fields: dict[str, object] = {}

        if node.get("alias") is None:
            if category in (TypeCategory.STRUCT, TypeCategory.UNION):
                fields["members"] = tuple(self._member(m) for m in node.findall("member"))
            elif category is TypeCategory.FUNCPOINTER:
                fields["funcpointer"] = parse_funcpointer(node)
            elif category is TypeCategory.DEFINE:
                defref = tuple(t.text.strip() for t in node.findall("type"))
                fields["define"] = parse_define(node.text, defref)
            elif category is TypeCategory.HANDLE:
                macro = _child_text(node, "type")
                fields["handle_kind"] = HANDLE_MACROS.get(macro) if macro else None
            elif category in (TypeCategory.BASIC, TypeCategory.BITMASK):
                fields["basetype"] = _child_text(node, "type")

        entry = TypeEntry(
            name=name,
            category=category,
            raw_category=raw_category,
            api=node.get("api"),
            alias=node.get("alias"),
            requires=node.get("requires"),
            bitvalues=node.get("bitvalues"),
            parent=node.get("parent"),
            objtypeenum=node.get("objtypeenum"),
            returnedonly=node.get("returnedonly") == "true",
            structextends=node.get("structextends"),
            allowduplicate=node.get("allowduplicate") == "true",
            comment=node.get("comment"),
            deprecated=node.get("deprecated"),
            code="" if category in (TypeCategory.STRUCT, TypeCategory.UNION) else node.text.strip(),
            **fields,
        )

        for other in self._types.get(name, []):
            if _apis_overlap(other.api, entry.api):
                raise BuildError(
                    ErrorCodes.E100_DUPLICATE_NAME,
                    f"Duplicate type '{name}'",
                    path,
                    suggestion="Give each declaration a distinct 'api' attribute",
                )
        return entry

    def _member(self, node: ElementNode) -> TypeMember:
        return TypeMember(
            declaration=parse_declaration(node),
            api=node.get("api"),
            values=node.get("values"),
            selector=node.get("selector"),
            selection=node.get("selection"),
            limittype=node.get("limittype"),
            validextensionstructs=node.get("validextensionstructs"),
            comment=_child_text(node, "comment") or node.get("comment"),
        )

    # Enums

    def _enums_section(self, node: ElementNode, parent: str) -> None:
        container = self._try(self._enum_container, node, parent)
        if container is not None:
            self._enums[container.name] = container

    def _enum_container(self, node: ElementNode, parent: str) -> EnumContainer:
        path = _element_path(parent, node)
        name = _required(node, "name", path)

        raw_kind = node.get("type")
        if raw_kind is None:
            kind = EnumsKind.CONSTANTS
        else:
            try:
                kind = EnumsKind(raw_kind)
            except ValueError as e:
                raise BuildError(
                    ErrorCodes.E302_INVALID_ATTRIBUTE_VALUE,
                    f"<enums> type must be enum, bitmask or constants, got '{raw_kind}'",
                    path,
                ) from e

        values: list[EnumValue] = []
        unused: list[UnusedRange] = []
        seen: set[str] = set()
        for child in node.elements:
            if child.tag == "enum":
                value = self._try(self._enum_in_container, child, path)
                if value is None:
                    continue
                if value.name in seen:
                    self._result.add_error(
                        ErrorCodes.E100_DUPLICATE_NAME,
                        f"Duplicate enum '{value.name}' in '{name}'",
                        _element_path(path, child),
                    )
                    continue
                seen.add(value.name)
                values.append(value)
            elif child.tag == "unused":
                item = self._try(self._unused, child, path)
                if item is not None:
                    unused.append(item)
            elif child.tag != "comment":
                self._unknown(child, path)

        if name in self._enums:
            raise BuildError(
                ErrorCodes.E100_DUPLICATE_NAME,
                f"Duplicate enum block '{name}'",
                path,
                suggestion="Add values to an existing enum with 'extends' in a require block",
            )

        return EnumContainer(
            name=name,
            kind=kind,
            bitwidth=_integer(node, "bitwidth", path),
            start=_integer(node, "start", path),
            end=_integer(node, "end", path),
            vendor=node.get("vendor"),
            comment=node.get("comment"),
            values=tuple(values),
            unused=tuple(unused),
        )

    def _unused(self, node: ElementNode, parent: str) -> UnusedRange:
        path = f"{parent}/unused"
        return UnusedRange(
            start=_integer(node, "start", path, required=True),
            end=_integer(node, "end", path),
            vendor=node.get("vendor"),
            comment=node.get("comment"),
        )

    def _enum_in_container(self, node: ElementNode, parent: str) -> EnumValue:
        return self._enum(node, parent, in_block=False)

    def _enum_in_block(self, node: ElementNode, parent: str) -> EnumValue:
        return self._enum(node, parent, in_block=True)

    def _enum(self, node: ElementNode, parent: str, in_block: bool) -> EnumValue:
        path = _element_path(parent, node)
        name = _required(node, "name", path)

        given = [a for a in ENUM_VALUE_ATTRIBUTES if node.get(a) is not None]
        if len(given) > 1:
            raise BuildError(
                ErrorCodes.E304_AMBIGUOUS_ENUM_VALUE,
                f"Enum '{name}' specifies more than one of {', '.join(given)}",
                path,
            )

        if not given:
            if not in_block:
                raise BuildError(
                    ErrorCodes.E300_MISSING_ATTRIBUTE,
                    f"Enum '{name}' needs one of value, bitpos, offset or alias",
                    path,
                )
            spec: LiteralSpec | BitposSpec | OffsetSpec | AliasSpec | ReferenceSpec = ReferenceSpec()
        elif given[0] == "value":
            spec = LiteralSpec(value=node.get("value"))
        elif given[0] == "bitpos":
            spec = BitposSpec(bitpos=_integer(node, "bitpos", path))
        elif given[0] == "offset":
            spec = OffsetSpec(
                offset=_integer(node, "offset", path),
                extnumber=_integer(node, "extnumber", path),
                negative=node.get("dir") == "-",
            )
        else:
            spec = AliasSpec(alias=node.get("alias"))

        return EnumValue(
            name=name,
            spec=spec,
            extends=node.get("extends"),
            api=node.get("api"),
            protect=node.get("protect"),
            type_suffix=node.get("type"),
            comment=node.get("comment"),
            deprecated=node.get("deprecated"),
        )

    # Commands

    def _commands_section(self, node: ElementNode, parent: str) -> None:
        path = f"{parent}/commands"
        for child in node.elements:
            if child.tag == "command":
                entry = self._try(self._command, child, path)
                if entry is not None:
                    self._commands.setdefault(entry.name, []).append(entry)
            elif child.tag != "comment":
                self._unknown(child, path)

    def _command(self, node: ElementNode, parent: str) -> CommandEntry:
        proto_node = node.find("proto")
        name = node.get("name")
        if name is None and proto_node is not None:
            name = _child_text(proto_node, "name")
        if not name:
            raise BuildError(
                ErrorCodes.E300_MISSING_ATTRIBUTE,
                "<command> has neither a 'name' attribute nor a <proto><name>",
                f"{parent}/command",
            )
        path = f'{parent}/command[@name="{name}"]'

        alias = node.get("alias")
        if proto_node is None and alias is None:
            raise BuildError(
                ErrorCodes.E303_MISSING_ELEMENT,
                f"Command '{name}' has no <proto> element",
                path,
            )

        fields: dict[str, object] = {}
        if proto_node is not None:
            fields["proto"] = parse_declaration(proto_node)
            fields["params"] = tuple(
                CommandParam(
                    declaration=parse_declaration(p),
                    api=p.get("api"),
                    validstructs=p.get("validstructs"),
                    stride=p.get("stride"),
                )
                for p in node.findall("param")
            )
            implicit = node.find("implicitexternsyncparams")
            if implicit is not None:
                fields["implicitexternsyncparams"] = tuple(
                    p.text.strip() for p in implicit.findall("param")
                )

        entry = CommandEntry(
            name=name,
            alias=alias,
            api=node.get("api"),
            successcodes=node.get("successcodes"),
            errorcodes=node.get("errorcodes"),
            queues=node.get("queues"),
            renderpass=node.get("renderpass"),
            cmdbufferlevel=node.get("cmdbufferlevel"),
            pipeline=node.get("pipeline"),
            videocoding=node.get("videocoding"),
            tasks=node.get("tasks"),
            export=node.get("export"),
            description=_child_text(node, "description"),
            comment=node.get("comment"),
            deprecated=node.get("deprecated"),
            code=proto_node.text.strip() if proto_node is not None else "",
            **fields,
        )

        for other in self._commands.get(name, []):
            if _apis_overlap(other.api, entry.api):
                raise BuildError(
                    ErrorCodes.E100_DUPLICATE_NAME,
                    f"Duplicate command '{name}'",
                    path,
                    suggestion="Give each declaration a distinct 'api' attribute",
                )
        return entry

    # Features and extensions

    def _blocks(self, node: ElementNode, path: str) -> tuple[InterfaceBlock, ...]:
        blocks: list[InterfaceBlock] = []
        for child in node.elements:
            if child.tag in ("require", "remove"):
                block = self._try(self._block, child, path)
                if block is not None:
                    blocks.append(block)
            elif child.tag != "comment":
                self._unknown(child, path)
        return tuple(blocks)

    def _block(self, node: ElementNode, parent: str) -> InterfaceBlock:
        path = f"{parent}/{node.tag}"
        items: list[InterfaceItem] = []
        for child in node.elements:
            if child.tag in ("type", "command"):
                item_path = _element_path(path, child)
                try:
                    name = _required(child, "name", item_path)
                except BuildError as e:
                    self._result.add_error(e.code, str(e), e.path)
                    continue
                items.append(
                    InterfaceItem(
                        kind=EntityKind(child.tag), name=name, comment=child.get("comment")
                    )
                )
            elif child.tag == "enum":
                value = self._try(self._enum_in_block, child, path)
                if value is not None:
                    items.append(
                        InterfaceItem(
                            kind=EntityKind.ENUM,
                            name=value.name,
                            comment=value.comment,
                            enum=None if value.is_reference else value,
                        )
                    )
            elif child.tag != "comment":
                self._unknown(child, path)

        return InterfaceBlock(
            action=BlockAction(node.tag),
            api=node.get("api"),
            depends=node.get("depends"),
            extension=node.get("extension"),
            feature=node.get("feature"),
            profile=node.get("profile"),
            comment=node.get("comment"),
            items=tuple(items),
        )

    def _feature_section(self, node: ElementNode, parent: str) -> None:
        feature = self._try(self._feature, node, parent)
        if feature is not None:
            self._features.append(feature)

    def _feature(self, node: ElementNode, parent: str) -> Feature:
        path = _element_path(parent, node)
        feature = Feature(
            name=_required(node, "name", path),
            api=_required(node, "api", path),
            number=_required(node, "number", path),
            depends=node.get("depends"),
            protect=node.get("protect"),
            comment=node.get("comment"),
            blocks=self._blocks(node, path),
        )
        for other in self._features:
            if other.name == feature.name and _apis_overlap(other.api, feature.api):
                raise BuildError(
                    ErrorCodes.E100_DUPLICATE_NAME, f"Duplicate feature '{feature.name}'", path
                )
        return feature

    def _extensions_section(self, node: ElementNode, parent: str) -> None:
        path = f"{parent}/extensions"
        for child in node.elements:
            if child.tag == "extension":
                extension = self._try(self._extension, child, path)
                if extension is not None:
                    self._extensions.append(extension)
                    self._extension_names.add(extension.name)
            elif child.tag != "comment":
                self._unknown(child, path)

    def _extension(self, node: ElementNode, parent: str) -> Extension:
        path = _element_path(parent, node)
        name = _required(node, "name", path)
        if name in self._extension_names:
            raise BuildError(ErrorCodes.E100_DUPLICATE_NAME, f"Duplicate extension '{name}'", path)

        return Extension(
            name=name,
            number=_integer(node, "number", path, required=True),
            ext_type=node.get("type"),
            supported=node.get("supported"),
            ratified=node.get("ratified"),
            depends=node.get("depends"),
            requires=node.get("requires"),
            requires_core=node.get("requiresCore"),
            platform=node.get("platform"),
            protect=node.get("protect"),
            author=node.get("author"),
            contact=node.get("contact"),
            provisional=node.get("provisional") == "true",
            specialuse=node.get("specialuse"),
            sortorder=_integer(node, "sortorder", path),
            promotedto=node.get("promotedto"),
            deprecatedby=node.get("deprecatedby"),
            obsoletedby=node.get("obsoletedby"),
            comment=node.get("comment"),
            blocks=self._blocks(node, path),
        )

    # Formats

    def _formats_section(self, node: ElementNode, parent: str) -> None:
        path = f"{parent}/formats"
        for child in node.elements:
            if child.tag == "format":
                fmt = self._try(self._format, child, path)
                if fmt is not None:
                    self._formats.append(fmt)
            else:
                self._unknown(child, path)

    def _format(self, node: ElementNode, parent: str) -> Format:
        path = _element_path(parent, node)
        components: list[FormatComponent] = []
        planes: list[FormatPlane] = []
        spirv: list[str] = []
        for child in node.elements:
            if child.tag == "component":
                cpath = _element_path(path, child)
                components.append(
                    FormatComponent(
                        name=_required(child, "name", cpath),
                        bits=_required(child, "bits", cpath),
                        numeric_format=_required(child, "numericFormat", cpath),
                        plane_index=_integer(child, "planeIndex", cpath),
                    )
                )
            elif child.tag == "plane":
                ppath = f"{path}/plane"
                planes.append(
                    FormatPlane(
                        index=_integer(child, "index", ppath, required=True),
                        width_divisor=_integer(child, "widthDivisor", ppath, required=True),
                        height_divisor=_integer(child, "heightDivisor", ppath, required=True),
                        compatible=_required(child, "compatible", ppath),
                    )
                )
            elif child.tag == "spirvimageformat":
                spirv.append(_required(child, "name", f"{path}/spirvimageformat"))
            else:
                self._unknown(child, path)

        return Format(
            name=_required(node, "name", path),
            format_class=_required(node, "class", path),
            block_size=_integer(node, "blockSize", path, required=True),
            texels_per_block=_integer(node, "texelsPerBlock", path, required=True),
            block_extent=node.get("blockExtent"),
            packed=_integer(node, "packed", path),
            compressed=node.get("compressed"),
            chroma=node.get("chroma"),
            components=tuple(components),
            planes=tuple(planes),
            spirv_image_formats=tuple(spirv),
        )

    # SPIR-V

    def _spirv_extensions_section(self, node: ElementNode, parent: str) -> None:
        path = f"{parent}/spirvextensions"
        for child in node.elements:
            if child.tag == "spirvextension":
                item = self._try(self._spirv_extension, child, path)
                if item is not None:
                    self._spirv_extensions.append(item)
            else:
                self._unknown(child, path)

    def _spirv_extension(self, node: ElementNode, parent: str) -> SpirvExtension:
        path = _element_path(parent, node)
        return SpirvExtension(name=_required(node, "name", path), enables=self._enables(node, path))

    def _spirv_capabilities_section(self, node: ElementNode, parent: str) -> None:
        path = f"{parent}/spirvcapabilities"
        for child in node.elements:
            if child.tag == "spirvcapability":
                item = self._try(self._spirv_capability, child, path)
                if item is not None:
                    self._spirv_capabilities.append(item)
            else:
                self._unknown(child, path)

    def _spirv_capability(self, node: ElementNode, parent: str) -> SpirvCapability:
        path = _element_path(parent, node)
        return SpirvCapability(name=_required(node, "name", path), enables=self._enables(node, path))

    def _enables(self, node: ElementNode, path: str) -> tuple[Enable, ...]:
        enables: list[Enable] = []
        for child in node.elements:
            if child.tag != "enable":
                self._unknown(child, path)
                continue
            enable_path = f"{path}/enable"
            if not any(child.get(a) for a in ("version", "extension", "struct", "property")):
                raise BuildError(
                    ErrorCodes.E300_MISSING_ATTRIBUTE,
                    "<enable> needs one of version, extension, struct or property",
                    enable_path,
                )
            if child.get("struct") is not None:
                _required(child, "feature", enable_path)
            if child.get("property") is not None:
                _required(child, "member", enable_path)
                _required(child, "value", enable_path)
            enables.append(Enable(**{k: child.get(k) for k in Enable.model_fields}))
        return tuple(enables)


def parse_registry(data: bytes | str) -> BuildResult:
    """Read and build a registry document in one step.

    Args:
    ----
        data: The registry document as bytes or text.

    Returns:
    -------
        BuildResult with the registry and any build issues.

    Raises:
    ------
        DocumentParseError: If the markup is malformed.

    """
    return RegistryBuilder().build(read_document(data))
