"""Tests for building registry tables from documents."""

from __future__ import annotations

import pytest
from vk_registry.builder import BuildResult, RegistryBuilder, parse_registry
from vk_registry.models import (
    AliasSpec,
    BitposSpec,
    EntityKind,
    EnumsKind,
    HandleKind,
    LiteralSpec,
    OffsetSpec,
    Registry,
    TypeCategory,
)
from vk_registry.reader import DocumentParseError, read_document

from tests.fixtures.sample_registries import (
    BROKEN_ENTITIES_XML,
    CONFLICTING_ENUM_XML,
    MALFORMED_XML,
)


def _codes(built: BuildResult) -> list[str]:
    return sorted(issue.code for issue in built.result.errors)


class TestSampleRegistry:
    """Tests for the sample registry build."""

    def test_builds_without_errors(self, built: BuildResult) -> None:
        """Should build the sample registry without errors or warnings."""
        assert built.result.errors == []
        assert built.result.warnings == []

    def test_metadata(self, registry: Registry) -> None:
        """Should collect platforms, tags, vendor ids and comments."""
        assert [p.name for p in registry.platforms] == ["xlib"]
        assert registry.platforms[0].protect == "VK_USE_PLATFORM_XLIB_KHR"
        assert [t.name for t in registry.tags] == ["KHR", "EXT"]
        assert registry.vendorids[0].id == 0x10000
        assert registry.comments == ("Sample registry used by the test suite",)

    def test_categories(self, registry: Registry) -> None:
        """Should map category attributes onto TypeCategory."""
        expected = {
            "uint32_t": TypeCategory.BASIC,
            "VkBool32": TypeCategory.BASIC,
            "vk_platform": TypeCategory.INCLUDE,
            "VK_DEFINE_HANDLE": TypeCategory.DEFINE,
            "VkQueueFlags": TypeCategory.BITMASK,
            "VkInstance": TypeCategory.HANDLE,
            "VkResult": TypeCategory.ENUM,
            "PFN_vkVoidFunction": TypeCategory.FUNCPOINTER,
            "VkExtent2D": TypeCategory.STRUCT,
            "VkClearColorValue": TypeCategory.UNION,
        }
        for name, category in expected.items():
            entry = registry.get_type(name)
            assert entry is not None, name
            assert entry.category is category, name

    def test_raw_category_kept(self, registry: Registry) -> None:
        """Should keep the literal category attribute."""
        basetype = registry.get_type("VkBool32")
        scalar = registry.get_type("uint32_t")
        assert basetype is not None and scalar is not None
        assert basetype.raw_category == "basetype"
        assert scalar.raw_category is None
        assert scalar.requires == "vk_platform"

    def test_name_from_child_element(self, registry: Registry) -> None:
        """Should take the type name from a <name> child."""
        entry = registry.get_type("VkFlags64")
        assert entry is not None
        assert entry.basetype == "uint64_t"

    def test_handle_kinds(self, registry: Registry) -> None:
        """Should derive the handle kind from the defining macro."""
        instance = registry.get_type("VkInstance")
        surface = registry.get_type("VkSurfaceKHR")
        assert instance is not None and surface is not None
        assert instance.handle_kind is HandleKind.DISPATCHABLE
        assert surface.handle_kind is HandleKind.NON_DISPATCHABLE
        assert surface.parent == ("VkInstance",)
        assert surface.objtypeenum == "VK_OBJECT_TYPE_SURFACE_KHR"

    def test_bitmask_backing_enum(self, registry: Registry) -> None:
        """Should record requires and bitvalues of bitmasks."""
        queue_flags = registry.get_type("VkQueueFlags")
        access_flags = registry.get_type("VkAccessFlags2")
        create_flags = registry.get_type("VkInstanceCreateFlags")
        assert queue_flags is not None and access_flags is not None and create_flags is not None
        assert queue_flags.backing_enum == "VkQueueFlagBits"
        assert access_flags.backing_enum == "VkAccessFlagBits2"
        assert access_flags.basetype == "VkFlags64"
        assert create_flags.backing_enum is None

    def test_struct_members(self, registry: Registry) -> None:
        """Should parse members with their attributes."""
        entry = registry.get_type("VkInstanceCreateInfo")
        assert entry is not None
        assert [m.name for m in entry.members][:3] == ["sType", "pNext", "flags"]
        assert entry.members[0].values == "VK_STRUCTURE_TYPE_INSTANCE_CREATE_INFO"
        last = entry.members[-1].declaration
        assert last.pointer is not None
        assert last.pointer.inner_is_const

    def test_struct_flags(self, registry: Registry) -> None:
        """Should parse returnedonly and structextends."""
        properties = registry.get_type("VkPhysicalDeviceProperties")
        protected = registry.get_type("VkPhysicalDeviceProtectedMemoryFeatures")
        assert properties is not None and protected is not None
        assert properties.returnedonly
        assert properties.members[1].declaration.array_shape == ("VK_MAX_PHYSICAL_DEVICE_NAME_SIZE",)
        assert protected.structextends == ("VkInstanceCreateInfo",)

    def test_alias_types(self, registry: Registry) -> None:
        """Should keep alias declarations without members."""
        entry = registry.get_type("VkPhysicalDeviceProperties2KHR")
        assert entry is not None
        assert entry.alias == "VkPhysicalDeviceProperties2"
        assert entry.members == ()

    def test_defines(self, registry: Registry) -> None:
        """Should interpret define bodies."""
        make_version = registry.get_type("VK_MAKE_API_VERSION")
        version = registry.get_type("VK_API_VERSION_1_0")
        assert make_version is not None and make_version.define is not None
        assert make_version.define.params == ("variant", "major", "minor", "patch")
        assert version is not None and version.define is not None
        assert version.define.defref == ("VK_MAKE_API_VERSION",)
        assert version.define.comment == "Vulkan 1.0 version number"

    def test_funcpointers(self, registry: Registry) -> None:
        """Should parse funcpointer signatures."""
        entry = registry.get_type("PFN_vkAllocationFunction")
        assert entry is not None and entry.funcpointer is not None
        assert [p.name for p in entry.funcpointer.params] == ["pUserData", "size"]

    def test_enum_containers(self, registry: Registry) -> None:
        """Should build enum containers with their kind and values."""
        constants = registry.get_enum("API Constants")
        result = registry.get_enum("VkResult")
        access = registry.get_enum("VkAccessFlagBits2")
        assert constants is not None and result is not None and access is not None
        assert constants.kind is EnumsKind.CONSTANTS
        assert result.kind is EnumsKind.ENUM
        assert access.kind is EnumsKind.BITMASK
        assert access.bitwidth == 64
        assert result.unused[0].start == -14
        assert isinstance(access.values[1].spec, AliasSpec)
        assert isinstance(access.values[2].spec, BitposSpec)

    def test_constant_type_suffix(self, registry: Registry) -> None:
        """Should keep the C type of constants."""
        constant = registry.get_constant("VK_LOD_CLAMP_NONE")
        assert constant is not None
        assert constant.type_suffix == "float"
        assert constant.spec == LiteralSpec(value="1000.0F")

    def test_commands(self, registry: Registry) -> None:
        """Should build commands from their prototypes."""
        command = registry.get_command("vkCreateInstance")
        assert command is not None
        assert command.proto is not None
        assert command.proto.type_name == "VkResult"
        assert [p.name for p in command.params] == ["pCreateInfo", "pInstance"]
        assert command.successcodes == ("VK_SUCCESS",)
        assert "VK_ERROR_INITIALIZATION_FAILED" in command.errorcodes

    def test_command_alias(self, registry: Registry) -> None:
        """Should keep command aliases without a prototype."""
        command = registry.get_command("vkGetPhysicalDeviceProperties2KHR")
        assert command is not None
        assert command.alias == "vkGetPhysicalDeviceProperties2"
        assert command.proto is None

    def test_reference_items_have_no_declaration(self, registry: Registry) -> None:
        """Should store bare enum references without a declaration."""
        feature = registry.get_feature("VK_VERSION_1_0")
        assert feature is not None
        items = [i for block in feature.blocks for i in block.items if i.kind is EntityKind.ENUM]
        assert items
        assert all(i.enum is None for i in items)

    def test_block_enum_declarations(self, registry: Registry) -> None:
        """Should keep enum declarations made inside require blocks."""
        extension = registry.get_extension("VK_KHR_surface")
        assert extension is not None
        items = {i.name: i for i in extension.blocks[0].items}
        lost = items["VK_ERROR_SURFACE_LOST_KHR"].enum
        assert lost is not None
        assert lost.extends == "VkResult"
        assert lost.spec == OffsetSpec(offset=0, negative=True)

    def test_extensions(self, registry: Registry) -> None:
        """Should build extensions with their attributes."""
        swapchain = registry.get_extension("VK_KHR_swapchain")
        sync2 = registry.get_extension("VK_KHR_synchronization2")
        assert swapchain is not None and sync2 is not None
        assert swapchain.number == 2
        assert swapchain.depends == "VK_KHR_surface"
        assert swapchain.supported == ("vulkan", "vulkansc")
        assert sync2.blocks[1].depends == "VK_KHR_swapchain"
        assert sync2.promotedto == "VK_VERSION_1_3"

    def test_features(self, registry: Registry) -> None:
        """Should build features in document order."""
        assert [f.name for f in registry.feature_list] == ["VK_VERSION_1_0", "VK_VERSION_1_1"]
        assert registry.feature_list[1].depends == "VK_VERSION_1_0"
        assert len(registry.feature_list[0].blocks) == 3


class TestBuildErrors:
    """Tests for build error aggregation."""

    @pytest.fixture
    def broken(self) -> BuildResult:
        """Return the build of a document full of broken entities."""
        return parse_registry(BROKEN_ENTITIES_XML)

    def test_all_errors_reported(self, broken: BuildResult) -> None:
        """Should report every broken entity instead of stopping at the first."""
        assert _codes(broken) == ["E100", "E300", "E300", "E301", "E303", "E304"]

    def test_siblings_still_built(self, broken: BuildResult) -> None:
        """Should keep the valid siblings of broken entities."""
        registry = broken.registry
        assert registry.get_type("VkExtent2D") is not None
        assert registry.get_type("VkNoName") is None
        container = registry.get_enum("VkResult")
        assert container is not None
        assert [v.name for v in container.values] == ["VK_SUCCESS"]
        assert registry.extension_list == ()
        assert registry.vendorids == ()

    def test_first_duplicate_wins(self, broken: BuildResult) -> None:
        """Should keep the first of two overlapping declarations."""
        entry = broken.registry.get_type("VkExtent2D")
        assert entry is not None
        assert entry.members[0].name == "width"

    def test_error_paths(self, broken: BuildResult) -> None:
        """Should locate errors by element path."""
        duplicate = broken.result.by_code("E100")[0]
        assert duplicate.location is not None
        assert duplicate.location.path == 'registry/types/type[@name="VkExtent2D"]'
        assert duplicate.suggestion is not None

    def test_unrecognized_element_preserved(self, broken: BuildResult) -> None:
        """Should report unknown elements as info and keep their markup."""
        infos = broken.result.by_code("W001")
        assert len(infos) == 1
        assert infos[0] in broken.result.infos
        element = broken.registry.unrecognized[0]
        assert element.tag == "sparkles"
        assert element.attributes == {"name": "glitter"}
        assert "glitter" in element.markup

    def test_duplicate_enums_block(self) -> None:
        """Should reject a second enums block with the same name."""
        built = parse_registry(
            "<registry>"
            '<enums name="VkResult" type="enum"><enum value="0" name="VK_SUCCESS"/></enums>'
            '<enums name="VkResult" type="enum"><enum value="1" name="VK_NOT_READY"/></enums>'
            "</registry>"
        )
        assert _codes(built) == ["E100"]
        container = built.registry.get_enum("VkResult")
        assert container is not None
        assert [v.name for v in container.values] == ["VK_SUCCESS"]

    def test_duplicate_enum_in_block(self) -> None:
        """Should reject a repeated enum name inside one block."""
        built = parse_registry(
            '<registry><enums name="VkResult" type="enum">'
            '<enum value="0" name="VK_SUCCESS"/><enum value="1" name="VK_SUCCESS"/>'
            "</enums></registry>"
        )
        assert _codes(built) == ["E100"]

    def test_invalid_enums_type(self) -> None:
        """Should reject unknown enums block types."""
        built = parse_registry('<registry><enums name="VkX" type="flags"/></registry>')
        assert _codes(built) == ["E302"]

    def test_disjoint_api_duplicates_allowed(self) -> None:
        """Should accept the same type declared for disjoint apis."""
        built = parse_registry(
            "<registry><types>"
            '<type category="struct" name="VkS" api="vulkan">'
            "<member><type>uint32_t</type> <name>a</name></member></type>"
            '<type category="struct" name="VkS" api="vulkansc">'
            "<member><type>uint64_t</type> <name>a</name></member></type>"
            "</types></registry>"
        )
        assert built.result.is_valid
        vulkansc = built.registry.get_type("VkS", "vulkansc")
        assert vulkansc is not None
        assert vulkansc.members[0].type_name == "uint64_t"

    def test_conflicting_enum_value(self) -> None:
        """Should report a constant declared with two different values."""
        built = parse_registry(CONFLICTING_ENUM_XML)
        assert _codes(built) == ["E101"]
        error = built.result.errors[0]
        assert error.context["first_origin"] == "VK_KHR_a"
        assert error.context["second_origin"] == "VK_KHR_b"
        assert [e.name for e in built.registry.extension_list] == ["VK_KHR_a", "VK_KHR_b"]

    def test_command_without_proto(self) -> None:
        """Should reject commands with neither proto nor alias."""
        built = parse_registry('<registry><commands><command name="vkX"/></commands></registry>')
        assert _codes(built) == ["E303"]

    def test_wrong_root(self) -> None:
        """Should report a document whose root is not a registry."""
        built = parse_registry("<types/>")
        assert _codes(built) == ["E303"]

    def test_malformed_document_raises(self) -> None:
        """Should propagate parse errors of malformed markup."""
        with pytest.raises(DocumentParseError):
            parse_registry(MALFORMED_XML)


class TestFormatsAndSpirv:
    """Tests for format and SPIR-V sections."""

    DOCUMENT = """\
<registry>
    <formats>
        <format name="VK_FORMAT_R8G8B8A8_UNORM" class="32-bit" blockSize="4" texelsPerBlock="1">
            <component name="R" bits="8" numericFormat="UNORM"/>
            <component name="G" bits="8" numericFormat="UNORM"/>
            <spirvimageformat name="Rgba8"/>
        </format>
        <format name="VK_FORMAT_G8_B8R8_2PLANE_420_UNORM" class="8-bit 2-plane 420" blockSize="3" texelsPerBlock="1" chroma="420">
            <component name="G" bits="8" numericFormat="UNORM" planeIndex="0"/>
            <plane index="0" widthDivisor="1" heightDivisor="1" compatible="VK_FORMAT_R8_UNORM"/>
            <plane index="1" widthDivisor="2" heightDivisor="2" compatible="VK_FORMAT_R8G8_UNORM"/>
        </format>
    </formats>
    <spirvextensions>
        <spirvextension name="SPV_KHR_variable_pointers">
            <enable version="VK_VERSION_1_1"/>
            <enable extension="VK_KHR_variable_pointers"/>
        </spirvextension>
    </spirvextensions>
    <spirvcapabilities>
        <spirvcapability name="Shader">
            <enable version="VK_VERSION_1_0"/>
        </spirvcapability>
        <spirvcapability name="Broken">
            <enable struct="VkPhysicalDeviceFeatures"/>
        </spirvcapability>
    </spirvcapabilities>
</registry>
"""

    @pytest.fixture
    def built(self) -> BuildResult:
        """Return the build of the formats document."""
        return RegistryBuilder().build(read_document(self.DOCUMENT))

    def test_formats(self, built: BuildResult) -> None:
        """Should build formats with components and planes."""
        rgba, planar = built.registry.formats
        assert rgba.block_size == 4
        assert [c.name for c in rgba.components] == ["R", "G"]
        assert rgba.spirv_image_formats == ("Rgba8",)
        assert planar.chroma == "420"
        assert [p.width_divisor for p in planar.planes] == [1, 2]
        assert planar.components[0].plane_index == 0

    def test_spirv(self, built: BuildResult) -> None:
        """Should build SPIR-V extensions and capabilities."""
        extension = built.registry.spirv_extensions[0]
        assert [e.version or e.extension for e in extension.enables] == [
            "VK_VERSION_1_1",
            "VK_KHR_variable_pointers",
        ]
        assert [c.name for c in built.registry.spirv_capabilities] == ["Shader"]

    def test_struct_enable_needs_feature(self, built: BuildResult) -> None:
        """Should reject struct enables without a feature attribute."""
        assert _codes(built) == ["E300"]

    def test_builder_is_reusable(self) -> None:
        """Should start from empty tables on every build."""
        builder = RegistryBuilder()
        builder.build(read_document(self.DOCUMENT))
        again = builder.build(read_document("<registry/>"))
        assert again.registry.formats == ()
        assert again.result.issues == []
