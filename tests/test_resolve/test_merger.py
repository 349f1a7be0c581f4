"""Tests for the feature/extension merger."""

from __future__ import annotations

import pytest
from vk_registry.builder import parse_registry
from vk_registry.models import EntityKind, MergeStepAction, Registry, ResolvedRegistry
from vk_registry.resolve import AliasResolver, FeatureMerger, MergeOptions, RemovePrecedence

from tests.fixtures.sample_registries import REMOVE_ENUM_VALUE_XML, REMOVE_REQUIRE_XML

API_CONSTANTS_1_0 = (
    "VK_FALSE",
    "VK_LOD_CLAMP_NONE",
    "VK_MAX_EXTENSION_NAME_SIZE",
    "VK_MAX_PHYSICAL_DEVICE_NAME_SIZE",
    "VK_REMAINING_MIP_LEVELS",
    "VK_TRUE",
    "VK_UUID_SIZE",
    "VK_WHOLE_SIZE",
)


@pytest.fixture
def merger(registry: Registry, aliases: AliasResolver) -> FeatureMerger:
    """Return a merger over the sample registry."""
    return FeatureMerger(registry, aliases)


def _codes(resolved: ResolvedRegistry) -> list[str]:
    return [w.code for w in resolved.warnings]


class TestCoreVersions:
    """Tests for replaying core versions."""

    def test_version_1_0(self, merger: FeatureMerger) -> None:
        """Should include exactly what VK_VERSION_1_0 requires."""
        resolved = merger.merge("vulkan", "1.0")
        assert resolved.features == ("VK_VERSION_1_0",)
        assert resolved.extensions == ()
        assert "VkInstanceCreateInfo" in resolved.types
        assert "VkPhysicalDeviceProperties2" not in resolved.types
        assert "vkGetPhysicalDeviceProperties2" not in resolved.commands
        assert resolved.warnings == ()

    def test_version_limit(self, merger: FeatureMerger) -> None:
        """Should include later versions only when asked."""
        assert merger.merge("vulkan", "1.1").features == ("VK_VERSION_1_0", "VK_VERSION_1_1")
        assert merger.merge("vulkan").features == ("VK_VERSION_1_0", "VK_VERSION_1_1")

    def test_names_sorted(self, merger: FeatureMerger) -> None:
        """Should return sorted name tuples."""
        resolved = merger.merge("vulkan", "1.1")
        assert list(resolved.types) == sorted(resolved.types)
        assert list(resolved.commands) == sorted(resolved.commands)
        assert list(resolved.enums) == sorted(resolved.enums)

    def test_constants_container(self, merger: FeatureMerger) -> None:
        """Should list only the required constants of the constants block."""
        resolved = merger.merge("vulkan", "1.0")
        assert resolved.enum_values["API Constants"] == API_CONSTANTS_1_0
        assert "VK_LUID_SIZE" not in resolved.enums

    def test_enum_type_pulls_its_values(self, merger: FeatureMerger) -> None:
        """Should include all container values of an included enum type."""
        resolved = merger.merge("vulkan", "1.0")
        assert resolved.enum_values["VkResult"] == (
            "VK_ERROR_INITIALIZATION_FAILED",
            "VK_ERROR_OUT_OF_HOST_MEMORY",
            "VK_NOT_READY",
            "VK_SUCCESS",
        )
        assert "VK_SUCCESS" in resolved.enums

    def test_excluded_enum_type(self, merger: FeatureMerger) -> None:
        """Should leave out containers whose type is not included."""
        resolved = merger.merge("vulkan", "1.0")
        assert "VkAccessFlagBits2" not in resolved.enum_values
        assert "VK_ACCESS_2_NONE" not in resolved.enums

    def test_extended_values(self, merger: FeatureMerger) -> None:
        """Should add values that later versions add to existing enums."""
        resolved = merger.merge("vulkan", "1.1")
        assert resolved.enum_values["VkQueueFlagBits"] == (
            "VK_QUEUE_COMPUTE_BIT",
            "VK_QUEUE_GRAPHICS_BIT",
            "VK_QUEUE_PROTECTED_BIT",
            "VK_QUEUE_SPARSE_BINDING_BIT",
        )
        assert "VK_STRUCTURE_TYPE_PHYSICAL_DEVICE_PROTECTED_MEMORY_FEATURES" in (
            resolved.enum_values["VkStructureType"]
        )

    def test_api_filtering(self, merger: FeatureMerger) -> None:
        """Should only replay features of the requested api."""
        resolved = merger.merge("vulkansc", "1.0")
        assert resolved.features == ()
        assert resolved.types == ()


class TestExtensions:
    """Tests for enabling extensions."""

    def test_extension_adds_names(self, merger: FeatureMerger) -> None:
        """Should add the names and enum extensions of an extension."""
        resolved = merger.merge("vulkan", "1.0", ["VK_KHR_surface"])
        assert resolved.extensions == ("VK_KHR_surface",)
        assert "VkSurfaceKHR" in resolved.types
        assert "vkDestroySurfaceKHR" in resolved.commands
        assert "VK_KHR_SURFACE_SPEC_VERSION" in resolved.enums
        assert "VK_ERROR_SURFACE_LOST_KHR" in resolved.enum_values["VkResult"]
        assert "VK_OBJECT_TYPE_SURFACE_KHR" in resolved.enum_values["VkObjectType"]

    def test_unsatisfied_dependency(self, merger: FeatureMerger) -> None:
        """Should skip an extension whose dependency is not enabled."""
        resolved = merger.merge("vulkan", "1.0", ["VK_KHR_swapchain"])
        assert resolved.extensions == ()
        assert _codes(resolved) == ["W010"]
        assert resolved.warnings[0].source == "VK_KHR_swapchain"
        assert "VK_SUBOPTIMAL_KHR" not in resolved.enums

    def test_order_independent(self, merger: FeatureMerger) -> None:
        """Should produce identical surfaces for any request order."""
        first = merger.merge("vulkan", "1.0", ["VK_KHR_surface", "VK_KHR_swapchain"])
        second = merger.merge("vulkan", "1.0", ["VK_KHR_swapchain", "VK_KHR_surface"])
        assert first == second
        assert first.extensions == ("VK_KHR_surface", "VK_KHR_swapchain")
        assert "VK_SUBOPTIMAL_KHR" in first.enum_values["VkResult"]

    def test_unsupported_api(self, merger: FeatureMerger) -> None:
        """Should skip disabled extensions with W011."""
        resolved = merger.merge("vulkan", "1.0", ["VK_NV_extension_99"])
        assert _codes(resolved) == ["W011"]
        assert "VK_NV_EXTENSION_99_SPEC_VERSION" not in resolved.enums

    def test_unknown_extension(self, merger: FeatureMerger) -> None:
        """Should skip undeclared extensions with W012."""
        resolved = merger.merge("vulkan", "1.0", ["VK_KHR_bogus"])
        assert _codes(resolved) == ["W012"]

    def test_dependency_on_core_version(self, merger: FeatureMerger) -> None:
        """Should accept extensions that depend on an enabled core version."""
        assert merger.merge("vulkan", "1.0", ["VK_KHR_get_physical_device_properties2"]).extensions == (
            "VK_KHR_get_physical_device_properties2",
        )

    def test_or_dependency(self, merger: FeatureMerger) -> None:
        """Should accept either side of a ',' dependency."""
        via_extension = merger.merge(
            "vulkan", "1.0", ["VK_KHR_synchronization2", "VK_KHR_get_physical_device_properties2"]
        )
        via_version = merger.merge("vulkan", "1.1", ["VK_KHR_synchronization2"])
        neither = merger.merge("vulkan", "1.0", ["VK_KHR_synchronization2"])
        assert "VK_KHR_synchronization2" in via_extension.extensions
        assert "VK_KHR_synchronization2" in via_version.extensions
        assert _codes(neither) == ["W010"]

    def test_guarded_block_skipped(self, merger: FeatureMerger) -> None:
        """Should skip require blocks whose guard is not met, as a note."""
        resolved = merger.merge("vulkan", "1.1", ["VK_KHR_synchronization2"])
        assert _codes(resolved) == ["W013"]
        assert resolved.warnings[0].informational
        assert resolved.enum_values["VkAccessFlagBits2"] == (
            "VK_ACCESS_2_INDIRECT_COMMAND_READ_BIT",
            "VK_ACCESS_2_NONE",
        )

    def test_guarded_block_applied(self, merger: FeatureMerger) -> None:
        """Should apply guarded blocks once the guard is enabled."""
        resolved = merger.merge(
            "vulkan", "1.1", ["VK_KHR_synchronization2", "VK_KHR_swapchain", "VK_KHR_surface"]
        )
        assert resolved.warnings == ()
        assert "VK_ACCESS_2_SHADER_SAMPLED_READ_BIT" in resolved.enum_values["VkAccessFlagBits2"]


class TestAliases:
    """Tests for alias handling during merges."""

    def test_alias_requests_include_canonical(self, merger: FeatureMerger) -> None:
        """Should include the canonical declaration of required aliases."""
        resolved = merger.merge("vulkan", "1.0", ["VK_KHR_get_physical_device_properties2"])
        assert "VkPhysicalDeviceProperties2" in resolved.types
        assert "VkPhysicalDeviceProperties2KHR" not in resolved.types
        assert "vkGetPhysicalDeviceProperties2" in resolved.commands
        assert resolved.aliases["VkPhysicalDeviceProperties2KHR"] == "VkPhysicalDeviceProperties2"

    def test_includes_by_alias(self, merger: FeatureMerger) -> None:
        """Should answer includes() for alias names."""
        resolved = merger.merge("vulkan", "1.0", ["VK_KHR_get_physical_device_properties2"])
        assert resolved.includes(EntityKind.TYPE, "VkPhysicalDeviceProperties2KHR")
        assert resolved.includes(EntityKind.COMMAND, "vkGetPhysicalDeviceProperties2KHR")
        assert resolved.includes(EntityKind.ENUM, "VK_STRUCTURE_TYPE_PHYSICAL_DEVICE_PROPERTIES_2_KHR")
        assert not resolved.includes(EntityKind.TYPE, "VkSurfaceKHR")

    def test_enum_alias_extends_canonical(self, merger: FeatureMerger) -> None:
        """Should record the canonical value under the extended container."""
        resolved = merger.merge("vulkan", "1.0", ["VK_KHR_get_physical_device_properties2"])
        values = resolved.enum_values["VkStructureType"]
        assert "VK_STRUCTURE_TYPE_PHYSICAL_DEVICE_PROPERTIES_2" in values
        assert "VK_STRUCTURE_TYPE_PHYSICAL_DEVICE_PROPERTIES_2_KHR" not in values

    def test_container_aliases_add_no_values(self, merger: FeatureMerger) -> None:
        """Should not list alias entries of a container as values."""
        resolved = merger.merge("vulkan", "1.1", ["VK_KHR_synchronization2"])
        assert "VK_ACCESS_2_NONE_KHR" not in resolved.enum_values["VkAccessFlagBits2"]
        assert resolved.includes(EntityKind.TYPE, "VkAccessFlags2KHR")
        assert resolved.names(EntityKind.TYPE) == resolved.types


class TestRemoveBlocks:
    """Tests for remove blocks and precedence."""

    @pytest.fixture
    def remove_registry(self) -> Registry:
        """Return the remove/require document."""
        return parse_registry(REMOVE_REQUIRE_XML).registry

    def test_last_applied_wins(self, remove_registry: Registry) -> None:
        """Should re-add a removed name required by a later feature."""
        resolved = FeatureMerger(remove_registry).merge("vulkansc")
        assert resolved.features == ("VK_VERSION_1_0", "VKSC_VERSION_1_0", "VK_VERSION_1_1")
        assert resolved.commands == ("vkA", "vkB")

    def test_remove_wins(self, remove_registry: Registry) -> None:
        """Should keep removed names out with REMOVE_WINS."""
        options = MergeOptions(remove_precedence=RemovePrecedence.REMOVE_WINS)
        resolved = FeatureMerger(remove_registry, options=options).merge("vulkansc")
        assert resolved.commands == ("vkB",)
        ignored = [s for s in resolved.log if s.action is MergeStepAction.IGNORE]
        assert [(s.source, s.name) for s in ignored] == [
            ("VKSC_VERSION_1_0", "vkNeverAdded"),
            ("VK_VERSION_1_1", "vkA"),
        ]

    def test_removal_before_readd(self, remove_registry: Registry) -> None:
        """Should exclude removed names when no later feature adds them."""
        resolved = FeatureMerger(remove_registry).merge("vulkansc", "1.0")
        assert resolved.commands == ("vkB",)

    def test_remove_of_absent_name_is_noop(self, remove_registry: Registry) -> None:
        """Should log and ignore removal of a name never added."""
        resolved = FeatureMerger(remove_registry).merge("vulkansc", "1.0")
        step = next(s for s in resolved.log if s.name == "vkNeverAdded")
        assert step.action is MergeStepAction.IGNORE
        assert resolved.warnings == ()

    def test_other_api_unaffected(self, remove_registry: Registry) -> None:
        """Should not apply vulkansc removals to vulkan."""
        resolved = FeatureMerger(remove_registry).merge("vulkan")
        assert resolved.features == ("VK_VERSION_1_0", "VK_VERSION_1_1")
        assert resolved.commands == ("vkA", "vkB")


class TestRemoveContainerValues:
    """Tests for removing values an enums block declares itself."""

    @pytest.fixture
    def enum_registry(self) -> Registry:
        """Return the document that removes one value of VkE."""
        return parse_registry(REMOVE_ENUM_VALUE_XML).registry

    def test_value_removed(self, enum_registry: Registry) -> None:
        """Should drop the removed value from its container."""
        resolved = FeatureMerger(enum_registry).merge("vulkansc", "1.0")
        assert resolved.enum_values == {"VkE": ("VK_E_A",)}
        assert "VK_E_B" not in resolved.enums
        step = next(s for s in resolved.log if s.name == "VK_E_B")
        assert (step.source, step.action) == ("VKSC_VERSION_1_0", MergeStepAction.REMOVE)

    def test_last_applied_wins_readds(self, enum_registry: Registry) -> None:
        """Should restore the value when a later feature requires it."""
        resolved = FeatureMerger(enum_registry).merge("vulkansc")
        assert resolved.enum_values == {"VkE": ("VK_E_A", "VK_E_B")}
        assert "VK_E_B" in resolved.enums

    def test_remove_wins_keeps_value_out(self, enum_registry: Registry) -> None:
        """Should ignore the later require with REMOVE_WINS."""
        options = MergeOptions(remove_precedence=RemovePrecedence.REMOVE_WINS)
        resolved = FeatureMerger(enum_registry, options=options).merge("vulkansc")
        assert resolved.enum_values == {"VkE": ("VK_E_A",)}
        ignored = [s for s in resolved.log if s.action is MergeStepAction.IGNORE]
        assert [(s.source, s.name) for s in ignored] == [("VK_VERSION_1_1", "VK_E_B")]

    def test_remove_without_container_is_noop(self) -> None:
        """Should ignore removal of a value whose container is not included."""
        document = REMOVE_ENUM_VALUE_XML.replace('<type name="VkE"/>', "")
        resolved = FeatureMerger(parse_registry(document).registry).merge("vulkansc", "1.0")
        step = next(s for s in resolved.log if s.name == "VK_E_B")
        assert step.action is MergeStepAction.IGNORE
        assert resolved.enum_values == {}

    def test_other_api_keeps_value(self, enum_registry: Registry) -> None:
        """Should not apply the vulkansc removal to vulkan."""
        resolved = FeatureMerger(enum_registry).merge("vulkan", "1.0")
        assert resolved.enum_values == {"VkE": ("VK_E_A", "VK_E_B")}


class TestMergeLog:
    """Tests for the merge log."""

    def test_log_order(self, merger: FeatureMerger) -> None:
        """Should log steps in replay order."""
        resolved = merger.merge("vulkan", "1.0", ["VK_KHR_surface"])
        first = resolved.log[0]
        assert (first.source, first.action, first.kind, first.name) == (
            "VK_VERSION_1_0",
            MergeStepAction.ADD,
            EntityKind.TYPE,
            "vk_platform",
        )
        assert resolved.log[-1].source == "VK_KHR_surface"

    def test_log_records_canonical(self, merger: FeatureMerger) -> None:
        """Should record the canonical name of alias requests."""
        resolved = merger.merge("vulkan", "1.0", ["VK_KHR_get_physical_device_properties2"])
        step = next(s for s in resolved.log if s.name == "vkGetPhysicalDeviceProperties2KHR")
        assert step.canonical == "vkGetPhysicalDeviceProperties2"

    def test_resolved_is_frozen(self, merger: FeatureMerger) -> None:
        """Should return an immutable snapshot."""
        resolved = merger.merge("vulkan", "1.0")
        with pytest.raises(ValueError):
            resolved.api = "vulkansc"  # type: ignore[misc]
