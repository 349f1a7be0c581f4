"""Tests for pipeline configuration files."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError
from vk_registry.config import PipelineConfig, load_config_file, load_pipeline_config
from vk_registry.models.loader import LoaderError
from vk_registry.resolve.merger import RemovePrecedence


class TestPipelineConfig:
    """Tests for the PipelineConfig model."""

    def test_defaults(self) -> None:
        """Should resolve every vulkan version with no extensions by default."""
        config = PipelineConfig()
        assert config.api == "vulkan"
        assert config.version is None
        assert config.extensions == ()
        assert config.merge.remove_precedence is RemovePrecedence.LAST_APPLIED_WINS
        assert config.transform.include_aliases

    def test_extensions_comma_string(self) -> None:
        """Should accept extensions as a comma-separated string."""
        config = PipelineConfig(extensions="VK_KHR_surface, VK_KHR_swapchain")
        assert config.extensions == ("VK_KHR_surface", "VK_KHR_swapchain")

    def test_invalid_version(self) -> None:
        """Should reject versions that are not MAJOR.MINOR."""
        with pytest.raises(ValidationError) as exc_info:
            PipelineConfig(version="1")
        assert exc_info.value.errors()[0]["type"] == "string_pattern_mismatch"

    def test_unknown_field(self) -> None:
        """Should reject unknown keys."""
        with pytest.raises(ValidationError):
            PipelineConfig(apis="vulkan")  # type: ignore[call-arg]

    def test_unknown_precedence(self) -> None:
        """Should reject an unknown remove precedence."""
        with pytest.raises(ValidationError):
            PipelineConfig.model_validate({"merge": {"remove_precedence": "first_wins"}})


class TestLoadConfig:
    """Tests for loading configuration files."""

    def test_load_yaml(self, tmp_path: Path) -> None:
        """Should load a YAML configuration."""
        path = tmp_path / "pipeline.yaml"
        path.write_text(
            """\
api: vulkan
version: "1.1"
extensions: [VK_KHR_surface]
merge:
  remove_precedence: remove_wins
transform:
  include_availability: false
"""
        )
        config = load_pipeline_config(path)
        assert config.version == "1.1"
        assert config.extensions == ("VK_KHR_surface",)
        assert config.merge.remove_precedence is RemovePrecedence.REMOVE_WINS
        assert not config.transform.include_availability

    def test_load_json(self, tmp_path: Path) -> None:
        """Should load a JSON configuration."""
        path = tmp_path / "pipeline.json"
        path.write_text('{"api": "vulkansc", "version": "1.0"}')
        assert load_pipeline_config(path).api == "vulkansc"

    def test_empty_file(self, tmp_path: Path) -> None:
        """Should treat an empty file as an empty configuration."""
        path = tmp_path / "pipeline.yaml"
        path.write_text("")
        assert load_config_file(path) == {}

    def test_missing_file(self, tmp_path: Path) -> None:
        """Should raise LoaderError for a missing file."""
        with pytest.raises(LoaderError, match="not found"):
            load_config_file(tmp_path / "missing.yaml")

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        """Should raise LoaderError for an unsupported suffix."""
        path = tmp_path / "pipeline.toml"
        path.write_text("api = 'vulkan'")
        with pytest.raises(LoaderError, match="Unsupported file extension"):
            load_config_file(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Should raise LoaderError for unparseable YAML."""
        path = tmp_path / "pipeline.yaml"
        path.write_text("api: [vulkan")
        with pytest.raises(LoaderError, match="YAML parsing error"):
            load_config_file(path)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        """Should raise LoaderError when the root is not a mapping."""
        path = tmp_path / "pipeline.yaml"
        path.write_text("- vulkan\n- vulkansc\n")
        with pytest.raises(LoaderError, match="Expected dictionary"):
            load_config_file(path)
