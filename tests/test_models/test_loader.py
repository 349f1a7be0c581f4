"""Tests for the registry loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from vk_registry.models.loader import LoaderError, load_registry, read_registry_bytes

from tests.fixtures.sample_registries import MALFORMED_XML


class TestReadRegistryBytes:
    """Tests for read_registry_bytes."""

    def test_reads_file(self, sample_xml_file: Path) -> None:
        """Should return the file content."""
        assert read_registry_bytes(sample_xml_file).startswith(b"<?xml")

    def test_missing_file(self, tmp_path: Path) -> None:
        """Should raise LoaderError for a missing file."""
        with pytest.raises(LoaderError, match="File not found"):
            read_registry_bytes(tmp_path / "missing.xml")

    def test_directory(self, tmp_path: Path) -> None:
        """Should raise LoaderError for a directory."""
        directory = tmp_path / "vk.xml"
        directory.mkdir()
        with pytest.raises(LoaderError, match="Not a file"):
            read_registry_bytes(directory)

    def test_wrong_extension(self, tmp_path: Path) -> None:
        """Should raise LoaderError for a non-XML suffix."""
        path = tmp_path / "vk.yaml"
        path.write_text("registry: {}")
        with pytest.raises(LoaderError, match="Unsupported file extension"):
            read_registry_bytes(path)


class TestLoadRegistry:
    """Tests for load_registry."""

    def test_load_sample(self, sample_xml_file: Path) -> None:
        """Should build the sample registry without errors."""
        built = load_registry(sample_xml_file)
        assert built.result.is_valid
        assert "VkInstance" in built.registry.types

    def test_malformed_document(self, tmp_path: Path) -> None:
        """Should wrap parse errors in LoaderError with the position."""
        path = tmp_path / "broken.xml"
        path.write_text(MALFORMED_XML)
        with pytest.raises(LoaderError, match="Malformed registry document") as exc_info:
            load_registry(path)
        assert exc_info.value.path == path
        assert "line" in str(exc_info.value)
