"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest
from vk_registry.builder import BuildResult, parse_registry
from vk_registry.models.registry import Registry
from vk_registry.resolve.aliases import AliasResolver

from tests.fixtures.sample_registries import SAMPLE_REGISTRY_XML


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_xml() -> str:
    """Return the sample registry document."""
    return SAMPLE_REGISTRY_XML


@pytest.fixture
def sample_xml_file(tmp_path: Path, sample_xml: str) -> Path:
    """Write the sample registry to a temporary vk.xml."""
    path = tmp_path / "vk.xml"
    path.write_text(sample_xml, encoding="utf-8")
    return path


@pytest.fixture
def built(sample_xml: str) -> BuildResult:
    """Build the sample registry."""
    return parse_registry(sample_xml)


@pytest.fixture
def registry(built: BuildResult) -> Registry:
    """Return the tables of the sample registry."""
    return built.registry


@pytest.fixture
def aliases(registry: Registry) -> AliasResolver:
    """Return an alias resolver over the sample registry."""
    return AliasResolver(registry)
