"""vk-registry: parser and resolver for machine-readable API registry documents.

This package provides tools for:
- Reading a registry XML document (e.g. Vulkan's vk.xml) into typed tables
- Resolving aliases and computing enumeration values
- Merging feature levels and extensions into a concrete API surface
- Transforming the resolved surface into a denormalized schema

Quick Start:
    >>> from vk_registry.builder import parse_registry
    >>> from vk_registry.transform import RegistryToIRTransformer
    >>>
    >>> built = parse_registry(xml_bytes)
    >>> resolved = built.registry.resolve("vulkan", "1.3", ["VK_KHR_surface"])
    >>> schema = RegistryToIRTransformer(built.registry).transform(resolved)

Modules:
    reader: Generic element tree reader
    models: Pydantic models for the registry tables
    builder: Element tree to registry tables
    resolve: Alias resolution, enum values, feature/extension merging
    validation: Cross-reference and consistency checks
    ir: Denormalized downstream schema
    transform: Resolved registry to IR transformation
    converters: Interchange cache and schema writers
    cli: Command-line interface
"""

__version__ = "0.1.0"
