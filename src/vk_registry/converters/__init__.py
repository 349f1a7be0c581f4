"""Converters for storing registries and publishing the IR schema.

This package provides the output stage of the pipeline:

Cache Format:
    A 16 byte magic header, one compression byte (0 none, 1 gzip,
    2 lzma, 3 zstd) and the JSON encoding of a ``Registry`` or
    ``ResolvedRegistry``.

Primary Classes:
    RegistryCache: Write and read cache files
    SchemaWriter: Serialize an ``IRRegistry`` to JSON or YAML

Example:
-------
    >>> from vk_registry.converters import RegistryCache, SchemaWriter
    >>>
    >>> # Cache a built registry
    >>> data = RegistryCache(compression="gzip").write_bytes(registry)
    >>> registry = RegistryCache().read_bytes(data)
    >>>
    >>> # Publish a transformed surface
    >>> SchemaWriter(format="yaml").write(ir_registry, Path("vulkan.yaml"))

"""

from vk_registry.converters.cache import FILE_MAGIC, CacheFormatError, RegistryCache
from vk_registry.converters.schema_writer import SchemaWriter, ir_to_dict

__all__ = [
    "FILE_MAGIC",
    "CacheFormatError",
    "RegistryCache",
    "SchemaWriter",
    "ir_to_dict",
]
