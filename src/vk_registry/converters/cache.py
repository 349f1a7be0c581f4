"""Write and read registry cache files.

A cache file is a fixed magic header, one compression byte and the
pydantic JSON encoding of a ``Registry`` or ``ResolvedRegistry``.
Reading a cache skips XML parsing and building entirely.
"""

from __future__ import annotations

import gzip
import json
import lzma
import zlib
from pathlib import Path
from types import ModuleType

from pydantic import ValidationError

from vk_registry import __version__
from vk_registry.models.registry import Registry
from vk_registry.models.resolved import ResolvedRegistry

# "VKREG cache 1\0\0\0" - 16 bytes total (ASCII)
FILE_MAGIC = b"VKREG cache 1\x00\x00\x00"

_COMPRESSION_IDS: dict[str | None, int] = {None: 0, "gzip": 1, "lzma": 2, "zstd": 3}
_COMPRESSION_NAMES = {value: key for key, value in _COMPRESSION_IDS.items()}

_KINDS: dict[str, type[Registry] | type[ResolvedRegistry]] = {
    "registry": Registry,
    "resolved": ResolvedRegistry,
}


class CacheFormatError(ValueError):
    """Raised when cache bytes are not a valid registry cache."""


class RegistryCache:
    """Encode registries to cache files and back.

    Usage:
        cache = RegistryCache(compression="gzip")
        cache.write(registry, Path("vk.cache"))
        registry = cache.read(Path("vk.cache"))

    Or for in-memory conversion:
        data = cache.write_bytes(registry)
    """

    def __init__(self, compression: str | None = None) -> None:
        """Initialize the cache codec.

        Args:
        ----
            compression: Compression algorithm ("gzip", "lzma", "zstd", or None).
                "zstd" requires the zstandard package.

        Raises:
        ------
            ValueError: If compression algorithm is unknown.

        """
        if compression not in _COMPRESSION_IDS:
            raise ValueError(f"Unknown compression algorithm: {compression}")
        self._compression = compression

    def write(self, model: Registry | ResolvedRegistry, output_path: Path) -> None:
        """Write a registry to a cache file.

        Args:
        ----
            model: Registry or resolved surface to store.
            output_path: Output file path. Parent directories will be created.

        """
        data = self.write_bytes(model)

        # Ensure parent directory exists
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "wb") as f:
            f.write(data)

    def write_bytes(self, model: Registry | ResolvedRegistry) -> bytes:
        """Encode a registry without writing to file.

        Args:
        ----
            model: Registry or resolved surface to encode.

        Returns:
        -------
            Cache bytes (magic header, compression byte, payload).

        """
        kind = "resolved" if isinstance(model, ResolvedRegistry) else "registry"
        envelope = {
            "kind": kind,
            "generator": __version__,
            "data": model.model_dump(mode="json"),
        }
        payload = json.dumps(envelope, separators=(",", ":")).encode("utf-8")
        compression_id = _COMPRESSION_IDS[self._compression]
        return FILE_MAGIC + bytes([compression_id]) + self._compress(payload)

    def read(self, path: Path) -> Registry | ResolvedRegistry:
        """Read a cache file.

        Raises
        ------
            FileNotFoundError: If file doesn't exist.
            CacheFormatError: If file format is invalid.

        """
        with open(path, "rb") as f:
            raw_data = f.read()

        return self.read_bytes(raw_data)

    def read_bytes(self, raw_data: bytes) -> Registry | ResolvedRegistry:
        """Decode cache bytes.

        Args:
        ----
            raw_data: Bytes produced by ``write_bytes``.

        Returns:
        -------
            The stored Registry or ResolvedRegistry.

        Raises:
        ------
            CacheFormatError: If the header, compression or payload is invalid.

        """
        if not raw_data.startswith(FILE_MAGIC):
            raise CacheFormatError("Invalid cache file: missing magic header")

        header_size = len(FILE_MAGIC)
        if len(raw_data) <= header_size:
            raise CacheFormatError("Invalid cache file: truncated header")

        compression_id = raw_data[header_size]
        if compression_id not in _COMPRESSION_NAMES:
            raise CacheFormatError(f"Unknown compression id: {compression_id}")

        try:
            payload = self._decompress(
                raw_data[header_size + 1 :], _COMPRESSION_NAMES[compression_id]
            )
            envelope = json.loads(payload)
        except (OSError, EOFError, zlib.error, lzma.LZMAError, ValueError) as e:
            raise CacheFormatError(f"Corrupt cache payload: {e}") from e

        if not isinstance(envelope, dict) or envelope.get("kind") not in _KINDS:
            raise CacheFormatError("Invalid cache file: unknown payload kind")

        model_class = _KINDS[envelope["kind"]]
        try:
            return model_class.model_validate(envelope.get("data"))
        except ValidationError as e:
            raise CacheFormatError(f"Cache payload does not match the registry model: {e}") from e

    def _compress(self, data: bytes) -> bytes:
        if self._compression == "gzip":
            return gzip.compress(data)
        if self._compression == "lzma":
            return lzma.compress(data)
        if self._compression == "zstd":
            return _zstandard().ZstdCompressor().compress(data)
        return data

    @staticmethod
    def _decompress(data: bytes, compression: str | None) -> bytes:
        if compression == "gzip":
            return gzip.decompress(data)
        if compression == "lzma":
            return lzma.decompress(data)
        if compression == "zstd":
            zstd = _zstandard()
            try:
                return zstd.ZstdDecompressor().decompress(data)
            except zstd.ZstdError as e:
                raise ValueError(str(e)) from e
        return data


def _zstandard() -> ModuleType:
    try:
        import zstandard
    except ImportError:
        raise RuntimeError(
            "zstandard package required for zstd compression. "
            "Install with: pip install zstandard"
        ) from None
    return zstandard
