"""Registry file loading utilities."""

from __future__ import annotations

import logging
from pathlib import Path

from vk_registry.builder import BuildResult, parse_registry
from vk_registry.reader import DocumentParseError

logger = logging.getLogger(__name__)


class LoaderError(Exception):
    """Error during registry file loading."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        """Initialize LoaderError.

        Args:
        ----
            message: Error message describing what went wrong.
            path: Optional path to the file that caused the error.

        """
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


def read_registry_bytes(path: Path) -> bytes:
    """Read a registry document from disk.

    Args:
    ----
        path: Path to the XML registry file.

    Returns:
    -------
        The raw file content.

    Raises:
    ------
        LoaderError: If the file does not exist or cannot be read.

    """
    if not path.exists():
        raise LoaderError(f"File not found: {path}", path)

    if not path.is_file():
        raise LoaderError(f"Not a file: {path}", path)

    suffix = path.suffix.lower()
    if suffix != ".xml":
        raise LoaderError(f"Unsupported file extension: {suffix}. Use .xml", path)

    try:
        return path.read_bytes()
    except OSError as e:
        raise LoaderError(f"File read error: {e}", path) from e


def load_registry(path: Path) -> BuildResult:
    """Load and build a registry from an XML file.

    Args:
    ----
        path: Path to the registry file (e.g. ``vk.xml``).

    Returns:
    -------
        BuildResult with the registry and any build issues.

    Raises:
    ------
        LoaderError: If the file cannot be read or is not well-formed.

    """
    data = read_registry_bytes(path)
    logger.debug("Read %d bytes from %s", len(data), path)

    try:
        return parse_registry(data)
    except DocumentParseError as e:
        location = f" (line {e.line}, col {e.column})" if e.line is not None else ""
        raise LoaderError(f"Malformed registry document{location}: {e}", path) from e
