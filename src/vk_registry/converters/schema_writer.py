"""Write the IR schema as JSON or YAML documents."""

from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from vk_registry.ir.registry import IRRegistry

SCHEMA_FORMATS = ("json", "yaml")


def ir_to_dict(value: Any, compact: bool = False) -> Any:
    """Convert IR dataclasses to plain dicts, lists and scalars.

    Args:
    ----
        value: An IR record (or any nested part of one).
        compact: Leave out fields that are None or empty.

    Returns:
    -------
        A structure that ``json`` and ``yaml.safe_dump`` accept.

    """
    if is_dataclass(value) and not isinstance(value, type):
        result = {}
        for f in fields(value):
            item = ir_to_dict(getattr(value, f.name), compact)
            if compact and (item is None or item == [] or item == {}):
                continue
            result[f.name] = item
        return result
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [ir_to_dict(item, compact) for item in value]
    if isinstance(value, dict):
        return {key: ir_to_dict(item, compact) for key, item in value.items()}
    return value


class SchemaWriter:
    """Serialize an ``IRRegistry`` for downstream generators.

    Usage:
        writer = SchemaWriter(format="yaml")
        writer.write(ir_registry, Path("vulkan-1.1.yaml"))
    """

    def __init__(self, format: str = "json", compact: bool = False) -> None:
        """Initialize the writer.

        Args:
        ----
            format: Output format ("json" or "yaml").
            compact: Leave out fields that are None or empty.

        Raises:
        ------
            ValueError: If the format is unknown.

        """
        if format not in SCHEMA_FORMATS:
            raise ValueError(f"Unknown schema format: {format}")
        self._format = format
        self._compact = compact

    def write(self, ir_registry: IRRegistry, output_path: Path) -> None:
        """Write the schema to a file. Parent directories will be created."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.write_text(ir_registry), encoding="utf-8")

    def write_text(self, ir_registry: IRRegistry) -> str:
        """Serialize the schema to a string."""
        data = ir_to_dict(ir_registry, self._compact)
        if self._format == "yaml":
            return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
        return json.dumps(data, indent=2) + "\n"
