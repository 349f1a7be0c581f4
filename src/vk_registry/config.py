"""Pipeline configuration files.

A configuration file names the surface to resolve and the merge and
transform options, so that a generator build can pin them in one place:

```yaml
api: vulkan
version: "1.3"
extensions: [VK_KHR_surface, VK_KHR_swapchain]
merge:
  remove_precedence: remove_wins
transform:
  include_availability: false
```
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

from vk_registry.models.common import CommaList
from vk_registry.models.loader import LoaderError
from vk_registry.resolve.merger import MergeOptions
from vk_registry.transform.options import TransformOptions


class PipelineConfig(BaseModel):
    """Surface request plus merge and transform options."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    api: Annotated[str, Field(min_length=1)] = "vulkan"
    version: Annotated[str, Field(pattern=r"^\d+\.\d+$")] | None = None
    extensions: CommaList = ()
    merge: MergeOptions = Field(default_factory=MergeOptions)
    transform: TransformOptions = Field(default_factory=TransformOptions)


def load_config_file(path: Path) -> dict[str, Any]:
    """Load a YAML or JSON configuration file and return the raw dictionary.

    Raises
    ------
        LoaderError: If the file cannot be loaded or parsed.

    """
    if not path.is_file():
        raise LoaderError(f"Config file not found: {path}", path)

    suffix = path.suffix.lower()
    if suffix not in {".yaml", ".yml", ".json"}:
        raise LoaderError(
            f"Unsupported file extension: {suffix}. Use .yaml, .yml, or .json",
            path,
        )

    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise LoaderError(f"YAML parsing error: {e}", path) from e
    except OSError as e:
        raise LoaderError(f"File read error: {e}", path) from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise LoaderError(
            f"Expected dictionary at root level, got {type(data).__name__}",
            path,
        )

    return data


def load_pipeline_config(path: Path) -> PipelineConfig:
    """Load and validate a pipeline configuration.

    Args:
    ----
        path: Path to the configuration file.

    Returns:
    -------
        Validated PipelineConfig.

    Raises:
    ------
        LoaderError: If the file cannot be loaded.
        pydantic.ValidationError: If the file content is invalid.

    """
    return PipelineConfig.model_validate(load_config_file(path))
