"""Registry to IR (Intermediate Representation) transformation module.

This module transforms a resolved API surface of a built ``Registry`` into
the denormalized IR consumed by code generators.

The transformation process:
    1. Fold the merge log into "available in" markers
    2. Group alias names under their canonical records
    3. Expand struct members and command parameters to type descriptors
    4. Attach computed values to enums and inline them into bitmasks
    5. Collect standalone constants

Primary Class:
    RegistryToIRTransformer: Main transformer class

Example:
-------
    >>> from vk_registry.models.loader import load_registry
    >>> from vk_registry.transform import RegistryToIRTransformer
    >>>
    >>> registry = load_registry("vk.xml").registry
    >>> resolved = registry.resolve("vulkan", "1.0")
    >>> ir_registry = RegistryToIRTransformer(registry).transform(resolved)
    >>> print(f"Commands: {len(ir_registry.commands)}")

"""

from vk_registry.transform.options import TransformOptions
from vk_registry.transform.transformer import RegistryToIRTransformer

__all__ = ["RegistryToIRTransformer", "TransformOptions"]
