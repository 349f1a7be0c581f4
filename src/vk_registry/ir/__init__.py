"""Intermediate Representation (IR) of the denormalized registry schema.

The IR is what downstream generators consume:

1. Aliases are resolved; alias names are kept only as a list on the
   canonical record
2. Struct members and parameters carry complete type descriptors
3. Bitmasks carry their flag-bits enum inline
4. Feature/extension provenance is folded into ``available_in`` markers
5. Uses frozen dataclasses for simple, immutable data structures
"""

from vk_registry.ir.registry import IRCommand, IRRegistry
from vk_registry.ir.types import (
    IRAvailability,
    IRAvailabilityKind,
    IRBaseType,
    IRBitmask,
    IRConstant,
    IREnum,
    IREnumValue,
    IRFuncPointer,
    IRHandle,
    IRMember,
    IRStruct,
    IRTypeRef,
)

__all__ = [
    "IRAvailability",
    "IRAvailabilityKind",
    "IRBaseType",
    "IRBitmask",
    "IRCommand",
    "IRConstant",
    "IREnum",
    "IREnumValue",
    "IRFuncPointer",
    "IRHandle",
    "IRMember",
    "IRRegistry",
    "IRStruct",
    "IRTypeRef",
]
