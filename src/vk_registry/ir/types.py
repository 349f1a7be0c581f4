"""IR models for type records of the denormalized schema.

Every reference is already resolved to its canonical name, so consumers
never have to follow an alias.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class IRAvailabilityKind(Enum):
    """Where an entity becomes available."""

    FEATURE = "feature"
    EXTENSION = "extension"


@dataclass(frozen=True)
class IRAvailability:
    """An "available in" marker, e.g. feature VK_VERSION_1_1."""

    kind: IRAvailabilityKind
    name: str


@dataclass(frozen=True)
class IRTypeRef:
    """A fully resolved reference to a type.

    Attributes
    ----------
        name: Canonical type name.
        category: Category of the referenced type (None for C builtins).
        pointer_depth: 0 for values, 1 for ``T*``, 2 for ``T**``.
        is_const: The pointee (or value) is const.
        inner_is_const: For ``T* const*``, the inner pointer is const.
        array_dims: Static array dimensions (ints or constant names).
        bit_width: Bit-field width.

    """

    name: str
    category: str | None = None
    pointer_depth: int = 0
    is_const: bool = False
    inner_is_const: bool = False
    array_dims: tuple[int | str, ...] = ()
    bit_width: int | None = None


@dataclass(frozen=True)
class IRMember:
    """A struct member or a command/function pointer parameter."""

    name: str
    type: IRTypeRef
    length: str | None = None
    optional: tuple[str, ...] = ()
    values: str | None = None
    externsync: str | None = None
    noautovalidity: bool = False


@dataclass(frozen=True)
class IRStruct:
    """A struct or union with its members expanded."""

    name: str
    is_union: bool = False
    members: tuple[IRMember, ...] = ()
    extends: tuple[str, ...] = ()
    returned_only: bool = False
    aliases: tuple[str, ...] = ()
    available_in: tuple[IRAvailability, ...] = ()


@dataclass(frozen=True)
class IRHandle:
    """An opaque handle type."""

    name: str
    dispatchable: bool
    parents: tuple[str, ...] = ()
    object_type: str | None = None
    aliases: tuple[str, ...] = ()
    available_in: tuple[IRAvailability, ...] = ()


@dataclass(frozen=True)
class IREnumValue:
    """A computed enum constant."""

    name: str
    value: int | float | str
    aliases: tuple[str, ...] = ()
    available_in: tuple[IRAvailability, ...] = ()


@dataclass(frozen=True)
class IREnum:
    """An enumeration or flag-bits type with its included values."""

    name: str
    is_bitmask: bool = False
    bitwidth: int = 32
    values: tuple[IREnumValue, ...] = ()
    aliases: tuple[str, ...] = ()
    available_in: tuple[IRAvailability, ...] = ()


@dataclass(frozen=True)
class IRBitmask:
    """A flags type, carrying its flag-bits enum inline."""

    name: str
    flag_width: int = 32
    flags: IREnum | None = None
    aliases: tuple[str, ...] = ()
    available_in: tuple[IRAvailability, ...] = ()


@dataclass(frozen=True)
class IRBaseType:
    """A scalar typedef (``VkBool32``) or platform type (``uint32_t``)."""

    name: str
    underlying: str | None = None
    aliases: tuple[str, ...] = ()
    available_in: tuple[IRAvailability, ...] = ()


@dataclass(frozen=True)
class IRConstant:
    """A standalone constant such as ``VK_MAX_EXTENSION_NAME_SIZE``.

    ``c_type`` is the declared ``type`` attribute of the constant
    (``uint32_t``, ``float``); None when the document gives none.
    """

    name: str
    value: int | float | str
    c_type: str | None = None
    aliases: tuple[str, ...] = ()
    available_in: tuple[IRAvailability, ...] = ()


@dataclass(frozen=True)
class IRFuncPointer:
    """A function pointer type, flattened to return type and parameters."""

    name: str
    return_type: IRTypeRef
    params: tuple[IRMember, ...] = ()
    available_in: tuple[IRAvailability, ...] = ()
