"""Models for the types section of a registry document."""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import Field

from vk_registry.models.common import CommaList, RegistryModel


class TypeCategory(str, Enum):
    """Category of a type declaration.

    ``basic`` covers both ``category="basetype"`` and declarations with no
    category at all (platform scalars such as ``uint32_t``); the literal
    attribute is kept on ``TypeEntry.raw_category``.
    """

    BASIC = "basic"
    BITMASK = "bitmask"
    HANDLE = "handle"
    ENUM = "enum"
    FUNCPOINTER = "funcpointer"
    STRUCT = "struct"
    UNION = "union"
    DEFINE = "define"
    INCLUDE = "include"
    UNKNOWN = "unknown"


# Raw category attribute -> TypeCategory
CATEGORY_MAP: dict[str | None, TypeCategory] = {
    None: TypeCategory.BASIC,
    "basetype": TypeCategory.BASIC,
    "bitmask": TypeCategory.BITMASK,
    "handle": TypeCategory.HANDLE,
    "enum": TypeCategory.ENUM,
    "funcpointer": TypeCategory.FUNCPOINTER,
    "struct": TypeCategory.STRUCT,
    "union": TypeCategory.UNION,
    "define": TypeCategory.DEFINE,
    "include": TypeCategory.INCLUDE,
}


class HandleKind(str, Enum):
    """Handle flavour, from the defining macro."""

    DISPATCHABLE = "dispatchable"
    NON_DISPATCHABLE = "non_dispatchable"


class PointerKind(RegistryModel):
    """Pointer qualifiers of a declaration.

    ``const char* const*`` is depth 2 with both flags set.
    """

    depth: Annotated[int, Field(ge=1, le=2)]
    is_const: bool = False
    inner_is_const: bool = False


class Declaration(RegistryModel):
    """A C declaration split into its parts: ``const struct T* name[N]``.

    Used for struct members, command parameters and return types.
    """

    name: str
    type_name: str
    pointer: PointerKind | None = None
    is_const: bool = False
    is_struct: bool = False
    array_shape: tuple[int | str, ...] = ()
    bitfield_width: int | None = None
    len: str | None = None
    altlen: str | None = None
    optional: CommaList = ()
    noautovalidity: bool = False
    externsync: str | None = None
    objecttype: str | None = None
    code: str = ""

    @property
    def pointer_depth(self) -> int:
        """Number of pointer indirections (0 for plain values)."""
        return self.pointer.depth if self.pointer else 0


class TypeMember(RegistryModel):
    """A struct or union member."""

    declaration: Declaration
    api: CommaList = ()
    values: str | None = None
    selector: str | None = None
    selection: CommaList = ()
    limittype: str | None = None
    validextensionstructs: CommaList = ()
    comment: str | None = None

    @property
    def name(self) -> str:
        """Member name."""
        return self.declaration.name

    @property
    def type_name(self) -> str:
        """Referenced type name."""
        return self.declaration.type_name


class FunctionPointer(RegistryModel):
    """Signature of a ``funcpointer`` type."""

    proto: Declaration
    params: tuple[Declaration, ...] = ()


class DefineSpec(RegistryModel):
    """Interpretation of a ``#define`` type body.

    Exactly one of ``value`` / ``expression`` is set unless the define is
    empty. Function-like macros carry their ``params``.
    """

    value: str | None = None
    expression: str | None = None
    params: tuple[str, ...] = ()
    is_disabled: bool = False
    replace: bool = False
    comment: str | None = None
    defref: tuple[str, ...] = ()


class TypeEntry(RegistryModel):
    """A single ``<type>`` declaration.

    Example:
    -------
        ```xml
        <type category="struct" name="VkExtent2D">
            <member><type>uint32_t</type> <name>width</name></member>
            <member><type>uint32_t</type> <name>height</name></member>
        </type>
        ```

    """

    name: Annotated[str, Field(min_length=1)]
    category: TypeCategory
    raw_category: str | None = None
    api: CommaList = ()
    alias: str | None = None
    requires: str | None = None
    bitvalues: str | None = None
    parent: CommaList = ()
    basetype: str | None = None
    handle_kind: HandleKind | None = None
    objtypeenum: str | None = None
    returnedonly: bool = False
    structextends: CommaList = ()
    allowduplicate: bool = False
    members: tuple[TypeMember, ...] = ()
    funcpointer: FunctionPointer | None = None
    define: DefineSpec | None = None
    comment: str | None = None
    deprecated: str | None = None
    code: str = ""

    @property
    def backing_enum(self) -> str | None:
        """Enum container a bitmask draws its flag bits from."""
        if self.category is not TypeCategory.BITMASK:
            return None
        return self.bitvalues or self.requires
