"""Convert parsed declarations to IR type descriptors."""

from __future__ import annotations

from vk_registry.ir.types import IRMember, IRTypeRef
from vk_registry.models.types import Declaration


def declaration_to_type_ref(
    declaration: Declaration, canonical: str, category: str | None
) -> IRTypeRef:
    """Create a type descriptor from a declaration.

    Args:
    ----
        declaration: Parsed member, parameter or return declaration.
        canonical: Canonical name of the referenced type.
        category: Category of the referenced type, None for C builtins.

    Returns:
    -------
        IRTypeRef carrying pointer, const, array and bit-field details.

    Example:
    -------
        ``const char* const* ppEnabledLayerNames`` becomes
        ``IRTypeRef("char", None, pointer_depth=2, is_const=True,
        inner_is_const=True)``.

    """
    pointer = declaration.pointer
    return IRTypeRef(
        name=canonical,
        category=category,
        pointer_depth=declaration.pointer_depth,
        is_const=declaration.is_const,
        inner_is_const=pointer.inner_is_const if pointer else False,
        array_dims=declaration.array_shape,
        bit_width=declaration.bitfield_width,
    )


def declaration_to_member(
    declaration: Declaration, type_ref: IRTypeRef, values: str | None = None
) -> IRMember:
    """Create an IR member (or parameter) from a declaration."""
    return IRMember(
        name=declaration.name,
        type=type_ref,
        length=declaration.len,
        optional=tuple(declaration.optional),
        values=values,
        externsync=declaration.externsync,
        noautovalidity=declaration.noautovalidity,
    )
