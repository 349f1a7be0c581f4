"""Models for registry metadata: vendors, platforms, tags, formats, SPIR-V."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

from vk_registry.models.common import HexInt, RegistryModel


class VendorId(RegistryModel):
    """A Khronos vendor id (``<vendorid name="KHR" id="0x10000"/>``)."""

    name: Annotated[str, Field(min_length=1)]
    id: HexInt
    comment: str | None = None


class Platform(RegistryModel):
    """A window-system platform and its protecting preprocessor macro."""

    name: Annotated[str, Field(min_length=1)]
    protect: str
    comment: str | None = None


class Tag(RegistryModel):
    """An author tag used as a name suffix (KHR, EXT, ...)."""

    name: Annotated[str, Field(min_length=1)]
    author: str
    contact: str


class FormatComponent(RegistryModel):
    """A colour component of a format."""

    name: str
    bits: str
    numeric_format: str
    plane_index: int | None = None


class FormatPlane(RegistryModel):
    """A plane of a multi-planar format."""

    index: int
    width_divisor: int
    height_divisor: int
    compatible: str


class Format(RegistryModel):
    """A ``<format>`` description."""

    name: Annotated[str, Field(min_length=1)]
    format_class: str
    block_size: int
    texels_per_block: int
    block_extent: str | None = None
    packed: int | None = None
    compressed: str | None = None
    chroma: str | None = None
    components: tuple[FormatComponent, ...] = ()
    planes: tuple[FormatPlane, ...] = ()
    spirv_image_formats: tuple[str, ...] = ()


class Enable(RegistryModel):
    """What enables a SPIR-V extension or capability.

    Exactly one of ``version``, ``extension``, ``struct`` (feature enable)
    or ``property`` (property enable) is set.
    """

    version: str | None = None
    extension: str | None = None
    struct: str | None = None
    feature: str | None = None
    property: str | None = None
    member: str | None = None
    value: str | None = None
    requires: str | None = None
    alias: str | None = None


class SpirvExtension(RegistryModel):
    """A SPIR-V extension and how it is enabled."""

    name: Annotated[str, Field(min_length=1)]
    enables: tuple[Enable, ...] = ()


class SpirvCapability(RegistryModel):
    """A SPIR-V capability and how it is enabled."""

    name: Annotated[str, Field(min_length=1)]
    enables: tuple[Enable, ...] = ()


class UnrecognizedElement(RegistryModel):
    """An element the builder does not know, kept as written."""

    xpath: str
    tag: str
    attributes: dict[str, str] = Field(default_factory=dict)
    markup: str
