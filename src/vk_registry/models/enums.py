"""Models for enumeration containers and their values."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import Field

from vk_registry.models.common import CommaList, HexInt, RegistryModel


class EnumsKind(str, Enum):
    """Kind of an ``<enums>`` block."""

    ENUM = "enum"
    BITMASK = "bitmask"
    CONSTANTS = "constants"


class LiteralSpec(RegistryModel):
    """``value="..."``: an explicit literal, kept as written."""

    kind: Literal["literal"] = "literal"
    value: str


class BitposSpec(RegistryModel):
    """``bitpos="p"``: the value is ``1 << p``."""

    kind: Literal["bitpos"] = "bitpos"
    bitpos: Annotated[int, Field(ge=0)]


class OffsetSpec(RegistryModel):
    """``offset="O"``: value derived from the owning extension's number."""

    kind: Literal["offset"] = "offset"
    offset: int
    extnumber: int | None = None
    negative: bool = False


class AliasSpec(RegistryModel):
    """``alias="OTHER"``: same value as another constant."""

    kind: Literal["alias"] = "alias"
    alias: str


class ReferenceSpec(RegistryModel):
    """Bare ``<enum name="X"/>`` inside a require block: a reference only."""

    kind: Literal["reference"] = "reference"


EnumValueSpec = Annotated[
    LiteralSpec | BitposSpec | OffsetSpec | AliasSpec | ReferenceSpec,
    Field(discriminator="kind"),
]


class EnumValue(RegistryModel):
    """A single ``<enum>`` declaration.

    Appears either inside an ``<enums>`` block or as an item of a feature or
    extension require block (usually with ``extends``).
    """

    name: Annotated[str, Field(min_length=1)]
    spec: EnumValueSpec
    extends: str | None = None
    api: CommaList = ()
    protect: str | None = None
    type_suffix: str | None = None
    comment: str | None = None
    deprecated: str | None = None

    @property
    def alias(self) -> str | None:
        """Alias target, if this declaration is an alias."""
        return self.spec.alias if isinstance(self.spec, AliasSpec) else None

    @property
    def is_reference(self) -> bool:
        """True when the declaration only refers to an existing constant."""
        return isinstance(self.spec, ReferenceSpec)


class UnusedRange(RegistryModel):
    """An ``<unused>`` range reserved inside an ``<enums>`` block."""

    start: int
    end: int | None = None
    vendor: str | None = None
    comment: str | None = None


class EnumContainer(RegistryModel):
    """An ``<enums>`` block.

    Example:
    -------
        ```xml
        <enums name="VkImageLayout" type="enum">
            <enum value="0" name="VK_IMAGE_LAYOUT_UNDEFINED"/>
            <enum value="1" name="VK_IMAGE_LAYOUT_GENERAL"/>
        </enums>
        ```

    """

    name: Annotated[str, Field(min_length=1)]
    kind: EnumsKind
    bitwidth: int | None = None
    start: HexInt | None = None
    end: HexInt | None = None
    vendor: str | None = None
    comment: str | None = None
    values: tuple[EnumValue, ...] = ()
    unused: tuple[UnusedRange, ...] = ()

    def get_value(self, name: str) -> EnumValue | None:
        """Return a value declared directly in this block."""
        for value in self.values:
            if value.name == name:
                return value
        return None


# Name of the container holding standalone constants such as VK_MAX_EXTENSION_NAME_SIZE
API_CONSTANTS = "API Constants"
