"""Models for features (core versions) and extensions."""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import Field, model_validator

from vk_registry.models.common import CommaList, EntityKind, RegistryModel
from vk_registry.models.enums import EnumValue


class BlockAction(str, Enum):
    """Whether an interface block adds or removes names."""

    REQUIRE = "require"
    REMOVE = "remove"


class InterfaceItem(RegistryModel):
    """A ``<type>``, ``<command>`` or ``<enum>`` item of a require/remove block.

    Enum items keep their full declaration since they may define new
    values (``extends`` + ``offset``/``bitpos``/``value``).
    """

    kind: EntityKind
    name: Annotated[str, Field(min_length=1)]
    comment: str | None = None
    enum: EnumValue | None = None

    @model_validator(mode="after")
    def _enum_only_for_enum_items(self) -> InterfaceItem:
        if self.enum is not None and self.kind is not EntityKind.ENUM:
            raise ValueError("Only enum items may carry an enum declaration")
        return self


class InterfaceBlock(RegistryModel):
    """A ``<require>`` or ``<remove>`` block with its optional guard."""

    action: BlockAction
    api: CommaList = ()
    depends: str | None = None
    extension: str | None = None
    feature: str | None = None
    profile: str | None = None
    comment: str | None = None
    items: tuple[InterfaceItem, ...] = ()

    def names(self, kind: EntityKind) -> list[str]:
        """Names of all items of a given kind, in block order."""
        return [item.name for item in self.items if item.kind is kind]


class Feature(RegistryModel):
    """A ``<feature>``: a core API version such as VK_VERSION_1_1.

    Example:
    -------
        ```xml
        <feature api="vulkan" name="VK_VERSION_1_0" number="1.0">
            <require>
                <type name="VkExtent2D"/>
                <command name="vkCreateInstance"/>
            </require>
        </feature>
        ```

    """

    name: Annotated[str, Field(min_length=1)]
    api: CommaList
    number: str
    depends: str | None = None
    protect: str | None = None
    comment: str | None = None
    blocks: tuple[InterfaceBlock, ...] = ()

    @property
    def version(self) -> tuple[int, ...]:
        """Version number as a comparable tuple, e.g. ``(1, 2)``."""
        return version_key(self.number)


class Extension(RegistryModel):
    """An ``<extension>`` with its numbered enum range and blocks."""

    name: Annotated[str, Field(min_length=1)]
    number: int
    ext_type: str | None = None
    supported: CommaList = ()
    ratified: CommaList = ()
    depends: str | None = None
    requires: CommaList = ()
    requires_core: str | None = None
    platform: str | None = None
    protect: str | None = None
    author: str | None = None
    contact: str | None = None
    provisional: bool = False
    specialuse: CommaList = ()
    sortorder: int | None = None
    promotedto: str | None = None
    deprecatedby: str | None = None
    obsoletedby: str | None = None
    comment: str | None = None
    blocks: tuple[InterfaceBlock, ...] = ()

    @property
    def is_disabled(self) -> bool:
        """True for reserved placeholders with ``supported="disabled"``."""
        return self.supported == ("disabled",)


def version_key(number: str) -> tuple[int, ...]:
    """Turn a version string like ``"1.2"`` into ``(1, 2)``.

    Non-numeric components sort as 0.
    """
    parts: list[int] = []
    for part in number.split("."):
        parts.append(int(part) if part.isdigit() else 0)
    return tuple(parts)
