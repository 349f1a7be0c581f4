"""Models for the commands section."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

from vk_registry.models.common import CommaList, RegistryModel
from vk_registry.models.types import Declaration


class CommandParam(RegistryModel):
    """A ``<param>`` of a command."""

    declaration: Declaration
    api: CommaList = ()
    validstructs: CommaList = ()
    stride: str | None = None

    @property
    def name(self) -> str:
        """Parameter name."""
        return self.declaration.name

    @property
    def type_name(self) -> str:
        """Referenced type name."""
        return self.declaration.type_name


class CommandEntry(RegistryModel):
    """A single ``<command>`` declaration.

    An alias command carries only ``name`` and ``alias``; its signature is
    the one of the canonical command.

    Example:
    -------
        ```xml
        <command successcodes="VK_SUCCESS" errorcodes="VK_ERROR_OUT_OF_HOST_MEMORY">
            <proto><type>VkResult</type> <name>vkCreateInstance</name></proto>
            <param>const <type>VkInstanceCreateInfo</type>* <name>pCreateInfo</name></param>
        </command>
        ```

    """

    name: Annotated[str, Field(min_length=1)]
    proto: Declaration | None = None
    params: tuple[CommandParam, ...] = ()
    alias: str | None = None
    api: CommaList = ()
    successcodes: CommaList = ()
    errorcodes: CommaList = ()
    queues: CommaList = ()
    renderpass: str | None = None
    cmdbufferlevel: CommaList = ()
    pipeline: str | None = None
    videocoding: str | None = None
    tasks: CommaList = ()
    export: CommaList = ()
    description: str | None = None
    comment: str | None = None
    deprecated: str | None = None
    implicitexternsyncparams: tuple[str, ...] = ()
    code: str = ""

    @property
    def return_type(self) -> str | None:
        """Return type name, or None for alias entries."""
        return self.proto.type_name if self.proto else None

    def get_param(self, name: str) -> CommandParam | None:
        """Return a parameter by name."""
        for param in self.params:
            if param.name == name:
                return param
        return None
