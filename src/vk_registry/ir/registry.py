"""IR model for commands and the complete denormalized registry.

This module defines the top-level container handed to downstream code
generators.
"""

from __future__ import annotations

from dataclasses import dataclass

from vk_registry.ir.types import (
    IRAvailability,
    IRBaseType,
    IRBitmask,
    IRConstant,
    IREnum,
    IRFuncPointer,
    IRHandle,
    IRMember,
    IRStruct,
    IRTypeRef,
)


@dataclass(frozen=True)
class IRCommand:
    """A command with resolved return and parameter types."""

    name: str
    return_type: IRTypeRef
    params: tuple[IRMember, ...] = ()
    success_codes: tuple[str, ...] = ()
    error_codes: tuple[str, ...] = ()
    queues: tuple[str, ...] = ()
    renderpass: str | None = None
    cmdbufferlevel: tuple[str, ...] = ()
    aliases: tuple[str, ...] = ()
    available_in: tuple[IRAvailability, ...] = ()


@dataclass(frozen=True)
class IRRegistry:
    """The denormalized schema of one resolved API surface.

    All record tuples are sorted by name.
    """

    api: str
    version: str | None = None
    extensions: tuple[str, ...] = ()
    basetypes: tuple[IRBaseType, ...] = ()
    structs: tuple[IRStruct, ...] = ()
    handles: tuple[IRHandle, ...] = ()
    enums: tuple[IREnum, ...] = ()
    bitmasks: tuple[IRBitmask, ...] = ()
    constants: tuple[IRConstant, ...] = ()
    funcpointers: tuple[IRFuncPointer, ...] = ()
    commands: tuple[IRCommand, ...] = ()

    def get_struct(self, name: str) -> IRStruct | None:
        """Get a struct or union by name."""
        return next((s for s in self.structs if s.name == name), None)

    def get_enum(self, name: str) -> IREnum | None:
        """Get an enum by name."""
        return next((e for e in self.enums if e.name == name), None)

    def get_bitmask(self, name: str) -> IRBitmask | None:
        """Get a bitmask by name."""
        return next((b for b in self.bitmasks if b.name == name), None)

    def get_handle(self, name: str) -> IRHandle | None:
        """Get a handle by name."""
        return next((h for h in self.handles if h.name == name), None)

    def get_command(self, name: str) -> IRCommand | None:
        """Get a command by name."""
        return next((c for c in self.commands if c.name == name), None)

    def get_constant(self, name: str) -> IRConstant | None:
        """Get a constant by name."""
        return next((c for c in self.constants if c.name == name), None)
