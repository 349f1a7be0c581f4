"""Registry builder: element tree to typed registry tables."""

from vk_registry.builder.builder import BuildError, BuildResult, RegistryBuilder, parse_registry
from vk_registry.builder.declarations import (
    DeclarationError,
    parse_declaration,
    parse_define,
    parse_funcpointer,
)

__all__ = [
    "BuildError",
    "BuildResult",
    "DeclarationError",
    "RegistryBuilder",
    "parse_declaration",
    "parse_define",
    "parse_funcpointer",
    "parse_registry",
]
