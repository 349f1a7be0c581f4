"""Resolution passes over a built registry.

Modules:
    aliases: Alias chain resolution and the alias index
    enum_values: Concrete values of enum constants
    depends: Dependency expression evaluation
    merger: Feature/extension replay into a ResolvedRegistry
"""

from vk_registry.resolve.aliases import AliasCycleError, AliasIndex, AliasResolver
from vk_registry.resolve.depends import (
    DependsSyntaxError,
    depends_names,
    evaluate_depends,
    parse_depends,
)
from vk_registry.resolve.enum_values import (
    ENUM_BASE_VALUE,
    ENUM_RANGE_SIZE,
    ComputedEnum,
    EnumValueCalculator,
    EnumValueTable,
    extension_enum_value,
    parse_enum_literal,
)
from vk_registry.resolve.merger import FeatureMerger, MergeOptions, RemovePrecedence

__all__ = [
    "ENUM_BASE_VALUE",
    "ENUM_RANGE_SIZE",
    "AliasCycleError",
    "AliasIndex",
    "AliasResolver",
    "ComputedEnum",
    "DependsSyntaxError",
    "EnumValueCalculator",
    "EnumValueTable",
    "FeatureMerger",
    "MergeOptions",
    "RemovePrecedence",
    "depends_names",
    "evaluate_depends",
    "extension_enum_value",
    "parse_depends",
    "parse_enum_literal",
]
