"""Validators for name references between registry tables."""

from __future__ import annotations

from vk_registry.models.common import EntityKind
from vk_registry.models.features import InterfaceItem
from vk_registry.models.types import Declaration, TypeCategory, TypeEntry
from vk_registry.validation.base import BaseValidator, RegistryContext
from vk_registry.validation.errors import ErrorCodes, ValidationResult


def _type_path(entry: TypeEntry) -> str:
    return f'types/type[@name="{entry.name}"]'


class TypeReferenceValidator(BaseValidator):
    """Validates that types used inside type declarations are defined."""

    def validate(
        self,
        ctx: RegistryContext,
        result: ValidationResult,
    ) -> None:
        """Check struct members, function pointer signatures and typedef targets."""
        for entries in ctx.registry.types.values():
            for entry in entries:
                if entry.alias:
                    continue
                self._validate_entry(ctx, entry, result)

    def _validate_entry(self, ctx: RegistryContext, entry: TypeEntry, result: ValidationResult) -> None:
        path = _type_path(entry)

        for member in entry.members:
            self._check(
                ctx,
                member.declaration,
                f"{entry.category.value.capitalize()} '{entry.name}' member '{member.name}'",
                f'{path}/member[@name="{member.name}"]',
                entry.name,
                result,
            )

        if entry.funcpointer is not None:
            self._check(
                ctx,
                entry.funcpointer.proto,
                f"Function pointer '{entry.name}' return type",
                f"{path}/proto",
                entry.name,
                result,
            )
            for param in entry.funcpointer.params:
                self._check(
                    ctx,
                    param,
                    f"Function pointer '{entry.name}' parameter '{param.name}'",
                    f'{path}/param[@name="{param.name}"]',
                    entry.name,
                    result,
                )

        if entry.basetype and not ctx.type_exists(entry.basetype):
            result.add_error(
                code=ErrorCodes.E001_UNDEFINED_TYPE,
                message=f"Type '{entry.name}' is a typedef of undefined type '{entry.basetype}'",
                path=path,
                suggestion=f"Declare '{entry.basetype}' in the types section",
                entity=entry.name,
                referenced_type=entry.basetype,
            )

    @staticmethod
    def _check(
        ctx: RegistryContext,
        declaration: Declaration,
        what: str,
        path: str,
        entity: str,
        result: ValidationResult,
    ) -> None:
        if ctx.type_exists(declaration.type_name):
            return
        result.add_error(
            code=ErrorCodes.E001_UNDEFINED_TYPE,
            message=f"{what} references undefined type '{declaration.type_name}'",
            path=path,
            suggestion=f"Declare '{declaration.type_name}' in the types section",
            entity=entity,
            referenced_type=declaration.type_name,
        )


class CommandReferenceValidator(BaseValidator):
    """Validates that command return and parameter types are defined."""

    def validate(
        self,
        ctx: RegistryContext,
        result: ValidationResult,
    ) -> None:
        """Check the types used by every command signature."""
        for name, entries in ctx.registry.commands.items():
            for command in entries:
                if command.proto is None:
                    continue
                path = f'commands/command[@name="{name}"]'
                declarations = [("return type", command.proto, f"{path}/proto")]
                declarations += [
                    (f"parameter '{p.name}'", p.declaration, f'{path}/param[@name="{p.name}"]')
                    for p in command.params
                ]
                for what, declaration, decl_path in declarations:
                    if ctx.type_exists(declaration.type_name):
                        continue
                    result.add_error(
                        code=ErrorCodes.E001_UNDEFINED_TYPE,
                        message=(
                            f"Command '{name}' {what} references undefined type "
                            f"'{declaration.type_name}'"
                        ),
                        path=decl_path,
                        suggestion=f"Declare '{declaration.type_name}' in the types section",
                        entity=name,
                        referenced_type=declaration.type_name,
                    )


class RequiresReferenceValidator(BaseValidator):
    """Validates ``requires``, ``bitvalues``, ``parent`` and ``structextends`` references."""

    def validate(
        self,
        ctx: RegistryContext,
        result: ValidationResult,
    ) -> None:
        """Check the type-level references of every type."""
        for entries in ctx.registry.types.values():
            for entry in entries:
                if entry.alias:
                    continue
                if entry.category is TypeCategory.BITMASK:
                    self._validate_bitmask(ctx, entry, result)
                elif entry.requires and not ctx.type_exists(entry.requires):
                    self._undefined_type(entry, "requires", entry.requires, result)

                for parent in entry.parent:
                    if not ctx.type_exists(parent):
                        self._undefined_type(entry, "parent", parent, result)
                for extended in entry.structextends:
                    if not ctx.type_exists(extended):
                        self._undefined_type(entry, "structextends", extended, result)

    def _validate_bitmask(self, ctx: RegistryContext, entry: TypeEntry, result: ValidationResult) -> None:
        backing = entry.backing_enum
        if backing is None:
            return
        if backing in ctx.registry.enums or ctx.canonical(backing) in ctx.registry.enums:
            return
        attribute = "bitvalues" if entry.bitvalues else "requires"
        result.add_error(
            code=ErrorCodes.E002_UNDEFINED_ENUM,
            message=f"Bitmask '{entry.name}' {attribute} undefined enum '{backing}'",
            path=f"{_type_path(entry)}/@{attribute}",
            suggestion=f"Add an <enums name=\"{backing}\" type=\"bitmask\"> block",
            entity=entry.name,
            referenced_enum=backing,
        )

    @staticmethod
    def _undefined_type(entry: TypeEntry, attribute: str, name: str, result: ValidationResult) -> None:
        result.add_error(
            code=ErrorCodes.E001_UNDEFINED_TYPE,
            message=f"Type '{entry.name}' {attribute} undefined type '{name}'",
            path=f"{_type_path(entry)}/@{attribute}",
            suggestion=f"Declare '{name}' in the types section",
            entity=entry.name,
            referenced_type=name,
        )


class AliasTargetValidator(BaseValidator):
    """Validates that every alias points at a declared name."""

    def validate(
        self,
        ctx: RegistryContext,
        result: ValidationResult,
    ) -> None:
        """Check the direct target of every alias declaration."""
        exists = {
            EntityKind.TYPE: lambda n: n in ctx.registry.types,
            EntityKind.COMMAND: lambda n: n in ctx.registry.commands,
            EntityKind.ENUM: lambda n: n in ctx.constants,
        }
        for kind in EntityKind:
            for name, target in sorted(ctx.aliases.alias_sources(kind).items()):
                if exists[kind](target):
                    continue
                result.add_error(
                    code=ErrorCodes.E004_UNDEFINED_ALIAS_TARGET,
                    message=f"{kind.value.capitalize()} '{name}' aliases undefined '{target}'",
                    path=f'{kind.value}[@name="{name}"]/@alias',
                    suggestion=f"Declare '{target}' or fix the alias",
                    entity=name,
                    alias=target,
                )


class InterfaceReferenceValidator(BaseValidator):
    """Validates names used by feature and extension blocks."""

    def validate(
        self,
        ctx: RegistryContext,
        result: ValidationResult,
    ) -> None:
        """Check require/remove items, extends targets and dependency names."""
        from vk_registry.resolve.depends import DependsSyntaxError, depends_names

        owners = [(f.name, "feature", f.depends, (), f.blocks) for f in ctx.registry.feature_list]
        owners += [
            (e.name, "extension", e.depends, e.requires, e.blocks)
            for e in ctx.registry.extension_list
        ]

        for owner, tag, depends, requires, blocks in owners:
            path = f'{tag}[@name="{owner}"]'
            expressions = [depends, *requires]
            for block in blocks:
                expressions += [block.depends, block.extension, block.feature]
                self._validate_items(ctx, owner, path, block.items, result)

            for expression in expressions:
                try:
                    names = depends_names(expression)
                except DependsSyntaxError as e:
                    result.add_error(
                        code=ErrorCodes.E302_INVALID_ATTRIBUTE_VALUE,
                        message=f"'{owner}' has an invalid dependency expression: {e}",
                        path=path,
                    )
                    continue
                for name in names:
                    if name not in ctx.interface_names:
                        result.add_error(
                            code=ErrorCodes.E005_UNDEFINED_EXTENSION,
                            message=f"'{owner}' depends on undefined feature or extension '{name}'",
                            path=path,
                            entity=owner,
                            referenced_extension=name,
                        )

    @staticmethod
    def _validate_items(
        ctx: RegistryContext,
        owner: str,
        path: str,
        items: tuple[InterfaceItem, ...],
        result: ValidationResult,
    ) -> None:
        for item in items:
            item_path = f'{path}/{item.kind.value}[@name="{item.name}"]'
            if item.kind is EntityKind.TYPE and not ctx.type_exists(item.name):
                result.add_error(
                    code=ErrorCodes.E001_UNDEFINED_TYPE,
                    message=f"'{owner}' requires undefined type '{item.name}'",
                    path=item_path,
                    entity=owner,
                    referenced_type=item.name,
                )
            elif item.kind is EntityKind.COMMAND and not ctx.command_exists(item.name):
                result.add_error(
                    code=ErrorCodes.E003_UNDEFINED_COMMAND,
                    message=f"'{owner}' requires undefined command '{item.name}'",
                    path=item_path,
                    entity=owner,
                    referenced_command=item.name,
                )
            elif item.kind is EntityKind.ENUM:
                if item.enum is None and not ctx.constant_exists(item.name):
                    result.add_error(
                        code=ErrorCodes.E002_UNDEFINED_ENUM,
                        message=f"'{owner}' requires undefined enum '{item.name}'",
                        path=item_path,
                        entity=owner,
                        referenced_enum=item.name,
                    )
                extends = item.enum.extends if item.enum is not None else None
                if (
                    extends
                    and extends not in ctx.registry.enums
                    and ctx.canonical(extends) not in ctx.registry.enums
                ):
                    result.add_error(
                        code=ErrorCodes.E002_UNDEFINED_ENUM,
                        message=f"'{owner}' extends undefined enum '{extends}' with '{item.name}'",
                        path=item_path,
                        entity=owner,
                        referenced_enum=extends,
                    )
