"""CLI exception handling."""

from __future__ import annotations

import traceback
from collections.abc import Callable
from functools import wraps
from typing import TypeVar

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from vk_registry.converters.cache import CacheFormatError
from vk_registry.models.loader import LoaderError
from vk_registry.resolve.aliases import AliasCycleError
from vk_registry.validation.validator import RegistryValidationError

T = TypeVar("T")

console = Console(stderr=True)


def handle_exceptions(
    verbose: bool = False,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Handle exceptions in CLI commands with formatted output.

    Every handled exception ends the command with exit code 1.

    Args:
    ----
        verbose: Whether to show full tracebacks.

    Returns:
    -------
        Decorator function.

    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: object, **kwargs: object) -> T:
            try:
                return func(*args, **kwargs)
            except typer.Exit:
                raise
            except RegistryValidationError as e:
                _handle_validation_error(e, verbose)
                raise typer.Exit(1) from None
            except PydanticValidationError as e:
                _handle_pydantic_error(e, verbose)
                raise typer.Exit(1) from None
            except CacheFormatError as e:
                _handle_cache_error(e, verbose)
                raise typer.Exit(1) from None
            except LoaderError as e:
                _print_panel(str(e), "Please check that the registry file is readable XML.")
                raise typer.Exit(1) from None
            except AliasCycleError as e:
                _print_panel(str(e), "Break the cycle by removing one of the alias attributes.")
                raise typer.Exit(1) from None
            except FileNotFoundError as e:
                _print_panel(
                    f"File not found: {e.filename or 'unknown'}",
                    "Please check that the file path is correct.",
                )
                raise typer.Exit(1) from None
            except PermissionError as e:
                _print_panel(
                    f"Permission denied: {e.filename or 'unknown'}",
                    "Check file permissions and try again.",
                )
                raise typer.Exit(1) from None
            except Exception as e:
                _handle_generic_error(e, verbose)
                raise typer.Exit(1) from None

        return wrapper

    return decorator


def _handle_validation_error(error: RegistryValidationError, verbose: bool) -> None:
    """Handle registry validation errors."""
    from vk_registry.cli.error_formatter import ErrorFormatter

    formatter = ErrorFormatter(console, show_info=verbose)
    formatter.format_validation_result(error.result)


def _handle_pydantic_error(error: PydanticValidationError, verbose: bool) -> None:
    """Handle Pydantic validation errors (configuration files, cache payloads)."""
    from vk_registry.cli.pydantic_errors import (
        format_pydantic_location,
        get_suggestion_for_error,
        translate_pydantic_error,
    )

    console.print("[red bold]Schema Validation Failed[/red bold]")
    console.print()

    for err in error.errors():
        location = format_pydantic_location(err["loc"])
        msg = translate_pydantic_error(err)
        suggestion = get_suggestion_for_error(err)

        console.print(f"[red]✗[/red] {escape(location)}")
        console.print(f"  {escape(msg)}")
        console.print(f"  [dim]({err['type']})[/dim]")

        if suggestion:
            console.print(f"  [green]💡 {escape(suggestion)}[/green]")

        console.print()

    if verbose:
        console.print("[dim]Full error:[/dim]")
        console.print(escape(str(error)))


def _handle_cache_error(error: CacheFormatError, verbose: bool) -> None:
    """Handle unreadable cache files; model mismatches are shown field by field."""
    if isinstance(error.__cause__, PydanticValidationError):
        _handle_pydantic_error(error.__cause__, verbose)
        return
    _print_panel(str(error), "Recreate the cache with 'vk-registry cache'.")


def _print_panel(message: str, hint: str) -> None:
    console.print(
        Panel(
            f"[red]{escape(message)}[/red]\n\n{escape(hint)}",
            title="Error",
            border_style="red",
        )
    )


def _handle_generic_error(error: Exception, verbose: bool) -> None:
    """Handle unexpected errors."""
    console.print(
        Panel(
            f"[red]An unexpected error occurred:[/red]\n{escape(str(error))}",
            title="Error",
            border_style="red",
        )
    )

    if verbose:
        console.print("\n[dim]Traceback:[/dim]")
        console.print(escape(traceback.format_exc()))
    else:
        console.print("\n[dim]Use --verbose for full traceback[/dim]")
