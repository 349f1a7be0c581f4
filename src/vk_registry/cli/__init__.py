"""CLI support module for vk-registry (the typer app lives in ``vk_registry.cli_main``)."""

from vk_registry.cli.error_formatter import ErrorFormatter, ErrorTable, ErrorTree
from vk_registry.cli.exception_handler import handle_exceptions
from vk_registry.cli.pydantic_errors import (
    format_pydantic_location,
    get_suggestion_for_error,
    translate_pydantic_error,
)

__all__ = [
    "ErrorFormatter",
    "ErrorTable",
    "ErrorTree",
    "handle_exceptions",
    "format_pydantic_location",
    "get_suggestion_for_error",
    "translate_pydantic_error",
]
