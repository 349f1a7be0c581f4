"""Command-line interface for the vk-registry toolkit."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from vk_registry import __version__
from vk_registry.cli.exception_handler import handle_exceptions
from vk_registry.config import PipelineConfig, load_pipeline_config
from vk_registry.models.registry import Registry
from vk_registry.models.resolved import ResolvedRegistry
from vk_registry.resolve.merger import MergeOptions, RemovePrecedence
from vk_registry.validation.errors import ValidationResult

# Create Typer app
app = typer.Typer(
    name="vk-registry",
    help="Parse, validate, resolve and transform API registry XML documents.",
    add_completion=True,
    no_args_is_help=True,
)

# Rich consoles for output
console = Console()
error_console = Console(stderr=True)

CACHE_COMPRESSIONS = ("gzip", "lzma", "zstd", "none")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"vk-registry version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route library logging through Rich; debug level with --verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Parse, validate, resolve and transform API registry XML documents.

    The registry document (e.g. vk.xml) is built into typed tables, merged
    into an API surface for one version plus extensions, and transformed
    into a denormalized schema for code generators.
    """


# Shared option types
InputFile = Annotated[
    Path,
    typer.Argument(
        help="Registry XML file or registry cache file.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        resolve_path=True,
    ),
]
ApiOption = Annotated[
    str | None, typer.Option("--api", "-a", help="API name to resolve (default: vulkan).")
]
ApiVersionOption = Annotated[
    str | None,
    typer.Option("--api-version", help="Highest core version to include, e.g. 1.3."),
]
ExtensionOption = Annotated[
    list[str] | None,
    typer.Option("--extension", "-e", help="Extension to enable. Repeat for several."),
]
ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Pipeline configuration file (YAML/JSON).",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
]
RemoveWinsOption = Annotated[
    bool,
    typer.Option("--remove-wins", help="A removed name stays removed even if required later."),
]
VerboseOption = Annotated[
    bool, typer.Option("--verbose", help="Show debug logging and full tracebacks.")
]


@app.command()
def validate(
    input_file: InputFile,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Treat warnings as errors."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only output errors, no success messages."),
    ] = False,
    show_summary: Annotated[
        bool,
        typer.Option("--summary", "-s", help="Show summary of registry contents."),
    ] = False,
    output_format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Output format for validation results: text, table, tree.",
        ),
    ] = "text",
    verbose: VerboseOption = False,
) -> None:
    """Build a registry and check all of its cross-references.

    Reports build errors (E1xx, E3xx), dangling references (E00x),
    alias cycles (E200), enum value conflicts and extension number reuse.

    Examples
    --------
        vk-registry validate vk.xml
        vk-registry validate vk.xml --strict
        vk-registry validate vk.xml --format tree

    """
    configure_logging(verbose)
    handle_exceptions(verbose)(_validate)(
        input_file, strict, quiet, show_summary, output_format, verbose
    )


def _validate(
    input_file: Path,
    strict: bool,
    quiet: bool,
    show_summary: bool,
    output_format: str,
    verbose: bool,
) -> None:
    from vk_registry.cli.error_formatter import ErrorFormatter, ErrorTable, ErrorTree
    from vk_registry.validation.validator import RegistryValidator

    registry, result = _load_input(input_file)
    result.merge(RegistryValidator(strict=strict).validate(registry))

    failed = not result.is_valid or (strict and bool(result.warnings))
    if failed or result.warnings or (verbose and result.infos):
        if output_format == "table":
            ErrorTable(error_console).print_result(result)
        elif output_format == "tree":
            ErrorTree(error_console).print_result(result)
        else:
            ErrorFormatter(error_console, show_info=verbose).format_validation_result(
                result, input_file
            )

    if failed:
        raise typer.Exit(code=1)

    if not quiet:
        if result.warnings:
            console.print(
                f"\n[bold yellow]⚠ {input_file.name} is valid with warnings[/bold yellow]\n"
            )
        else:
            console.print(f"\n[bold green]✓ {input_file.name} is valid[/bold green]\n")

        if show_summary:
            _print_registry_summary(registry)


@app.command()
def resolve(
    input_file: InputFile,
    api: ApiOption = None,
    api_version: ApiVersionOption = None,
    extensions: ExtensionOption = None,
    config: ConfigOption = None,
    remove_wins: RemoveWinsOption = False,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the resolved surface as JSON."),
    ] = None,
    check: Annotated[
        bool,
        typer.Option("--check", help="Warn about references leaving the resolved surface."),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Merge core versions and extensions into one API surface.

    Examples
    --------
        vk-registry resolve vk.xml --api-version 1.1
        vk-registry resolve vk.xml -e VK_KHR_surface -e VK_KHR_swapchain
        vk-registry resolve vk.xml --config pipeline.yaml -o surface.json

    """
    configure_logging(verbose)
    handle_exceptions(verbose)(_resolve)(
        input_file, api, api_version, extensions, config, remove_wins, output, check
    )


def _resolve(
    input_file: Path,
    api: str | None,
    api_version: str | None,
    extensions: list[str] | None,
    config: Path | None,
    remove_wins: bool,
    output: Path | None,
    check: bool,
) -> None:
    from vk_registry.cli.error_formatter import ErrorFormatter
    from vk_registry.validation.validator import validate_surface

    registry, _ = _load_input(input_file)
    pipeline = _pipeline_config(config, api, api_version, extensions, remove_wins)
    resolved = registry.resolve(
        pipeline.api, pipeline.version, pipeline.extensions, pipeline.merge
    )

    formatter = ErrorFormatter(error_console)
    formatter.format_merge_warnings(resolved.warnings)
    if check:
        surface_result = validate_surface(registry, resolved)
        if surface_result.issues:
            formatter.format_validation_result(surface_result, input_file)

    _print_surface_summary(resolved)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(resolved.model_dump_json(indent=2), encoding="utf-8")
        console.print(f"\n[bold green]✓ Wrote resolved surface to {output}[/bold green]\n")


@app.command()
def transform(
    input_file: InputFile,
    api: ApiOption = None,
    api_version: ApiVersionOption = None,
    extensions: ExtensionOption = None,
    config: ConfigOption = None,
    remove_wins: RemoveWinsOption = False,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file. Defaults to standard output."),
    ] = None,
    schema_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Schema format: json or yaml."),
    ] = "json",
    compact: Annotated[
        bool,
        typer.Option("--compact", help="Leave out empty and unset fields."),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Resolve a surface and write its denormalized schema.

    Examples
    --------
        vk-registry transform vk.xml --api-version 1.0 -o vulkan-1.0.json
        vk-registry transform vk.xml -e VK_KHR_surface --format yaml

    """
    configure_logging(verbose)
    handle_exceptions(verbose)(_transform)(
        input_file,
        api,
        api_version,
        extensions,
        config,
        remove_wins,
        output,
        schema_format,
        compact,
    )


def _transform(
    input_file: Path,
    api: str | None,
    api_version: str | None,
    extensions: list[str] | None,
    config: Path | None,
    remove_wins: bool,
    output: Path | None,
    schema_format: str,
    compact: bool,
) -> None:
    from vk_registry.converters.schema_writer import SCHEMA_FORMATS, SchemaWriter
    from vk_registry.transform import RegistryToIRTransformer

    if schema_format not in SCHEMA_FORMATS:
        error_console.print(
            f"\n[bold red]✗ Invalid format: {escape(schema_format)}[/bold red]\n"
            f"Supported: {', '.join(SCHEMA_FORMATS)}"
        )
        raise typer.Exit(code=1)

    registry, _ = _load_input(input_file)
    pipeline = _pipeline_config(config, api, api_version, extensions, remove_wins)
    resolved = registry.resolve(
        pipeline.api, pipeline.version, pipeline.extensions, pipeline.merge
    )
    ir_registry = RegistryToIRTransformer(registry, pipeline.transform).transform(resolved)

    writer = SchemaWriter(format=schema_format, compact=compact)
    if output is None:
        sys.stdout.write(writer.write_text(ir_registry))
        return

    writer.write(ir_registry, output)
    console.print(
        f"\n[bold green]✓ Wrote {len(ir_registry.structs)} structs and "
        f"{len(ir_registry.commands)} commands to {output}[/bold green]\n"
    )


@app.command()
def cache(
    input_file: InputFile,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Cache file path. Defaults to input filename with .vkcache extension.",
        ),
    ] = None,
    compression: Annotated[
        str,
        typer.Option(
            "--compression", help="Compression algorithm (gzip, lzma, zstd, or 'none')."
        ),
    ] = "gzip",
    resolve_surface: Annotated[
        bool,
        typer.Option("--resolved", help="Store the resolved surface instead of the registry."),
    ] = False,
    api: ApiOption = None,
    api_version: ApiVersionOption = None,
    extensions: ExtensionOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite output file if it exists."),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Store a built registry (or a resolved surface) as a cache file.

    Examples
    --------
        vk-registry cache vk.xml
        vk-registry cache vk.xml -o vk.vkcache --compression lzma
        vk-registry cache vk.xml --resolved --api-version 1.3

    """
    configure_logging(verbose)
    handle_exceptions(verbose)(_cache)(
        input_file, output, compression, resolve_surface, api, api_version, extensions, force
    )


def _cache(
    input_file: Path,
    output: Path | None,
    compression: str,
    resolve_surface: bool,
    api: str | None,
    api_version: str | None,
    extensions: list[str] | None,
    force: bool,
) -> None:
    from vk_registry.converters.cache import RegistryCache

    if compression not in CACHE_COMPRESSIONS:
        error_console.print(
            f"\n[bold red]✗ Invalid compression: {escape(compression)}[/bold red]\n"
            f"Supported: {', '.join(CACHE_COMPRESSIONS)}"
        )
        raise typer.Exit(code=1)

    if output is None:
        output = input_file.with_suffix(".vkcache")

    if output.exists() and not force:
        error_console.print(
            f"\n[bold red]✗ Output file already exists: {output}[/bold red]\n"
            "Use --force to overwrite."
        )
        raise typer.Exit(code=1)

    registry, _ = _load_input(input_file)
    model: Registry | ResolvedRegistry = registry
    if resolve_surface:
        pipeline = _pipeline_config(None, api, api_version, extensions, False)
        model = registry.resolve(pipeline.api, pipeline.version, pipeline.extensions)

    RegistryCache(compression=None if compression == "none" else compression).write(model, output)
    console.print(
        f"\n[bold green]✓ Wrote {output.stat().st_size:,} bytes to {output}[/bold green]\n"
    )


@app.command()
def info(
    input_file: InputFile,
    verbose: VerboseOption = False,
) -> None:
    """Display information about a registry XML or cache file.

    Examples
    --------
        vk-registry info vk.xml
        vk-registry info vk.vkcache

    """
    configure_logging(verbose)
    handle_exceptions(verbose)(_info)(input_file)


def _info(input_file: Path) -> None:
    from vk_registry.converters.cache import FILE_MAGIC, RegistryCache

    if input_file.suffix.lower() == ".xml":
        console.print(
            Panel.fit(f"[bold]Registry XML Document[/bold]\nFile: {input_file}", title="File Info")
        )
        registry, result = _load_input(input_file)
        _print_registry_summary(registry, result)
        return

    data = input_file.read_bytes()
    if not data.startswith(FILE_MAGIC):
        error_console.print(
            f"\n[bold red]✗ Unknown file type: {input_file.suffix}[/bold red]\n"
            "Supported: .xml and registry cache files"
        )
        raise typer.Exit(code=1)

    model = RegistryCache().read_bytes(data)
    kind = "Resolved Surface" if isinstance(model, ResolvedRegistry) else "Registry"
    console.print(
        Panel.fit(
            f"[bold]Registry Cache ({kind})[/bold]\nFile: {input_file}\nSize: {len(data):,} bytes",
            title="File Info",
        )
    )
    if isinstance(model, ResolvedRegistry):
        _print_surface_summary(model)
    else:
        _print_registry_summary(model)


def _load_input(path: Path) -> tuple[Registry, ValidationResult]:
    """Load a registry from XML or from a registry cache file."""
    from vk_registry.converters.cache import CacheFormatError, RegistryCache
    from vk_registry.models.loader import load_registry

    if path.suffix.lower() == ".xml":
        built = load_registry(path)
        return built.registry, built.result

    model = RegistryCache().read(path)
    if not isinstance(model, Registry):
        raise CacheFormatError(f"{path} holds a resolved surface, not a registry")
    return model, ValidationResult()


def _pipeline_config(
    config: Path | None,
    api: str | None,
    api_version: str | None,
    extensions: list[str] | None,
    remove_wins: bool,
) -> PipelineConfig:
    """Combine a configuration file with command-line overrides."""
    pipeline = load_pipeline_config(config) if config else PipelineConfig()
    updates: dict[str, object] = {}
    if api:
        updates["api"] = api
    if api_version:
        updates["version"] = api_version
    if extensions:
        updates["extensions"] = tuple(extensions)
    if remove_wins:
        updates["merge"] = MergeOptions(
            remove_precedence=RemovePrecedence.REMOVE_WINS, profile=pipeline.merge.profile
        )
    if not updates:
        return pipeline
    # Re-validate so that command-line values get the same checks as the file
    return PipelineConfig.model_validate({**pipeline.model_dump(), **updates})


def _print_registry_summary(registry: Registry, result: ValidationResult | None = None) -> None:
    """Print a summary of registry contents."""
    table = Table(title="Registry Summary", show_header=False, box=None)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Types", str(len(registry.types)))
    table.add_row("Enum blocks", str(len(registry.enums)))
    table.add_row("Commands", str(len(registry.commands)))
    table.add_row("Features", ", ".join(f.name for f in registry.feature_list) or "-")
    table.add_row("Extensions", str(len(registry.extension_list)))
    table.add_row("Formats", str(len(registry.formats)))

    if registry.unrecognized:
        table.add_row("", "")  # Spacer
        table.add_row("Unrecognized elements", str(len(registry.unrecognized)))
    if result is not None and result.issues:
        table.add_row("Build errors", str(len(result.errors)))

    console.print(table)


def _print_surface_summary(resolved: ResolvedRegistry) -> None:
    """Print a summary of a resolved surface."""
    table = Table(title=f"Resolved Surface: {resolved.api}", show_header=False, box=None)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Version", resolved.version or "latest")
    table.add_row("Features", ", ".join(resolved.features) or "-")
    table.add_row("Extensions", ", ".join(resolved.extensions) or "-")
    table.add_row("", "")  # Spacer
    table.add_row("Types", str(len(resolved.types)))
    table.add_row("Commands", str(len(resolved.commands)))
    table.add_row("Enums", str(len(resolved.enums)))
    if resolved.warnings:
        table.add_row("Warnings", str(len(resolved.warnings)))

    console.print(table)


if __name__ == "__main__":
    app()
