"""
Command-line interface for markgen.

Provides the ``generate`` and ``inspect`` commands.
"""

import argparse
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from ._version import __version__
from .core import (
    Compilation,
    ConfigError,
    GeneratorConfig,
    GeneratorError,
    GeneratorRunResult,
    SourceGenerator,
    TemplateError,
    load_config,
    write_sources,
)
from .core.config import get_config_manager
from .logging_config import configure_logging, get_logger

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Initialize rich console
console = Console()


def _add_common_args(parser: argparse.ArgumentParser):
    parser.add_argument("paths", nargs="+", help="Python files or directories to scan")
    parser.add_argument("--config", metavar="FILE", help="JSON configuration file")
    parser.add_argument(
        "--marker",
        metavar="NAME",
        help="Decorator name that marks classes (default: GenerateCode)",
    )
    parser.add_argument(
        "--strict-marker",
        metavar="MODULE",
        help="Only accept the marker when it is imported from MODULE",
    )
    parser.add_argument(
        "--include-private",
        action="store_true",
        help="Include properties whose names start with an underscore",
    )
    parser.add_argument(
        "--exclude",
        metavar="GLOB",
        action="append",
        help="Skip files matching GLOB (repeatable)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="markgen",
        description="Generate companion sources for classes marked with @GenerateCode",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  markgen generate src/ --output generated/
  markgen generate models.py --dry-run
  markgen inspect src/ --marker Entity
        """.strip(),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", metavar="FILE", help="Also write logs to FILE")

    subparsers = parser.add_subparsers(dest="command")

    generate = subparsers.add_parser("generate", help="Generate companion sources")
    _add_common_args(generate)
    generate.add_argument("--output", "-o", metavar="DIR", help="Output directory")
    generate.add_argument("--template-dir", metavar="DIR", help="Directory of custom templates")
    generate.add_argument("--template", metavar="NAME", help="Template name to render")
    generate.add_argument("--suffix", metavar="SUFFIX", help="Generated file suffix (default: .g)")
    generate.add_argument(
        "--extension", metavar="EXT", help="Generated file extension (default: .py)"
    )
    generate.add_argument(
        "--workers", type=int, metavar="N", help="Render classes on N threads"
    )
    generate.add_argument(
        "--dry-run",
        action="store_true",
        help="Print generated sources instead of writing them",
    )
    generate.set_defaults(func=_handle_generate)

    inspect = subparsers.add_parser("inspect", help="List marked classes and their properties")
    _add_common_args(inspect)
    inspect.set_defaults(func=_handle_inspect)

    return parser


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Build configuration from CLI arguments."""
    overrides = {}

    if args.marker:
        overrides["marker_name"] = args.marker
    if args.strict_marker:
        overrides["strict_marker"] = True
        overrides["marker_module"] = args.strict_marker
    if args.include_private:
        overrides["include_private"] = True
    if args.exclude:
        overrides["exclude"] = args.exclude

    if getattr(args, "output", None):
        overrides["output_dir"] = args.output
    if getattr(args, "template_dir", None):
        overrides["template_dir"] = args.template_dir
    if getattr(args, "template", None):
        overrides["template_name"] = args.template
    if getattr(args, "suffix", None) is not None:
        overrides["generated_suffix"] = args.suffix
    if getattr(args, "extension", None):
        overrides["file_extension"] = args.extension
    if getattr(args, "workers", None) is not None:
        overrides["workers"] = args.workers

    config = load_config(custom_config=overrides, config_file=args.config)

    for warning in get_config_manager().validate_config(config):
        logger.warning(warning)

    return config


def _print_diagnostics(result: GeneratorRunResult):
    if not result.diagnostics:
        return

    console.print()
    for diagnostic in result.diagnostics:
        color = "red" if diagnostic.is_error else "yellow"
        console.print(f"[{color}]✗[/{color}] {escape(str(diagnostic))}", highlight=False)


def _handle_generate(args: argparse.Namespace) -> int:
    config = _build_config(args)

    if not args.dry_run and not config.output_dir:
        raise CLIError("--output is required unless --dry-run is given")

    generator = SourceGenerator(config)
    result = generator.run_paths(args.paths)

    if args.dry_run:
        for source in result.sources:
            console.print(
                Panel(
                    Syntax(source.text, "python", theme="monokai"),
                    title=f"📄 {source.hint_name}",
                    subtitle=f"sha256 {source.checksum[:16]}",
                    border_style="green",
                )
            )
    else:
        written = write_sources(result.sources, config.output_dir)
        unchanged = len(result.sources) - len(written)
        console.print(
            f"[green]✓[/green] {len(written)} file(s) written to "
            f"[cyan]{config.output_dir}[/cyan]"
            + (f" [dim]({unchanged} unchanged)[/dim]" if unchanged else "")
        )

    _print_diagnostics(result)

    if args.verbose:
        metadata_table = Table(
            title="📊 Generation Summary",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold cyan",
        )
        metadata_table.add_column("Property", style="bold")
        metadata_table.add_column("Value", style="green")
        for key, value in result.metadata.items():
            metadata_table.add_row(key.replace("_", " ").title(), str(value))
        console.print(metadata_table)

    return 1 if result.has_errors else 0


def _handle_inspect(args: argparse.Namespace) -> int:
    config = _build_config(args)

    compilation = Compilation.from_paths(
        args.paths, exclude=config.exclude, generated_pattern=config.generated_pattern
    )
    # Discovery only; no template is loaded
    generator = SourceGenerator(config, renderer=lambda metadata: "")
    discovered = generator.discover(compilation)

    if not discovered:
        console.print(f"[yellow]⚠️ No classes marked with @{config.marker_name}[/yellow]")
    else:
        table = Table(
            title=f"📋 Classes marked with @{config.marker_name}",
            box=box.ROUNDED,
            title_style="bold cyan",
        )
        table.add_column("Class", style="bold green", no_wrap=True)
        table.add_column("Namespace", style="cyan")
        table.add_column("Properties", style="dim")
        table.add_column("Output", style="blue")

        for metadata in discovered:
            properties = (
                "\n".join(escape(f"{p.name}: {p.type}") for p in metadata.properties)
                or "[dim]none[/dim]"
            )
            table.add_row(
                metadata.name,
                escape(metadata.namespace) or "[dim]<global>[/dim]",
                properties,
                f"{metadata.name}{config.generated_suffix}{config.file_extension}",
            )
        console.print(table)

    result = GeneratorRunResult(diagnostics=list(compilation.diagnostics))
    _print_diagnostics(result)
    return 1 if result.has_errors else 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=args.verbose, log_file=Path(args.log_file) if args.log_file else None
    )

    if not getattr(args, "func", None):
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except (CLIError, ConfigError, TemplateError, GeneratorError) as e:
        console.print(f"[red]✗ Error:[/red] {escape(str(e))}")
        logger.debug("Command failed", exc_info=True)
        return 1
