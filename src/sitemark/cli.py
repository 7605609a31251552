#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/sitemark/cli.py
"""Command-line interface for building sitemark pages.

Examples
--------
Compile a content directory to HTML::

    $ sitemark build content/ --out _site

Compile with an explicit extension order and a component binding::

    $ sitemark build post.mdx --extensions gfm-tables,emphasis --component Card=mysite.components:card

Emit the render tree as JSON::

    $ sitemark build content/ --format json

List registered extensions::

    $ sitemark extensions --rich
    $ sitemark extensions heading-ids

Configuration files (``.sitemark.toml`` and friends, or ``[tool.sitemark]``
in pyproject.toml) are discovered from the current directory upwards; the
``SITEMARK_CONFIG`` environment variable names one explicitly. Command-line
flags override file values.

"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

from sitemark import __version__
from sitemark.compiler import BatchResult, CompileResult, compile_batch
from sitemark.config import CONFIG_ENV_VAR, load_config_with_priority, options_from_config
from sitemark.constants import DEFAULT_LOG_LEVEL, DEFAULT_OUTPUT_DIR, DEFAULT_OUTPUT_FORMAT, SOURCE_SUFFIXES
from sitemark.exceptions import ConfigurationError
from sitemark.extensions import extension_registry
from sitemark.logging_utils import configure_logging
from sitemark.render.serialize import to_dict, to_html

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_COMPILATION_ERROR = 1
EXIT_VALIDATION_ERROR = 3
EXIT_FILE_ERROR = 4

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_extension_list(value: str) -> list[str]:
    """Split a comma-separated extension list; an empty string means no extensions."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_component(value: str) -> tuple[str, str]:
    tag, sep, path = value.partition("=")
    if not sep or not tag.strip() or not path.strip():
        raise argparse.ArgumentTypeError(f"Invalid component binding '{value}', expected TAG=module:attr")
    return tag.strip(), path.strip()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the ``sitemark`` command."""
    parser = argparse.ArgumentParser(
        prog="sitemark",
        description="Compile Markdown and MDX documents into render trees.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    build = subparsers.add_parser("build", help="Compile documents and write one output per input")
    build.add_argument("sources", nargs="+", metavar="SOURCE", help="Files or directories to compile")
    build.add_argument("--out", "-o", type=Path, default=None, help=f"Output directory (default: {DEFAULT_OUTPUT_DIR})")
    build.add_argument(
        "--format",
        choices=["html", "json"],
        default=None,
        help=f"Output format (default: {DEFAULT_OUTPUT_FORMAT})",
    )
    build.add_argument(
        "--extensions",
        type=_parse_extension_list,
        default=None,
        help="Comma-separated extension ids in chain order; an empty string disables all extensions",
    )
    build.add_argument(
        "--component",
        type=_parse_component,
        action="append",
        default=[],
        metavar="TAG=module:attr",
        help="Bind a component tag to a renderer (repeatable)",
    )
    build.add_argument("--config", help=f"Configuration file (default: ${CONFIG_ENV_VAR} or auto-discovered)")
    build.add_argument("--no-config", action="store_true", help="Ignore configuration files")
    build.add_argument("--log-level", choices=LOG_LEVELS, default=None, help="Logging level")
    build.add_argument("--log-file", help="Also write log output to this file")
    build.add_argument("--trace", action="store_true", help="Verbose logging with timestamps and logger names")
    build.add_argument("--jobs", "-j", type=int, default=None, help="Number of worker threads")

    listing = subparsers.add_parser("extensions", help="Show registered syntax extensions")
    listing.add_argument("extension", nargs="?", help="Show details for a specific extension")
    listing.add_argument("--rich", action="store_true", help="Use rich terminal output")

    return parser


def collect_sources(paths: list[str]) -> list[tuple[Path, Path]]:
    """Find source documents.

    Parameters
    ----------
    paths : list of str
        Files or directories; directories are searched recursively for
        ``.md`` and ``.mdx`` files

    Returns
    -------
    list of (Path, Path)
        Source path and its path relative to the output directory, without
        suffix, in a stable order

    Raises
    ------
    FileNotFoundError
        If a path does not exist

    """
    found: list[tuple[Path, Path]] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            for source in sorted(p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in SOURCE_SUFFIXES):
                found.append((source, source.relative_to(path).with_suffix("")))
        elif path.is_file():
            found.append((path, Path(path.stem)))
        else:
            raise FileNotFoundError(f"No such file or directory: {raw}")
    return found


def render_output(result: CompileResult, output_format: str) -> str:
    """Serialize a compile result in the requested output format."""
    if output_format == "json":
        payload = {"metadata": asdict(result.metadata), "tree": to_dict(result.tree)}
        return json.dumps(payload, indent=2, ensure_ascii=False, default=str) + "\n"
    return to_html(result.tree) + "\n"


def _merge_cli_overrides(config: dict[str, Any], parsed: argparse.Namespace) -> dict[str, Any]:
    merged = dict(config)
    if parsed.extensions is not None:
        merged["extensions"] = parsed.extensions
    if parsed.component:
        components = dict(merged.get("components") or {})
        components.update(dict(parsed.component))
        merged["components"] = components
    if parsed.format is not None:
        merged["format"] = parsed.format
    if parsed.log_level is not None:
        merged["log_level"] = parsed.log_level
    return merged


def _report(batch: BatchResult) -> None:
    for name, error in batch.errors.items():
        print(f"Error: {name}: {error}", file=sys.stderr)


def handle_build_command(parsed: argparse.Namespace) -> int:
    """Run ``sitemark build``.

    Returns
    -------
    int
        Exit code: 0 if every document compiled, 1 if any document failed,
        3 for configuration errors and 4 for missing inputs

    """
    try:
        config: dict[str, Any] = {}
        if not parsed.no_config:
            config = load_config_with_priority(parsed.config, os.environ.get(CONFIG_ENV_VAR))
        config = _merge_cli_overrides(config, parsed)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    configure_logging(
        config.get("log_level", DEFAULT_LOG_LEVEL),
        log_file=parsed.log_file,
        trace_mode=parsed.trace,
    )

    output_format = config.get("format", DEFAULT_OUTPUT_FORMAT)
    if output_format not in ("html", "json"):
        print(f"Error: Unsupported output format: {output_format}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    try:
        options = options_from_config(config)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    try:
        sources = collect_sources(parsed.sources)
        texts = {str(path): path.read_text(encoding="utf-8") for path, _ in sources}
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FILE_ERROR

    if not sources:
        print("Error: No .md or .mdx files found", file=sys.stderr)
        return EXIT_FILE_ERROR

    try:
        batch = compile_batch(texts, options, max_workers=parsed.jobs)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    out_dir: Path = parsed.out or Path(DEFAULT_OUTPUT_DIR)
    suffix = ".json" if output_format == "json" else ".html"
    for path, relative in sources:
        result = batch.results.get(str(path))
        if result is None:
            continue
        target = out_dir / relative.with_suffix(suffix)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(render_output(result, output_format), encoding="utf-8")
        except OSError as e:
            print(f"Error: Cannot write {target}: {e}", file=sys.stderr)
            return EXIT_FILE_ERROR
        logger.info(f"{path} -> {target}")

    _report(batch)
    print(f"Compiled {len(batch.results)} of {len(sources)} document(s) into {out_dir}", file=sys.stderr)
    return EXIT_SUCCESS if batch.ok else EXIT_COMPILATION_ERROR


def _type_name(value: Any) -> str:
    return value.__name__ if hasattr(value, "__name__") else str(value)


def handle_extensions_command(parsed: argparse.Namespace) -> int:
    """Run ``sitemark extensions``."""
    extensions = extension_registry.list_extensions()
    specific = parsed.extension

    if specific:
        if specific not in extensions:
            print(f"Error: Extension '{specific}' not found", file=sys.stderr)
            print(f"Available: {', '.join(extensions)}", file=sys.stderr)
            return 1
        extensions = [specific]

    if parsed.rich:
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table

        console = Console()
        if specific:
            metadata = extension_registry.get_metadata(specific)
            content = [
                f"[bold]Name:[/bold] {metadata.name}",
                f"[bold]Description:[/bold] {metadata.description}",
                f"[bold]Version:[/bold] {metadata.version}",
            ]
            if metadata.tags:
                content.append(f"[bold]Tags:[/bold] {', '.join(metadata.tags)}")
            console.print(Panel("\n".join(content), title=f"Extension: {metadata.name}"))

            if metadata.parameters:
                table = Table(title="Parameters")
                table.add_column("Name", style="cyan")
                table.add_column("Type", style="yellow")
                table.add_column("Default", style="green")
                table.add_column("Description", style="white")
                for name, spec in metadata.parameters.items():
                    table.add_row(name, _type_name(spec.type), repr(spec.default), spec.help or "")
                console.print(table)
        else:
            table = Table(title=f"Available Extensions ({len(extensions)})")
            table.add_column("Name", style="cyan")
            table.add_column("Description", style="white")
            table.add_column("Tags", style="yellow")
            for name in extensions:
                metadata = extension_registry.get_metadata(name)
                table.add_row(metadata.name, metadata.description, ", ".join(metadata.tags))
            console.print(table)
        return 0

    if specific:
        metadata = extension_registry.get_metadata(specific)
        print(f"\n{metadata.name}")
        print("=" * 60)
        print(f"Description: {metadata.description}")
        print(f"Version: {metadata.version}")
        if metadata.tags:
            print(f"Tags: {', '.join(metadata.tags)}")
        if metadata.parameters:
            print("\nParameters:")
            for name, spec in metadata.parameters.items():
                print(f"  {name} ({_type_name(spec.type)}) (default: {spec.default!r})")
                if spec.help:
                    print(f"    {spec.help}")
    else:
        print("\nAvailable Extensions")
        print("=" * 60)
        for name in extensions:
            metadata = extension_registry.get_metadata(name)
            tags_str = f" [{', '.join(metadata.tags)}]" if metadata.tags else ""
            print(f"  {metadata.name:20} {metadata.description}{tags_str}")
        print(f"\nTotal: {len(extensions)} extensions")
        print("Use 'sitemark extensions <extension>' for details")

    return 0


def main(args: Optional[list[str]] = None) -> int:
    """Execute the sitemark command line."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.command == "build":
        return handle_build_command(parsed)
    return handle_extensions_command(parsed)


if __name__ == "__main__":
    sys.exit(main())
