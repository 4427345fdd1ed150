"""
Import Map Command - Generate an import map for a module tree.

Walks the directory, registers every ECMAScript module under its
extension-less path, folds in package.json entry points, and prints or
writes the resulting ``{"imports": {...}}`` document.
"""

import json
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from ...config import CONFIG_FILENAME, ImportMapOptions
from ...core.generator import build_import_map
from ..utils import configure_logging, echo_error, echo_success, load_project_config, merge_overrides

logger = logging.getLogger(__name__)
console = Console()


@click.command()
@click.argument("directory", required=False)
@click.option("-o", "--output", help="Write the import map JSON to this file")
@click.option(
    "-e", "--exclude", "excluded_patterns", multiple=True,
    help="Skip entries whose name or path contains this substring (repeatable)",
)
@click.option(
    "-x", "--ext", "included_extensions", multiple=True,
    help="Module extension to include (repeatable, default: mjs, js)",
)
@click.option("--max-depth", type=click.IntRange(min=1), help="Maximum directory depth")
@click.option("-c", "--config", "config_path", default=CONFIG_FILENAME, help="Project config file")
@click.option("--json", "as_json", is_flag=True, help="Print the import map as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Show every entry and debug logs")
def importmap(
    directory: Optional[str],
    output: Optional[str],
    excluded_patterns: Tuple[str, ...],
    included_extensions: Tuple[str, ...],
    max_depth: Optional[int],
    config_path: str,
    as_json: bool,
    verbose: bool,
):
    """
    Generate an import map for DIRECTORY.

    DIRECTORY defaults to [importmap].root from esmap.toml, or ".".

    \b
    Examples:
        esmap importmap files -o dist/importmap.json
        esmap importmap files -e test -e fixtures --max-depth 4
        esmap importmap files --json > importmap.json
    """
    configure_logging(verbose)
    project = load_project_config(config_path)
    section = project.importmap

    root = Path(directory) if directory else section.root
    values = merge_overrides(
        section.model_dump(exclude={"root"}),
        output=output,
        excluded_patterns=excluded_patterns,
        included_extensions=included_extensions,
        max_depth=max_depth,
    )
    options = ImportMapOptions.model_validate(values)

    start = time.perf_counter()
    try:
        imports = build_import_map(root, options)
    except (OSError, UnicodeError) as e:
        echo_error(str(e))
        sys.exit(1)
    duration = time.perf_counter() - start

    if as_json:
        click.echo(json.dumps({"imports": dict(sorted(imports.items()))}, indent=2, ensure_ascii=False))
        return

    if verbose:
        table = Table(title="Import Map")
        table.add_column("Specifier", style="cyan")
        table.add_column("Path")
        for specifier, path in sorted(imports.items()):
            table.add_row(specifier, path)
        console.print(table)

    console.print(f"🗺️  [bold]{len(imports)}[/bold] entries from [cyan]{root}[/cyan] in {duration:.2f}s")
    if options.output:
        echo_success(f"Import map written to {options.output}")
