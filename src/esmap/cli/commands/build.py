"""
Build Command - Bundle the entry module with esbuild.

The previous bundle is kept as a numbered backup next to the new one.
"""

import logging
import sys
from typing import Optional

import click
from rich.console import Console

from ...build.bundler import BuildError, Bundler
from ...config import CONFIG_FILENAME, BuildOptions
from ..utils import configure_logging, echo_error, echo_success, load_project_config, merge_overrides

logger = logging.getLogger(__name__)
console = Console()


@click.command()
@click.option("--dist-dir", help="Output directory (default: dist)")
@click.option("--entry-point", help="Entry module (default: files/index.mjs)")
@click.option("--bundle-file", help="Bundle file name (default: bundle.mjs)")
@click.option("--minify/--no-minify", default=None, help="Minify the bundle")
@click.option("--keep-names/--no-keep-names", default=None, help="Preserve function and class names")
@click.option("--max-backups", type=click.IntRange(min=1), help="Previous bundles to keep (default: 100)")
@click.option("-c", "--config", "config_path", default=CONFIG_FILENAME, help="Project config file")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logs")
def build(
    dist_dir: Optional[str],
    entry_point: Optional[str],
    bundle_file: Optional[str],
    minify: Optional[bool],
    keep_names: Optional[bool],
    max_backups: Optional[int],
    config_path: str,
    verbose: bool,
):
    """
    Bundle the entry module into a single ESM file.

    \b
    Examples:
        esmap build
        esmap build --minify --max-backups 10
        esmap build --entry-point src/main.mjs --bundle-file app.mjs
    """
    configure_logging(verbose)
    project = load_project_config(config_path)

    values = merge_overrides(
        project.build.model_dump(),
        dist_dir=dist_dir,
        entry_point=entry_point,
        bundle_file=bundle_file,
        minify=minify,
        keep_names=keep_names,
        max_backups=max_backups,
    )
    options = BuildOptions.model_validate(values)

    console.print(f"📦 Bundling [cyan]{options.entry_point}[/cyan]")
    try:
        result = Bundler(options).build()
    except (BuildError, OSError) as e:
        echo_error(f"Build failed: {e}")
        sys.exit(1)

    if result.backup:
        console.print(f"   [dim]Previous bundle kept as {result.backup.name}[/dim]")
    echo_success(f"Built {result.outfile}")
