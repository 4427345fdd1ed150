"""
Import Map Generator.

Entry point tying the walk together for one invocation:

    1. Check the root (fatal if missing or not a directory)
    2. Walk the tree into a fresh ImportMap
    3. Tear down the probe caches, cancelling anything still in flight
    4. Optionally persist ``{"imports": {...}}`` to ``options.output``
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import stat
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from ..config import ImportMapOptions
from .import_map import ImportMap
from .probe import FilesystemProbe
from .walker import TreeWalker

logger = logging.getLogger(__name__)

OptionsLike = Union[ImportMapOptions, Mapping[str, Any], None]


def coerce_options(options: OptionsLike) -> ImportMapOptions:
    """Accept a model, a plain mapping (camelCase or snake_case keys), or None."""
    if options is None:
        return ImportMapOptions()
    if isinstance(options, ImportMapOptions):
        return options
    return ImportMapOptions.model_validate(dict(options))


def check_root(root_dir: str) -> None:
    """
    Validate the walk root.

    Raises:
        FileNotFoundError: The root does not exist.
        NotADirectoryError: The root exists but is not a directory.
    """
    try:
        root_stats = os.stat(root_dir)
    except FileNotFoundError:
        raise FileNotFoundError(f"Directory does not exist: {root_dir}")

    if not stat.S_ISDIR(root_stats.st_mode):
        raise NotADirectoryError(f"Path is not a directory: {root_dir}")


async def generate_import_map(
    root_dir: Union[str, Path],
    options: OptionsLike = None,
) -> Dict[str, str]:
    """
    Build the import map for a directory tree.

    Args:
        root_dir: Directory to scan.
        options: ImportMapOptions or an equivalent mapping.

    Returns:
        Specifier -> ``./relative/path`` mapping.

    Raises:
        FileNotFoundError: Root does not exist.
        NotADirectoryError: Root is not a directory.
        OSError: ``options.output`` could not be written.
    """
    opts = coerce_options(options)
    root = os.fspath(root_dir)

    await asyncio.to_thread(check_root, root)

    imports = ImportMap()
    probe = FilesystemProbe()
    walker = TreeWalker(root, opts, imports, probe)

    logger.debug(f"Scanning {root} (max depth {opts.depth_limit})")
    try:
        await walker.walk()
    finally:
        walker.visited.clear()
        probe.close()

    logger.debug(f"Collected {len(imports)} import map entries")

    if opts.output:
        await asyncio.to_thread(imports.write, opts.output)

    return imports.to_dict()


def build_import_map(
    root_dir: Union[str, Path],
    options: OptionsLike = None,
) -> Dict[str, str]:
    """Synchronous wrapper around ``generate_import_map``."""
    return asyncio.run(generate_import_map(root_dir, options))


def load_import_map(path: Union[str, Path]) -> Dict[str, str]:
    """Read the ``imports`` table back from a serialized import map."""
    with open(path, encoding="utf-8") as f:
        return json.load(f).get("imports", {})
