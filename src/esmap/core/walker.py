"""
Import Map Tree Walker.

Recursive, concurrent directory visit that feeds the import map. Each visit
moves through these steps:

    listing      -> entry names (probe layer, [] if unreadable)
    probing      -> stat every kept entry at once, results in listing order
    classifying  -> files, the manifest, subdirectories
    recursing    -> visit subdirectories concurrently and join
    folding      -> apply the directory's manifest, if any
    done         -> report whether the directory had content

Registrations inside one directory happen in that order, which is what gives
an ``index`` file precedence over ``main``/``exports`` for the same directory.
"""

from __future__ import annotations

import asyncio
import logging
import os
import stat
from dataclasses import dataclass
from typing import List, Optional, Set

from ..config import INDEX_BASENAME, MANIFEST_FILENAME, ImportMapOptions
from .import_map import ImportMap, to_path_value
from .manifest import ManifestError, PackageManifest, manifest_registrations
from .probe import FilesystemProbe

logger = logging.getLogger(__name__)


@dataclass
class ProbedEntry:
    """
    A directory entry that survived filtering and has metadata.

    Attributes:
        name: Entry name.
        full_path: Host path, joined onto the walk root.
        rel_path: Root-relative, slash-separated path.
        stats: Result of ``os.stat`` (symlinks followed).
    """

    name: str
    full_path: str
    rel_path: str
    stats: os.stat_result

    @property
    def is_file(self) -> bool:
        return stat.S_ISREG(self.stats.st_mode)

    @property
    def is_dir(self) -> bool:
        return stat.S_ISDIR(self.stats.st_mode)


class TreeWalker:
    """
    Walks one root directory and registers specifiers into an ImportMap.

    The visited set and the import map belong to this walker only; create a
    new walker per run.

    Attributes:
        root_dir: Directory the walk starts from.
        options: Validated generator options.
        imports: Shared result mapping.
        probe: Cached filesystem access for this run.
        visited: Directory paths already entered.
    """

    def __init__(
        self,
        root_dir: str,
        options: ImportMapOptions,
        imports: ImportMap,
        probe: FilesystemProbe,
    ):
        self.root_dir = root_dir
        self.options = options
        self.imports = imports
        self.probe = probe
        self.visited: Set[str] = set()
        self._depth_limit = options.depth_limit
        self._extensions = options.extension_set

    async def walk(self) -> bool:
        """Visit the root directory. Returns True if anything was registered."""
        return await self.visit(self.root_dir, "", 0)

    async def visit(self, dir_path: str, dir_rel: str, depth: int) -> bool:
        """
        Scan one directory and everything below it.

        Args:
            dir_path: Host path of the directory.
            dir_rel: Root-relative path, ``""`` for the root.
            depth: Distance from the root.

        Returns:
            True if the directory or a descendant contributed an entry.
        """
        if depth >= self._depth_limit or dir_path in self.visited:
            return False
        self.visited.add(dir_path)

        entries = await self._probe_entries(dir_path, dir_rel)

        manifest: Optional[PackageManifest] = None
        has_files = False
        subdirs: List[ProbedEntry] = []

        for entry in entries:
            if entry.is_file:
                if entry.name == MANIFEST_FILENAME:
                    manifest = await self._load_manifest(entry.full_path)
                    continue
                if self._register_file(entry, dir_rel):
                    has_files = True
            elif entry.is_dir:
                subdirs.append(entry)

        results = await asyncio.gather(
            *(self.visit(sub.full_path, sub.rel_path, depth + 1) for sub in subdirs)
        )
        has_content = has_files or any(results)

        if self._fold_manifest(manifest, dir_rel):
            has_content = True

        if has_content:
            self._register_directory(dir_rel)

        return has_content

    async def _probe_entries(self, dir_path: str, dir_rel: str) -> List[ProbedEntry]:
        candidates = []
        for name in await self.probe.list_dir(dir_path):
            if name.startswith("."):
                continue
            rel_path = f"{dir_rel}/{name}" if dir_rel else name
            if self.options.is_excluded(name, rel_path):
                continue
            candidates.append((name, os.path.join(dir_path, name), rel_path))

        # Stat concurrently; gather keeps listing order
        results = await asyncio.gather(*(self.probe.stat(full) for _, full, _ in candidates))

        return [
            ProbedEntry(name=name, full_path=full, rel_path=rel, stats=st)
            for (name, full, rel), st in zip(candidates, results)
            if st is not None
        ]

    async def _load_manifest(self, path: str) -> Optional[PackageManifest]:
        try:
            return await PackageManifest.load(path)
        except ManifestError as e:
            logger.error(str(e))
            return None

    def _register_file(self, entry: ProbedEntry, dir_rel: str) -> bool:
        """Register a module file (and its directory for ``index``). False if not a module."""
        stem, ext = os.path.splitext(entry.name)
        if ext not in self._extensions:
            return False

        path_value = to_path_value(entry.rel_path)
        self.imports.register(entry.rel_path[: -len(ext)], path_value)

        if stem == INDEX_BASENAME and dir_rel:
            self.imports.register(dir_rel, path_value)

        return True

    def _fold_manifest(self, manifest: Optional[PackageManifest], dir_rel: str) -> bool:
        """Apply manifest entries. True if at least one was written."""
        wrote = False
        for specifier, path_value in manifest_registrations(manifest, dir_rel):
            if self.imports.register(specifier, path_value):
                wrote = True
        return wrote

    def _register_directory(self, dir_rel: str) -> None:
        if dir_rel:
            self.imports.register(f"{dir_rel}/", f"./{dir_rel}/")
        else:
            self.imports.register("./", "./")
