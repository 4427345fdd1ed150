"""
Filesystem Probe Layer.

Two single-flight caches over blocking filesystem calls, each run in a
worker thread so the walk can keep many probes in flight:

    - list_dir: directory entry names, ``[]`` on any error
    - stat: entry metadata, ``None`` on any error

A directory that vanishes between being listed and being stat-ed must not
abort the walk, so errors are downgraded here and never reach the caller.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import List, Optional

from .cache import SingleFlightCache

logger = logging.getLogger(__name__)


async def _list_dir(path: str, cancelled: asyncio.Event) -> List[str]:
    if cancelled.is_set():
        return []
    try:
        return sorted(await asyncio.to_thread(os.listdir, path))
    except Exception as e:
        logger.debug(f"Cannot list {path}: {e}")
        return []


async def _stat(path: str, cancelled: asyncio.Event) -> Optional[os.stat_result]:
    if cancelled.is_set():
        return None
    try:
        return await asyncio.to_thread(os.stat, path)
    except Exception as e:
        logger.debug(f"Cannot stat {path}: {e}")
        return None


class FilesystemProbe:
    """
    Cached, failure-tolerant directory listing and stat for one walk.

    Attributes:
        dirs: Cache of directory listings keyed by path.
        stats: Cache of stat results keyed by path.
    """

    def __init__(self):
        self.dirs: SingleFlightCache[str, List[str]] = SingleFlightCache(_list_dir)
        self.stats: SingleFlightCache[str, Optional[os.stat_result]] = SingleFlightCache(_stat)

    async def list_dir(self, path: str) -> List[str]:
        """Entry names of ``path`` sorted by name, or ``[]`` if unreadable."""
        return await self.dirs.get(path)

    async def stat(self, path: str) -> Optional[os.stat_result]:
        """Metadata for ``path`` following symlinks, or ``None`` if it is gone."""
        return await self.stats.get(path)

    def close(self) -> None:
        """Cancel every outstanding probe and release all entries."""
        self.dirs.clear()
        self.stats.clear()
