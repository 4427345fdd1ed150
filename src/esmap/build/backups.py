"""
Bundle Backup Rotation.

Before a new bundle overwrites the previous one, the previous one is moved
aside under a cyclically numbered name:

    dist/
    ├── bundle.mjs            # current
    ├── bundle.old.000.mjs
    ├── bundle.old.001.mjs
    └── ...

Numbers wrap at ``max_backups``. The next slot follows the most recently
written backup; once ``max_backups`` backups exist, the oldest one by
modification time is deleted and its number reused.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class BackupFile:
    """
    An existing numbered backup.

    Attributes:
        path: Location of the backup.
        num: Its sequence number.
    """

    path: Path
    num: int


def number_width(max_backups: int) -> int:
    """Digits used for backup numbers (at least 3)."""
    return max(3, math.ceil(math.log10(max_backups + 1)))


def split_name(file_name: str) -> Tuple[str, str]:
    """Split at the last dot unless it is the leading one: ``bundle.mjs`` -> (``bundle``, ``.mjs``)."""
    idx = file_name.rfind(".")
    if idx > 0:
        return file_name[:idx], file_name[idx:]
    return file_name, ""


def backup_name(file_name: str, num: int, max_backups: int) -> str:
    base, ext = split_name(file_name)
    return f"{base}.old.{num:0{number_width(max_backups)}d}{ext}"


def list_backups(dist_dir: Path, file_name: str, max_backups: int) -> List[BackupFile]:
    """
    Find numbered backups of ``file_name`` in ``dist_dir``.

    Only names with exactly the expected digit width and a number below
    ``max_backups`` count.
    """
    base, ext = split_name(file_name)
    prefix = f"{base}.old."
    width = number_width(max_backups)
    backups = []

    for name in os.listdir(dist_dir):
        if not (name.startswith(prefix) and name.endswith(ext)):
            continue
        if len(name) != len(prefix) + width + len(ext):
            continue
        digits = name[len(prefix) : len(prefix) + width]
        if not (digits.isascii() and digits.isdigit()):
            continue
        num = int(digits)
        if num < max_backups:
            backups.append(BackupFile(path=dist_dir / name, num=num))

    return backups


def _age(backup: BackupFile) -> Tuple[int, int]:
    return backup.path.stat().st_mtime_ns, backup.num


def next_slot(backups: List[BackupFile], max_backups: int) -> int:
    """Number following the newest backup, skipping slots still in use."""
    if not backups:
        return 0
    taken = {b.num for b in backups}
    newest = max(backups, key=_age).num
    for step in range(1, max_backups + 1):
        num = (newest + step) % max_backups
        if num not in taken:
            return num
    return (newest + 1) % max_backups


def rotate_backup(dest: Path, max_backups: int) -> Optional[Path]:
    """
    Move ``dest`` to its next backup slot.

    Args:
        dest: The artifact about to be overwritten.
        max_backups: Retention count (>= 1).

    Returns:
        The backup path, or None if ``dest`` does not exist.
    """
    if max_backups < 1:
        raise ValueError(f"max_backups must be at least 1, got {max_backups}")

    dest = Path(dest)
    if not dest.exists():
        return None

    dist_dir = dest.parent
    backups = list_backups(dist_dir, dest.name, max_backups)
    if len(backups) >= max_backups:
        oldest = min(backups, key=_age)
        oldest.path.unlink()
        logger.info(f"Deleted oldest backup: {oldest.path}")
        next_num = oldest.num
    else:
        next_num = next_slot(backups, max_backups)

    target = dist_dir / backup_name(dest.name, next_num, max_backups)
    os.replace(dest, target)
    logger.info(f"📦 {target.name}")
    return target
