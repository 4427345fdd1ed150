"""
Import Map Assembler.

Every registration made during a walk goes through ``ImportMap.register``,
a synchronous check-and-write. The walk runs on a single event loop and this
method never awaits, so concurrent directory visits cannot interleave inside
it: the first write for a specifier wins and later writes are no-ops.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Iterator

logger = logging.getLogger(__name__)


def to_path_value(rel_path: str) -> str:
    """Render a root-relative path as an import map value (``./a/b.js``)."""
    rel_path = rel_path.replace("\\", "/")
    return f"./{rel_path}"


class ImportMap:
    """
    Specifier -> path mapping with first-write-wins semantics.

    Example:
        ```python
        imports = ImportMap()
        imports.register("sub", "./sub/index.js")   # True
        imports.register("sub", "./sub/other.js")   # False, already set
        imports.to_dict()  # {"sub": "./sub/index.js"}
        ```
    """

    def __init__(self):
        self._imports: Dict[str, str] = {}

    def register(self, specifier: str, path: str) -> bool:
        """
        Set ``specifier`` if it is not registered yet.

        Returns:
            True if this call wrote the entry.
        """
        if not specifier or specifier in self._imports:
            return False
        self._imports[specifier] = path
        return True

    def get(self, specifier: str):
        return self._imports.get(specifier)

    def to_dict(self) -> Dict[str, str]:
        """Copy of the mapping in insertion order."""
        return dict(self._imports)

    def to_json(self) -> str:
        """
        Serialize as ``{"imports": {...}}``, pretty-printed.

        Keys are sorted so unchanged trees serialize identically regardless
        of the order in which sibling directories finished.
        """
        return json.dumps(
            {"imports": dict(sorted(self._imports.items()))},
            indent=2,
            ensure_ascii=False,
        )

    def write(self, dest: Path) -> None:
        """
        Persist the map as UTF-8 JSON.

        The document is written to a temporary file next to ``dest`` and moved
        into place, so a failed write leaves any previous file untouched.

        Raises:
            OSError: If the file cannot be written.
            UnicodeError: If a specifier or path cannot be encoded as UTF-8.
                Both are logged before re-raising.
        """
        dest = Path(dest)
        try:
            data = self.to_json().encode("utf-8")
            fd, tmp = tempfile.mkstemp(prefix=f".{dest.name}.", suffix=".tmp", dir=dest.parent)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.chmod(tmp, 0o644)
                os.replace(tmp, dest)
            except OSError:
                Path(tmp).unlink(missing_ok=True)
                raise
        except (OSError, UnicodeError) as e:
            logger.error(f"❌ import map {dest}: {e}")
            raise
        logger.info(f"✅ import map {dest}")

    def __contains__(self, specifier: object) -> bool:
        return specifier in self._imports

    def __iter__(self) -> Iterator[str]:
        return iter(self._imports)

    def __len__(self) -> int:
        return len(self._imports)
