"""Shared fixtures for building module trees on disk."""

import json
from pathlib import Path
from typing import Dict, Union

import pytest


def write_tree(root: Path, files: Dict[str, Union[str, dict]]) -> Path:
    """Create ``files`` (relative path -> text or JSON object) under ``root``."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, dict):
            content = json.dumps(content)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_tree(tmp_path):
    """Factory fixture: ``make_tree({...})`` returns the tree root."""

    def _make(files: Dict[str, Union[str, dict]], name: str = "R") -> Path:
        root = tmp_path / name
        root.mkdir(exist_ok=True)
        return write_tree(root, files)

    return _make


@pytest.fixture
def sample_tree(make_tree):
    """Mixed tree with plain modules, an index file, and a package."""
    return make_tree(
        {
            "a.js": "export const a = 1;",
            "b.mjs": "export const b = 2;",
            "sub/index.js": "export default {};",
            "sub/c.txt": "not a module",
            "pkgdir/package.json": {"main": "lib/entry.js"},
            "pkgdir/lib/entry.js": "export default 1;",
        }
    )
