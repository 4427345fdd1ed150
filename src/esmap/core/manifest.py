"""
Package Manifest Loading and Entry Resolution.

Reads ``package.json`` files found during a walk and turns their ``main``
and ``exports`` fields into import map registrations for the owning
directory.

Registration order (first write wins in the import map):
    1. ``main``                        -> <dir>
    2. root export (``.`` or whole)    -> <dir>
    3. subpath exports (``./x``)       -> <dir>/x
"""

from __future__ import annotations

import asyncio
import json
import logging
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from .exports import ABSENT, ExportValue, classify_export, iter_subpaths, root_target

logger = logging.getLogger(__name__)

Registration = Tuple[str, str]


class ManifestError(ValueError):
    """
    Raised when a manifest cannot be read or parsed.

    Attributes:
        path: The manifest file.
    """

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"Failed to parse {path}: {message}")


@dataclass
class PackageManifest:
    """
    The parts of a ``package.json`` that designate entry points.

    Attributes:
        main: The ``main`` file, if declared.
        exports: Classified ``exports`` field.
    """

    main: Optional[str] = None
    exports: ExportValue = field(default=ABSENT)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PackageManifest":
        main = data.get("main")
        return cls(
            main=main if isinstance(main, str) and main else None,
            exports=classify_export(data.get("exports")),
        )

    @classmethod
    def parse(cls, text: str, path: Path) -> "PackageManifest":
        """
        Parse manifest JSON text.

        Raises:
            ManifestError: If the text is not JSON, nests too deeply, or its
                root is not an object.
        """
        try:
            data = json.loads(text)
            if not isinstance(data, dict):
                raise ManifestError(path, f"expected an object, got {type(data).__name__}")
            return cls.from_dict(data)
        except ManifestError:
            raise
        except ValueError as e:
            raise ManifestError(path, str(e))
        except RecursionError:
            raise ManifestError(path, "nesting too deep")

    @classmethod
    async def load(cls, path: Path) -> "PackageManifest":
        """
        Read and parse a manifest file without blocking the event loop.

        Raises:
            ManifestError: If the file cannot be read or parsed.
        """
        try:
            text = await asyncio.to_thread(Path(path).read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestError(path, str(e))
        return cls.parse(text, path)


def package_normalizer(dir_specifier: str) -> Callable[[str], str]:
    """
    Build the function mapping package-relative files to import map values.

    ``lib/entry.js`` in ``pkgdir`` becomes ``./pkgdir/lib/entry.js``.
    """

    def normalize(entry: str) -> str:
        entry = entry.replace("\\", "/")
        joined = posixpath.normpath(posixpath.join(dir_specifier, entry.lstrip("/")))
        if entry.endswith("/"):
            joined += "/"
        return f"./{joined}"

    return normalize


def manifest_registrations(
    manifest: Optional[PackageManifest],
    dir_specifier: str,
    normalize: Optional[Callable[[str], str]] = None,
) -> List[Registration]:
    """
    List the registrations a manifest contributes to its directory.

    Args:
        manifest: Parsed manifest, or None.
        dir_specifier: Root-relative path of the package directory.
        normalize: Package-relative path normalizer. Defaults to
            ``package_normalizer(dir_specifier)``.

    Returns:
        ``(specifier, path)`` pairs in precedence order.
    """
    if manifest is None or not dir_specifier:
        return []

    normalize = normalize or package_normalizer(dir_specifier)
    registrations: List[Registration] = []

    if manifest.main:
        registrations.append((dir_specifier, normalize(manifest.main)))

    target = root_target(manifest.exports)
    if target:
        registrations.append((dir_specifier, normalize(target)))

    for suffix, sub_target in iter_subpaths(manifest.exports):
        registrations.append((f"{dir_specifier}{suffix}", normalize(sub_target)))

    return registrations
