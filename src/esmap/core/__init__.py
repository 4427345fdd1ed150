"""
esmap Core Module.

Building blocks of the import map generator:

Filesystem Access:
    - SingleFlightCache: Per-run memoization with bulk cancellation
    - FilesystemProbe: Failure-tolerant cached listdir/stat

Package Manifests:
    - PackageManifest: ``main``/``exports`` view of package.json
    - manifest_registrations: Entry points a manifest contributes

Walk & Output:
    - TreeWalker: Concurrent, depth-bounded directory visit
    - ImportMap: First-write-wins specifier mapping
    - generate_import_map / build_import_map: Async and sync entry points
"""

from .cache import SingleFlightCache
from .exports import (
    AbsentValue,
    ConditionsMap,
    ExportValue,
    FilePath,
    SubpathMap,
    classify_export,
    resolve_target,
)
from .generator import build_import_map, generate_import_map, load_import_map
from .import_map import ImportMap
from .manifest import ManifestError, PackageManifest, manifest_registrations
from .probe import FilesystemProbe
from .walker import TreeWalker

__all__ = [
    "SingleFlightCache",
    "FilesystemProbe",
    "AbsentValue",
    "FilePath",
    "ConditionsMap",
    "SubpathMap",
    "ExportValue",
    "classify_export",
    "resolve_target",
    "PackageManifest",
    "ManifestError",
    "manifest_registrations",
    "ImportMap",
    "TreeWalker",
    "generate_import_map",
    "build_import_map",
    "load_import_map",
]
