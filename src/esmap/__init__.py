"""esmap: import map generator and bundle builder for ECMAScript module trees."""

from .config import BuildOptions, ImportMapOptions
from .core import build_import_map, generate_import_map

__version__ = "0.1.0"

__all__ = [
    "BuildOptions",
    "ImportMapOptions",
    "build_import_map",
    "generate_import_map",
]
