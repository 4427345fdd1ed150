"""
Global Configuration and Option Models.

This module centralizes the defaults used by the import map generator and
the bundle builder, the pydantic models that validate user options, and the
loader for the optional ``esmap.toml`` project file.

Config File:
    ./esmap.toml

    [importmap]
    root = "files"
    output = "dist/importmap.json"
    excluded_patterns = ["test", "fixtures"]
    included_extensions = ["mjs", "js"]
    max_depth = 8

    [build]
    dist_dir = "dist"
    entry_point = "files/index.mjs"
    bundle_file = "bundle.mjs"
    minify = true
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

# --- Walk Defaults ---

# Package descriptor parsed (never registered) when found in a directory
MANIFEST_FILENAME = "package.json"

# Base name that also registers its containing directory
INDEX_BASENAME = "index"

# Hard ceiling for recursion, also used when no depth is configured
MAX_DEPTH_LIMIT = 10_000

DEFAULT_EXTENSIONS = ("mjs", "js")

# Order in which export conditions are tried
CONDITION_PRECEDENCE = ("default", "browser", "import", "node")

CONFIG_FILENAME = "esmap.toml"


def normalize_extension(ext: str) -> str:
    """Return ``ext`` with exactly one leading dot."""
    return ext if ext.startswith(".") else f".{ext}"


class ImportMapOptions(BaseModel):
    """
    Options accepted by the import map generator.

    Both the camelCase names used in JSON configuration (``excludedPatterns``)
    and the snake_case attribute names are accepted.

    Attributes:
        output: Destination for the serialized map. Nothing is written if unset.
        excluded_patterns: Substrings; matching entry names or root-relative
            paths are dropped together with their descendants.
        included_extensions: Extensions registered as modules, normalized to
            a leading-dot form.
        max_depth: Recursion bound, clamped to ``[1, MAX_DEPTH_LIMIT]``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    output: Optional[Path] = None
    excluded_patterns: List[str] = Field(default_factory=list, alias="excludedPatterns")
    included_extensions: List[str] = Field(
        default_factory=lambda: [normalize_extension(e) for e in DEFAULT_EXTENSIONS],
        alias="includedExtensions",
    )
    max_depth: Optional[int] = Field(default=None, alias="maxDepth")

    @field_validator("excluded_patterns", mode="before")
    @classmethod
    def _drop_empty_patterns(cls, value: Any) -> List[str]:
        if value is None:
            return []
        return [p for p in value if p]

    @field_validator("included_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: Any) -> List[str]:
        exts = [e for e in (value or []) if e]
        if not exts:
            exts = list(DEFAULT_EXTENSIONS)
        return [normalize_extension(e) for e in exts]

    @property
    def depth_limit(self) -> int:
        """Effective recursion bound."""
        if not self.max_depth:
            return MAX_DEPTH_LIMIT
        return max(1, min(MAX_DEPTH_LIMIT, self.max_depth))

    @property
    def extension_set(self) -> FrozenSet[str]:
        return frozenset(self.included_extensions)

    def is_excluded(self, name: str, rel_path: str) -> bool:
        """Check whether an entry name or its root-relative path hits a pattern."""
        return any(p in name or p in rel_path for p in self.excluded_patterns)


class BuildOptions(BaseModel):
    """
    Options for the bundle build.

    Attributes:
        dist_dir: Output directory.
        entry_point: Entry module handed to the bundler.
        bundle_file: Output bundle file name inside ``dist_dir``.
        minify: Minify the output.
        keep_names: Preserve function and class names.
        max_backups: Number of previous bundles kept as numbered backups.
        esbuild_bin: Name or path of the esbuild executable.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    dist_dir: Path = Field(default=Path("dist"), alias="distDir")
    entry_point: Path = Field(default=Path("files/index.mjs"), alias="entryPoint")
    bundle_file: str = Field(default="bundle.mjs", alias="bundleFile")
    minify: bool = False
    keep_names: bool = Field(default=True, alias="keepNames")
    max_backups: int = Field(default=100, ge=1, alias="maxBackups")
    esbuild_bin: str = "esbuild"

    @property
    def dest(self) -> Path:
        return self.dist_dir / self.bundle_file


class ImportMapSection(ImportMapOptions):
    """The ``[importmap]`` table: generator options plus the directory to scan."""

    root: Path = Path(".")


class ProjectConfig(BaseModel):
    """Parsed content of an ``esmap.toml`` file."""

    importmap: ImportMapSection = Field(default_factory=ImportMapSection)
    build: BuildOptions = Field(default_factory=BuildOptions)

    @classmethod
    def load(cls, path: Path) -> "ProjectConfig":
        """
        Load and validate a project config file.

        Args:
            path: Path to the TOML file.

        Returns:
            ProjectConfig: Parsed configuration. Defaults if the file does not exist.

        Raises:
            ValueError: If the file is malformed or holds invalid values.
        """
        if not path.exists():
            return cls()

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except Exception as e:
            raise ValueError(f"Failed to parse {path}: {e}")

        try:
            return cls.from_dict(data)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration in {path}: {e}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectConfig":
        return cls(
            importmap=ImportMapSection.model_validate(data.get("importmap", {})),
            build=BuildOptions.model_validate(data.get("build", {})),
        )
