"""
Export Value Model.

Typed view of a manifest ``exports`` field. Raw JSON is classified once
into a small variant and the resolution rules work on that variant:

    AbsentValue      nothing usable (null, empty string, empty object)
    FilePath         "./lib/index.js"
    ConditionsMap    {"import": ..., "default": ...}   resolved by precedence
    SubpathMap       {".": ..., "./feature": ...}      iterated by key

An object is a subpath map when any of its keys starts with ``.``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple, Union

from ..config import CONDITION_PRECEDENCE

ROOT_MARKER = "."


@dataclass(frozen=True)
class AbsentValue:
    pass


@dataclass(frozen=True)
class FilePath:
    path: str


@dataclass(frozen=True)
class ConditionsMap:
    entries: Dict[str, "ExportValue"] = field(default_factory=dict)


@dataclass(frozen=True)
class SubpathMap:
    entries: Dict[str, "ExportValue"] = field(default_factory=dict)


ExportValue = Union[AbsentValue, FilePath, ConditionsMap, SubpathMap]

ABSENT = AbsentValue()

# Deepest exports structure accepted from a manifest
MAX_EXPORT_NESTING = 64


def classify_export(raw: Any, depth: int = 0) -> ExportValue:
    """
    Convert a raw JSON ``exports`` value into an ExportValue.

    Arrays are fallback lists: the first element that resolves to a path wins.

    Raises:
        ValueError: If objects or arrays nest deeper than ``MAX_EXPORT_NESTING``.
    """
    if depth > MAX_EXPORT_NESTING:
        raise ValueError(f"exports nested deeper than {MAX_EXPORT_NESTING} levels")

    if isinstance(raw, str):
        return FilePath(raw) if raw else ABSENT

    if isinstance(raw, list):
        for item in raw:
            candidate = classify_export(item, depth + 1)
            if resolve_target(candidate) is not None:
                return candidate
        return ABSENT

    if isinstance(raw, dict) and raw:
        entries = {str(k): classify_export(v, depth + 1) for k, v in raw.items()}
        if any(k.startswith(".") for k in entries):
            return SubpathMap(entries)
        return ConditionsMap(entries)

    return ABSENT


def select_condition(conditions: ConditionsMap) -> ExportValue:
    """
    Pick one branch of a conditions object.

    The first of ``default``, ``browser``, ``import``, ``node`` that is present
    and not absent wins, even if it later resolves to nothing; otherwise the
    first value in key order.
    """
    for name in CONDITION_PRECEDENCE:
        value = conditions.entries.get(name, ABSENT)
        if not isinstance(value, AbsentValue):
            return value
    return next(iter(conditions.entries.values()), ABSENT)


def resolve_target(value: ExportValue) -> Optional[str]:
    """Follow conditions down to a concrete file path, or None."""
    if isinstance(value, FilePath):
        return value.path
    if isinstance(value, ConditionsMap):
        return resolve_target(select_condition(value))
    if isinstance(value, SubpathMap):
        return resolve_target(value.entries.get(ROOT_MARKER, ABSENT))
    return None


def root_target(exports: ExportValue) -> Optional[str]:
    """Resolve the package root entry (``.``) of an exports value."""
    return resolve_target(exports)


def iter_subpaths(exports: ExportValue) -> Iterator[Tuple[str, str]]:
    """
    Yield ``(suffix, target)`` for every concrete subpath export.

    ``suffix`` is the key without its leading dot (``./feature`` -> ``/feature``).
    Pattern keys containing ``*`` and subpaths resolving to nothing are skipped.
    """
    if not isinstance(exports, SubpathMap):
        return

    for key, value in exports.entries.items():
        if key == ROOT_MARKER or not key.startswith("./") or len(key) <= 2:
            continue
        if "*" in key:
            continue
        target = resolve_target(value)
        if target:
            yield key[1:], target
