# src/composite/core/paths.py
"""Nested param lookup and strict-mode path validation."""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from pydantic import BaseModel

Path = Tuple[Any, ...]


def is_plain_params(params: Any) -> bool:
    """Only plain mappings are checked in strict mode; models and other values are opaque."""
    return isinstance(params, Mapping) and not isinstance(params, BaseModel)


def get_in(params: Any, path: Sequence[Any]) -> Any:
    """
    Read a value from nested params by successive keys.

    Mappings are traversed by key and pydantic models by field. A missing
    key or a value that can't be traversed yields `None`.
    """
    current = params
    for key in path:
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(key)
        elif isinstance(current, BaseModel):
            # Only fields; attributes such as `json` or `copy` are methods, not params.
            if key in type(current).model_fields:
                current = getattr(current, key)
            else:
                current = (current.model_extra or {}).get(key)
        else:
            return None
    return current


def _group_by_head(paths: Iterable[Path]) -> Dict[Any, List[Path]]:
    groups: Dict[Any, List[Path]] = {}
    for path in paths:
        groups.setdefault(path[0], []).append(path[1:])
    return groups


def find_unknown_paths(params: Mapping, declared: Iterable[Path], prefix: Path = ()) -> List[Path]:
    """
    Collect every key path in `params` that no declared path covers.

    A declared path that ends at a key covers everything below it. Paths are
    returned in the order the params are traversed.
    """
    groups = _group_by_head(declared)
    unknown: List[Path] = []

    for key, value in params.items():
        path = prefix + (key,)
        if key not in groups:
            unknown.append(path)
            continue

        subpaths = groups[key]
        if () in subpaths:
            continue
        # Non-mapping values under nested declarations simply resolve to nothing.
        if is_plain_params(value):
            unknown.extend(find_unknown_paths(value, subpaths, path))

    return unknown
