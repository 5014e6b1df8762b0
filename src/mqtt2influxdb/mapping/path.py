from __future__ import annotations

import re
from typing import Any, List, Optional, Sequence

PATH_SEPARATOR = "."

_INDEX = re.compile(r"\+?[0-9]+")


def split_path(path: str) -> List[str]:
    # "a.b.0" -> ["a", "b", "0"]; "" -> [""]
    return path.split(PATH_SEPARATOR)


def _parse_index(segment: str) -> Optional[int]:
    if _INDEX.fullmatch(segment) is None:
        return None
    return int(segment)


def resolve(root: Any, segments: Sequence[str]) -> Any:
    """
    Walk ``segments`` through a decoded JSON document.

    Resolution is lenient: a segment that cannot be applied (missing key,
    non-integer or out-of-range index, scalar node) is skipped and the walk
    continues from the value reached so far. The result is the last value
    successfully reached, which is ``root`` itself if nothing applied.

    Examples:
      resolve({"a": {"b": [10, 20]}}, ["a", "b", "0"])  -> 10
      resolve({"a": {"b": [10, 20]}}, ["a", "x"])       -> {"b": [10, 20]}
      resolve({"a": {"b": [10, 20]}}, ["a", "x", "b"])  -> [10, 20]
    """
    current = root
    for segment in segments:
        if isinstance(current, list):
            index = _parse_index(segment)
            if index is not None and index < len(current):
                current = current[index]
        elif isinstance(current, dict):
            if segment in current:
                current = current[segment]
        # scalars and null: nothing to descend into
    return current
