"""Field paths: segment tuples threaded through recursive walks.

Recursion carries a tuple of segments (field names and list indices) and
only renders it when an error or warning is actually emitted, e.g.
``("items", 2, "price")`` -> ``"items[2].price"``.
"""

from __future__ import annotations

import re
from typing import Union

__all__ = ["PathSegment", "FieldPath", "format_path", "parse_path"]

PathSegment = Union[str, int]
FieldPath = tuple[PathSegment, ...]

_SEGMENT_RE = re.compile(r"([^.\[\]]+)|\[(\d+)\]")


def format_path(path: FieldPath) -> str:
    """Render *path* as a dot/bracket locator."""
    out = ""
    for segment in path:
        if isinstance(segment, int):
            out += f"[{segment}]"
        elif out:
            out += f".{segment}"
        else:
            out = segment
    return out


def parse_path(text: str) -> FieldPath:
    """Split a rendered locator back into segments."""
    segments: list[PathSegment] = []
    for name, index in _SEGMENT_RE.findall(text or ""):
        segments.append(int(index) if index else name)
    return tuple(segments)
