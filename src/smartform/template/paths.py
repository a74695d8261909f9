"""Path resolution over nested values.

Paths use dot notation for fields and bracket notation for list indexes:

    user.name
    items[0]
    users[0].addresses[1].street
    matrix[1][2]

Resolution never raises. Missing fields, non-map intermediates, non-list
indexed values and out-of-range indexes all produce NOT_FOUND, leaving the
caller to decide whether an unresolved path is an error.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

_SEGMENT = re.compile(r"^([^\[\]]*)((?:\[\d+\])*)$")
_INDEX = re.compile(r"\[(\d+)\]")


class _NotFound:
    """Sentinel type for unresolved paths."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND: Any = _NotFound()


@dataclass(frozen=True)
class PathStep:
    """One step of a parsed path: a field name or a list index."""

    key: str | None = None
    index: int | None = None

    @property
    def is_index(self) -> bool:
        return self.index is not None


def split_path(path: str) -> list[PathStep] | None:
    """Split a path into steps.

    Returns None for malformed paths (empty segments, stray brackets).

    Example:
        split_path("a.b[2].c")
        # [PathStep(key="a"), PathStep(key="b"), PathStep(index=2), PathStep(key="c")]
    """
    if not path:
        return None

    steps: list[PathStep] = []
    for segment in path.split("."):
        match = _SEGMENT.match(segment.strip())
        if match is None:
            return None
        name, indexes = match.group(1), match.group(2)
        if name:
            steps.append(PathStep(key=name))
        elif not indexes:
            return None
        for index in _INDEX.findall(indexes):
            steps.append(PathStep(index=int(index)))
    return steps


def root_name(path: str) -> str:
    """Return the root identifier of a path ("items[0].name" -> "items")."""
    end = len(path)
    for delimiter in (".", "["):
        position = path.find(delimiter)
        if position != -1:
            end = min(end, position)
    return path[:end].strip()


def resolve_path(root: Any, path: str) -> Any:
    """Resolve a path against a root value.

    Args:
        root: A mapping (typically a context or a registry wrapper) or any value
        path: Dotted/bracketed path

    Returns:
        The resolved value, or NOT_FOUND
    """
    steps = split_path(path)
    if steps is None:
        return NOT_FOUND
    return resolve_steps(root, steps)


def resolve_steps(root: Any, steps: list[PathStep]) -> Any:
    """Resolve already-split steps against a root value."""
    current = root
    for step in steps:
        if step.is_index:
            if not isinstance(current, (list, tuple)):
                return NOT_FOUND
            if step.index >= len(current):
                return NOT_FOUND
            current = current[step.index]
        else:
            if not isinstance(current, Mapping) or step.key not in current:
                return NOT_FOUND
            current = current[step.key]
    return current
