"""SnapshotTree — local mirror of a realtime-store subtree.

The streaming protocol delivers deltas (``put`` replaces a location,
``patch`` merges children into one).  Consumers want whole snapshots, so the
subscriber replays every delta into this mirror and reads the full value back
after each change.
"""

from __future__ import annotations

import copy
import re
from typing import Any

from companyfeed.models.events import ChangeEvent, ChangeKind

# Keys the store treats as integers when ordering children.
_INT_KEY = re.compile(r"^-?(0|[1-9][0-9]{0,9})$")


def split_path(path: str) -> list[str]:
    """Split ``/a/b/`` into ``["a", "b"]``; the root is ``[]``."""
    return [segment for segment in path.split("/") if segment]


def child_sort_key(key: str) -> tuple[int, int, str]:
    """Order children the way the store does: integer keys first, numerically."""
    if _INT_KEY.match(key):
        value = int(key)
        if -(2**31) <= value < 2**31:
            return (0, value, key)
    return (1, 0, key)


def _prune(value: Any) -> Any:
    """Collapse empty containers and null children to ``None``."""
    if isinstance(value, dict):
        pruned = {k: _prune(v) for k, v in value.items()}
        pruned = {k: v for k, v in pruned.items() if v is not None}
        return pruned or None
    if isinstance(value, list):
        pruned_list = [_prune(v) for v in value]
        return pruned_list if any(v is not None for v in pruned_list) else None
    return value


class SnapshotTree:
    """Mutable JSON mirror of a single subscribed location."""

    def __init__(self, value: Any = None) -> None:
        self._root: Any = _prune(copy.deepcopy(value))

    @property
    def value(self) -> Any:
        """The current value at the subscribed location (``None`` if empty)."""
        return self._root

    def apply(self, change: ChangeEvent) -> None:
        """Replay a ``put`` or ``patch`` delta; other kinds are ignored."""
        segments = split_path(change.path)
        if change.kind == ChangeKind.PUT:
            self._root = self._set(self._root, segments, copy.deepcopy(change.data))
        elif change.kind == ChangeKind.PATCH:
            if not isinstance(change.data, dict):
                return
            for key, child in change.data.items():
                self._root = self._set(
                    self._root,
                    segments + split_path(str(key)),
                    copy.deepcopy(child),
                )

    def children(self) -> list[tuple[str, Any]]:
        """Return ``(key, value)`` pairs of the root in store order."""
        root = self._root
        if isinstance(root, dict):
            return [(key, root[key]) for key in sorted(root, key=child_sort_key)]
        if isinstance(root, list):
            return [
                (str(index), child)
                for index, child in enumerate(root)
                if child is not None
            ]
        return []

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _set(self, node: Any, segments: list[str], value: Any) -> Any:
        if not segments:
            return _prune(value)

        head, rest = segments[0], segments[1:]
        if isinstance(node, list):
            # Arrays are addressed by index keys; mutate as an object.
            node = {str(i): v for i, v in enumerate(node) if v is not None}
        if not isinstance(node, dict):
            node = {}

        updated = self._set(node.get(head), rest, value)
        if updated is None:
            node.pop(head, None)
        else:
            node[head] = updated
        return node or None
