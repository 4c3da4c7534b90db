from dataclasses import dataclass, field
from typing import List, Mapping, Optional

import pandas as pd

from column_schema import ColumnSchema


@dataclass(frozen=True)
class DocumentSnapshot:
    """(rows, headers, schema) as one immutable unit of undo/redo."""

    frame: pd.DataFrame
    headers: tuple
    schema: Mapping[str, ColumnSchema] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "headers", tuple(self.headers))

    @property
    def row_count(self) -> int:
        return len(self.frame)

    def equals(self, other: "DocumentSnapshot") -> bool:
        if other is None:
            return False
        return (
            self.headers == other.headers
            and dict(self.schema) == dict(other.schema)
            and self.frame.equals(other.frame)
            and list(self.frame.index) == list(other.frame.index)
        )


class SnapshotHistory:
    """Undo/redo stacks of whole document snapshots."""

    def __init__(self, initial: DocumentSnapshot, max_depth: int = 50):
        self.max_depth = max(1, max_depth)
        self.past: List[DocumentSnapshot] = []
        self.future: List[DocumentSnapshot] = []
        self._current = initial
        # snapshot in force before the first uncommitted preview
        self._pending_base: Optional[DocumentSnapshot] = None

    @property
    def current(self) -> DocumentSnapshot:
        return self._current

    @property
    def pending_base(self) -> Optional[DocumentSnapshot]:
        return self._pending_base

    @property
    def has_pending(self) -> bool:
        return self._pending_base is not None

    def can_undo(self) -> bool:
        return bool(self.past) or self.has_pending

    def can_redo(self) -> bool:
        return bool(self.future)

    # ---------- transitions ----------
    def reset(self, snapshot: DocumentSnapshot):
        self.past.clear()
        self.future.clear()
        self._pending_base = None
        self._current = snapshot

    def preview(self, snapshot: DocumentSnapshot):
        if self._pending_base is None:
            self._pending_base = self._current
        self._current = snapshot

    def commit(self, snapshot: DocumentSnapshot):
        base = self._pending_base if self._pending_base is not None else self._current
        self._pending_base = None
        self._push_past(base)
        self.future.clear()
        self._current = snapshot

    def discard_pending(self) -> bool:
        if self._pending_base is None:
            return False
        self._current = self._pending_base
        self._pending_base = None
        return True

    def undo(self) -> bool:
        if self.discard_pending():
            return True
        if not self.past:
            return False
        snap = self.past.pop()
        self.future.insert(0, self._current)
        self._current = snap
        return True

    def redo(self) -> bool:
        discarded = self.discard_pending()
        if not self.future:
            return discarded
        snap = self.future.pop(0)
        self._push_past(self._current)
        self._current = snap
        return True

    # ---------- stack helpers ----------
    def _push_past(self, snapshot: DocumentSnapshot):
        self.past.append(snapshot)
        if len(self.past) > self.max_depth:
            self.past.pop(0)
