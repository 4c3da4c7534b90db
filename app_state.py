import pandas as pd

from cell_coercion import coerce_cell_value
from csv_codec import ROW_ID_KEY, empty_frame, new_row_id
from column_schema import clamp_width
from history_manager import DocumentSnapshot, SnapshotHistory


class AppState:
    """Current document snapshot, its history, and the UI width preference."""

    def __init__(self, undo_max_depth: int = 50, default_width: int = 150, min_width: int = 80):
        self.undo_max_depth = undo_max_depth
        self.default_width = max(default_width, min_width)
        self.min_width = min_width

        self.history = SnapshotHistory(self.empty_snapshot(), max_depth=undo_max_depth)
        # not part of history; survives undo/redo
        self.column_widths: dict[str, int] = {}
        self.loaded = False

    # ---------- current snapshot ----------
    @property
    def snapshot(self) -> DocumentSnapshot:
        return self.history.current

    @property
    def df(self) -> pd.DataFrame:
        return self.history.current.frame

    @property
    def headers(self) -> tuple:
        return self.history.current.headers

    @property
    def schema(self):
        return self.history.current.schema

    def has_row(self, row_id) -> bool:
        return row_id in self.df.index

    # ---------- frame helpers ----------
    @staticmethod
    def empty_snapshot() -> DocumentSnapshot:
        return DocumentSnapshot(frame=empty_frame(), headers=(), schema={})

    def build_default_row(self, headers=None) -> dict:
        target = self.headers if headers is None else headers
        return {col: "" for col in target}

    @staticmethod
    def backfill(frame: pd.DataFrame, headers) -> pd.DataFrame:
        """Return a copy holding exactly ``headers`` with every gap set to ""."""
        headers = list(headers)
        if len(frame) == 0:
            return empty_frame(headers)
        out = frame.reindex(columns=headers).astype(object)
        out = out.map(coerce_cell_value).astype(object)
        out.index = pd.Index(list(frame.index), dtype=object, name=ROW_ID_KEY)
        return out

    @staticmethod
    def frame_from_records(records, headers) -> pd.DataFrame:
        """Build a frame from row dicts, keeping ``__id`` values where present."""
        headers = list(headers)
        ids = []
        seen = set()
        rows = []
        for record in records:
            if not isinstance(record, dict):
                continue
            row_id = record.get(ROW_ID_KEY)
            row_id = "" if row_id is None else str(row_id)
            if not row_id or row_id in seen:
                row_id = new_row_id()
            seen.add(row_id)
            ids.append(row_id)
            rows.append({col: coerce_cell_value(record.get(col)) for col in headers})
        if not rows:
            return empty_frame(headers)
        return pd.DataFrame(
            rows,
            index=pd.Index(ids, dtype=object, name=ROW_ID_KEY),
            columns=headers,
            dtype=object,
        )

    @staticmethod
    def records(frame: pd.DataFrame) -> list[dict]:
        out = []
        for row_id, row in zip(frame.index, frame.to_dict(orient="records")):
            out.append({ROW_ID_KEY: row_id, **row})
        return out

    # ---------- widths ----------
    def width_for(self, column: str) -> int:
        return self.column_widths.get(column, self.default_width)

    def set_width(self, column: str, width) -> int:
        value = clamp_width(width, self.min_width)
        self.column_widths[column] = value
        return value
