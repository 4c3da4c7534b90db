"""
Document state engine for the annotation editor.

One ``DocumentEngine`` owns the current ``(rows, headers, schema)`` snapshot,
its undo/redo history and the column width preference, and keeps the two
persistence partitions up to date:

* the schema partition is written at every commit, undo and redo;
* the document partition is written on a debounce timer, and immediately
  when a new file is loaded;
* width changes are written a short grace period after a resize ends.

Writes are fire-and-forget tasks on the running event loop. A failed write
is logged and never rolls back the in-memory state, which stays the source
of truth. All entry points are meant to be called from that loop's thread.
"""

import asyncio
import math
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Mapping, Optional

import pandas as pd

import config_paths
from app_state import AppState
from cell_coercion import coerce_cell_value
from column_schema import (
    PLAIN,
    classify_columns,
    constrained,
    grow_allowed_values,
    merge_headers,
    replace_options,
    resolve_widths,
    widths_for_headers,
)
from csv_codec import ROW_ID_KEY, CsvParseError, empty_frame, new_row_id, parse_csv, serialize_csv
from debounce_timer import DebounceTimer
from default_df_initializer import DefaultDfInitializer
from file_type_handler import export_filename
from history_manager import DocumentSnapshot
from logging_utils import get_logger
from persistence_gateway import (
    DOCUMENT_KEY,
    SCHEMA_KEY,
    PersistenceGateway,
    document_to_payload,
    payload_to_document,
    payload_to_schema,
    schema_to_payload,
)

logger = get_logger("engine")


@dataclass
class EditResult:
    ok: bool
    message: str = ""
    error: Optional[BaseException] = None
    row_id: Optional[str] = None

    def __bool__(self):
        return self.ok


class DocumentEngine:
    def __init__(
        self,
        gateway: PersistenceGateway,
        config: Optional[dict] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        set_status: Optional[Callable[[str, float], None]] = None,
    ):
        cfg = config_paths.default_config()
        cfg.update(config or {})

        self.gateway = gateway
        self.loop = loop or asyncio.get_running_loop()
        self._set_status = set_status or (lambda _msg, _secs: None)

        self.designated = tuple(cfg["CONSTRAINED_COLUMNS"])
        self.enum_threshold = cfg["ENUM_THRESHOLD"]
        self.state = AppState(
            undo_max_depth=cfg["UNDO_MAX_DEPTH"],
            default_width=cfg["DEFAULT_COLUMN_WIDTH"],
            min_width=cfg["MIN_COLUMN_WIDTH"],
        )

        self._document_timer = DebounceTimer(self.loop, cfg["AUTOSAVE_DELAY"], self._write_document)
        self._width_timer = DebounceTimer(self.loop, cfg["WIDTH_FLUSH_DELAY"], self._write_schema)
        self._writes: set = set()
        self._locks = {DOCUMENT_KEY: asyncio.Lock(), SCHEMA_KEY: asyncio.Lock()}

    # ---------- read access ----------
    @property
    def headers(self) -> list[str]:
        return list(self.state.headers)

    @property
    def frame(self) -> pd.DataFrame:
        return self.state.df.copy()

    @property
    def rows(self) -> list[dict]:
        return AppState.records(self.state.df)

    @property
    def row_ids(self) -> list[str]:
        return list(self.state.df.index)

    @property
    def schema(self) -> dict:
        return dict(self.state.schema)

    @property
    def column_widths(self) -> dict:
        return {name: self.state.width_for(name) for name in self.state.headers}

    @property
    def constrained_columns(self) -> list[str]:
        schema = self.state.schema
        return [h for h in self.state.headers if schema.get(h, PLAIN).is_constrained]

    @property
    def can_undo(self) -> bool:
        return self.state.history.can_undo()

    @property
    def can_redo(self) -> bool:
        return self.state.history.can_redo()

    def options_for(self, column: str) -> list[str]:
        return self.state.schema.get(column, PLAIN).sorted_options()

    def cell(self, row_id: str, column: str) -> str:
        return self.state.df.at[row_id, column]

    # ---------- loading ----------
    async def load_default(self) -> EditResult:
        """Restore the stored document (or the built-in sample) and reset history."""
        stored_schema = await self._read(SCHEMA_KEY, payload_to_schema)
        stored_doc = await self._read(DOCUMENT_KEY, payload_to_document)

        if stored_doc is not None:
            headers, frame = stored_doc
            source = "saved data"
        else:
            parsed = DefaultDfInitializer().create()
            headers, frame = parsed.headers, parsed.frame
            source = "default data"

        snapshot, widths = self._reconcile(headers, frame, stored_schema)
        self.state.history.reset(snapshot)
        self.state.column_widths.update(widths)
        self.state.loaded = True

        logger.info("Loaded %s: %d rows, %d columns", source, snapshot.row_count, len(snapshot.headers))
        self._write_schema()
        self._document_timer.schedule()
        self._set_status(f"Loaded {source}", 2)
        return EditResult(True, f"Loaded {source}")

    async def load_file(self, text) -> EditResult:
        """Replace the rows with a parsed file, keeping the persisted schema."""
        try:
            parsed = parse_csv(text)
        except CsvParseError as exc:
            logger.warning("Could not parse file: %s", exc)
            self._set_status(f"Error reading file: {exc}", 3)
            return EditResult(False, str(exc), error=exc)

        if self.state.loaded:
            current = self.state.snapshot
            stored_schema = (list(current.headers), dict(current.schema), dict(self.state.column_widths))
        else:
            stored_schema = await self._read(SCHEMA_KEY, payload_to_schema)

        snapshot, widths = self._reconcile(parsed.headers, parsed.frame, stored_schema)
        if self.state.loaded:
            self.state.history.commit(snapshot)
        else:
            self.state.history.reset(snapshot)
            self.state.loaded = True
        self.state.column_widths.update(widths)

        logger.info("Loaded file: %d rows, %d columns", snapshot.row_count, len(snapshot.headers))
        self._write_schema()
        self._document_timer.cancel()
        self._write_document()
        message = f"Loaded {snapshot.row_count} row{'s' if snapshot.row_count != 1 else ''}"
        self._set_status(message, 2)
        return EditResult(True, message)

    def _reconcile(self, headers, frame, stored_schema):
        if stored_schema is not None:
            stored_headers, stored_entries, stored_widths = stored_schema
        else:
            stored_headers, stored_entries, stored_widths = [], {}, {}

        effective = merge_headers(headers, stored_headers)
        frame = AppState.backfill(frame, effective)
        schema = classify_columns(
            effective,
            frame,
            persisted=stored_entries,
            designated=self.designated,
            enum_threshold=self.enum_threshold,
        )
        widths = resolve_widths(effective, stored_widths, self.state.default_width, self.state.min_width)
        return DocumentSnapshot(frame=frame, headers=effective, schema=schema), widths

    # ---------- row edits ----------
    def edit_cell(self, row_id: str, column: str, value, commit: bool = True) -> EditResult:
        snap = self.state.snapshot
        if column not in snap.headers:
            return self._reject(f"Unknown column '{column}'")
        if not self.state.has_row(row_id):
            return self._reject("Row not found")

        text = coerce_cell_value(value)
        frame = snap.frame.copy()
        frame.at[row_id, column] = text

        if not commit:
            # keystroke-level update: visible now, recorded on the next commit
            self.state.history.preview(DocumentSnapshot(frame, snap.headers, snap.schema))
            self._document_timer.schedule()
            return EditResult(True, "Edited", row_id=row_id)

        schema = grow_allowed_values(snap.schema, {column: text})
        if schema is not snap.schema:
            logger.debug("Column '%s' gained option '%s'", column, text)
        return self._commit(DocumentSnapshot(frame, snap.headers, schema), "Cell updated", row_id=row_id)

    def add_row(self, values: Optional[Mapping[str, str]] = None) -> EditResult:
        snap = self.state.snapshot
        values = dict(values or {})
        values.pop(ROW_ID_KEY, None)
        if not snap.headers:
            return self._reject("No columns")
        unknown = [k for k in values if k not in snap.headers]
        if unknown:
            return self._reject(f"Unknown column '{unknown[0]}'")

        cleaned = {col: coerce_cell_value(values.get(col)) for col in snap.headers}
        if not any(cleaned.values()):
            return self._reject("Row must contain at least one value")

        row_id = new_row_id()
        new_row = pd.DataFrame(
            [cleaned],
            index=pd.Index([row_id], dtype=object, name=ROW_ID_KEY),
            columns=list(snap.headers),
            dtype=object,
        )
        frame = new_row if len(snap.frame) == 0 else pd.concat([snap.frame, new_row])
        schema = grow_allowed_values(snap.schema, cleaned)
        return self._commit(DocumentSnapshot(frame, snap.headers, schema), "Row added", row_id=row_id)

    def edit_row(self, row_id: str, values: Mapping[str, str]) -> EditResult:
        snap = self.state.snapshot
        if not self.state.has_row(row_id):
            return self._reject("Row not found")
        values = {k: v for k, v in dict(values or {}).items() if k != ROW_ID_KEY}
        unknown = [k for k in values if k not in snap.headers]
        if unknown:
            return self._reject(f"Unknown column '{unknown[0]}'")

        cleaned = {col: coerce_cell_value(v) for col, v in values.items()}
        frame = snap.frame.copy()
        for col, text in cleaned.items():
            frame.at[row_id, col] = text
        schema = grow_allowed_values(snap.schema, cleaned)
        return self._commit(DocumentSnapshot(frame, snap.headers, schema), "Row updated", row_id=row_id)

    def remove_row(self, row_id: str) -> EditResult:
        snap = self.state.snapshot
        if not self.state.has_row(row_id):
            return self._reject("Row not found")
        frame = snap.frame.drop(index=[row_id])
        return self._commit(DocumentSnapshot(frame, snap.headers, snap.schema), "Row deleted", row_id=row_id)

    def clear_rows(self) -> EditResult:
        snap = self.state.snapshot
        count = snap.row_count
        if count == 0:
            return EditResult(True, "No rows")
        frame = empty_frame(snap.headers)
        return self._commit(
            DocumentSnapshot(frame, snap.headers, snap.schema),
            f"Deleted {count} row{'s' if count != 1 else ''}",
        )

    # ---------- column edits ----------
    def add_column(self, name: str, is_constrained: bool = False, initial_options: Iterable[str] = ()) -> EditResult:
        snap = self.state.snapshot
        name = coerce_cell_value(name)
        if not name:
            return self._reject("Column name cannot be empty")
        if name == ROW_ID_KEY:
            return self._reject(f"'{ROW_ID_KEY}' is reserved")
        if name in snap.headers:
            return self._reject(f"Column '{name}' already exists")

        frame = snap.frame.copy()
        frame[name] = ""
        frame[name] = frame[name].astype(object)
        schema = dict(snap.schema)
        schema[name] = constrained(initial_options) if is_constrained else PLAIN
        self.state.column_widths.setdefault(name, self.state.default_width)
        return self._commit(
            DocumentSnapshot(frame, snap.headers + (name,), schema),
            f"Added column '{name}'",
        )

    def remove_column(self, name: str) -> EditResult:
        snap = self.state.snapshot
        if name not in snap.headers:
            return self._reject(f"Unknown column '{name}'")
        frame = snap.frame.drop(columns=[name])
        schema = {k: v for k, v in snap.schema.items() if k != name}
        headers = tuple(h for h in snap.headers if h != name)
        return self._commit(DocumentSnapshot(frame, headers, schema), f"Deleted column '{name}'")

    def replace_column_options(self, name: str, options: Iterable[str]) -> EditResult:
        snap = self.state.snapshot
        entry = snap.schema.get(name)
        if name not in snap.headers or entry is None:
            return self._reject(f"Unknown column '{name}'")
        if not entry.is_constrained:
            return self._reject(f"Column '{name}' has no option list")
        try:
            schema = replace_options(snap.schema, name, options)
        except ValueError:
            return self._reject("Options list cannot be empty. Please add at least one option.")
        return self._commit(
            DocumentSnapshot(snap.frame, snap.headers, schema),
            f"Options for '{name}' saved",
        )

    # ---------- widths ----------
    def set_column_width(self, name: str, width) -> EditResult:
        if name not in self.state.headers:
            return self._reject(f"Unknown column '{name}'")
        try:
            number = float(width)
        except (TypeError, ValueError):
            number = math.nan
        if isinstance(width, bool) or not math.isfinite(number):
            return self._reject("Invalid width")
        value = self.state.set_width(name, number)
        return EditResult(True, f"Width {value}")

    def end_column_resize(self):
        self._width_timer.schedule()

    # ---------- history ----------
    def undo(self) -> bool:
        history = self.state.history
        if not history.undo():
            self._set_status("Nothing to undo", 2)
            return False
        self._after_change()
        remaining = len(history.past)
        self._set_status(f"Undone ({remaining} more)" if remaining else "Undone", 2)
        return True

    def redo(self) -> bool:
        history = self.state.history
        if not history.redo():
            self._set_status("Nothing to redo", 2)
            return False
        self._after_change()
        remaining = len(history.future)
        self._set_status(f"Redone ({remaining} more)" if remaining else "Redone", 2)
        return True

    # ---------- export ----------
    def export_text(self) -> str:
        return serialize_csv(self.state.df, self.state.headers)

    @staticmethod
    def export_filename(day: Optional[date] = None) -> str:
        return export_filename(day)

    # ---------- persistence ----------
    async def flush(self):
        """Run pending timed writes now and wait for every write in flight."""
        self._width_timer.fire_now()
        self._document_timer.fire_now()
        while self._writes:
            await asyncio.gather(*list(self._writes))

    async def _read(self, key, convert):
        try:
            payload = await self.gateway.get(key)
        except Exception:
            logger.warning("Could not read '%s'; continuing without it", key, exc_info=True)
            return None
        if payload is None:
            return None
        converted = convert(payload)
        if converted is None:
            logger.warning("Ignoring malformed '%s' payload", key)
        return converted

    async def _put(self, key, payload) -> bool:
        async with self._locks[key]:
            try:
                ok = await self.gateway.put(key, payload)
            except Exception:
                logger.error("Could not save '%s'", key, exc_info=True)
                return False
        if not ok:
            logger.warning("Saving '%s' failed; changes are kept in memory only", key)
        return bool(ok)

    def _spawn(self, coro):
        task = self.loop.create_task(coro)
        self._writes.add(task)
        task.add_done_callback(self._writes.discard)
        return task

    def _write_schema(self):
        snap = self.state.snapshot
        widths = widths_for_headers(snap.headers, self.state.column_widths, self.state.default_width)
        self._spawn(self._put(SCHEMA_KEY, schema_to_payload(snap.headers, snap.schema, widths)))

    def _write_document(self):
        snap = self.state.snapshot
        self._spawn(self._put(DOCUMENT_KEY, document_to_payload(snap.frame, snap.headers)))

    # ---------- internals ----------
    def _commit(self, snapshot: DocumentSnapshot, message: str, row_id: Optional[str] = None) -> EditResult:
        history = self.state.history
        if history.has_pending:
            snapshot = self._grow_from_pending(snapshot)
        base = history.pending_base if history.has_pending else history.current
        if snapshot.equals(base):
            history.discard_pending()
            return EditResult(True, "No change", row_id=row_id)

        history.commit(snapshot)
        logger.debug("%s (%d undo steps)", message, len(history.past))
        self._after_change()
        self._set_status(message, 2)
        return EditResult(True, message, row_id=row_id)

    def _grow_from_pending(self, snapshot: DocumentSnapshot) -> DocumentSnapshot:
        """Cells typed into a constrained column before this commit join its option set too."""
        history = self.state.history
        base, preview = history.pending_base.frame, history.current.frame
        rows = preview.index.intersection(base.index).intersection(snapshot.frame.index)
        schema = snapshot.schema
        for column in snapshot.headers:
            entry = schema.get(column)
            if entry is None or not entry.is_constrained:
                continue
            if column not in base.columns or column not in preview.columns:
                continue
            changed = preview.loc[rows, column] != base.loc[rows, column]
            for row_id in changed[changed].index:
                schema = grow_allowed_values(schema, {column: snapshot.frame.at[row_id, column]})
        if schema is snapshot.schema:
            return snapshot
        return DocumentSnapshot(snapshot.frame, snapshot.headers, schema)

    def _after_change(self):
        self._write_schema()
        self._document_timer.schedule()

    def _reject(self, message: str) -> EditResult:
        logger.debug("Rejected: %s", message)
        self._set_status(message, 3)
        return EditResult(False, message)
