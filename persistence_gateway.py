"""
Key-value persistence for the editor, split into two partitions.

``DOCUMENT_KEY`` holds the transient document (headers + rows) and is
replaced wholesale whenever a new file is loaded. ``SCHEMA_KEY`` holds the
persistent schema (headers, column constraints, column widths) and survives
file loads. The two partitions are written at different times, so on disk
they may briefly disagree; loaders reconcile them rather than assume they
match.

Payloads are JSON-compatible. Allowed-value sets become sorted lists on the
way out and frozensets on the way back in; that conversion lives here and
nowhere else.
"""

import asyncio
import copy
import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Optional

import pandas as pd

from app_state import AppState
from column_schema import ColumnSchema
from csv_codec import ROW_ID_KEY
from logging_utils import get_logger

DOCUMENT_KEY = "current_csv_data"
SCHEMA_KEY = "csv_schema"

logger = get_logger("persistence")


class PersistenceGateway:
    """Asynchronous key-value store. ``put`` reports failure by returning False."""

    async def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    async def put(self, key: str, value: Any) -> bool:
        raise NotImplementedError


class MemoryGateway(PersistenceGateway):
    def __init__(self, initial: Optional[dict] = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self.fail_puts = False
        self.fail_gets = False
        self.put_count: dict[str, int] = {}

    async def get(self, key):
        if self.fail_gets:
            raise OSError("storage unavailable")
        value = self._data.get(key)
        return copy.deepcopy(value)

    async def put(self, key, value):
        self.put_count[key] = self.put_count.get(key, 0) + 1
        if self.fail_puts:
            return False
        self._data[key] = copy.deepcopy(value)
        return True

    def peek(self, key):
        return copy.deepcopy(self._data.get(key))


class JsonFileGateway(PersistenceGateway):
    """One ``<key>.json`` file per partition under ``directory``."""

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def _read(self, key):
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _write(self, key, value):
        os.makedirs(self.directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False)
            os.replace(tmp_path, self._path(key))
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    async def get(self, key):
        return await asyncio.to_thread(self._read, key)

    async def put(self, key, value):
        try:
            await asyncio.to_thread(self._write, key, value)
        except (OSError, TypeError, ValueError):
            logger.error("Could not write '%s'", key, exc_info=True)
            return False
        return True


# ---------- payload conversion ----------
def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def document_to_payload(frame: pd.DataFrame, headers) -> dict:
    return {
        "headers": list(headers),
        "rows": AppState.records(frame.reindex(columns=list(headers))),
        "timestamp": _timestamp(),
    }


def payload_to_document(payload) -> Optional[tuple]:
    """Return ``(headers, frame)`` or None when the payload is unusable."""
    if not isinstance(payload, dict):
        return None
    headers = payload.get("headers")
    rows = payload.get("rows")
    if not isinstance(headers, list) or not isinstance(rows, list):
        return None
    headers = _clean_headers(headers)
    if not headers:
        return None
    return headers, AppState.frame_from_records(rows, headers)


def schema_to_payload(headers, schema, widths: dict) -> dict:
    names = set(headers)
    return {
        "headers": list(headers),
        "columnSchema": {
            name: {
                "isEnum": entry.is_constrained,
                "options": entry.sorted_options(),
            }
            for name, entry in schema.items()
            if name in names
        },
        "columnWidths": {name: int(widths[name]) for name in headers if name in widths},
        "timestamp": _timestamp(),
    }


def payload_to_schema(payload) -> Optional[tuple]:
    """Return ``(headers, schema, widths)`` or None when the payload is unusable."""
    if not isinstance(payload, dict):
        return None
    headers = payload.get("headers")
    if not isinstance(headers, list):
        return None
    headers = _clean_headers(headers)

    schema = {}
    raw_schema = payload.get("columnSchema")
    if isinstance(raw_schema, dict):
        for name, entry in raw_schema.items():
            if not isinstance(name, str) or not isinstance(entry, dict):
                continue
            options = entry.get("options")
            if not isinstance(options, list):
                options = []
            schema[name] = ColumnSchema(
                bool(entry.get("isEnum")),
                frozenset(str(o) for o in options if isinstance(o, (str, int, float))),
            )

    widths = {}
    raw_widths = payload.get("columnWidths")
    if isinstance(raw_widths, dict):
        for name, width in raw_widths.items():
            if isinstance(width, bool) or not isinstance(width, (int, float)):
                continue
            widths[str(name)] = int(width)

    return headers, schema, widths


def _clean_headers(headers) -> list[str]:
    cleaned = []
    seen = set()
    for name in headers:
        if not isinstance(name, str):
            continue
        name = name.strip()
        if not name or name in seen or name == ROW_ID_KEY:
            continue
        seen.add(name)
        cleaned.append(name)
    return cleaned
