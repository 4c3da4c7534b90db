"""
CSV text <-> row frame conversion.

Parsing is line based and deliberately pragmatic: lines are split on
``\\n`` / ``\\r\\n`` first, so a quoted field may contain commas and doubled
quotes but never a line break. Serialisation goes through pandas with minimal
quoting, which the parser reads back losslessly for single-line values.
"""

import re
import uuid
from dataclasses import dataclass
from typing import Optional

import pandas as pd

ROW_ID_KEY = "__id"

_LINE_SPLIT = re.compile(r"\r?\n")


class CsvParseError(Exception):
    """Raised when CSV text cannot be turned into a document."""

    def __init__(self, message: str, line_number: Optional[int] = None, cause: Optional[BaseException] = None):
        self.message = message
        self.line_number = line_number
        self.cause = cause
        if line_number is not None:
            message = f"Line {line_number}: {message}"
        super().__init__(message)


@dataclass(frozen=True)
class ParsedCsv:
    headers: tuple
    # indexed by row id; cells absent from a short line are NaN
    frame: pd.DataFrame

    @property
    def row_count(self) -> int:
        return len(self.frame)


def new_row_id() -> str:
    return uuid.uuid4().hex


def empty_frame(headers=()) -> pd.DataFrame:
    return pd.DataFrame(
        index=pd.Index([], dtype=object, name=ROW_ID_KEY),
        columns=list(headers),
        dtype=object,
    )


def split_csv_line(line: str, line_number: Optional[int] = None) -> list[str]:
    """Split one line on unquoted commas, unquoting and trimming each cell."""
    cells: list[str] = []
    cell: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < n and line[i + 1] == '"':
                    cell.append('"')
                    i += 2
                    continue
                in_quotes = False
            else:
                cell.append(ch)
        elif ch == '"':
            in_quotes = True
        elif ch == ",":
            cells.append("".join(cell).strip())
            cell = []
        else:
            cell.append(ch)
        i += 1

    if in_quotes:
        raise CsvParseError("Unterminated quoted field", line_number)

    cells.append("".join(cell).strip())
    return cells


def _decode(text) -> str:
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CsvParseError("File is not valid UTF-8", cause=exc) from exc
    if not isinstance(text, str):
        raise CsvParseError(f"Expected CSV text, got {type(text).__name__}")
    return text.lstrip("\ufeff")


def parse_csv(text) -> ParsedCsv:
    """
    Parse CSV text into headers and a frame of string cells.

    Raises:
        CsvParseError: If the text has no usable header line, duplicate
            header names, the reserved row-id header, or an unterminated quoted
            field
    """
    text = _decode(text)

    numbered = [
        (num, line)
        for num, line in enumerate(_LINE_SPLIT.split(text), start=1)
        if line.strip() != ""
    ]
    if not numbered:
        raise CsvParseError("CSV file is empty or has no headers")

    header_num, header_line = numbered[0]
    positions = split_csv_line(header_line, header_num)
    while positions and positions[-1] == "":
        positions.pop()
    headers = [name for name in positions if name]
    if not headers:
        raise CsvParseError("Header line has no column names", header_num)

    seen = set()
    for name in headers:
        if name in seen:
            raise CsvParseError(f"Duplicate column name '{name}'", header_num)
        seen.add(name)
    if ROW_ID_KEY in seen:
        raise CsvParseError(f"Column name '{ROW_ID_KEY}' is reserved", header_num)

    records = []
    ids = []
    for num, line in numbered[1:]:
        cells = split_csv_line(line, num)
        record = {}
        # extra cells past the header are dropped, missing ones stay absent
        for name, value in zip(positions, cells):
            if name:
                record[name] = value
        records.append(record)
        ids.append(new_row_id())

    if not records:
        return ParsedCsv(headers=tuple(headers), frame=empty_frame(headers))

    frame = pd.DataFrame(
        records,
        index=pd.Index(ids, dtype=object, name=ROW_ID_KEY),
        columns=headers,
        dtype=object,
    )
    return ParsedCsv(headers=tuple(headers), frame=frame)


def serialize_csv(frame: pd.DataFrame, headers) -> str:
    """Header row first, rows joined with ``\\n``, no trailing newline."""
    headers = list(headers)
    if not headers:
        return ""
    if len(frame) == 0:
        out = empty_frame(headers)
    else:
        out = frame.reindex(columns=headers).fillna("")
    text = out.to_csv(index=False, lineterminator="\n")
    return text[:-1] if text.endswith("\n") else text
