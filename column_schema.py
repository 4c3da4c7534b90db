"""
Column schema: constraint classification, header merging, allowed-value
growth and column width bookkeeping.

All functions here are pure. Schemas are plain ``dict[str, ColumnSchema]``
mappings that callers treat as immutable once installed; every helper that
changes something returns a new mapping.
"""

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

import pandas as pd

from cell_coercion import coerce_cell_value, normalize_options


@dataclass(frozen=True)
class ColumnSchema:
    is_constrained: bool = False
    allowed_values: frozenset = frozenset()

    def __post_init__(self):
        values = frozenset(self.allowed_values) if self.is_constrained else frozenset()
        object.__setattr__(self, "allowed_values", values)

    def sorted_options(self) -> list[str]:
        return sorted(self.allowed_values)

    def accepts_new(self, value: str) -> bool:
        return self.is_constrained and value != "" and value not in self.allowed_values

    def with_value(self, value: str) -> "ColumnSchema":
        if not self.accepts_new(value):
            return self
        return ColumnSchema(True, self.allowed_values | {value})


PLAIN = ColumnSchema()


def constrained(options: Iterable[str] = ()) -> ColumnSchema:
    return ColumnSchema(True, frozenset(normalize_options(options)))


# ---------- headers ----------
def merge_headers(incoming: Iterable[str], persisted: Iterable[str]) -> tuple:
    """Incoming headers first in their order, then persisted-only ones."""
    merged: list[str] = []
    seen = set()
    for name in list(incoming) + list(persisted or []):
        if name in seen:
            continue
        seen.add(name)
        merged.append(name)
    return tuple(merged)


# ---------- classification ----------
def observed_values(frame: pd.DataFrame, column: str) -> set[str]:
    if column not in frame.columns or len(frame) == 0:
        return set()
    values = set()
    for raw in frame[column].tolist():
        text = coerce_cell_value(raw)
        if text:
            values.add(text)
    return values


def classify_columns(
    headers: Iterable[str],
    frame: pd.DataFrame,
    persisted: Optional[Mapping[str, ColumnSchema]] = None,
    designated: Iterable[str] = (),
    enum_threshold: Optional[int] = None,
) -> dict:
    """
    Build the schema for ``headers`` from the loaded rows.

    A column is constrained when it is designated or persisted as
    constrained. Its allowed values are the persisted ones plus every
    non-blank value seen in ``frame``. With ``enum_threshold`` set, a column
    that is neither designated nor persisted is also constrained when it has
    between 1 and ``enum_threshold`` distinct values.
    """
    persisted = persisted or {}
    designated = set(designated)
    schema = {}
    for name in headers:
        prior = persisted.get(name)
        seen = observed_values(frame, name)
        is_constrained = name in designated or bool(prior and prior.is_constrained)
        if not is_constrained and prior is None and enum_threshold:
            is_constrained = 0 < len(seen) <= enum_threshold
        if not is_constrained:
            schema[name] = PLAIN
            continue
        base = prior.allowed_values if prior is not None else frozenset()
        schema[name] = ColumnSchema(True, base | seen)
    return schema


# ---------- value-driven growth ----------
def grow_allowed_values(schema: Mapping[str, ColumnSchema], values: Mapping[str, str]) -> Mapping[str, ColumnSchema]:
    """
    Add each new non-blank value of a constrained column to its allowed set.

    Returns ``schema`` itself when nothing grows, so callers can tell a
    no-op apart by identity.
    """
    grown = None
    for column, value in values.items():
        entry = schema.get(column)
        if entry is None or not entry.accepts_new(value):
            continue
        if grown is None:
            grown = dict(schema)
        grown[column] = grown[column].with_value(value)
    return schema if grown is None else grown


def replace_options(schema: Mapping[str, ColumnSchema], column: str, options: Iterable[str]) -> dict:
    cleaned = normalize_options(options)
    if not cleaned:
        raise ValueError("Options list cannot be empty")
    replaced = dict(schema)
    replaced[column] = ColumnSchema(True, frozenset(cleaned))
    return replaced


# ---------- widths ----------
def clamp_width(width, minimum: int) -> int:
    return max(int(minimum), int(width))


def resolve_widths(headers: Iterable[str], stored: Optional[Mapping[str, int]], default: int, minimum: int) -> dict:
    stored = stored or {}
    widths = {}
    for name in headers:
        value = stored.get(name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            value = default
        widths[name] = clamp_width(value, minimum)
    return widths


def widths_for_headers(headers: Iterable[str], widths: Mapping[str, int], default: int) -> dict:
    """Widths to persist: removed columns are dropped, new ones get the default."""
    return {name: widths.get(name, default) for name in headers}
