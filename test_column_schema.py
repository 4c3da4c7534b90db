import pandas as pd
import pytest

from column_schema import (
    PLAIN,
    ColumnSchema,
    classify_columns,
    clamp_width,
    constrained,
    grow_allowed_values,
    merge_headers,
    replace_options,
    resolve_widths,
    widths_for_headers,
)


def _frame(rows, headers):
    return pd.DataFrame(rows, index=[f"r{i}" for i in range(len(rows))], columns=headers, dtype=object)


def test_unconstrained_entry_never_keeps_values():
    entry = ColumnSchema(False, frozenset({"a"}))
    assert entry.allowed_values == frozenset()
    assert entry == PLAIN


def test_merge_headers_appends_persisted_only_names():
    assert merge_headers(["B", "A"], ["A", "C", "B", "D"]) == ("B", "A", "C", "D")


def test_merge_headers_is_idempotent():
    headers = ("A", "B", "C")
    assert merge_headers(headers, headers) == headers


def test_designated_column_collects_observed_values():
    frame = _frame([{"Status": "open", "Notes": "x"}, {"Status": " closed ", "Notes": ""}, {"Status": "", "Notes": "y"}], ["Status", "Notes"])
    schema = classify_columns(["Status", "Notes"], frame, designated=["Status"])
    assert schema["Status"] == ColumnSchema(True, frozenset({"open", "closed"}))
    assert schema["Notes"] == PLAIN


def test_persisted_constraint_is_kept_and_unioned():
    frame = _frame([{"Mood": "happy"}], ["Mood"])
    persisted = {"Mood": ColumnSchema(True, frozenset({"sad"}))}
    schema = classify_columns(["Mood"], frame, persisted=persisted)
    assert schema["Mood"].allowed_values == {"sad", "happy"}


def test_persisted_plain_column_stays_plain():
    frame = _frame([{"Mood": "happy"}], ["Mood"])
    schema = classify_columns(["Mood"], frame, persisted={"Mood": PLAIN}, enum_threshold=4)
    assert schema["Mood"] == PLAIN


def test_designated_wins_over_persisted_plain():
    frame = _frame([{"Face": "N/A"}], ["Face"])
    schema = classify_columns(["Face"], frame, persisted={"Face": PLAIN}, designated=["Face"])
    assert schema["Face"].is_constrained


def test_enum_threshold_infers_small_value_sets():
    frame = _frame([{"A": "x", "B": str(i)} for i in range(6)], ["A", "B"])
    schema = classify_columns(["A", "B"], frame, enum_threshold=4)
    assert schema["A"] == ColumnSchema(True, frozenset({"x"}))
    assert schema["B"] == PLAIN


def test_classification_of_persisted_schema_is_idempotent():
    frame = _frame([{"Status": "open"}], ["Status"])
    first = classify_columns(["Status"], frame, designated=["Status"])
    second = classify_columns(["Status"], frame, persisted=first, designated=["Status"])
    assert first == second


def test_grow_adds_new_value_only_to_constrained_columns():
    schema = {"Status": constrained(["open", "closed"]), "Notes": PLAIN}
    grown = grow_allowed_values(schema, {"Status": "pending", "Notes": "anything"})
    assert grown["Status"].allowed_values == {"open", "closed", "pending"}
    assert grown["Notes"] == PLAIN
    assert schema["Status"].allowed_values == {"open", "closed"}


@pytest.mark.parametrize("value", ["", "open"])
def test_grow_is_noop_for_blank_or_known_values(value):
    schema = {"Status": constrained(["open", "closed"])}
    assert grow_allowed_values(schema, {"Status": value}) is schema


def test_replace_options_trims_and_rejects_empty():
    schema = {"Status": constrained(["open"])}
    replaced = replace_options(schema, "Status", [" done ", "", "done", "todo"])
    assert replaced["Status"].allowed_values == {"done", "todo"}
    with pytest.raises(ValueError):
        replace_options(schema, "Status", ["  ", ""])


def test_widths_default_clamp_and_gc():
    widths = resolve_widths(["A", "B", "C"], {"A": 220, "B": 10, "Gone": 300}, default=150, minimum=80)
    assert widths == {"A": 220, "B": 80, "C": 150}
    assert clamp_width(5, 80) == 80
    assert widths_for_headers(["A", "D"], widths, default=150) == {"A": 220, "D": 150}
