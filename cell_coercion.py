import pandas as pd


def coerce_cell_value(value) -> str:
    """Cells are always stored as trimmed strings; missing values become ""."""
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        # list-likes are not cell values, fall through to str()
        pass
    return str(value).strip()


def normalize_options(options) -> list[str]:
    """Trim, drop blanks and duplicates, keep first-seen order. A single string is one option."""
    if isinstance(options, str):
        options = [options]
    seen = set()
    cleaned: list[str] = []
    for raw in options or []:
        text = coerce_cell_value(raw)
        if not text or text in seen:
            continue
        seen.add(text)
        cleaned.append(text)
    return cleaned
