import json
import os

HOME = os.path.expanduser("~")
XDG_CONFIG_HOME = os.environ.get("XDG_CONFIG_HOME")
CONFIG_HOME = XDG_CONFIG_HOME if XDG_CONFIG_HOME else os.path.join(HOME, ".config")
CONFIG_DIR = os.path.join(CONFIG_HOME, "annotab")
STORE_DIR = os.path.join(CONFIG_DIR, "store")
CONFIG_JSON = os.path.join(CONFIG_DIR, "config.json")

# default settings
UNDO_MAX_DEPTH_DEFAULT = 50
AUTOSAVE_DELAY_DEFAULT = 0.5  # seconds, document partition debounce
WIDTH_FLUSH_DELAY_DEFAULT = 0.3  # seconds, grace after a resize gesture
DEFAULT_COLUMN_WIDTH_DEFAULT = 150
MIN_COLUMN_WIDTH_DEFAULT = 80
CONSTRAINED_COLUMNS_DEFAULT = [
    "IllocutionaryForce",
    "Modality",
    "Stance",
    "Evidentiality",
    "Face",
    "Veridicality",
    "EntailmentPattern",
    "InferenceType",
    "IsCancelled",
    "PresuppositionType",
    "ImplicatureType",
    "InvitedInference",
    "IsScalar",
    "ScaleType",
    "IsExhausted",
]
ENUM_THRESHOLD_DEFAULT = None


def ensure_config_dirs():
    os.makedirs(CONFIG_DIR, exist_ok=True)
    os.makedirs(STORE_DIR, exist_ok=True)


def default_config() -> dict:
    return {
        "UNDO_MAX_DEPTH": UNDO_MAX_DEPTH_DEFAULT,
        "AUTOSAVE_DELAY": AUTOSAVE_DELAY_DEFAULT,
        "WIDTH_FLUSH_DELAY": WIDTH_FLUSH_DELAY_DEFAULT,
        "DEFAULT_COLUMN_WIDTH": DEFAULT_COLUMN_WIDTH_DEFAULT,
        "MIN_COLUMN_WIDTH": MIN_COLUMN_WIDTH_DEFAULT,
        "CONSTRAINED_COLUMNS": list(CONSTRAINED_COLUMNS_DEFAULT),
        "ENUM_THRESHOLD": ENUM_THRESHOLD_DEFAULT,
    }


def _positive_int(value):
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value > 0 else None


def _non_negative_number(value):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if value >= 0 else None


def load_config():
    cfg = default_config()

    if not os.path.exists(CONFIG_JSON):
        return cfg

    try:
        with open(CONFIG_JSON, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return cfg

    if not isinstance(data, dict):
        return cfg

    history = data.get("history")
    if isinstance(history, dict):
        depth = _positive_int(history.get("max_depth"))
        if depth is not None:
            cfg["UNDO_MAX_DEPTH"] = depth

    autosave = data.get("autosave")
    if isinstance(autosave, dict):
        delay = _non_negative_number(autosave.get("document_delay_seconds"))
        if delay is not None:
            cfg["AUTOSAVE_DELAY"] = delay
        delay = _non_negative_number(autosave.get("width_delay_seconds"))
        if delay is not None:
            cfg["WIDTH_FLUSH_DELAY"] = delay

    columns = data.get("columns")
    if isinstance(columns, dict):
        min_width = _positive_int(columns.get("min_width"))
        if min_width is not None:
            cfg["MIN_COLUMN_WIDTH"] = min_width
        width = _positive_int(columns.get("default_width"))
        if width is not None:
            cfg["DEFAULT_COLUMN_WIDTH"] = width
        constrained = columns.get("constrained")
        if isinstance(constrained, list) and all(
            isinstance(item, str) for item in constrained
        ):
            cfg["CONSTRAINED_COLUMNS"] = [c.strip() for c in constrained if c.strip()]
        threshold = _positive_int(columns.get("enum_threshold"))
        if threshold is not None:
            cfg["ENUM_THRESHOLD"] = threshold

    # default width may never sit below the floor
    cfg["DEFAULT_COLUMN_WIDTH"] = max(
        cfg["DEFAULT_COLUMN_WIDTH"], cfg["MIN_COLUMN_WIDTH"]
    )
    return cfg
