import json
import tempfile
from pathlib import Path

import config_paths


def _with_config(cfg_dir, fn):
    orig_dir = config_paths.CONFIG_DIR
    orig_json = config_paths.CONFIG_JSON
    try:
        config_paths.CONFIG_DIR = str(cfg_dir)
        config_paths.CONFIG_JSON = str(cfg_dir / "config.json")
        return fn()
    finally:
        config_paths.CONFIG_DIR = orig_dir
        config_paths.CONFIG_JSON = orig_json


def test_load_config_defaults_without_json():
    with tempfile.TemporaryDirectory() as tmp:
        cfg_dir = Path(tmp) / "annotab"
        cfg_dir.mkdir(parents=True, exist_ok=True)
        cfg = _with_config(cfg_dir, config_paths.load_config)
        assert cfg == config_paths.default_config()
        assert cfg["UNDO_MAX_DEPTH"] == 50
        assert "Modality" in cfg["CONSTRAINED_COLUMNS"]
        assert cfg["ENUM_THRESHOLD"] is None


def test_load_config_reads_json_overrides():
    with tempfile.TemporaryDirectory() as tmp:
        cfg_dir = Path(tmp) / "annotab"
        cfg_dir.mkdir(parents=True, exist_ok=True)
        (cfg_dir / "config.json").write_text(
            json.dumps(
                {
                    "history": {"max_depth": 10},
                    "autosave": {
                        "document_delay_seconds": 1.5,
                        "width_delay_seconds": 0,
                    },
                    "columns": {
                        "min_width": 60,
                        "default_width": 120,
                        "constrained": ["Status", " ", "Mood "],
                        "enum_threshold": 4,
                    },
                }
            )
        )
        cfg = _with_config(cfg_dir, config_paths.load_config)
        assert cfg["UNDO_MAX_DEPTH"] == 10
        assert cfg["AUTOSAVE_DELAY"] == 1.5
        assert cfg["WIDTH_FLUSH_DELAY"] == 0
        assert cfg["MIN_COLUMN_WIDTH"] == 60
        assert cfg["DEFAULT_COLUMN_WIDTH"] == 120
        assert cfg["CONSTRAINED_COLUMNS"] == ["Status", "Mood"]
        assert cfg["ENUM_THRESHOLD"] == 4


def test_load_config_ignores_invalid_values():
    with tempfile.TemporaryDirectory() as tmp:
        cfg_dir = Path(tmp) / "annotab"
        cfg_dir.mkdir(parents=True, exist_ok=True)
        (cfg_dir / "config.json").write_text(
            json.dumps(
                {
                    "history": {"max_depth": 0},
                    "autosave": {"document_delay_seconds": "soon"},
                    "columns": {
                        "min_width": 200,
                        "default_width": True,
                        "constrained": "Status",
                    },
                }
            )
        )
        cfg = _with_config(cfg_dir, config_paths.load_config)
        defaults = config_paths.default_config()
        assert cfg["UNDO_MAX_DEPTH"] == defaults["UNDO_MAX_DEPTH"]
        assert cfg["AUTOSAVE_DELAY"] == defaults["AUTOSAVE_DELAY"]
        assert cfg["CONSTRAINED_COLUMNS"] == defaults["CONSTRAINED_COLUMNS"]
        assert cfg["MIN_COLUMN_WIDTH"] == 200
        # default width is raised to the minimum
        assert cfg["DEFAULT_COLUMN_WIDTH"] == 200


def test_load_config_survives_broken_json():
    with tempfile.TemporaryDirectory() as tmp:
        cfg_dir = Path(tmp) / "annotab"
        cfg_dir.mkdir(parents=True, exist_ok=True)
        (cfg_dir / "config.json").write_text("{not json")
        cfg = _with_config(cfg_dir, config_paths.load_config)
        assert cfg == config_paths.default_config()
