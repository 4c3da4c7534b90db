import json

import pytest

from main import _split_options, main


@pytest.fixture
def store(tmp_path):
    return str(tmp_path / "store")


def test_version_flag(capsys):
    assert main(["-v"]) == 0
    assert capsys.readouterr().out.strip()


def test_no_args_prints_usage(capsys):
    assert main([]) == 0
    assert "Usage:" in capsys.readouterr().out


@pytest.mark.parametrize(
    "args, expected",
    [
        (["show"], (None, False, ["show"])),
        (["--store", "/tmp/x", "show"], ("/tmp/x", False, ["show"])),
        (["columns", "--verbose"], (None, True, ["columns"])),
    ],
)
def test_split_options(args, expected):
    assert _split_options(args) == expected


def test_store_without_directory_is_usage_error():
    assert main(["--store"]) == 2


def test_unknown_command_is_usage_error(store):
    assert main(["--store", store, "frobnicate"]) == 2


def test_show_prints_default_sample(store, capsys):
    assert main(["--store", store, "show"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("ID,Book,Chapter")


def test_import_then_export(store, tmp_path, capsys):
    source = tmp_path / "in.csv"
    source.write_text("Status,Notes\nopen,first\n", encoding="utf-8")

    assert main(["--store", store, "import", str(source)]) == 0
    saved = json.loads((tmp_path / "store" / "current_csv_data.json").read_text(encoding="utf-8"))
    assert saved["rows"][0]["Status"] == "open"

    target = tmp_path / "out.csv"
    assert main(["--store", store, "export", str(target)]) == 0
    text = target.read_text(encoding="utf-8")
    assert text.splitlines()[1].startswith("open,first")


def test_import_rejects_non_csv(store, tmp_path):
    source = tmp_path / "in.xlsx"
    source.write_text("x", encoding="utf-8")
    assert main(["--store", store, "import", str(source)]) == 2


def test_import_reports_parse_error(store, tmp_path):
    source = tmp_path / "bad.csv"
    source.write_text("A,A\n1,2\n", encoding="utf-8")
    assert main(["--store", store, "import", str(source)]) == 1


def test_add_and_remove_column(store, capsys):
    assert main(["--store", store, "add-column", "Mood", "--enum", "calm", "tense"]) == 0
    capsys.readouterr()
    assert main(["--store", store, "columns"]) == 0
    out = capsys.readouterr().out
    assert "Mood [150] (enum): calm, tense" in out

    assert main(["--store", store, "add-column", "Mood"]) == 1
    assert main(["--store", store, "remove-column", "Mood"]) == 0
    capsys.readouterr()
    main(["--store", store, "columns"])
    assert "Mood" not in capsys.readouterr().out
