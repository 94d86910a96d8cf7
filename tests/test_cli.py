"""Tests for the focus-flow command line."""

import datetime
import json

import pytest

from focus_flow.cli import build_parser, main
from focus_flow.custom import custom_exercises
from focus_flow.exercises import enabled_extra_ids
from focus_flow.stats import load_history
from focus_flow.storage import JsonFileStore, load_advanced_settings


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.command is None
    assert not args.test
    args = build_parser().parse_args(["--test", "--data-dir", "/tmp/x", "summary"])
    assert args.test and args.data_dir == "/tmp/x" and args.command == "summary"


def test_schedule_show(store, capsys):
    assert main(["schedule"], store=store) == 0
    out = capsys.readouterr().out
    assert "10:00 - 17:00" in out
    assert "1h 24min entre sesiones" in out


def test_schedule_set_and_enable(store, capsys):
    assert main(["schedule", "--set", "09:00", "17:00", "8", "--enable"], store=store) == 0
    out = capsys.readouterr().out
    assert "[OK]" in out
    assert "09:00 - 17:00" in out
    assert load_advanced_settings(store)["workSchedule"]["sessionCount"] == 8


def test_schedule_rejects_short_window(store, capsys):
    assert main(["schedule", "--set", "10:00", "12:00", "6"], store=store) == 1
    assert "al menos 4 horas" in capsys.readouterr().out
    assert main(["schedule", "--set", "10h", "17:00", "6"], store=store) == 1


def test_schedule_quiet_hours(store):
    assert main(["schedule", "--quiet-hours", "09:00", "18:00", "8"], store=store) == 0
    assert load_advanced_settings(store)["notificationSchedule"]["enabled"] is True
    assert main(["schedule", "--no-quiet-hours"], store=store) == 0
    assert load_advanced_settings(store)["notificationSchedule"]["enabled"] is False


def test_next_and_summary(store, capsys):
    assert main(["next"], store=store) == 0
    assert "Next session" in capsys.readouterr().out
    assert main(["summary"], store=store) == 0
    out = capsys.readouterr().out
    assert "Sessions: 0" in out
    assert "Cuello" in out


def test_extras(store, capsys):
    assert main(["extras", "--enable", "101,102"], store=store) == 0
    assert enabled_extra_ids(store) == [101, 102]
    assert main(["extras", "--disable", "101"], store=store) == 0
    assert enabled_extra_ids(store) == [102]
    assert main(["extras", "--zone", "de_pie"], store=store) == 0
    assert enabled_extra_ids(store) == [102, 131, 132, 133, 134, 135, 136]
    assert "[x] 131" in capsys.readouterr().out
    with pytest.raises(SystemExit):
        main(["extras", "--enable", "a,b"], store=store)


def test_custom_add_and_delete(store, capsys):
    argv = ["custom", "--add", "--name", "Giro de muñecas", "--zone", "hombros",
            "--posture", "sitting", "--duration", "30",
            "--movement", "Girar las muñecas en círculos", "--objective", "Movilidad de antebrazos"]
    assert main(argv, store=store) == 0
    [record] = custom_exercises(store)
    assert main(["custom", "--delete", record["id"]], store=store) == 0
    assert custom_exercises(store) == []
    assert main(["custom", "--delete", record["id"]], store=store) == 1


def test_custom_add_invalid(store, capsys):
    assert main(["custom", "--add", "--name", "ab"], store=store) == 1
    assert "El nombre debe tener al menos 3 caracteres" in capsys.readouterr().out
    assert custom_exercises(store) == []


def test_export_then_import(tmp_path, capsys):
    source = JsonFileStore(str(tmp_path / "a"))
    source.set("focus-flow-stats", [{"date": "2024-01-02", "sessions": [
        {"id": 1, "name": "E1", "zone": "cuello", "durationSeconds": 40,
         "completedAt": "2024-01-02T10:00:00"}]}])
    assert main(["--data-dir", str(tmp_path / "a"), "export", "json", "--out", str(tmp_path)]) == 0
    name = f"focus-flow-data-{datetime.date.today().isoformat()}.json"
    exported = tmp_path / name
    assert json.loads(exported.read_text(encoding="utf-8"))["exerciseHistory"]

    assert main(["--data-dir", str(tmp_path / "b"), "import", str(exported)]) == 0
    assert "Exercises: 1" in capsys.readouterr().out
    assert len(load_history(JsonFileStore(str(tmp_path / "b")))) == 1


def test_import_bad_file(store, tmp_path, capsys):
    bad = tmp_path / "bad.json"
    bad.write_text("nope", encoding="utf-8")
    assert main(["import", str(bad)], store=store) == 1
    assert "[!]" in capsys.readouterr().out


def test_export_csv_to_missing_dir(store, tmp_path):
    assert main(["export", "csv", "--out", str(tmp_path / "nope")], store=store) == 1


def test_icon_command(store, tmp_path):
    assert main(["icon", "--out", str(tmp_path)], store=store) == 0
    assert (tmp_path / "icon.png").exists()


def test_export_csv_with_bad_timestamp(store, tmp_path):
    store.set("focus-flow-stats", [{"date": "2024-01-02", "sessions": [
        {"id": 1, "name": "E1", "zone": "cuello", "durationSeconds": 40,
         "completedAt": "yesterday"}]}])
    assert main(["export", "csv", "--out", str(tmp_path)], store=store) == 0
