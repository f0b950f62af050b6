import json
import sys

import openpyxl
import pytest

import run_scheduler


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["run_scheduler.py", *argv])
    run_scheduler.main()


@pytest.fixture
def roster(tmp_path):
    path = tmp_path / "roster.json"
    path.write_text(json.dumps({
        "participants": [f"p{i}" for i in range(1, 10)],
        "total_rounds": 5,
        "players_per_team": 2,
        "linked_groups": [["p1", "p2"]],
    }), encoding="utf-8")
    return path


def test_generate_writes_workbook_and_json(monkeypatch, tmp_path, roster, capsys):
    out = tmp_path / "schedule.xlsx"
    json_out = tmp_path / "rounds.json"
    _run(monkeypatch, "generate", "--input", str(roster), "--out", str(out),
         "--json-out", str(json_out), "--seed", "4")

    printed = capsys.readouterr().out
    assert "Validation: OK" in printed
    rounds = json.loads(json_out.read_text(encoding="utf-8"))
    assert [r["roundNumber"] for r in rounds] == [1, 2, 3, 4, 5]
    assert all(len(r["sittingOut"]) == 1 for r in rounds)
    assert "ROUNDS" in openpyxl.load_workbook(out).sheetnames


def test_check_reports_problems(monkeypatch, tmp_path, capsys):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"participants": ["a", "b"], "total_rounds": 0,
                                "players_per_team": 1}), encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        _run(monkeypatch, "check", "--input", str(path))
    assert exc.value.code == 1
    assert "total_rounds must be at least 1" in capsys.readouterr().out


def test_setup_then_check(monkeypatch, tmp_path, capsys):
    wb = tmp_path / "roster.xlsx"
    _run(monkeypatch, "setup", "--workbook", str(wb))
    assert wb.exists()
    # a fresh roster has no participants yet
    with pytest.raises(SystemExit):
        _run(monkeypatch, "check", "--input", str(wb))
    assert "participants is empty" in capsys.readouterr().out
