import json

import openpyxl
import pytest

from scheduler.generator import generate_schedule
from scheduler.parse_inputs import config_from_dict, load_config, parse_workbook
from scheduler.workbook_sheets import setup_all_sheets
from scheduler.write_schedule import add_issues_sheet, write_schedule


def test_setup_creates_roster_sheets_with_defaults(tmp_path):
    path = tmp_path / "roster.xlsx"
    setup_all_sheets(str(path))
    wb = openpyxl.load_workbook(path)
    assert wb.sheetnames == ["PARTICIPANTS", "LINKED_GROUPS", "SETTINGS"]
    assert wb["SETTINGS"].cell(2, 1).value == "total_rounds"
    assert wb["SETTINGS"].cell(2, 2).value == 6


def test_roster_round_trip(tmp_path, doubles_config):
    path = tmp_path / "roster.xlsx"
    setup_all_sheets(str(path), doubles_config)
    parsed = parse_workbook(str(path))
    assert parsed == doubles_config


def test_setup_keeps_existing_roster(tmp_path, doubles_config):
    path = tmp_path / "roster.xlsx"
    setup_all_sheets(str(path), doubles_config)
    setup_all_sheets(str(path))
    parsed = parse_workbook(str(path), random_seed=3)
    assert parsed.participants == doubles_config.participants
    assert parsed.linked_groups == [["p01", "p02"]]
    assert parsed.random_seed == 3


def test_missing_participants_sheet(tmp_path):
    path = tmp_path / "empty.xlsx"
    openpyxl.Workbook().save(path)
    with pytest.raises(ValueError):
        parse_workbook(str(path))


def test_json_roster_accepts_web_payload(tmp_path):
    path = tmp_path / "roster.json"
    path.write_text(json.dumps({
        "participants": [{"userId": "u1", "userName": "Ann"}, {"userId": "u2"}, "u3", "u4"],
        "rounds": 3,
        "playersPerTeam": 1,
        "linkedGroups": [["u1"]],
        "randomSeed": 8,
    }), encoding="utf-8")
    config = load_config(str(path))
    assert config.participants == ["u1", "u2", "u3", "u4"]
    assert config.total_rounds == 3
    assert config.players_per_team == 1
    assert config.linked_groups == [["u1"]]
    assert config.random_seed == 8


def test_seed_argument_wins_over_file():
    config = config_from_dict({"participants": ["a", "b"], "total_rounds": 1,
                               "players_per_team": 1, "random_seed": 1}, random_seed=2)
    assert config.random_seed == 2


def test_unsupported_roster_extension():
    with pytest.raises(ValueError):
        load_config("roster.csv")


def test_write_schedule_sheets(tmp_path, doubles_config):
    rounds = generate_schedule(doubles_config)
    out = tmp_path / "schedule.xlsx"
    write_schedule(str(out), rounds, doubles_config, names={"p01": "Pat"})

    wb = openpyxl.load_workbook(out)
    assert wb.sheetnames == ["ROUNDS", "SITTING"]
    ws = wb["ROUNDS"]
    assert ws.cell(1, 3).value == "Team 1"
    # two matches per round
    assert ws.max_row == 1 + 2 * len(rounds)

    sitting = wb["SITTING"]
    assert sitting.cell(1, 2).value == "R1"
    labels = [sitting.cell(r, 1).value for r in range(2, 12)]
    assert labels[0] == "Pat"
    total_sits = sum(sitting.cell(r, 2 + len(rounds)).value for r in range(2, 12))
    assert total_sits == sum(len(r.sitting_out) for r in rounds)


def test_write_schedule_keeps_template_sheets(tmp_path, doubles_config):
    roster = tmp_path / "roster.xlsx"
    setup_all_sheets(str(roster), doubles_config)
    out = tmp_path / "schedule.xlsx"
    write_schedule(str(out), generate_schedule(doubles_config), doubles_config,
                   template_path=str(roster))
    names = openpyxl.load_workbook(out).sheetnames
    assert names[:3] == ["PARTICIPANTS", "LINKED_GROUPS", "SETTINGS"]
    assert "ROUNDS" in names


def test_issues_sheet(tmp_path, doubles_config):
    out = tmp_path / "schedule.xlsx"
    write_schedule(str(out), generate_schedule(doubles_config), doubles_config)
    add_issues_sheet(str(out), ["Round 2: sat out again: p03"])
    ws = openpyxl.load_workbook(out)["ISSUES"]
    assert ws.cell(2, 1).value == "Round 2: sat out again: p03"
