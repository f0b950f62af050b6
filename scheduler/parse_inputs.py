"""
Load a ScrimmageConfig from a JSON file or from a roster workbook
(PARTICIPANTS + LINKED_GROUPS + SETTINGS sheets, see workbook_sheets.py).
"""

import json
from typing import List, Optional

import openpyxl

from .models import ScrimmageConfig


def config_from_dict(d: dict, random_seed: Optional[int] = None) -> ScrimmageConfig:
    """Accepts snake_case or the camelCase keys used by the web API."""
    participants = d.get("participants", [])
    # [{userId, userName}] as stored by the web app, or plain ids
    participants = [str(p["userId"]) if isinstance(p, dict) else str(p) for p in participants]
    groups = d.get("linked_groups", d.get("linkedGroups")) or []
    seed = d.get("random_seed", d.get("randomSeed"))
    return ScrimmageConfig(
        participants=participants,
        total_rounds=int(d.get("total_rounds", d.get("totalRounds", d.get("rounds", 0)))),
        players_per_team=int(d.get("players_per_team", d.get("playersPerTeam", 0))),
        linked_groups=[[str(p) for p in g] for g in groups],
        random_seed=random_seed if random_seed is not None else seed,
    )


def _read_participants(wb) -> List[str]:
    if "PARTICIPANTS" not in wb.sheetnames:
        raise ValueError("Workbook has no PARTICIPANTS sheet (run setup first)")
    ws = wb["PARTICIPANTS"]
    out = []
    for row in range(2, ws.max_row + 1):
        pid = ws.cell(row, 1).value
        if pid is None or not str(pid).strip():
            continue
        out.append(str(pid).strip())
    return out


def _read_linked_groups(wb) -> List[List[str]]:
    if "LINKED_GROUPS" not in wb.sheetnames:
        return []
    ws = wb["LINKED_GROUPS"]
    groups = []
    for row in range(2, ws.max_row + 1):
        members = ws.cell(row, 2).value
        if not members:
            continue
        group = [m.strip() for m in str(members).split(",") if m.strip()]
        if group:
            groups.append(group)
    return groups


def _read_settings(wb) -> dict:
    if "SETTINGS" not in wb.sheetnames:
        return {}
    ws = wb["SETTINGS"]
    rows = {}
    for row in range(2, ws.max_row + 1):
        p = ws.cell(row, 1).value
        v = ws.cell(row, 2).value
        if p and v not in (None, ""):
            rows[str(p).strip()] = v
    return rows


def parse_workbook(wb_path: str, random_seed: Optional[int] = None) -> ScrimmageConfig:
    wb = openpyxl.load_workbook(wb_path, data_only=True)
    settings = _read_settings(wb)
    seed = random_seed
    if seed is None and "random_seed" in settings:
        seed = int(settings["random_seed"])
    return ScrimmageConfig(
        participants=_read_participants(wb),
        total_rounds=int(settings.get("total_rounds", 0)),
        players_per_team=int(settings.get("players_per_team", 0)),
        linked_groups=_read_linked_groups(wb),
        random_seed=seed,
    )


def load_config(path: str, random_seed: Optional[int] = None) -> ScrimmageConfig:
    if path.endswith(".json"):
        with open(path, "r", encoding="utf-8") as f:
            return config_from_dict(json.load(f), random_seed=random_seed)
    elif path.endswith(".xlsx"):
        return parse_workbook(path, random_seed=random_seed)
    else:
        raise ValueError("Provide a .json roster or an .xlsx roster workbook")
