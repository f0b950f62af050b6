"""
Roster data-entry sheets: PARTICIPANTS, LINKED_GROUPS, SETTINGS.
setup_all_sheets() creates the workbook if needed and refreshes every sheet,
keeping whatever roster data is already there.
"""

from pathlib import Path
from typing import Dict, List, Optional

import openpyxl
from openpyxl.styles import Font

from .models import ScrimmageConfig

PARTICIPANT_HEADERS = ["ParticipantId", "DisplayName"]
LINKED_GROUP_HEADERS = ["GroupNo", "Members"]
SETTINGS_HEADERS = ["Parameter", "Value", "Notes"]

DEFAULT_SETTINGS = [
    ("total_rounds", 6, "Rounds to generate (>= 1)"),
    ("players_per_team", 2, "Players on each side of a match (>= 1)"),
    ("random_seed", None, "Optional; same seed + roster = same schedule"),
]

BOLD = Font(bold=True)


def _header_row(ws, headers: List[str]) -> None:
    for c, h in enumerate(headers, 1):
        cell = ws.cell(1, c, h)
        cell.font = BOLD


def _existing_rows(wb, sheet: str, width: int) -> List[list]:
    if sheet not in wb.sheetnames:
        return []
    ws = wb[sheet]
    rows = []
    for row in range(2, ws.max_row + 1):
        values = [ws.cell(row, c).value for c in range(1, width + 1)]
        if any(v not in (None, "") for v in values):
            rows.append(values)
    return rows


def ensure_participants_sheet(wb, participants: Optional[List[str]] = None,
                              names: Optional[Dict[str, str]] = None):
    """Create/replace PARTICIPANTS; rows come from `participants` or the old sheet."""
    names = names or {}
    if participants is not None:
        rows = [[p, names.get(p, "")] for p in participants]
    else:
        rows = _existing_rows(wb, "PARTICIPANTS", 2)
    if "PARTICIPANTS" in wb.sheetnames:
        del wb["PARTICIPANTS"]
    ws = wb.create_sheet("PARTICIPANTS")
    _header_row(ws, PARTICIPANT_HEADERS)
    for i, (pid, name) in enumerate(rows, 2):
        ws.cell(i, 1, pid)
        ws.cell(i, 2, name or "")
    ws.column_dimensions["A"].width = 24
    ws.column_dimensions["B"].width = 28


def ensure_linked_groups_sheet(wb, groups: Optional[List[List[str]]] = None):
    """Create/replace LINKED_GROUPS. Members are comma-separated participant ids."""
    if groups is not None:
        rows = [[i, ", ".join(g)] for i, g in enumerate(groups, 1)]
    else:
        rows = _existing_rows(wb, "LINKED_GROUPS", 2)
    if "LINKED_GROUPS" in wb.sheetnames:
        del wb["LINKED_GROUPS"]
    ws = wb.create_sheet("LINKED_GROUPS")
    _header_row(ws, LINKED_GROUP_HEADERS)
    for i, (no, members) in enumerate(rows, 2):
        ws.cell(i, 1, no)
        ws.cell(i, 2, members)
    ws.column_dimensions["B"].width = 48


def ensure_settings_sheet(wb, config: Optional[ScrimmageConfig] = None):
    """Create/replace SETTINGS; values from `config`, the old sheet, then defaults."""
    values = {k: v for k, v, _ in DEFAULT_SETTINGS}
    for param, value, _notes in _existing_rows(wb, "SETTINGS", 3):
        if param:
            values[str(param).strip()] = value
    if config is not None:
        values.update(total_rounds=config.total_rounds,
                      players_per_team=config.players_per_team,
                      random_seed=config.random_seed)

    if "SETTINGS" in wb.sheetnames:
        del wb["SETTINGS"]
    ws = wb.create_sheet("SETTINGS")
    _header_row(ws, SETTINGS_HEADERS)
    for i, (param, _default, notes) in enumerate(DEFAULT_SETTINGS, 2):
        ws.cell(i, 1, param)
        ws.cell(i, 2, values.get(param))
        ws.cell(i, 3, notes)
    ws.column_dimensions["A"].width = 20
    ws.column_dimensions["C"].width = 44


def setup_all_sheets(wb_path: str, config: Optional[ScrimmageConfig] = None) -> str:
    """Add/refresh all roster sheets; creates the workbook when it does not exist."""
    path = Path(wb_path)
    if path.exists():
        wb = openpyxl.load_workbook(path)
    else:
        wb = openpyxl.Workbook()
        del wb[wb.active.title]

    ensure_participants_sheet(wb, config.participants if config else None)
    ensure_linked_groups_sheet(wb, config.linked_groups if config else None)
    ensure_settings_sheet(wb, config)
    wb.save(path)
    return str(path)
