"""
Write generated rounds to an Excel workbook.
ROUNDS lists one row per matchup, SITTING summarizes sit-outs per participant,
and ISSUES is added when validation reports problems.
"""

import shutil
from pathlib import Path
from typing import Dict, List, Optional

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill

from .models import Round, ScrimmageConfig
from .validate import fairness_report

HEADER_FILL = PatternFill(start_color="FFCBD5E1", end_color="FFCBD5E1", fill_type="solid")
SIT_FILL = PatternFill(start_color="FFFCA5A5", end_color="FFFCA5A5", fill_type="solid")
BOLD = Font(bold=True)
CENTER = Alignment(horizontal="center", vertical="center")


def _label(pid: str, names: Dict[str, str]) -> str:
    return names.get(pid) or pid


def _fill_rounds_sheet(ws, rounds: List[Round], names: Dict[str, str]) -> None:
    headers = ["Round", "Match", "Team 1", "Team 2", "Sitting Out"]
    for c, h in enumerate(headers, 1):
        cell = ws.cell(1, c, h)
        cell.font = BOLD
        cell.fill = HEADER_FILL
        cell.alignment = CENTER

    row = 2
    for rnd in rounds:
        sitting = ", ".join(_label(p, names) for p in rnd.sitting_out)
        if not rnd.matchups:
            ws.cell(row, 1, rnd.round_number)
            ws.cell(row, 5, sitting)
            row += 1
            continue
        for m_idx, m in enumerate(rnd.matchups, 1):
            ws.cell(row, 1, rnd.round_number)
            ws.cell(row, 2, m_idx)
            ws.cell(row, 3, " & ".join(_label(p, names) for p in m.team1))
            ws.cell(row, 4, " & ".join(_label(p, names) for p in m.team2))
            if m_idx == 1:
                ws.cell(row, 5, sitting)
            row += 1

    ws.freeze_panes = "A2"
    for col, width in zip("ABCDE", (8, 8, 36, 36, 36)):
        ws.column_dimensions[col].width = width


def _fill_sitting_sheet(ws, rounds: List[Round], config: ScrimmageConfig,
                        names: Dict[str, str]) -> None:
    ws.cell(1, 1, "Participant").font = BOLD
    for r in rounds:
        cell = ws.cell(1, 1 + r.round_number, f"R{r.round_number}")
        cell.font = BOLD
        cell.alignment = CENTER
    total_col = 2 + len(rounds)
    ws.cell(1, total_col, "Sits").font = BOLD
    ws.cell(1, total_col + 1, "Longest Streak").font = BOLD

    report = fairness_report(rounds, config)
    for i, pid in enumerate(config.participants, 2):
        ws.cell(i, 1, _label(pid, names))
        for r in report[pid]["rounds"]:
            cell = ws.cell(i, 1 + r, "X")
            cell.fill = SIT_FILL
            cell.alignment = CENTER
        ws.cell(i, total_col, report[pid]["sits"])
        ws.cell(i, total_col + 1, report[pid]["longest_streak"])
    ws.column_dimensions["A"].width = 28


def build_workbook(rounds: List[Round], config: ScrimmageConfig,
                   names: Optional[Dict[str, str]] = None, wb=None):
    """Add ROUNDS and SITTING sheets to `wb` (a new workbook by default)."""
    names = names or {}
    if wb is None:
        wb = openpyxl.Workbook()
        del wb[wb.active.title]
    for title in ("ROUNDS", "SITTING"):
        if title in wb.sheetnames:
            del wb[title]
    _fill_rounds_sheet(wb.create_sheet("ROUNDS"), rounds, names)
    _fill_sitting_sheet(wb.create_sheet("SITTING"), rounds, config, names)
    return wb


def write_schedule(
    output_path: str,
    rounds: List[Round],
    config: ScrimmageConfig,
    template_path: Optional[str] = None,
    names: Optional[Dict[str, str]] = None,
) -> str:
    """
    Write the schedule to output_path. With a template (e.g. the roster
    workbook) the template is copied first and its sheets are kept.
    """
    output = Path(output_path)
    wb = None
    if template_path:
        template = Path(template_path)
        if not template.exists():
            raise FileNotFoundError(f"Template not found: {template_path}")
        if template.resolve() != output.resolve():
            shutil.copy2(template, output)
        wb = openpyxl.load_workbook(output)
    wb = build_workbook(rounds, config, names=names, wb=wb)
    wb.save(output)
    return str(output)


def add_issues_sheet(wb_path: str, issues: List[str]) -> None:
    """Add an ISSUES sheet listing validation or fairness messages."""
    wb = openpyxl.load_workbook(wb_path)
    if "ISSUES" in wb.sheetnames:
        del wb["ISSUES"]
    ws = wb.create_sheet("ISSUES")
    ws.cell(1, 1, "Issue").font = BOLD
    for i, msg in enumerate(issues, 2):
        ws.cell(i, 1, msg)
    ws.column_dimensions["A"].width = 80
    wb.save(wb_path)
