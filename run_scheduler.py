#!/usr/bin/env python3
"""
Scrimmage Scheduler CLI.

A roster is either a JSON file:
  {"participants": [...], "total_rounds": 6, "players_per_team": 2,
   "linked_groups": [["ann", "bo"]], "random_seed": 7}
or a workbook with PARTICIPANTS, LINKED_GROUPS and SETTINGS sheets.

Usage:
  # Step 1: Create/refresh the roster sheets in a workbook
  python run_scheduler.py setup --workbook roster.xlsx

  # Step 2 (optional): Check the roster configuration
  python run_scheduler.py check --input roster.xlsx

  # Step 3: Generate rounds into a workbook (and/or JSON)
  python run_scheduler.py generate --input roster.xlsx --out schedule.xlsx --seed 42
"""

import argparse
import json
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from scheduler.composer import get_composer, COMPOSERS
from scheduler.generator import generate_schedule, ScheduleCancelled
from scheduler.models import SearchStats
from scheduler.parse_inputs import load_config
from scheduler.validate import (
    ConfigurationError, config_problems, validate_rounds, consecutive_sits, fairness_report,
)
from scheduler.workbook_sheets import setup_all_sheets
from scheduler.write_schedule import write_schedule, add_issues_sheet


def _resolve(p: str) -> Path:
    pp = Path(p)
    if pp.is_absolute():
        return pp
    return Path.cwd() / pp


def cmd_setup(args):
    """Add/refresh roster sheets in the workbook."""
    wb_path = str(_resolve(args.workbook))
    print(f"Setting up sheets in: {wb_path}")
    setup_all_sheets(wb_path)
    print("Done: PARTICIPANTS, LINKED_GROUPS, SETTINGS")


def cmd_check(args):
    """Validate the roster configuration without generating."""
    path = str(_resolve(args.input))
    print(f"Parsing: {path}")
    config = load_config(path)
    print(f"  Participants: {len(config.participants)}")
    print(f"  Rounds: {config.total_rounds}")
    print(f"  Players per team: {config.players_per_team}")
    print(f"  Linked groups: {len(config.linked_groups)}")

    problems = config_problems(config)
    if not problems:
        per_match = config.players_per_match
        print(f"\nConfiguration: OK ({len(config.participants) // per_match} match(es) per round)")
        return
    print("\nConfiguration problems:")
    for p in problems:
        print(f"  {p}")
    sys.exit(1)


def cmd_generate(args):
    """Generate rounds and write them out."""
    path = str(_resolve(args.input))
    print(f"Parsing: {path}")
    config = load_config(path, random_seed=args.seed)
    print(f"  Participants: {len(config.participants)}")
    print(f"  Linked groups: {len(config.linked_groups)}")

    stats = SearchStats()
    print(f"\nGenerating {config.total_rounds} round(s) ({args.composer})...")
    try:
        rounds = generate_schedule(
            config,
            composer=get_composer(args.composer),
            stats=stats,
            time_limit_seconds=args.time_limit or None,
        )
    except ConfigurationError as e:
        print("\nConfiguration problems:")
        for p in e.problems:
            print(f"  {p}")
        sys.exit(1)
    except ScheduleCancelled as e:
        print(f"\nStopped: {e}")
        sys.exit(1)

    print(f"  Team pairs: {stats.team_pairs}, attempts: {stats.attempts}, "
          f"fallbacks: {stats.fallbacks}")
    if stats.under_resourced_rounds:
        print(f"  Rounds with no match (too few players): {stats.under_resourced_rounds}")

    valid, violations = validate_rounds(rounds, config)
    issues = violations + consecutive_sits(rounds)
    if valid:
        print("  Validation: OK")
    else:
        print(f"  Validation: {len(violations)} issue(s)")
        for v in violations[:15]:
            print(f"    {v}")
        if len(violations) > 15:
            print(f"    ... and {len(violations) - 15} more")

    report = fairness_report(rounds, config)
    sits = [r["sits"] for r in report.values()]
    print(f"  Sit-outs per participant: min {min(sits)}, max {max(sits)}")

    if args.json_out:
        json_path = _resolve(args.json_out)
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump([r.to_dict() for r in rounds], f, indent=2)
        print(f"\nRounds written to: {json_path}")

    if args.out:
        out_path = str(_resolve(args.out))
        template = path if path.endswith(".xlsx") else None
        print(f"\nWriting schedule to: {out_path}")
        write_schedule(out_path, rounds, config, template_path=template)
        if issues:
            add_issues_sheet(out_path, issues)
    print("Done.")


def main():
    parser = argparse.ArgumentParser(
        description="Scrimmage Scheduler: fair round-robin rounds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log search details")
    sub = parser.add_subparsers(dest="command", help="Command")

    # setup
    p_setup = sub.add_parser("setup", help="Add/refresh roster sheets")
    p_setup.add_argument("--workbook", required=True, help="Workbook path")

    # check
    p_check = sub.add_parser("check", help="Validate roster configuration")
    p_check.add_argument("--input", required=True, help="Roster .json or .xlsx")

    # generate
    p_gen = sub.add_parser("generate", help="Generate rounds")
    p_gen.add_argument("--input", required=True, help="Roster .json or .xlsx")
    p_gen.add_argument("--out", default="scrimmage_schedule.xlsx")
    p_gen.add_argument("--json-out", default=None)
    p_gen.add_argument("--seed", type=int, default=None)
    p_gen.add_argument("--composer", choices=sorted(COMPOSERS), default="sampling")
    p_gen.add_argument("--time-limit", type=float, default=0, help="Seconds; 0 = unlimited")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    dispatch = {
        "setup": cmd_setup,
        "check": cmd_check,
        "generate": cmd_generate,
    }
    dispatch[args.command](args)


if __name__ == "__main__":
    main()
