"""
Configuration checks (before generation) and post-schedule validation.
"""

from collections import Counter
from typing import Dict, List, Tuple

from .models import ScrimmageConfig, Round


class ConfigurationError(ValueError):
    """Raised before any round is generated; .problems lists every issue found."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


def config_problems(config: ScrimmageConfig) -> List[str]:
    problems = []
    if config.players_per_team < 1:
        problems.append(f"players_per_team must be at least 1 (got {config.players_per_team})")
    if config.total_rounds < 1:
        problems.append(f"total_rounds must be at least 1 (got {config.total_rounds})")
    if not config.participants:
        problems.append("participants is empty")

    dupes = sorted(str(p) for p, n in Counter(config.participants).items() if n > 1)
    if dupes:
        problems.append(f"duplicate participant ids: {', '.join(dupes)}")

    known = set(config.participants)
    seen_in: Dict[str, int] = {}
    for gi, group in enumerate(config.linked_groups):
        label = f"linked group {gi + 1}"
        if not group:
            problems.append(f"{label} is empty")
            continue
        if config.players_per_team >= 1 and len(group) > config.players_per_team:
            problems.append(
                f"{label} has {len(group)} members (max {config.players_per_team} per team)")
        unknown = [str(p) for p in group if p not in known]
        if unknown:
            problems.append(f"{label} references unknown participants: {', '.join(unknown)}")
        repeated = sorted(str(p) for p, n in Counter(group).items() if n > 1)
        if repeated:
            problems.append(f"{label} lists {', '.join(repeated)} more than once")
        for p in set(group):
            if p in seen_in:
                problems.append(f"{p} is in linked groups {seen_in[p] + 1} and {gi + 1}")
            else:
                seen_in[p] = gi
    return problems


def validate_config(config: ScrimmageConfig) -> None:
    problems = config_problems(config)
    if problems:
        raise ConfigurationError(problems)


def expected_sitters(pool_size: int, players_per_team: int) -> int:
    per_match = 2 * players_per_team
    return pool_size - (pool_size // per_match) * per_match


def validate_rounds(
    rounds: List[Round],
    config: ScrimmageConfig,
) -> Tuple[bool, List[str]]:
    """
    Validate a generated schedule against its hard invariants.
    Returns (is_valid, list_of_violation_messages).
    """
    violations = []
    everyone = set(config.participants)
    ppt = config.players_per_team

    if len(rounds) != config.total_rounds:
        violations.append(f"{len(rounds)} rounds generated (expected {config.total_rounds})")

    for rnd in rounds:
        label = f"Round {rnd.round_number}"
        slots = Counter()
        for m_idx, m in enumerate(rnd.matchups, 1):
            if len(m.team1) != ppt or len(m.team2) != ppt:
                violations.append(
                    f"{label} match {m_idx}: team sizes {len(m.team1)}v{len(m.team2)} (expected {ppt})")
            slots.update(m.players)
        slots.update(rnd.sitting_out)

        twice = sorted(str(p) for p, n in slots.items() if n > 1)
        if twice:
            violations.append(f"{label}: placed more than once: {', '.join(twice)}")
        missing = sorted(map(str, everyone - set(slots)))
        if missing:
            violations.append(f"{label}: not placed: {', '.join(missing)}")
        extra = sorted(map(str, set(slots) - everyone))
        if extra:
            violations.append(f"{label}: unknown participants: {', '.join(extra)}")

        if rnd.matchups and len(rnd.sitting_out) != expected_sitters(len(everyone), ppt):
            violations.append(
                f"{label}: {len(rnd.sitting_out)} sitting out "
                f"(expected {expected_sitters(len(everyone), ppt)})")

        team_of = {}
        for m_idx, m in enumerate(rnd.matchups):
            for p in m.team1:
                team_of[p] = (m_idx, 1)
            for p in m.team2:
                team_of[p] = (m_idx, 2)
        for group in config.linked_groups:
            if all(p in team_of for p in group) and len({team_of[p] for p in group}) > 1:
                violations.append(f"{label}: linked group {', '.join(map(str, group))} split across teams")

    return len(violations) == 0, violations


def fairness_report(rounds: List[Round], config: ScrimmageConfig) -> Dict[str, dict]:
    """Per participant: total sits, longest sit streak, and rounds sat."""
    report = {p: {"sits": 0, "longest_streak": 0, "rounds": []} for p in config.participants}
    streak = {p: 0 for p in config.participants}
    for rnd in rounds:
        sat = set(rnd.sitting_out)
        for p in config.participants:
            if p in sat:
                streak[p] += 1
                report[p]["sits"] += 1
                report[p]["rounds"].append(rnd.round_number)
                report[p]["longest_streak"] = max(report[p]["longest_streak"], streak[p])
            else:
                streak[p] = 0
    return report


def consecutive_sits(rounds: List[Round]) -> List[str]:
    """Messages for every participant who sat out two rounds running."""
    msgs = []
    for prev, cur in zip(rounds, rounds[1:]):
        again = sorted(map(str, set(prev.sitting_out) & set(cur.sitting_out)))
        if again:
            msgs.append(f"Round {cur.round_number}: sat out again: {', '.join(again)}")
    return msgs
