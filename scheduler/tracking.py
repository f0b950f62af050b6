"""
Per-invocation fairness state: teammate pairings, sit-out history, and the
scoped RoundState that threads them through every round of one generation.
"""

import random
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .models import ScoringWeights, SearchStats


def partnership_key(p1: str, p2: str) -> Tuple[str, str]:
    return (p1, p2) if p1 <= p2 else (p2, p1)


def team_partnerships(team: Iterable[str]) -> List[Tuple[str, str]]:
    """Every unordered teammate pair in a team, canonicalized."""
    return [partnership_key(a, b) for a, b in combinations(list(team), 2)]


class PartnershipTracker:
    """Counts how many rounds each pair of participants has been teammates."""

    def __init__(self):
        self._usage: Dict[Tuple[str, str], int] = {}

    def record_partnerships(self, team: Iterable[str]) -> None:
        for key in team_partnerships(team):
            self._usage[key] = self._usage.get(key, 0) + 1

    def usage_count(self, p1: str, p2: str) -> int:
        return self._usage.get(partnership_key(p1, p2), 0)

    def used_pairs(self) -> Dict[Tuple[str, str], int]:
        return dict(self._usage)

    def __len__(self) -> int:
        return len(self._usage)


class SittingTracker:
    """Cumulative sit-out counts and current consecutive streaks."""

    def __init__(self, participants: Iterable[str]):
        self._participants = list(participants)
        self._counts: Dict[str, int] = {p: 0 for p in self._participants}
        self._streaks: Dict[str, int] = {p: 0 for p in self._participants}

    def record_round(self, sitters: Set[str]) -> None:
        for p in self._participants:
            if p in sitters:
                self._counts[p] += 1
                self._streaks[p] += 1
            else:
                self._streaks[p] = 0

    def cumulative_count(self, p: str) -> int:
        return self._counts.get(p, 0)

    def streak(self, p: str) -> int:
        return self._streaks.get(p, 0)

    @property
    def min_count(self) -> int:
        return min(self._counts.values()) if self._counts else 0

    @property
    def max_count(self) -> int:
        return max(self._counts.values()) if self._counts else 0

    def counts(self) -> Dict[str, int]:
        return dict(self._counts)


@dataclass
class RoundState:
    """
    Mutable state for exactly one generate_schedule() call.
    Built fresh at the start and dropped after the last round; never shared.
    """
    participants: List[str]
    players_per_team: int
    linked_groups: List[Tuple[str, ...]]
    rng: random.Random
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    partnerships: PartnershipTracker = field(default_factory=PartnershipTracker)
    opponents: PartnershipTracker = field(default_factory=PartnershipTracker)
    sitting: Optional[SittingTracker] = None
    previous_sitters: Set[str] = field(default_factory=set)
    stats: SearchStats = field(default_factory=SearchStats)
    group_of: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        if self.sitting is None:
            self.sitting = SittingTracker(self.participants)
        for gi, group in enumerate(self.linked_groups):
            for p in group:
                self.group_of[p] = gi

    @property
    def players_per_match(self) -> int:
        return self.players_per_team * 2

    def are_linked(self, p1: str, p2: str) -> bool:
        g = self.group_of.get(p1)
        return g is not None and g == self.group_of.get(p2)

    def finish_round(self, sitters: Iterable[str]) -> None:
        sitter_set = set(sitters)
        self.sitting.record_round(sitter_set)
        self.previous_sitters = sitter_set
        self.stats.rounds += 1
