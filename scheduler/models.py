"""
Data models for the scrimmage round-robin scheduler.
Participants are opaque string ids; nothing else about a player matters here.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class ScrimmageConfig:
    """Everything one schedule generation needs."""
    participants: List[str]
    total_rounds: int
    players_per_team: int
    linked_groups: List[List[str]] = field(default_factory=list)
    random_seed: Optional[int] = None

    @property
    def players_per_match(self) -> int:
        return self.players_per_team * 2


@dataclass
class Matchup:
    team1: List[str]
    team2: List[str]

    @property
    def players(self) -> List[str]:
        return self.team1 + self.team2

    def to_dict(self) -> Dict[str, List[str]]:
        return {"team1": list(self.team1), "team2": list(self.team2)}


@dataclass
class Round:
    round_number: int               # 1-based
    matchups: List[Matchup] = field(default_factory=list)
    sitting_out: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "roundNumber": self.round_number,
            "matchups": [m.to_dict() for m in self.matchups],
            "sittingOut": list(self.sitting_out),
        }


@dataclass(frozen=True)
class ScoringWeights:
    """Penalty/bonus weights used to score a candidate team split. Immutable."""
    partnership_repeat: int = 10        # x usage^2 per intra-team pair
    opponent_repeat: int = 1            # x usage^2 per cross-team pair
    excluded_previous_sitter: int = 10000
    excluded_below_max_sits: int = 5000
    excluded_streak: int = 1000         # x streak^2
    play_previous_sitter_bonus: int = 200
    play_max_sits_bonus: int = 100
    play_above_min_bonus: int = 50
    linked_split_penalty: int = 1_000_000
    max_attempts: int = 100
    attempt_exponent_cap: int = 3
    near_perfect_score: int = 10


@dataclass
class SearchStats:
    """Counters collected while generating one schedule."""
    rounds: int = 0
    team_pairs: int = 0
    attempts: int = 0
    early_stops: int = 0
    fallbacks: int = 0
    under_resourced_rounds: int = 0
    linked_matchups: int = 0

