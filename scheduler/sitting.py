"""
Sitting fairness: decides who sits out this round and orders the rest of the
residual pool for team formation.
"""

from typing import List, Tuple

from .shuffle import shuffle
from .tracking import RoundState


def sitters_needed(pool_size: int, players_per_match: int) -> int:
    """Players left over once the pool is cut into full matches."""
    return pool_size - (pool_size // players_per_match) * players_per_match


def _sit_priority(state: RoundState, player: str) -> Tuple[int, int]:
    # (already on a streak, cumulative sits): lowest sorts first, i.e. sits
    return (1 if state.sitting.streak(player) > 0 else 0,
            state.sitting.cumulative_count(player))


def sit_order(state: RoundState, players: List[str]) -> List[str]:
    """Players in the order they should sit out this round."""
    # sorted() is stable, so the shuffle is the random tie-break
    return sorted(shuffle(players, state.rng), key=lambda p: _sit_priority(state, p))


def select_sitters(state: RoundState, residual: List[str]) -> Tuple[List[str], List[str]]:
    """
    Returns (sitters, play_pool). len(play_pool) is always a multiple of
    players_per_match and play_pool is tiered by prioritize_play_pool().
    """
    needed = sitters_needed(len(residual), state.players_per_match)
    sitters: List[str] = []
    if needed > 0:
        sitters = sit_order(state, residual)[:needed]

    sitter_set = set(sitters)
    players = [p for p in residual if p not in sitter_set]
    play_pool = prioritize_play_pool(state, players)
    return sitters, play_pool


def prioritize_play_pool(state: RoundState, players: List[str]) -> List[str]:
    """Order players as mustPlay (sat last round), shouldPlay, then normal."""
    min_sits = state.sitting.min_count
    must_play = [p for p in players if p in state.previous_sitters]
    should_play = [p for p in players
                   if p not in state.previous_sitters
                   and state.sitting.cumulative_count(p) >= min_sits]
    tiered = set(must_play) | set(should_play)
    normal = [p for p in players if p not in tiered]
    return must_play + should_play + normal
