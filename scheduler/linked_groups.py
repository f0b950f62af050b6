"""
Linked group placement: seats "always together" groups into matchups before
any individual assignment happens for the round.

Individuals who are next in line to sit out are held back, so the sitting
selector still sees them in the residual pool. Everyone else is picked one
seat at a time, fewest previous pairings with the team being built first.
"""

import logging
from typing import Collection, List, Optional, Sequence, Set, Tuple

from .models import Matchup
from .shuffle import shuffle
from .sitting import sit_order, sitters_needed
from .tracking import RoundState

logger = logging.getLogger(__name__)


def _free_individuals(state: RoundState, taken: Set[str]) -> List[str]:
    return [p for p in state.participants
            if p not in state.group_of and p not in taken]


def _seat_key(state: RoundState, player: str, team: Sequence[str], reserve: Collection[str]):
    usage = sum(state.partnerships.usage_count(player, t) for t in team)
    return (player in reserve,
            usage,
            player in state.previous_sitters,
            -state.sitting.cumulative_count(player))


def _pick_individuals(
    state: RoundState,
    count: int,
    taken: Set[str],
    team: Sequence[str],
    reserve: Collection[str],
) -> Optional[List[str]]:
    """Greedy pick of `count` free individuals to join `team`; None if too few."""
    pool = shuffle(_free_individuals(state, taken), state.rng)
    if len(pool) < count:
        return None
    chosen: List[str] = []
    for _ in range(count):
        # min() keeps the first of equal keys: the shuffle breaks ties
        best = min(pool, key=lambda p: _seat_key(state, p, list(team) + chosen, reserve))
        chosen.append(best)
        pool.remove(best)
    return chosen


def _fill_slots(
    state: RoundState,
    slots: int,
    taken: Set[str],
    team: Sequence[str],
    free_groups: Sequence[Tuple[str, ...]],
    reserve: Collection[str],
) -> Optional[List[str]]:
    """
    Pick `slots` players not in `taken` to join `team`. Individuals come
    first; when there are not enough of them, whole unplaced groups that fit
    are pulled in before topping up with individuals. Returns None when the
    slots cannot be filled.
    """
    available = len(_free_individuals(state, taken))
    if available >= slots:
        return _pick_individuals(state, slots, taken, team, reserve)

    chosen: List[str] = []
    remaining = slots
    for group in free_groups:
        if remaining <= available:
            break
        if any(p in taken for p in group) or len(group) > remaining:
            continue
        chosen.extend(group)
        remaining -= len(group)
    if remaining > available:
        return None
    rest = _pick_individuals(state, remaining, taken | set(chosen), list(team) + chosen, reserve)
    return chosen + rest


def _seat_group(
    state: RoundState,
    group: Tuple[str, ...],
    used: Set[str],
    free_groups: Sequence[Tuple[str, ...]],
    reserve: Collection[str],
) -> Optional[Matchup]:
    ppt = state.players_per_team
    taken = set(used) | set(group)
    others = [g for g in free_groups if g != group]

    teammates = _fill_slots(state, ppt - len(group), taken, group, others, reserve)
    if teammates is None:
        return None
    team1 = list(group) + teammates
    taken |= set(team1)

    team2 = _fill_slots(state, ppt, taken, [], others, reserve)
    if team2 is None:
        return None
    return Matchup(team1=team1, team2=team2)


def place_linked_groups(state: RoundState, used: Set[str]) -> List[Matchup]:
    """
    Seat as many linked groups as possible for this round.
    Mutates `used` and the partnership tracker for every matchup produced;
    groups that cannot be seated are left for the rest of the round.
    """
    matchups: List[Matchup] = []
    available = [g for g in state.linked_groups if not any(p in used for p in g)]
    order = shuffle(available, state.rng)

    to_sit = sitters_needed(len(state.participants) - len(used), state.players_per_match)
    reserve = set(sit_order(state, _free_individuals(state, used))[:to_sit])

    for group in order:
        if any(p in used for p in group):
            continue
        free_groups = [g for g in order if not any(p in used for p in g)]
        matchup = _seat_group(state, group, used, free_groups, reserve)
        if matchup is None:
            logger.debug("Linked group %s could not be seated this round", list(group))
            continue

        state.partnerships.record_partnerships(matchup.team1)
        state.partnerships.record_partnerships(matchup.team2)
        used.update(matchup.players)
        matchups.append(matchup)
        state.stats.linked_matchups += 1

    return matchups
