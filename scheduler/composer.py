"""
Team composition for one round's play pool.

Two interchangeable strategies share the TeamComposer interface:
  SamplingComposer  : bounded random search scored by score_split() (default)
  CpSatComposer     : OR-Tools CP-SAT model minimizing repeat cost for the
                      whole round at once

Both record the partnerships of every team they emit.
"""

import logging
import math
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Tuple

from ortools.sat.python import cp_model

from .models import Matchup
from .shuffle import shuffle
from .tracking import RoundState, team_partnerships

logger = logging.getLogger(__name__)


class TeamComposer:
    """Strategy interface: partition a play pool into matchups."""

    name = "base"

    def compose(self, state: RoundState, pool: List[str]) -> List[Matchup]:
        raise NotImplementedError


def check_pool(state: RoundState, pool: Sequence[str]) -> None:
    if len(pool) % state.players_per_match:
        raise ValueError(
            f"Play pool of {len(pool)} is not a multiple of "
            f"{state.players_per_match} players per match")


def record_matchup(state: RoundState, matchup: Matchup) -> None:
    state.partnerships.record_partnerships(matchup.team1)
    state.partnerships.record_partnerships(matchup.team2)
    for a in matchup.team1:
        for b in matchup.team2:
            state.opponents.record_partnerships((a, b))


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def repeat_cost(state: RoundState, team_a: Sequence[str], team_b: Sequence[str]) -> Tuple[int, int]:
    """
    Returns (cost, repeated_pairs). Teammate pairs outside linked groups cost
    usage^2 * partnership_repeat. In singles there are no teammates, so the
    two opponents are charged at that rate instead; otherwise opponents use
    the lighter opponent_repeat weight.
    """
    w = state.weights
    cost = 0
    repeats = 0
    for team in (team_a, team_b):
        for p1, p2 in team_partnerships(team):
            if state.are_linked(p1, p2):
                continue
            n = state.partnerships.usage_count(p1, p2)
            cost += n * n * w.partnership_repeat
            repeats += 1 if n else 0

    singles = state.players_per_team == 1
    opp_weight = w.partnership_repeat if singles else w.opponent_repeat
    for a in team_a:
        for b in team_b:
            n = state.opponents.usage_count(a, b)
            cost += n * n * opp_weight
            if singles and n:
                repeats += 1
    return cost, repeats


def linked_split_cost(state: RoundState, grouping: set, team_a: Sequence[str], pool: Sequence[str]) -> int:
    """Penalty for every linked group the split would break up."""
    if not state.group_of:
        return 0
    team_a_set = set(team_a)
    by_group: Dict[int, List[str]] = {}
    for p in pool:
        gi = state.group_of.get(p)
        if gi is not None:
            by_group.setdefault(gi, []).append(p)

    cost = 0
    for members in by_group.values():
        if len(members) < 2:
            continue
        inside = [m for m in members if m in grouping]
        if not inside:
            continue
        sides = {m in team_a_set for m in inside}
        if len(inside) != len(members) or len(sides) > 1:
            cost += state.weights.linked_split_penalty
    return cost


def score_split(
    state: RoundState,
    team_a: Sequence[str],
    team_b: Sequence[str],
    pool: Sequence[str],
) -> Tuple[int, int, int]:
    """
    Score a candidate two-team grouping drawn from `pool`.
    Returns (total, penalty, repeated_pairs); lower total is better and
    penalty excludes the playing-fairness bonuses.
    """
    w = state.weights
    sitting = state.sitting
    min_sits, max_sits = sitting.min_count, sitting.max_count
    grouping = set(team_a) | set(team_b)

    penalty, repeats = repeat_cost(state, team_a, team_b)

    for p in pool:
        if p in grouping:
            continue
        if p in state.previous_sitters:
            penalty += w.excluded_previous_sitter
        if sitting.cumulative_count(p) < max_sits:
            penalty += w.excluded_below_max_sits
        streak = sitting.streak(p)
        penalty += streak * streak * w.excluded_streak

    penalty += linked_split_cost(state, grouping, team_a, pool)

    bonus = 0
    for p in grouping:
        sits = sitting.cumulative_count(p)
        if p in state.previous_sitters:
            bonus -= w.play_previous_sitter_bonus
        if sits >= max_sits:
            bonus -= w.play_max_sits_bonus
        if sits > min_sits:
            bonus -= w.play_above_min_bonus

    return penalty + bonus, penalty, repeats


# ---------------------------------------------------------------------------
# Sampling strategy
# ---------------------------------------------------------------------------

def attempt_budget(state: RoundState, pool_size: int) -> int:
    w = state.weights
    exponent = min(state.players_per_team, w.attempt_exponent_cap)
    return min(w.max_attempts, pool_size ** exponent)


def split_count(pool_size: int, players_per_team: int) -> int:
    """Distinct unordered (team A, team B) groupings available in a pool."""
    if pool_size < 2 * players_per_team:
        return 0
    return (math.comb(pool_size, players_per_team)
            * math.comb(pool_size - players_per_team, players_per_team) // 2)


class SamplingComposer(TeamComposer):
    """
    Forms one team pair at a time. Each attempt draws a candidate split and
    scores it; the lowest score wins, fewer repeated pairings breaking ties.

    near_perfect_score is compared against the penalty alone (fairness bonuses
    excluded), and the search only stops early on a split that also repeats
    no pairing. A bonus-adjusted score can dip below the threshold while still
    repeating a pair, so the score by itself is not enough to stop. When the
    pool has no more distinct splits than max_attempts, every split is tried
    instead of sampling.
    """

    name = "sampling"

    def compose(self, state: RoundState, pool: List[str]) -> List[Matchup]:
        check_pool(state, pool)
        remaining = list(pool)
        matchups = []
        while len(remaining) >= state.players_per_match:
            matchup = self._best_pair(state, remaining)
            record_matchup(state, matchup)
            taken = set(matchup.players)
            remaining = [p for p in remaining if p not in taken]
            matchups.append(matchup)
        return matchups

    def _candidates(self, state: RoundState, pool: List[str]):
        ppt = state.players_per_team
        if split_count(len(pool), ppt) <= state.weights.max_attempts:
            yield from shuffle(list(_all_splits(pool, ppt)), state.rng)
            return
        for _ in range(attempt_budget(state, len(pool))):
            yield _sample_split(state, pool)

    def _best_pair(self, state: RoundState, pool: List[str]) -> Matchup:
        ppt = state.players_per_team
        near_perfect = state.weights.near_perfect_score
        best: Optional[Tuple[List[str], List[str]]] = None
        best_score = (math.inf, 0)
        attempts = 0

        for team_a, team_b in self._candidates(state, pool):
            attempts += 1
            total, penalty, repeats = score_split(state, team_a, team_b, pool)
            if (total, repeats) < best_score:
                best_score = (total, repeats)
                best = (team_a, team_b)
                if repeats == 0 and penalty <= near_perfect:
                    state.stats.early_stops += 1
                    break

        state.stats.team_pairs += 1
        state.stats.attempts += attempts
        if best is None:
            state.stats.fallbacks += 1
            logger.warning("No candidate split scored for pool of %d; using positional split",
                           len(pool))
            return Matchup(team1=pool[:ppt], team2=pool[ppt:2 * ppt])

        logger.debug("Team pair chosen after %d attempt(s), score %s", attempts, best_score[0])
        return Matchup(team1=list(best[0]), team2=list(best[1]))


def _all_splits(pool: List[str], ppt: int):
    index = {p: i for i, p in enumerate(pool)}
    for team_a in combinations(pool, ppt):
        rest = [p for p in pool if p not in team_a]
        for team_b in combinations(rest, ppt):
            # each unordered pair of teams once
            if index[team_a[0]] < index[team_b[0]]:
                yield list(team_a), list(team_b)


def _sample_split(state: RoundState, pool: List[str]) -> Tuple[List[str], List[str]]:
    """Shuffle the pool into two teams, packing linked members together when possible."""
    ppt = state.players_per_team
    units: Dict[object, List[str]] = {}
    for p in pool:
        gi = state.group_of.get(p)
        units.setdefault(("g", gi) if gi is not None else ("p", p), []).append(p)

    if len(units) < len(pool):
        team_a: List[str] = []
        team_b: List[str] = []
        for unit in shuffle(list(units.values()), state.rng):
            if len(team_a) + len(unit) <= ppt:
                team_a.extend(unit)
            elif len(team_b) + len(unit) <= ppt:
                team_b.extend(unit)
            if len(team_a) == ppt and len(team_b) == ppt:
                return team_a, team_b

    shuffled = shuffle(pool, state.rng)
    return shuffled[:ppt], shuffled[ppt:2 * ppt]


# ---------------------------------------------------------------------------
# CP-SAT strategy
# ---------------------------------------------------------------------------

class CpSatComposer(TeamComposer):
    """
    Exact alternative: assigns the whole pool in one CP-SAT model.

    Every pool player plays this round, so only repeat cost distinguishes
    solutions. Players go into "cells" of cell_size members that share a cost
    for every previously used pair inside them: teams for team play, whole
    matches in singles. Linked members in the pool are kept in the same cell
    when the model allows it. Falls back to the sampling strategy when the
    solver finds nothing within its time limit.
    """

    name = "cp-sat"

    def __init__(self, time_limit_seconds: float = 5.0, num_workers: int = 8,
                 fallback: Optional[TeamComposer] = None):
        self.time_limit_seconds = time_limit_seconds
        self.num_workers = num_workers
        self.fallback = fallback or SamplingComposer()

    def compose(self, state: RoundState, pool: List[str]) -> List[Matchup]:
        check_pool(state, pool)
        if not pool:
            return []

        ppt = state.players_per_team
        singles = ppt == 1
        cell_size = 2 if singles else ppt
        n_cells = len(pool) // cell_size

        cells = self._solve(state, pool, cell_size, n_cells, enforce_linked=True)
        if cells is None:
            cells = self._solve(state, pool, cell_size, n_cells, enforce_linked=False)
        if cells is None:
            state.stats.fallbacks += 1
            logger.warning("CP-SAT found no assignment for pool of %d; using %s",
                           len(pool), self.fallback.name)
            return self.fallback.compose(state, pool)

        matchups = []
        if singles:
            for cell in cells:
                matchups.append(Matchup(team1=[cell[0]], team2=[cell[1]]))
        else:
            for k in range(0, n_cells, 2):
                matchups.append(Matchup(team1=cells[k], team2=cells[k + 1]))
        for m in matchups:
            record_matchup(state, m)
        state.stats.team_pairs += len(matchups)
        return matchups

    def _pair_weight(self, state: RoundState, p1: str, p2: str) -> int:
        w = state.weights
        if state.players_per_team == 1:
            n = state.opponents.usage_count(p1, p2)
        else:
            if state.are_linked(p1, p2):
                return 0
            n = state.partnerships.usage_count(p1, p2)
        return n * n * w.partnership_repeat

    def _solve(self, state: RoundState, pool: List[str], cell_size: int,
               n_cells: int, enforce_linked: bool) -> Optional[List[List[str]]]:
        model = cp_model.CpModel()
        N = len(pool)
        cells = range(n_cells)

        x = {}
        for i in range(N):
            for c in cells:
                x[(i, c)] = model.NewBoolVar(f"x_{i}_{c}")
        for i in range(N):
            model.Add(sum(x[(i, c)] for c in cells) == 1)
        for c in cells:
            model.Add(sum(x[(i, c)] for i in range(N)) == cell_size)

        # symmetry: player 0 sits in cell 0
        model.Add(x[(0, 0)] == 1)

        if enforce_linked and state.group_of:
            for i, j in combinations(range(N), 2):
                if state.are_linked(pool[i], pool[j]):
                    for c in cells:
                        model.Add(x[(i, c)] == x[(j, c)])

        cost_terms = []
        for i, j in combinations(range(N), 2):
            weight = self._pair_weight(state, pool[i], pool[j])
            if weight <= 0:
                continue
            for c in cells:
                both = model.NewBoolVar(f"y_{i}_{j}_{c}")
                model.Add(both >= x[(i, c)] + x[(j, c)] - 1)
                cost_terms.append(both * weight)
        if cost_terms:
            model.Minimize(sum(cost_terms))

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.time_limit_seconds
        solver.parameters.num_workers = self.num_workers
        solver.parameters.random_seed = state.rng.randint(0, 2 ** 31 - 1)

        status = solver.Solve(model)
        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            logger.debug("CP-SAT status %s (linked enforced: %s)",
                         solver.StatusName(status), enforce_linked)
            return None

        out: List[List[str]] = [[] for _ in cells]
        for i in range(N):
            for c in cells:
                if solver.Value(x[(i, c)]):
                    out[c].append(pool[i])
                    break
        return out


COMPOSERS = {
    SamplingComposer.name: SamplingComposer,
    CpSatComposer.name: CpSatComposer,
}


def get_composer(name: str) -> TeamComposer:
    try:
        return COMPOSERS[name]()
    except KeyError:
        raise ValueError(f"Unknown composer {name!r}; choose from {sorted(COMPOSERS)}") from None
