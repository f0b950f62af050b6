"""
Round generation for a scrimmage.

Each round runs, in order: linked group placement, sitter selection, team
composition, then tracker updates. State lives in one RoundState built per
call, so concurrent calls never share fairness history.
"""

import logging
import random
import time
from typing import Callable, List, Optional

from .composer import SamplingComposer, TeamComposer
from .linked_groups import place_linked_groups
from .models import Round, ScrimmageConfig, ScoringWeights, SearchStats
from .sitting import select_sitters
from .tracking import RoundState
from .validate import validate_config

logger = logging.getLogger(__name__)


class ScheduleCancelled(RuntimeError):
    """Generation stopped between rounds; .rounds holds what was finished."""

    def __init__(self, message: str, rounds: List[Round]):
        super().__init__(message)
        self.rounds = rounds


def new_state(
    config: ScrimmageConfig,
    rng: Optional[random.Random] = None,
    weights: Optional[ScoringWeights] = None,
    stats: Optional[SearchStats] = None,
) -> RoundState:
    state = RoundState(
        participants=list(config.participants),
        players_per_team=config.players_per_team,
        linked_groups=[tuple(g) for g in config.linked_groups],
        rng=rng if rng is not None else random.Random(config.random_seed),
        weights=weights or ScoringWeights(),
    )
    if stats is not None:
        state.stats = stats
    return state


def generate_round(state: RoundState, round_number: int, composer: TeamComposer) -> Round:
    used = set()
    matchups = place_linked_groups(state, used)

    residual = [p for p in state.participants if p not in used]
    sitters, play_pool = select_sitters(state, residual)
    matchups.extend(composer.compose(state, play_pool))

    if not matchups:
        # Too few players for a single match: everyone sits, nothing is raised.
        state.stats.under_resourced_rounds += 1
        logger.warning("Round %d: %d player(s) available, %d needed for a match; all sit out",
                       round_number, len(residual), state.players_per_match)

    state.finish_round(sitters)
    logger.debug("Round %d: %d match(es), sitting out %s",
                 round_number, len(matchups), sitters)
    return Round(round_number=round_number, matchups=matchups, sitting_out=sitters)


def generate_schedule(
    config: ScrimmageConfig,
    composer: Optional[TeamComposer] = None,
    rng: Optional[random.Random] = None,
    weights: Optional[ScoringWeights] = None,
    should_cancel: Optional[Callable[[], bool]] = None,
    time_limit_seconds: Optional[float] = None,
    stats: Optional[SearchStats] = None,
) -> List[Round]:
    """
    Generate config.total_rounds rounds.

    Raises ConfigurationError for an invalid config and ScheduleCancelled when
    should_cancel() turns true or time_limit_seconds elapses; both checks run
    between rounds. Pass `rng` (or set config.random_seed) for repeatable
    output, and a SearchStats instance to collect search counters.
    """
    validate_config(config)
    composer = composer or SamplingComposer()
    state = new_state(config, rng=rng, weights=weights, stats=stats)
    deadline = time.monotonic() + time_limit_seconds if time_limit_seconds else None

    rounds: List[Round] = []
    for r in range(config.total_rounds):
        if should_cancel is not None and should_cancel():
            raise ScheduleCancelled(f"Cancelled after {len(rounds)} round(s)", rounds)
        if deadline is not None and time.monotonic() > deadline:
            raise ScheduleCancelled(
                f"Time limit of {time_limit_seconds}s reached after {len(rounds)} round(s)", rounds)
        rounds.append(generate_round(state, r + 1, composer))

    logger.info(
        "Generated %d round(s) for %d participant(s) with %s composer "
        "(%d team pair(s), %d attempt(s), %d fallback(s))",
        len(rounds), len(config.participants), composer.name,
        state.stats.team_pairs, state.stats.attempts, state.stats.fallbacks)
    return rounds
