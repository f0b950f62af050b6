import random
from itertools import chain, repeat
from types import SimpleNamespace

import pytest

from scheduler import generator
from scheduler.composer import CpSatComposer
from scheduler.generator import ScheduleCancelled, generate_schedule
from scheduler.models import ScrimmageConfig, SearchStats
from scheduler.tracking import partnership_key
from scheduler.validate import ConfigurationError, consecutive_sits, validate_rounds


def _config(n, rounds, ppt, linked=(), seed=None):
    return ScrimmageConfig(
        participants=[f"p{i:02d}" for i in range(1, n + 1)],
        total_rounds=rounds,
        players_per_team=ppt,
        linked_groups=[list(g) for g in linked],
        random_seed=seed,
    )


@pytest.mark.parametrize("n,ppt,linked", [
    (10, 2, [["p01", "p02"]]),
    (13, 3, [["p01", "p02"], ["p05", "p06", "p07"]]),
    (9, 1, []),
    (16, 4, [["p03", "p04"], ["p10"]]),
    (7, 2, []),
])
def test_schedules_satisfy_hard_invariants(n, ppt, linked):
    for seed in range(5):
        config = _config(n, 6, ppt, linked, seed=seed)
        rounds = generate_schedule(config)
        ok, violations = validate_rounds(rounds, config)
        assert ok, violations
        assert [r.round_number for r in rounds] == list(range(1, 7))


def test_doubles_fixture_is_valid(doubles_config):
    rounds = generate_schedule(doubles_config)
    ok, violations = validate_rounds(rounds, doubles_config)
    assert ok, violations
    for rnd in rounds:
        assert len(rnd.matchups) == 2
        assert len(rnd.sitting_out) == 2


def test_four_player_singles_never_repeat_an_opponent():
    for seed in range(10):
        rounds = generate_schedule(_config(4, 3, 1, seed=seed))
        pairs = []
        for rnd in rounds:
            assert len(rnd.matchups) == 2
            assert rnd.sitting_out == []
            pairs.extend(partnership_key(m.team1[0], m.team2[0]) for m in rnd.matchups)
        assert len(set(pairs)) == 6


@pytest.mark.parametrize("n", [5, 9])
def test_singles_with_one_spare_rotates_the_sit(n):
    for seed in range(5):
        rounds = generate_schedule(_config(n, n, 1, seed=seed))
        sat = [rnd.sitting_out for rnd in rounds]
        assert all(len(s) == 1 for s in sat)
        assert sorted(s[0] for s in sat) == [f"p{i:02d}" for i in range(1, n + 1)]


def test_nobody_sits_twice_in_a_row_when_avoidable(doubles_config):
    for seed in range(10):
        doubles_config.random_seed = seed
        doubles_config.total_rounds = 10
        rounds = generate_schedule(doubles_config)
        assert consecutive_sits(rounds) == []


def test_linked_group_always_shares_a_team():
    config = _config(12, 8, 3, linked=[["p01", "p02", "p03"], ["p04", "p05"]], seed=4)
    for rnd in generate_schedule(config):
        for group in config.linked_groups:
            teams = [t for m in rnd.matchups for t in (m.team1, m.team2)
                     if set(group) & set(t)]
            assert len(teams) == 1
            assert set(group) <= set(teams[0])


def test_fixed_seed_is_repeatable(doubles_config):
    first = [r.to_dict() for r in generate_schedule(doubles_config)]
    second = [r.to_dict() for r in generate_schedule(doubles_config)]
    assert first == second


def test_explicit_rng_overrides_seed(doubles_config):
    doubles_config.random_seed = None
    a = generate_schedule(doubles_config, rng=random.Random(42))
    b = generate_schedule(doubles_config, rng=random.Random(42))
    assert [r.to_dict() for r in a] == [r.to_dict() for r in b]


def test_too_few_players_sit_everyone_out():
    config = _config(3, 4, 2)
    stats = SearchStats()
    rounds = generate_schedule(config, stats=stats)
    assert len(rounds) == 4
    for rnd in rounds:
        assert rnd.matchups == []
        assert sorted(rnd.sitting_out) == ["p01", "p02", "p03"]
    assert stats.under_resourced_rounds == 4
    assert validate_rounds(rounds, config)[0]


@pytest.mark.parametrize("config", [
    _config(8, 4, 0),
    _config(8, 0, 2),
    _config(0, 4, 2),
    _config(8, 4, 2, linked=[["p01", "p02", "p03"]]),
    _config(8, 4, 2, linked=[["p01", "p02"], ["p02", "p03"]]),
    _config(8, 4, 2, linked=[["p01", "zz"]]),
    _config(8, 4, 2, linked=[[]]),
])
def test_bad_config_raises_before_generation(config):
    with pytest.raises(ConfigurationError) as exc:
        generate_schedule(config)
    assert exc.value.problems


def test_stats_are_collected(doubles_config):
    stats = SearchStats()
    generate_schedule(doubles_config, stats=stats)
    assert stats.rounds == 6
    assert stats.linked_matchups == 6
    assert stats.team_pairs == 6
    assert stats.attempts >= stats.team_pairs


def test_cancel_between_rounds(doubles_config):
    calls = []

    def should_cancel():
        calls.append(1)
        return len(calls) > 2

    with pytest.raises(ScheduleCancelled) as exc:
        generate_schedule(doubles_config, should_cancel=should_cancel)
    assert [r.round_number for r in exc.value.rounds] == [1, 2]


def test_time_limit_stops_generation(doubles_config, monkeypatch):
    clock = chain([0.0, 0.0], repeat(100.0))
    monkeypatch.setattr(generator, "time", SimpleNamespace(monotonic=lambda: next(clock)))
    with pytest.raises(ScheduleCancelled) as exc:
        generate_schedule(doubles_config, time_limit_seconds=5)
    assert len(exc.value.rounds) == 1


def test_cp_sat_composer_produces_valid_rounds(doubles_config):
    rounds = generate_schedule(doubles_config, composer=CpSatComposer(time_limit_seconds=5))
    ok, violations = validate_rounds(rounds, doubles_config)
    assert ok, violations


@pytest.mark.parametrize("n,ppt,linked,rounds", [
    (10, 2, [["p01", "p02"]], 8),
    (5, 2, [["p01", "p02"]], 6),
    (13, 2, [["p01", "p02"], ["p03", "p04"]], 9),
    (14, 3, [["p01", "p02", "p03"]], 8),
])
def test_sits_spread_evenly_around_linked_groups(n, ppt, linked, rounds):
    for seed in range(5):
        config = _config(n, rounds, ppt, linked, seed=seed)
        schedule = generate_schedule(config)
        members = {p for g in linked for p in g}
        individuals = [p for p in config.participants if p not in members]
        counts = dict.fromkeys(individuals, 0)
        for rnd in schedule:
            # linked members are always seatable in these configs
            assert not set(rnd.sitting_out) & members
            for p in rnd.sitting_out:
                counts[p] += 1
            assert max(counts.values()) - min(counts.values()) <= 1, (seed, rnd.round_number)
        assert consecutive_sits(schedule) == []


def test_five_players_with_a_pair_rotate_sitter_and_opponents():
    for seed in range(10):
        rounds = generate_schedule(_config(5, 3, 2, linked=[["p01", "p02"]], seed=seed))
        sat = sorted(p for rnd in rounds for p in rnd.sitting_out)
        assert sat == ["p03", "p04", "p05"]
        opponents = set()
        for rnd in rounds:
            (m,) = rnd.matchups
            assert sorted(m.team1) == ["p01", "p02"]
            opponents.add(tuple(sorted(m.team2)))
        assert len(opponents) == 3


def test_individuals_get_fresh_teammates_around_a_linked_pair(doubles_config):
    doubles_config.total_rounds = 3
    for seed in range(10):
        doubles_config.random_seed = seed
        pairs = []
        for rnd in generate_schedule(doubles_config):
            for m in rnd.matchups:
                for team in (m.team1, m.team2):
                    key = partnership_key(*team)
                    if key != ("p01", "p02"):
                        pairs.append(key)
        assert len(pairs) == len(set(pairs)), seed
