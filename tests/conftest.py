# tests/conftest.py
# Ensure the project root (where the local `scheduler/` lives) is first on sys.path
import os
import random
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from scheduler.models import ScrimmageConfig
from scheduler.tracking import RoundState


def make_state(participants, players_per_team, linked_groups=(), seed=0):
    return RoundState(
        participants=list(participants),
        players_per_team=players_per_team,
        linked_groups=[tuple(g) for g in linked_groups],
        rng=random.Random(seed),
    )


@pytest.fixture
def players():
    return [f"p{i:02d}" for i in range(1, 13)]


@pytest.fixture
def doubles_config(players):
    return ScrimmageConfig(
        participants=players[:10],
        total_rounds=6,
        players_per_team=2,
        linked_groups=[["p01", "p02"]],
        random_seed=11,
    )


@pytest.fixture
def state_factory():
    return make_state
