# Backend modules import each other as top-level names (database, models, routers)
import os
import sys

import pytest

BACKEND = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir,
                                       "webapp", "backend"))


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    db_file = tmp_path_factory.mktemp("db") / "scrimmages.db"
    os.environ["SCRIMMAGE_DATABASE_URL"] = f"sqlite:///{db_file}"
    if BACKEND not in sys.path:
        sys.path.insert(0, BACKEND)
    from main import app as fastapi_app
    return fastapi_app


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture
def scrimmage_payload():
    return {
        "team_id": "club-1",
        "name": "Thursday doubles",
        "rounds": 4,
        "players_per_team": 2,
        "created_by": "coach",
        "participants": [{"user_id": f"u{i}", "user_name": f"Player {i}"} for i in range(1, 11)],
        "linked_groups": [["u1", "u2"]],
    }
