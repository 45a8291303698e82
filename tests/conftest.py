from __future__ import annotations

from collections.abc import Generator

import fakeredis
import pytest
from fastapi.testclient import TestClient

from lockgraph.api.deps import get_redis
from lockgraph.api.models import Edge, Graph, Lock, PlayerType, Vertex
from lockgraph.main import app


@pytest.fixture()
def scenario_graph() -> Graph:
    """Three vertices; a key on 0->1 opens the lock on 1->0; 2 is the target."""

    return Graph(
        vertices=[
            Vertex(position=(0.0, 0.0), type=PlayerType.player_1, target=False),
            Vertex(position=(100.0, 0.0), type=PlayerType.player_2, target=False),
            Vertex(position=(200.0, 0.0), type=PlayerType.player_1, target=True),
        ],
        edges=[
            Edge(endpoints=(0, 1), locks=[], keys=[0]),
            Edge(endpoints=(1, 0), locks=[0], keys=[]),
            Edge(endpoints=(1, 2), locks=[], keys=[]),
        ],
        start=0,
        locks=[Lock(color="#dc2626", open=False)],
    )


@pytest.fixture()
def scenario_document(scenario_graph: Graph) -> dict:
    return scenario_graph.model_dump(mode="json")


@pytest.fixture()
def r() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def client_and_redis() -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()
