from __future__ import annotations

import fakeredis
from fastapi.testclient import TestClient

from lockgraph.palette import LOCK_COLORS


def _create(client: TestClient, document: dict | None = None) -> dict:
    body: dict = {"name": "scenario"}
    if document is not None:
        body["document"] = document
    resp = client.post("/graphs", json=body)
    assert resp.status_code == 201
    return resp.json()


def test_healthcheck_info_and_palette(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    assert client.get("/healthcheck").json() == {"status": "ok"}
    assert client.get("/info").json()["name"] == "lockgraph"
    assert client.get("/palette").json() == {"colors": list(LOCK_COLORS)}


def test_create_get_list_delete_graph(client_and_redis: tuple[TestClient, fakeredis.FakeRedis], scenario_document: dict) -> None:
    client, _ = client_and_redis
    created = _create(client, scenario_document)
    gid = created["graph_id"]

    assert created["graph"] == scenario_document
    assert client.get(f"/graphs/{gid}").json()["name"] == "scenario"
    assert [g["graph_id"] for g in client.get("/graphs").json()["graphs"]] == [gid]

    assert client.delete(f"/graphs/{gid}").status_code == 204
    assert client.get(f"/graphs/{gid}").status_code == 404
    assert client.delete(f"/graphs/{gid}").status_code == 404


def test_create_graph_rejects_malformed_document(client_and_redis: tuple[TestClient, fakeredis.FakeRedis], scenario_document: dict) -> None:
    client, r = client_and_redis
    scenario_document["edges"][0]["keys"] = [4]
    resp = client.post("/graphs", json={"name": "bad", "document": scenario_document})
    assert resp.status_code == 422
    assert "key 4" in resp.json()["detail"]
    assert client.get("/graphs").json()["graphs"] == []


def test_document_download_round_trips(client_and_redis: tuple[TestClient, fakeredis.FakeRedis], scenario_document: dict) -> None:
    client, _ = client_and_redis
    gid = _create(client, scenario_document)["graph_id"]

    resp = client.get(f"/graphs/{gid}/document")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.json() == scenario_document

    again = _create(client, resp.json())
    assert again["graph"] == scenario_document


def test_edit_actions(client_and_redis: tuple[TestClient, fakeredis.FakeRedis], scenario_document: dict) -> None:
    client, _ = client_and_redis
    gid = _create(client, scenario_document)["graph_id"]

    resp = client.post(f"/graphs/{gid}/actions", json={"action": "remove_vertex", "index": 0})
    assert resp.status_code == 200
    graph = resp.json()["graph"]
    assert graph["start"] is None
    assert [e["endpoints"] for e in graph["edges"]] == [[0, 1]]

    resp = client.post(f"/graphs/{gid}/actions", json={"action": "add_lock"})
    assert resp.json()["graph"]["locks"][-1]["color"] == LOCK_COLORS[1]

    events = client.get(f"/graphs/{gid}/events").json()
    assert [e["fields"]["action"] for e in events["events"]] == ["remove_vertex", "add_lock"]


def test_edit_action_errors(client_and_redis: tuple[TestClient, fakeredis.FakeRedis], scenario_document: dict) -> None:
    client, _ = client_and_redis
    gid = _create(client, scenario_document)["graph_id"]

    # Unknown action, missing fields and out-of-range indices are all 422.
    assert client.post(f"/graphs/{gid}/actions", json={"action": "nope"}).status_code == 422
    assert client.post(f"/graphs/{gid}/actions", json={"action": "remove_edge"}).status_code == 422
    resp = client.post(f"/graphs/{gid}/actions", json={"action": "remove_edge", "index": 3})
    assert resp.status_code == 422
    assert "out of range" in resp.json()["detail"]
    resp = client.post(f"/graphs/{gid}/actions", json={"action": "add_edge", "source": 1, "destination": 2})
    assert resp.status_code == 422
    assert "already exists" in resp.json()["detail"]

    missing = "00000000-0000-0000-0000-000000000000"
    assert client.post(f"/graphs/{missing}/actions", json={"action": "clear"}).status_code == 404

    assert client.get(f"/graphs/{gid}").json()["graph"] == scenario_document


def test_play_session_over_http(client_and_redis: tuple[TestClient, fakeredis.FakeRedis], scenario_document: dict) -> None:
    client, _ = client_and_redis
    gid = _create(client, scenario_document)["graph_id"]

    resp = client.post(f"/graphs/{gid}/sessions")
    assert resp.status_code == 201
    view = resp.json()
    sid = view["record"]["session_id"]
    assert view["legal_moves"] == [0]
    assert view["current_owner"] == "Player 1"
    assert view["terminal"] is False

    view = client.post(f"/sessions/{sid}/moves", json={"edge_index": 0}).json()
    assert view["record"]["session"]["lock_open"] == [True]
    assert view["legal_moves"] == [1, 2]
    assert view["current_owner"] == "Player 2"

    view = client.post(f"/sessions/{sid}/moves", json={"edge_index": 2}).json()
    assert view["terminal"] is True
    assert view["legal_moves"] == []
    assert view["record"]["session"]["phase"] == "finished"

    resp = client.post(f"/sessions/{sid}/moves", json={"edge_index": 1})
    assert resp.status_code == 422
    assert "not a legal move" in resp.json()["detail"]

    view = client.post(f"/sessions/{sid}/reset").json()
    assert view["record"]["session"]["position"] == 0
    assert view["legal_moves"] == [0]

    assert client.get(f"/sessions/{sid}").json()["record"]["session"]["position"] == 0
    types = [e["fields"]["type"] for e in client.get(f"/sessions/{sid}/events").json()["events"]]
    assert types == ["session_moved", "target_reached", "session_reset"]


def test_session_errors(client_and_redis: tuple[TestClient, fakeredis.FakeRedis], scenario_document: dict) -> None:
    client, _ = client_and_redis
    scenario_document["start"] = None
    gid = _create(client, scenario_document)["graph_id"]

    resp = client.post(f"/graphs/{gid}/sessions")
    assert resp.status_code == 422
    assert "start vertex" in resp.json()["detail"]

    missing = "00000000-0000-0000-0000-000000000000"
    assert client.post(f"/graphs/{missing}/sessions").status_code == 404
    assert client.get(f"/sessions/{missing}").status_code == 404
    assert client.post(f"/sessions/{missing}/moves", json={"edge_index": 0}).status_code == 404
    assert client.post(f"/sessions/{missing}/reset").status_code == 404
    assert client.get(f"/sessions/{missing}/events?count=0").status_code == 422


def test_ws_session_updates_broadcast(client_and_redis: tuple[TestClient, fakeredis.FakeRedis], scenario_document: dict) -> None:
    client, _ = client_and_redis
    gid = _create(client, scenario_document)["graph_id"]
    sid = client.post(f"/graphs/{gid}/sessions").json()["record"]["session_id"]

    with client.websocket_connect(f"/ws/sessions/{sid}") as ws:
        res = client.post(f"/sessions/{sid}/moves", json={"edge_index": 0})
        assert res.status_code == 200

        msg = ws.receive_json()
        assert msg == {"type": "session_updated", "session_id": sid}


def test_ws_graph_updates_broadcast(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    gid = _create(client)["graph_id"]

    with client.websocket_connect(f"/ws/graphs/{gid}") as ws:
        res = client.post(f"/graphs/{gid}/actions", json={"action": "add_vertex", "position": [1, 2]})
        assert res.status_code == 200

        msg = ws.receive_json()
        assert msg == {"type": "graph_updated", "graph_id": gid}


def test_graph_layout(client_and_redis: tuple[TestClient, fakeredis.FakeRedis], scenario_document: dict) -> None:
    client, _ = client_and_redis
    gid = _create(client, scenario_document)["graph_id"]
    client.post(f"/graphs/{gid}/actions", json={"action": "add_edge", "source": 2, "destination": 2})

    layout = client.get(f"/graphs/{gid}/layout").json()
    assert [(e["index"], e["endpoints"], e["curved"]) for e in layout["edges"]] == [
        (0, [0, 1], True),
        (1, [1, 0], True),
        (2, [1, 2], False),
        (3, [2, 2], True),
    ]
    assert layout["outgoing"] == [[0], [1, 2], [3]]

    missing = "00000000-0000-0000-0000-000000000000"
    assert client.get(f"/graphs/{missing}/layout").status_code == 404


def test_session_view_lists_locked_outgoing_edges(client_and_redis: tuple[TestClient, fakeredis.FakeRedis], scenario_document: dict) -> None:
    client, _ = client_and_redis
    gid = _create(client, scenario_document)["graph_id"]
    sid = client.post(f"/graphs/{gid}/sessions").json()["record"]["session_id"]

    view = client.post(f"/sessions/{sid}/moves", json={"edge_index": 0}).json()
    view = client.post(f"/sessions/{sid}/moves", json={"edge_index": 1}).json()
    view = client.post(f"/sessions/{sid}/moves", json={"edge_index": 0}).json()
    # Back on vertex 1 with the lock closed again: 1->0 leaves but is not legal.
    assert view["outgoing_edges"] == [1, 2]
    assert view["legal_moves"] == [2]


def test_move_by_clicked_vertex(client_and_redis: tuple[TestClient, fakeredis.FakeRedis], scenario_document: dict) -> None:
    client, _ = client_and_redis
    gid = _create(client, scenario_document)["graph_id"]
    sid = client.post(f"/graphs/{gid}/sessions").json()["record"]["session_id"]

    resp = client.post(f"/sessions/{sid}/moves", json={"vertex": 2})
    assert resp.status_code == 422
    assert "no legal move" in resp.json()["detail"]

    view = client.post(f"/sessions/{sid}/moves", json={"vertex": 1}).json()
    assert view["record"]["session"]["position"] == 1
    assert view["record"]["session"]["history"] == [0]

    assert client.post(f"/sessions/{sid}/moves", json={}).status_code == 422
    assert client.post(f"/sessions/{sid}/moves", json={"edge_index": 2, "vertex": 2}).status_code == 422
    assert client.get(f"/sessions/{sid}").json()["record"]["session"]["position"] == 1


def test_add_lock_with_empty_color_is_rejected(client_and_redis: tuple[TestClient, fakeredis.FakeRedis], scenario_document: dict) -> None:
    client, _ = client_and_redis
    gid = _create(client, scenario_document)["graph_id"]

    assert client.post(f"/graphs/{gid}/actions", json={"action": "add_lock", "color": ""}).status_code == 422
    assert client.get(f"/graphs/{gid}").json()["graph"]["locks"] == scenario_document["locks"]
