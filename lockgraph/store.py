from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID, uuid4

import redis

from lockgraph.api.models import Graph, GraphRecord, SessionRecord
from lockgraph.engine import init_session
from lockgraph.graph_ops import new_graph

logger = logging.getLogger(__name__)

GRAPHS_SET_KEY = "lockgraph:graphs"
GRAPH_KEY_PREFIX = "lockgraph:graph:"  # + {uuid}
SESSION_KEY_PREFIX = "lockgraph:session:"  # + {uuid}


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _graph_key(graph_id: UUID) -> str:
    return f"{GRAPH_KEY_PREFIX}{graph_id}"


def _session_key(session_id: UUID) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


def save_graph(*, r: redis.Redis, record: GraphRecord) -> None:
    record.last_updated_at = _now()
    r.set(_graph_key(record.graph_id), record.model_dump_json())
    r.sadd(GRAPHS_SET_KEY, str(record.graph_id))


def get_graph(*, r: redis.Redis, graph_id: UUID) -> GraphRecord | None:
    raw = r.get(_graph_key(graph_id))
    if not raw:
        return None
    return GraphRecord.model_validate_json(raw)


def require_graph(*, r: redis.Redis, graph_id: UUID) -> GraphRecord:
    record = get_graph(r=r, graph_id=graph_id)
    if record is None:
        raise LookupError("Graph not found")
    return record


def create_graph(*, r: redis.Redis, name: str, graph: Graph | None = None) -> GraphRecord:
    now = _now()
    record = GraphRecord(
        graph_id=uuid4(),
        name=name,
        created_at=now,
        last_updated_at=now,
        graph=graph if graph is not None else new_graph(),
    )
    save_graph(r=r, record=record)
    logger.info("graph created graph_id=%s name=%r vertices=%d", record.graph_id, name, len(record.graph.vertices))
    return record


def delete_graph(*, r: redis.Redis, graph_id: UUID) -> bool:
    removed = r.delete(_graph_key(graph_id))
    r.srem(GRAPHS_SET_KEY, str(graph_id))
    if removed:
        logger.info("graph deleted graph_id=%s", graph_id)
    return bool(removed)


def list_graphs(*, r: redis.Redis) -> list[GraphRecord]:
    out: list[GraphRecord] = []
    for sid in sorted(r.smembers(GRAPHS_SET_KEY)):
        try:
            gid = UUID(sid)
        except ValueError:
            continue
        record = get_graph(r=r, graph_id=gid)
        if record is not None:
            out.append(record)
    out.sort(key=lambda rec: rec.created_at, reverse=True)
    return out


def save_session(*, r: redis.Redis, record: SessionRecord) -> None:
    record.last_updated_at = _now()
    r.set(_session_key(record.session_id), record.model_dump_json())


def get_session(*, r: redis.Redis, session_id: UUID) -> SessionRecord | None:
    raw = r.get(_session_key(session_id))
    if not raw:
        return None
    return SessionRecord.model_validate_json(raw)


def require_session(*, r: redis.Redis, session_id: UUID) -> SessionRecord:
    record = get_session(r=r, session_id=session_id)
    if record is None:
        raise LookupError("Session not found")
    return record


def create_session(*, r: redis.Redis, graph_id: UUID) -> SessionRecord:
    """Start play on the stored graph.

    The session keeps its own snapshot, so later edits to the graph do not
    affect it.
    """

    graph_record = require_graph(r=r, graph_id=graph_id)
    session = init_session(graph_record.graph)

    now = _now()
    record = SessionRecord(
        session_id=uuid4(),
        graph_id=graph_id,
        created_at=now,
        last_updated_at=now,
        session=session,
    )
    save_session(r=r, record=record)
    logger.info(
        "session started session_id=%s graph_id=%s start=%d terminal=%s",
        record.session_id,
        graph_id,
        session.position,
        session.terminal,
    )
    return record
