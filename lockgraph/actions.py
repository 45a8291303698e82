from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

import redis

from lockgraph import graph_ops
from lockgraph.api.models import (
    AddEdgeAction,
    AddLockAction,
    AddVertexAction,
    ClearGraphAction,
    EdgeLockAction,
    EditAction,
    Graph,
    GraphRecord,
    ImportGraphAction,
    MoveVertexAction,
    RemoveEdgeAction,
    RemoveLockAction,
    RemoveVertexAction,
    SessionRecord,
    SetLockOpenAction,
    SetOwnerAction,
    SetStartAction,
    SetTargetAction,
    ToggleOwnerAction,
)
from lockgraph.documents import load_graph
from lockgraph.engine import apply_move, edge_to_vertex, reset_session
from lockgraph.lock import resource_lock
from lockgraph.palette import next_lock_color
from lockgraph.store import require_graph, require_session, save_graph, save_session
from lockgraph.streams import EventStream, publish_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GraphActionResult:
    record: GraphRecord
    event_id: str


@dataclass(frozen=True, slots=True)
class SessionActionResult:
    record: SessionRecord
    event_id: str


def _now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


def apply_edit(graph: Graph, action: EditAction) -> Graph:
    """Map a typed editor action onto the matching graph operation."""

    if isinstance(action, AddVertexAction):
        return graph_ops.add_vertex(graph, position=action.position, owner=action.owner, target=action.target)
    if isinstance(action, RemoveVertexAction):
        return graph_ops.remove_vertex(graph, index=action.index)
    if isinstance(action, MoveVertexAction):
        return graph_ops.move_vertex(graph, index=action.index, position=action.position)
    if isinstance(action, AddEdgeAction):
        return graph_ops.add_edge(graph, source=action.source, destination=action.destination)
    if isinstance(action, RemoveEdgeAction):
        return graph_ops.remove_edge(graph, index=action.index)
    if isinstance(action, AddLockAction):
        color = action.color if action.color is not None else next_lock_color(graph)
        if color is None:
            raise ValueError("No free lock colors left in the palette")
        return graph_ops.add_lock(graph, color=color)
    if isinstance(action, RemoveLockAction):
        return graph_ops.remove_lock(graph, index=action.index)
    if isinstance(action, SetLockOpenAction):
        return graph_ops.set_lock_open(graph, index=action.index, open=action.open)
    if isinstance(action, EdgeLockAction):
        op = getattr(graph_ops, action.action)
        return op(graph, edge_index=action.edge_index, lock_index=action.lock_index)
    if isinstance(action, SetStartAction):
        return graph_ops.set_start(graph, index=action.index)
    if isinstance(action, SetTargetAction):
        return graph_ops.set_target(graph, index=action.index, target=action.target)
    if isinstance(action, SetOwnerAction):
        return graph_ops.set_owner(graph, index=action.index, owner=action.owner)
    if isinstance(action, ToggleOwnerAction):
        return graph_ops.toggle_owner(graph, index=action.index)
    if isinstance(action, ClearGraphAction):
        return graph_ops.new_graph()
    if isinstance(action, ImportGraphAction):
        return load_graph(action.document)
    raise ValueError(f"Unknown action: {action!r}")


def dispatch_edit(*, r: redis.Redis, graph_id: UUID, action: EditAction) -> GraphActionResult:
    """Entry point for every editor change.

    Loads the graph under its lock, applies the action, persists the result
    and appends a `graph_changed` event. A failing action leaves the stored
    graph untouched.
    """

    gid = str(graph_id)
    with resource_lock(r=r, key=f"graph:{gid}"):
        record = require_graph(r=r, graph_id=graph_id)
        record.graph = apply_edit(record.graph, action)
        save_graph(r=r, record=record)

        event_id = publish_event(
            r=r,
            stream=EventStream(kind="graph", resource_id=gid),
            fields={
                "type": "graph_changed",
                "graph_id": gid,
                "action": action.action,
                "ts": _now_iso(),
            },
        )

    logger.info("edit applied graph_id=%s action=%s", gid, action.action)
    logger.debug(
        "graph_id=%s now has vertices=%d edges=%d locks=%d start=%s",
        gid,
        len(record.graph.vertices),
        len(record.graph.edges),
        len(record.graph.locks),
        record.graph.start,
    )
    return GraphActionResult(record=record, event_id=event_id)


def dispatch_move(
    *,
    r: redis.Redis,
    session_id: UUID,
    edge_index: int | None = None,
    vertex: int | None = None,
) -> SessionActionResult:
    """Apply one move, named by edge index or by destination vertex."""

    if (edge_index is None) == (vertex is None):
        raise ValueError("give exactly one of edge_index or vertex")

    sid = str(session_id)
    with resource_lock(r=r, key=f"session:{sid}"):
        record = require_session(r=r, session_id=session_id)
        if edge_index is None:
            edge_index = edge_to_vertex(record.session, vertex)
        record.session = apply_move(record.session, edge_index)
        save_session(r=r, record=record)

        session = record.session
        event_id = publish_event(
            r=r,
            stream=EventStream(kind="session", resource_id=sid),
            fields={
                "type": "target_reached" if session.terminal else "session_moved",
                "session_id": sid,
                "edge_index": str(edge_index),
                "position": str(session.position),
                "lock_open": ",".join("1" if o else "0" for o in session.lock_open),
                "ts": _now_iso(),
            },
        )

    if session.terminal:
        logger.info("target reached session_id=%s position=%d moves=%d", sid, session.position, len(session.history))
    else:
        logger.info("move applied session_id=%s edge=%d position=%d", sid, edge_index, session.position)
    return SessionActionResult(record=record, event_id=event_id)


def dispatch_reset(*, r: redis.Redis, session_id: UUID) -> SessionActionResult:
    """Restart a session from the snapshot it was created with."""

    sid = str(session_id)
    with resource_lock(r=r, key=f"session:{sid}"):
        record = require_session(r=r, session_id=session_id)
        record.session = reset_session(record.session.graph)
        save_session(r=r, record=record)

        event_id = publish_event(
            r=r,
            stream=EventStream(kind="session", resource_id=sid),
            fields={
                "type": "session_reset",
                "session_id": sid,
                "position": str(record.session.position),
                "ts": _now_iso(),
            },
        )

    logger.info("session reset session_id=%s", sid)
    return SessionActionResult(record=record, event_id=event_id)
