from __future__ import annotations

from typing import Any
from uuid import UUID

import redis
from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect, status

from lockgraph.actions import dispatch_edit, dispatch_move, dispatch_reset
from lockgraph.api.deps import get_redis
from lockgraph.api.models import (
    EDIT_ACTION_ADAPTER,
    EdgeLayout,
    GraphCreateRequest,
    GraphLayout,
    GraphListResponse,
    GraphRecord,
    MoveRequest,
    SessionRecord,
    SessionView,
)
from lockgraph.documents import dump_graph, load_graph
from lockgraph.engine import current_owner, is_terminal, legal_moves
from lockgraph.graph_ops import has_reverse_edge, outgoing_edges
from lockgraph.palette import LOCK_COLORS
from lockgraph.store import create_graph, create_session, delete_graph, get_graph, get_session, list_graphs
from lockgraph.streams import EventStream, ResourceKind, read_events
from lockgraph.websocket_hub import hub

router = APIRouter()


def _session_view(record: SessionRecord) -> SessionView:
    session = record.session
    return SessionView(
        record=record,
        legal_moves=list(legal_moves(session)),
        outgoing_edges=outgoing_edges(session.graph, vertex=session.position),
        current_owner=current_owner(session),
        terminal=is_terminal(session),
    )


def _check_count(count: int) -> None:
    if count < 1 or count > 200:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="count must be between 1 and 200")


async def _keep_open(kind: ResourceKind, resource_id: UUID, websocket: WebSocket) -> None:
    rid = str(resource_id)
    await hub.subscribe(kind, rid, websocket)
    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.unsubscribe(kind, rid, websocket)
    except Exception:
        await hub.unsubscribe(kind, rid, websocket)
        raise


@router.websocket("/ws/graphs/{graph_id}")
async def graph_updates_ws(websocket: WebSocket, graph_id: UUID) -> None:
    await _keep_open("graph", graph_id, websocket)


@router.websocket("/ws/sessions/{session_id}")
async def session_updates_ws(websocket: WebSocket, session_id: UUID) -> None:
    await _keep_open("session", session_id, websocket)


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/palette")
async def palette_route() -> dict[str, list[str]]:
    return {"colors": list(LOCK_COLORS)}


@router.post("/graphs", response_model=GraphRecord, status_code=status.HTTP_201_CREATED)
async def create_graph_route(payload: GraphCreateRequest, r: redis.Redis = Depends(get_redis)) -> GraphRecord:
    try:
        graph = load_graph(payload.document) if payload.document is not None else None
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return create_graph(r=r, name=payload.name, graph=graph)


@router.get("/graphs", response_model=GraphListResponse)
async def list_graphs_route(r: redis.Redis = Depends(get_redis)) -> GraphListResponse:
    return GraphListResponse(graphs=list_graphs(r=r))


@router.get("/graphs/{graph_id}", response_model=GraphRecord)
async def get_graph_route(graph_id: UUID, r: redis.Redis = Depends(get_redis)) -> GraphRecord:
    record = get_graph(r=r, graph_id=graph_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Graph not found")
    return record


@router.delete("/graphs/{graph_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_graph_route(graph_id: UUID, r: redis.Redis = Depends(get_redis)) -> Response:
    if not delete_graph(r=r, graph_id=graph_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Graph not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/graphs/{graph_id}/document")
async def graph_document_route(graph_id: UUID, r: redis.Redis = Depends(get_redis)) -> Response:
    """Saved-file form of the graph, as the editor's Save button downloads it."""

    record = get_graph(r=r, graph_id=graph_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Graph not found")
    return Response(
        content=dump_graph(record.graph),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="graph.json"'},
    )


@router.get("/graphs/{graph_id}/layout", response_model=GraphLayout)
async def graph_layout_route(graph_id: UUID, r: redis.Redis = Depends(get_redis)) -> GraphLayout:
    """Drawing hints for the editor: which edges arc, and what leaves each vertex."""

    record = get_graph(r=r, graph_id=graph_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Graph not found")
    graph = record.graph
    return GraphLayout(
        edges=[
            EdgeLayout(index=i, endpoints=edge.endpoints, curved=has_reverse_edge(graph, index=i))
            for i, edge in enumerate(graph.edges)
        ],
        outgoing=[outgoing_edges(graph, vertex=v) for v in range(len(graph.vertices))],
    )


@router.post("/graphs/{graph_id}/actions", response_model=GraphRecord)
async def edit_action_route(
    graph_id: UUID,
    body: dict[str, Any],
    r: redis.Redis = Depends(get_redis),
) -> GraphRecord:
    try:
        action = EDIT_ACTION_ADAPTER.validate_python(body)
        result = dispatch_edit(r=r, graph_id=graph_id, action=action)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    await hub.notify("graph", str(graph_id))
    return result.record


@router.post("/graphs/{graph_id}/sessions", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def create_session_route(graph_id: UUID, r: redis.Redis = Depends(get_redis)) -> SessionView:
    try:
        record = create_session(r=r, graph_id=graph_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return _session_view(record)


@router.get("/sessions/{session_id}", response_model=SessionView)
async def get_session_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> SessionView:
    record = get_session(r=r, session_id=session_id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return _session_view(record)


@router.post("/sessions/{session_id}/moves", response_model=SessionView)
async def move_route(session_id: UUID, payload: MoveRequest, r: redis.Redis = Depends(get_redis)) -> SessionView:
    try:
        result = dispatch_move(r=r, session_id=session_id, edge_index=payload.edge_index, vertex=payload.vertex)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    await hub.notify("session", str(session_id))
    return _session_view(result.record)


@router.post("/sessions/{session_id}/reset", response_model=SessionView)
async def reset_route(session_id: UUID, r: redis.Redis = Depends(get_redis)) -> SessionView:
    try:
        result = dispatch_reset(r=r, session_id=session_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    await hub.notify("session", str(session_id))
    return _session_view(result.record)


@router.get("/graphs/{graph_id}/events")
async def graph_events_route(
    graph_id: UUID,
    count: int = 20,
    start: str = "-",
    end: str = "+",
    r: redis.Redis = Depends(get_redis),
) -> dict[str, object]:
    _check_count(count)
    stream = EventStream(kind="graph", resource_id=str(graph_id))
    return {"stream": stream.key, "events": read_events(r=r, stream=stream, count=count, start=start, end=end)}


@router.get("/sessions/{session_id}/events")
async def session_events_route(
    session_id: UUID,
    count: int = 20,
    start: str = "-",
    end: str = "+",
    r: redis.Redis = Depends(get_redis),
) -> dict[str, object]:
    _check_count(count)
    stream = EventStream(kind="session", resource_id=str(session_id))
    return {"stream": stream.key, "events": read_events(r=r, stream=stream, count=count, start=start, end=end)}
