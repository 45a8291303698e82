from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal, Union
from uuid import UUID

from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, TypeAdapter, model_validator


class PlayerType(StrEnum):
    player_1 = "Player 1"
    player_2 = "Player 2"


class Vertex(BaseModel):
    # Editor coordinates; game logic never reads them.
    position: tuple[StrictFloat, StrictFloat]
    type: PlayerType
    target: StrictBool


class Edge(BaseModel):
    endpoints: tuple[StrictInt, StrictInt]
    locks: list[StrictInt]
    keys: list[StrictInt]

    @property
    def source(self) -> int:
        return self.endpoints[0]

    @property
    def destination(self) -> int:
        return self.endpoints[1]


class Lock(BaseModel):
    color: str
    # Initial state only; sessions keep their own copy.
    open: StrictBool


class Graph(BaseModel):
    """Authored graph, field-for-field the shape of a saved document."""

    vertices: list[Vertex]
    edges: list[Edge]
    start: StrictInt | None
    locks: list[Lock]


class SessionPhase(StrEnum):
    playing = "playing"
    finished = "finished"


class GameSession(BaseModel):
    """One playthrough of a graph snapshot."""

    graph: Graph
    position: int
    lock_open: list[bool]
    terminal: bool = False
    phase: SessionPhase = SessionPhase.playing

    # Edge indices applied so far, oldest first.
    history: list[int] = Field(default_factory=list)


class GraphRecord(BaseModel):
    graph_id: UUID
    name: str
    created_at: datetime
    last_updated_at: datetime
    graph: Graph


class SessionRecord(BaseModel):
    session_id: UUID
    graph_id: UUID
    created_at: datetime
    last_updated_at: datetime
    session: GameSession


class GraphCreateRequest(BaseModel):
    name: str = Field("untitled", min_length=1, max_length=200)
    # Optional saved document to start from; validated like a file load.
    document: dict[str, Any] | None = None


class GraphListResponse(BaseModel):
    graphs: list[GraphRecord]


class EdgeLayout(BaseModel):
    index: int
    endpoints: tuple[int, int]
    # Drawn as an arc: a reverse edge exists, or the edge is a loop.
    curved: bool


class GraphLayout(BaseModel):
    edges: list[EdgeLayout]
    # Edge indices leaving each vertex, by vertex index.
    outgoing: list[list[int]]


class MoveRequest(BaseModel):
    """Either an edge index, or the vertex the player clicked."""

    edge_index: int | None = None
    vertex: int | None = None

    @model_validator(mode="after")
    def _one_target(self) -> MoveRequest:
        if (self.edge_index is None) == (self.vertex is None):
            raise ValueError("give exactly one of edge_index or vertex")
        return self


class SessionView(BaseModel):
    record: SessionRecord
    legal_moves: list[int]
    # Every edge leaving the current vertex, locked or not.
    outgoing_edges: list[int]
    current_owner: PlayerType
    terminal: bool


# Typed editor actions, one per graph operation. The `action` field discriminates.


class AddVertexAction(BaseModel):
    action: Literal["add_vertex"]
    position: tuple[float, float] = (0.0, 0.0)
    owner: PlayerType = PlayerType.player_1
    target: bool = False


class RemoveVertexAction(BaseModel):
    action: Literal["remove_vertex"]
    index: int


class MoveVertexAction(BaseModel):
    action: Literal["move_vertex"]
    index: int
    position: tuple[float, float]


class AddEdgeAction(BaseModel):
    action: Literal["add_edge"]
    source: int
    destination: int


class RemoveEdgeAction(BaseModel):
    action: Literal["remove_edge"]
    index: int


class AddLockAction(BaseModel):
    action: Literal["add_lock"]
    # Omitted => next free palette color.
    color: str | None = Field(None, min_length=1)


class RemoveLockAction(BaseModel):
    action: Literal["remove_lock"]
    index: int


class SetLockOpenAction(BaseModel):
    action: Literal["set_lock_open"]
    index: int
    open: bool


class EdgeLockAction(BaseModel):
    action: Literal["attach_lock", "detach_lock", "attach_key", "detach_key"]
    edge_index: int
    lock_index: int


class SetStartAction(BaseModel):
    action: Literal["set_start"]
    index: int | None


class SetTargetAction(BaseModel):
    action: Literal["set_target"]
    index: int
    target: bool


class SetOwnerAction(BaseModel):
    action: Literal["set_owner"]
    index: int
    owner: PlayerType


class ToggleOwnerAction(BaseModel):
    action: Literal["toggle_owner"]
    index: int


class ClearGraphAction(BaseModel):
    action: Literal["clear"]


class ImportGraphAction(BaseModel):
    action: Literal["import"]
    document: dict[str, Any]


EditAction = Annotated[
    Union[
        AddVertexAction,
        RemoveVertexAction,
        MoveVertexAction,
        AddEdgeAction,
        RemoveEdgeAction,
        AddLockAction,
        RemoveLockAction,
        SetLockOpenAction,
        EdgeLockAction,
        SetStartAction,
        SetTargetAction,
        SetOwnerAction,
        ToggleOwnerAction,
        ClearGraphAction,
        ImportGraphAction,
    ],
    Field(discriminator="action"),
]

EDIT_ACTION_ADAPTER: TypeAdapter[EditAction] = TypeAdapter(EditAction)
