"""Editing operations over an authored Graph.

Every operation validates its arguments first, then returns a new Graph built
from a deep copy. The graph passed in is never mutated, so a failed call leaves
the caller's value exactly as it was.

Removals re-index: deleting a vertex or a lock shifts every higher index down by
one wherever it is referenced, so indices stay dense and nothing dangles.
"""

from __future__ import annotations

from lockgraph.api.models import Edge, Graph, Lock, PlayerType, Vertex
from lockgraph.errors import DuplicateEdge, InvalidEndpoint, OutOfRange


def _require_index(kind: str, index: int, count: int) -> None:
    if not 0 <= index < count:
        raise OutOfRange(f"{kind} index {index} out of range (count={count})")


def _shift_down(indices: list[int], removed: int) -> list[int]:
    return [i - 1 if i > removed else i for i in indices if i != removed]


def new_graph() -> Graph:
    return Graph(vertices=[], edges=[], start=None, locks=[])


def add_vertex(
    graph: Graph,
    *,
    position: tuple[float, float],
    owner: PlayerType = PlayerType.player_1,
    target: bool = False,
) -> Graph:
    updated = graph.model_copy(deep=True)
    updated.vertices.append(
        Vertex(position=(float(position[0]), float(position[1])), type=owner, target=target)
    )
    return updated


def remove_vertex(graph: Graph, *, index: int) -> Graph:
    _require_index("vertex", index, len(graph.vertices))

    updated = graph.model_copy(deep=True)
    del updated.vertices[index]

    edges: list[Edge] = []
    for edge in updated.edges:
        if index in edge.endpoints:
            continue
        edge.endpoints = tuple(v - 1 if v > index else v for v in edge.endpoints)  # type: ignore[assignment]
        edges.append(edge)
    updated.edges = edges

    if updated.start is not None:
        if updated.start == index:
            updated.start = None
        elif updated.start > index:
            updated.start -= 1
    return updated


def move_vertex(graph: Graph, *, index: int, position: tuple[float, float]) -> Graph:
    _require_index("vertex", index, len(graph.vertices))
    updated = graph.model_copy(deep=True)
    updated.vertices[index].position = (float(position[0]), float(position[1]))
    return updated


def add_edge(graph: Graph, *, source: int, destination: int) -> Graph:
    count = len(graph.vertices)
    for endpoint in (source, destination):
        if not 0 <= endpoint < count:
            raise InvalidEndpoint(f"vertex {endpoint} does not exist (count={count})")
    if any(e.endpoints == (source, destination) for e in graph.edges):
        raise DuplicateEdge(f"edge {source}->{destination} already exists")

    updated = graph.model_copy(deep=True)
    updated.edges.append(Edge(endpoints=(source, destination), locks=[], keys=[]))
    return updated


def remove_edge(graph: Graph, *, index: int) -> Graph:
    _require_index("edge", index, len(graph.edges))
    updated = graph.model_copy(deep=True)
    del updated.edges[index]
    return updated


def add_lock(graph: Graph, *, color: str) -> Graph:
    # Color uniqueness is the caller's business (see lockgraph.palette).
    updated = graph.model_copy(deep=True)
    updated.locks.append(Lock(color=color, open=False))
    return updated


def remove_lock(graph: Graph, *, index: int) -> Graph:
    _require_index("lock", index, len(graph.locks))

    updated = graph.model_copy(deep=True)
    del updated.locks[index]
    for edge in updated.edges:
        edge.locks = _shift_down(edge.locks, index)
        edge.keys = _shift_down(edge.keys, index)
    return updated


def set_lock_open(graph: Graph, *, index: int, open: bool) -> Graph:
    _require_index("lock", index, len(graph.locks))
    updated = graph.model_copy(deep=True)
    updated.locks[index].open = open
    return updated


def _edit_edge_refs(graph: Graph, *, edge_index: int, lock_index: int, field: str, attach: bool) -> Graph:
    _require_index("edge", edge_index, len(graph.edges))
    _require_index("lock", lock_index, len(graph.locks))

    updated = graph.model_copy(deep=True)
    edge = updated.edges[edge_index]
    refs: list[int] = getattr(edge, field)
    if attach:
        if lock_index not in refs:
            refs.append(lock_index)
    else:
        setattr(edge, field, [i for i in refs if i != lock_index])
    return updated


def attach_lock(graph: Graph, *, edge_index: int, lock_index: int) -> Graph:
    return _edit_edge_refs(graph, edge_index=edge_index, lock_index=lock_index, field="locks", attach=True)


def detach_lock(graph: Graph, *, edge_index: int, lock_index: int) -> Graph:
    return _edit_edge_refs(graph, edge_index=edge_index, lock_index=lock_index, field="locks", attach=False)


def attach_key(graph: Graph, *, edge_index: int, lock_index: int) -> Graph:
    return _edit_edge_refs(graph, edge_index=edge_index, lock_index=lock_index, field="keys", attach=True)


def detach_key(graph: Graph, *, edge_index: int, lock_index: int) -> Graph:
    return _edit_edge_refs(graph, edge_index=edge_index, lock_index=lock_index, field="keys", attach=False)


def set_start(graph: Graph, *, index: int | None) -> Graph:
    if index is not None:
        _require_index("vertex", index, len(graph.vertices))
    updated = graph.model_copy(deep=True)
    updated.start = index
    return updated


def set_target(graph: Graph, *, index: int, target: bool) -> Graph:
    _require_index("vertex", index, len(graph.vertices))
    updated = graph.model_copy(deep=True)
    updated.vertices[index].target = target
    return updated


def set_owner(graph: Graph, *, index: int, owner: PlayerType) -> Graph:
    _require_index("vertex", index, len(graph.vertices))
    updated = graph.model_copy(deep=True)
    updated.vertices[index].type = PlayerType(owner)
    return updated


def toggle_owner(graph: Graph, *, index: int) -> Graph:
    _require_index("vertex", index, len(graph.vertices))
    current = graph.vertices[index].type
    other = PlayerType.player_2 if current == PlayerType.player_1 else PlayerType.player_1
    return set_owner(graph, index=index, owner=other)


def has_reverse_edge(graph: Graph, *, index: int) -> bool:
    """Whether the edge should be drawn curved: a reverse edge exists, or it is a loop."""

    _require_index("edge", index, len(graph.edges))
    source, destination = graph.edges[index].endpoints
    if source == destination:
        return True
    return any(e.endpoints == (destination, source) for e in graph.edges)


def outgoing_edges(graph: Graph, *, vertex: int) -> list[int]:
    _require_index("vertex", vertex, len(graph.vertices))
    return [i for i, e in enumerate(graph.edges) if e.source == vertex]
