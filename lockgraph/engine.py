"""Token movement over a fixed graph.

A session is a labelled transition system over (position, lock_open) pairs.
The engine does not referee turns: any legal outgoing edge may be applied
whoever owns the current vertex. ``current_owner`` is informational only, and
a non-target vertex with no legal move is simply a state with no moves; what
that means for the players (usually "the player to move loses") is a rule of
the surrounding game.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from lockgraph.api.models import GameSession, Graph, PlayerType, SessionPhase
from lockgraph.errors import IllegalMove, NoStartVertex
from lockgraph.fsm import SessionFSM
from lockgraph.validation import validate_graph


@dataclass(frozen=True, slots=True)
class LegalMoves:
    """Edge indices traversable from a session state.

    Evaluated lazily on every iteration, so it can be iterated any number of
    times. Empty once the session is terminal.
    """

    session: GameSession

    def __iter__(self) -> Iterator[int]:
        if self.session.terminal:
            return
        lock_open = self.session.lock_open
        for i, edge in enumerate(self.session.graph.edges):
            if edge.source == self.session.position and all(lock_open[lock] for lock in edge.locks):
                yield i


def init_session(graph: Graph) -> GameSession:
    """Start play at the graph's start vertex.

    Graphs built in code get the same referential checks as ``load_graph``:
    a negative or dangling index raises ``MalformedDocument``.
    """

    if graph.start is None:
        raise NoStartVertex("graph has no start vertex")
    validate_graph(graph)

    snapshot = graph.model_copy(deep=True)
    terminal = snapshot.vertices[snapshot.start].target
    return GameSession(
        graph=snapshot,
        position=snapshot.start,
        lock_open=[lock.open for lock in snapshot.locks],
        terminal=terminal,
        phase=SessionPhase.finished if terminal else SessionPhase.playing,
        history=[],
    )


def reset_session(graph: Graph) -> GameSession:
    """Fresh session from the graph's stored start and lock states."""

    return init_session(graph)


def legal_moves(session: GameSession) -> LegalMoves:
    return LegalMoves(session)


def apply_move(session: GameSession, edge_index: int) -> GameSession:
    """Traverse an edge: toggle its keys, move, and test for a target.

    Keys toggle rather than set, so a key listed twice on one edge cancels out.
    The returned session is new; ``session`` is left as it was.
    """

    if edge_index not in legal_moves(session):
        raise IllegalMove(f"edge {edge_index} is not a legal move from vertex {session.position}")

    graph = session.graph
    edge = graph.edges[edge_index]

    lock_open = list(session.lock_open)
    for key in edge.keys:
        lock_open[key] = not lock_open[key]

    moved = session.model_copy(
        update={
            "position": edge.destination,
            "lock_open": lock_open,
            "terminal": session.terminal or graph.vertices[edge.destination].target,
            "history": [*session.history, edge_index],
        }
    )

    fsm = SessionFSM(moved)
    if moved.terminal:
        fsm.reach_target()
    else:
        fsm.move()
    fsm.sync_phase_to_model()
    return moved


def edge_to_vertex(session: GameSession, vertex: int) -> int:
    """The legal edge leading from the current position to ``vertex``.

    Edges are unique per (source, destination), so there is at most one.
    """

    for i in legal_moves(session):
        if session.graph.edges[i].destination == vertex:
            return i
    raise IllegalMove(f"no legal move from vertex {session.position} to vertex {vertex}")


def current_owner(session: GameSession) -> PlayerType:
    return session.graph.vertices[session.position].type


def is_terminal(session: GameSession) -> bool:
    return session.terminal
