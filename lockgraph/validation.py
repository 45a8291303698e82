from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from lockgraph.api.models import Graph
from lockgraph.errors import MalformedDocument


class GraphValidator(ABC):
    """A small, composable referential check over a decoded graph."""

    @abstractmethod
    def validate(self, *, graph: Graph) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class VertexReferenceValidator(GraphValidator):
    """Every edge endpoint names an existing vertex."""

    def validate(self, *, graph: Graph) -> None:
        count = len(graph.vertices)
        for i, edge in enumerate(graph.edges):
            for v in edge.endpoints:
                if not 0 <= v < count:
                    raise MalformedDocument(f"edge {i} references vertex {v} (vertex count={count})")


@dataclass(frozen=True, slots=True)
class LockReferenceValidator(GraphValidator):
    """Every lock and key on every edge names an existing lock."""

    def validate(self, *, graph: Graph) -> None:
        count = len(graph.locks)
        for i, edge in enumerate(graph.edges):
            for field, refs in (("lock", edge.locks), ("key", edge.keys)):
                for ref in refs:
                    if not 0 <= ref < count:
                        raise MalformedDocument(f"edge {i} references {field} {ref} (lock count={count})")


@dataclass(frozen=True, slots=True)
class StartVertexValidator(GraphValidator):
    def validate(self, *, graph: Graph) -> None:
        if graph.start is not None and not 0 <= graph.start < len(graph.vertices):
            raise MalformedDocument(f"start vertex {graph.start} does not exist (vertex count={len(graph.vertices)})")


@dataclass(frozen=True, slots=True)
class DuplicateEdgeValidator(GraphValidator):
    def validate(self, *, graph: Graph) -> None:
        seen: set[tuple[int, int]] = set()
        for i, edge in enumerate(graph.edges):
            if edge.endpoints in seen:
                raise MalformedDocument(f"edge {i} duplicates {edge.source}->{edge.destination}")
            seen.add(edge.endpoints)


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[GraphValidator, ...]

    def validate(self, *, graph: Graph) -> None:
        for v in self.validators:
            v.validate(graph=graph)


# Duplicate lock/key references inside a single edge are tolerated on purpose:
# repeated locks check the same flag, repeated keys toggle twice.
DEFAULT_PIPELINE = ValidatorPipeline(
    validators=(
        VertexReferenceValidator(),
        LockReferenceValidator(),
        StartVertexValidator(),
        DuplicateEdgeValidator(),
    )
)


def validate_graph(graph: Graph) -> None:
    DEFAULT_PIPELINE.validate(graph=graph)
