from __future__ import annotations


class GraphError(ValueError):
    """Base for every error raised by the graph model, codec and engine.

    Subclasses ValueError so the service/HTTP layers can keep treating
    caller mistakes uniformly.
    """


class OutOfRange(GraphError):
    """A vertex, edge or lock index is outside the graph's bounds."""


class InvalidEndpoint(GraphError):
    """An edge endpoint does not name an existing vertex."""


class DuplicateEdge(GraphError):
    """An edge with the same (source, destination) already exists."""


class NoStartVertex(GraphError):
    """A session was requested for a graph without a start vertex."""


class IllegalMove(GraphError):
    """The edge is not currently traversable from the session state."""


class MalformedDocument(GraphError):
    """A serialized graph failed structural or referential validation."""
