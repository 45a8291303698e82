"""Graph documents: the JSON shape the editor saves and loads.

Decoding happens once, here. Anything the engine receives has already passed
both the structural (pydantic) and the referential (validator pipeline) checks.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from lockgraph.api.models import Graph
from lockgraph.errors import MalformedDocument
from lockgraph.validation import validate_graph


def load_graph(raw: str | bytes | Mapping[str, Any]) -> Graph:
    """Decode and validate a graph document, all or nothing."""

    try:
        if isinstance(raw, (str, bytes)):
            graph = Graph.model_validate_json(raw)
        else:
            graph = Graph.model_validate(raw)
    except ValidationError as e:
        raise MalformedDocument(f"invalid graph document: {e}") from e

    validate_graph(graph)
    return graph


def dump_graph(graph: Graph) -> str:
    return graph.model_dump_json()
