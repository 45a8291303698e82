from __future__ import annotations

from lockgraph.api.models import Graph

# Editor palette, in allocation order. A graph never needs more locks than this.
LOCK_COLORS: tuple[str, ...] = (
    "#dc2626",
    "#22c55e",
    "#3b82f6",
    "#f97316",
    "#facc15",
    "#6366f1",
    "#8b5cf6",
    "#ec4899",
    "black",
)


def next_lock_color(graph: Graph) -> str | None:
    """First palette color no current lock uses, or None when all are taken.

    This is an allocation policy for callers creating locks; the graph model
    itself accepts any color string, duplicates included.
    """

    used = {lock.color for lock in graph.locks}
    return next((c for c in LOCK_COLORS if c not in used), None)
