from __future__ import annotations

from lockgraph import graph_ops
from lockgraph.api.models import Graph
from lockgraph.palette import LOCK_COLORS, next_lock_color


def test_palette_has_nine_distinct_colors() -> None:
    assert len(LOCK_COLORS) == 9
    assert len(set(LOCK_COLORS)) == 9


def test_next_lock_color_allocates_in_order() -> None:
    g = graph_ops.new_graph()
    assert next_lock_color(g) == LOCK_COLORS[0]
    g = graph_ops.add_lock(g, color=LOCK_COLORS[0])
    assert next_lock_color(g) == LOCK_COLORS[1]


def test_next_lock_color_reuses_freed_color(scenario_graph: Graph) -> None:
    g = graph_ops.add_lock(scenario_graph, color=LOCK_COLORS[1])
    g = graph_ops.remove_lock(g, index=0)
    assert next_lock_color(g) == LOCK_COLORS[0]


def test_next_lock_color_exhausted() -> None:
    g = graph_ops.new_graph()
    for color in LOCK_COLORS:
        g = graph_ops.add_lock(g, color=color)
    assert next_lock_color(g) is None
