"""Directed lock/key graphs and the pursuit game played on them.

``graph_ops``, ``documents`` and ``engine`` are the pure core; the redis store,
action dispatch and FastAPI routes wrap them for the editor/play UI.
"""
