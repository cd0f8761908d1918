"""Resolve a pointer position to the most specific atom under it."""

from __future__ import annotations

from mathsurf.core.config import DEFAULT_CONFIG, SurfaceConfig
from mathsurf.surface.node import SurfaceMap, SurfaceNode


def hit_test_point(
    surface_map: SurfaceMap,
    x: float,
    y: float,
    config: SurfaceConfig | None = None,
) -> SurfaceNode | None:
    """Return the smallest-area atom containing the absolute point ``(x, y)``.

    Operator-role atoms get ``operator_hit_tolerance_px`` of vertical slack.
    Equal areas go to the deeper node. Returns ``None`` for a click outside
    every atom.
    """

    cfg = config or DEFAULT_CONFIG
    rx, ry = surface_map.to_relative(x, y)
    candidates = [
        atom
        for atom in surface_map.atoms
        if atom.bbox.contains(
            rx,
            ry,
            tolerance_y=cfg.operator_hit_tolerance_px if atom.role == "operator" else 0.0,
        )
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda atom: (atom.bbox.area, -atom.depth))
