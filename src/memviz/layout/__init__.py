"""Layout algorithms and the pin/release layout engine."""

from memviz.layout.algorithms import (
    ForceConfig,
    LayoutName,
    LayoutState,
    NodePosition,
    apply_layout,
    compute_degrees,
    compute_levels,
    golden_spiral_point,
    resolve_layout_name,
)
from memviz.layout.engine import LayoutEngine

__all__ = [
    "ForceConfig",
    "LayoutEngine",
    "LayoutName",
    "LayoutState",
    "NodePosition",
    "apply_layout",
    "compute_degrees",
    "compute_levels",
    "golden_spiral_point",
    "resolve_layout_name",
]
