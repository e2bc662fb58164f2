"""Layout algorithms.

Pure functions: given a GraphStore and a layout name, produce coordinates
for every node (or, for the force layout, a configuration for the live
simulation). Nothing here touches timers or the renderer.
"""

import logging
import math
from collections import deque
from dataclasses import dataclass, field
from enum import Enum

import networkx as nx

from memviz.errors import UnknownLayoutError
from memviz.graph.store import GraphStore

logger = logging.getLogger(__name__)

GRID_SPACING = 30.0
HIERARCHY_SPACING_2D = 40.0
HIERARCHY_SPACING_3D = 80.0
CONCENTRIC_BASE_RADIUS = 30.0
CONCENTRIC_RADIUS_RANGE = 100.0
GOLDEN_ANGLE_FACTOR = math.pi * (1 + math.sqrt(5))


class LayoutName(str, Enum):
    """Supported layouts. Only FORCE is continuous; the rest are one-shot."""

    FORCE = "force"
    CIRCLE = "circle"
    GRID = "grid"
    CUBE = "cube"
    SPHERE = "sphere"
    HIERARCHICAL = "hierarchical"
    CONCENTRIC = "concentric"


LAYOUT_ALIASES = {"cose": LayoutName.FORCE}

# Volumetric layouts collapse to their planar counterpart in 2D sessions
PLANAR_FALLBACK = {LayoutName.CUBE: LayoutName.GRID, LayoutName.SPHERE: LayoutName.CIRCLE}


@dataclass
class NodePosition:
    """Current coordinates plus optional pins for the live simulation."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    fx: float | None = None
    fy: float | None = None
    fz: float | None = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None

    def pin(self) -> None:
        self.fx, self.fy, self.fz = self.x, self.y, self.z

    def release(self) -> None:
        self.fx = self.fy = self.fz = None

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z, "fx": self.fx, "fy": self.fy, "fz": self.fz}


@dataclass
class ForceConfig:
    """Parameters for the continuous force simulation.

    The per-axis centering forces pull every node (not just the centroid)
    toward the origin, so disconnected components drift toward a shared
    focal region instead of flying apart.
    """

    charge_strength: float = -120.0
    link_distance: float = 30.0
    alpha_decay: float = 0.02
    velocity_decay: float = 0.3
    warmup_ticks: int = 100
    cooldown_ticks: int = 0
    center_strength: float = 0.03

    def to_dict(self) -> dict:
        return {
            "chargeStrength": self.charge_strength,
            "linkDistance": self.link_distance,
            "alphaDecay": self.alpha_decay,
            "velocityDecay": self.velocity_decay,
            "warmupTicks": self.warmup_ticks,
            "cooldownTicks": self.cooldown_ticks,
            "centerForces": {axis: self.center_strength for axis in ("x", "y", "z")},
        }


@dataclass
class LayoutState:
    """Positions produced by a layout, keyed by node id."""

    name: LayoutName
    dimensions: int
    positions: dict[str, NodePosition] = field(default_factory=dict)
    force: ForceConfig | None = None
    levels: dict[str, int] = field(default_factory=dict)  # hierarchical only

    @property
    def is_continuous(self) -> bool:
        return self.name is LayoutName.FORCE

    def position_of(self, node_id: str) -> NodePosition | None:
        return self.positions.get(node_id)

    def pin_all(self) -> None:
        for position in self.positions.values():
            position.pin()

    def release_all(self) -> None:
        for position in self.positions.values():
            position.release()

    @property
    def pinned_count(self) -> int:
        return sum(1 for p in self.positions.values() if p.pinned)

    def to_dict(self) -> dict:
        return {
            "name": self.name.value,
            "dimensions": self.dimensions,
            "continuous": self.is_continuous,
            "force": self.force.to_dict() if self.force else None,
            "positions": {k: p.to_dict() for k, p in self.positions.items()},
        }


# ==========================================================================
# Helpers
# ==========================================================================


def resolve_layout_name(layout_name: str | LayoutName, dimensions: int = 3) -> LayoutName:
    """Map a user-facing name (or alias) to a LayoutName for this dimensionality.

    Raises UnknownLayoutError for names that are not recognized.
    """
    if isinstance(layout_name, LayoutName):
        name = layout_name
    else:
        key = (layout_name or "").strip().lower()
        if key in LAYOUT_ALIASES:
            name = LAYOUT_ALIASES[key]
        else:
            try:
                name = LayoutName(key)
            except ValueError:
                raise UnknownLayoutError(str(layout_name)) from None
    if dimensions == 2:
        name = PLANAR_FALLBACK.get(name, name)
    return name


def ceil_sqrt(n: int) -> int:
    return math.isqrt(n - 1) + 1 if n > 0 else 0


def ceil_cbrt(n: int) -> int:
    """Smallest c with c**3 >= n, without float rounding surprises."""
    if n <= 0:
        return 0
    c = max(1, round(n ** (1 / 3)))
    while c**3 < n:
        c += 1
    while c > 1 and (c - 1) ** 3 >= n:
        c -= 1
    return c


def golden_spiral_point(i: int, n: int, radius: float) -> tuple[float, float, float]:
    """Point i of n on a sphere via the golden-angle (Fibonacci) spiral."""
    phi = math.acos(1 - 2 * (i + 0.5) / n)
    theta = GOLDEN_ANGLE_FACTOR * i
    return (
        radius * math.sin(phi) * math.cos(theta),
        radius * math.sin(phi) * math.sin(theta),
        radius * math.cos(phi),
    )


def compute_degrees(store: GraphStore) -> dict[str, int]:
    return {node.id: store.degree_of(node.id) for node in store.nodes}


def compute_levels(store: GraphStore) -> dict[str, int]:
    """BFS levels from the root set (nodes with in-degree 0).

    With no roots in a non-empty graph the first node is the single root.
    A node keeps the minimum level it is reached at and is re-expanded
    whenever its level improves. Nodes unreachable from the roots seed
    further searches in insertion order.
    """
    levels: dict[str, int] = {}
    if not store.nodes:
        return levels

    roots = [n for n in store.nodes if store.in_degree(n.id) == 0]
    if not roots:
        logger.debug("No root nodes found - using first node as root")
        roots = [store.nodes[0]]

    queue: deque[str] = deque()

    def relax() -> None:
        while queue:
            node_id = queue.popleft()
            next_level = levels[node_id] + 1
            for link in store.outgoing(node_id):
                target_id = link.target.id
                if target_id not in levels or levels[target_id] > next_level:
                    levels[target_id] = next_level
                    queue.append(target_id)

    for root in roots:
        levels[root.id] = 0
        queue.append(root.id)
    relax()

    for node in store.nodes:
        if node.id not in levels:
            levels[node.id] = 0
            queue.append(node.id)
            relax()

    return levels


# ==========================================================================
# Layouts
# ==========================================================================


def _circle(store: GraphStore) -> dict[str, NodePosition]:
    n = len(store)
    radius = 10.0 * n
    positions = {}
    for i, node in enumerate(store.nodes):
        angle = 2 * math.pi * i / n
        positions[node.id] = NodePosition(x=radius * math.cos(angle), y=radius * math.sin(angle))
    return positions


def _grid(store: GraphStore) -> dict[str, NodePosition]:
    n = len(store)
    cols = ceil_sqrt(n)
    rows = math.ceil(n / cols)
    positions = {}
    for i, node in enumerate(store.nodes):
        col, row = i % cols, i // cols
        positions[node.id] = NodePosition(
            x=(col - (cols - 1) / 2) * GRID_SPACING,
            y=(row - (rows - 1) / 2) * GRID_SPACING,
        )
    return positions


def _cube(store: GraphStore) -> dict[str, NodePosition]:
    n = len(store)
    cols = ceil_cbrt(n)
    rows = min(cols, math.ceil(n / cols))
    layers = math.ceil(n / (cols * cols))
    positions = {}
    for i, node in enumerate(store.nodes):
        x, y, z = i % cols, (i // cols) % cols, i // (cols * cols)
        positions[node.id] = NodePosition(
            x=(x - (cols - 1) / 2) * GRID_SPACING,
            y=(y - (rows - 1) / 2) * GRID_SPACING,
            z=(z - (layers - 1) / 2) * GRID_SPACING,
        )
    return positions


def _sphere(store: GraphStore) -> dict[str, NodePosition]:
    n = len(store)
    radius = max(n * 5.0, 50.0)
    positions = {}
    for i, node in enumerate(store.nodes):
        x, y, z = golden_spiral_point(i, n, radius)
        positions[node.id] = NodePosition(x=x, y=y, z=z)
    return positions


def _hierarchical(store: GraphStore, dimensions: int) -> tuple[dict[str, NodePosition], dict[str, int]]:
    levels = compute_levels(store)

    groups: dict[int, list[str]] = {}
    for node in store.nodes:
        groups.setdefault(levels[node.id], []).append(node.id)

    positions = {}
    for level in sorted(groups):
        members = groups[level]
        radius = max(len(members) * 8.0, 40.0)
        if dimensions == 2:
            radius += level * HIERARCHY_SPACING_2D
        for i, node_id in enumerate(members):
            angle = 2 * math.pi * i / len(members)
            positions[node_id] = NodePosition(
                x=math.cos(angle) * radius,
                y=math.sin(angle) * radius,
                z=level * HIERARCHY_SPACING_3D if dimensions == 3 else 0.0,
            )

    logger.debug(
        f"Hierarchical layout: {len(groups)} levels, max level {max(groups, default=0)}"
    )
    return positions, levels


def _concentric(store: GraphStore, dimensions: int) -> dict[str, NodePosition]:
    degrees = compute_degrees(store)
    ranked = sorted(store.nodes, key=lambda n: degrees[n.id], reverse=True)
    max_degree = max(max(degrees.values(), default=0), 1)
    n = len(ranked)

    positions = {}
    for i, node in enumerate(ranked):
        degree = degrees[node.id]
        radius = CONCENTRIC_BASE_RADIUS + (max_degree - degree) / max_degree * CONCENTRIC_RADIUS_RANGE
        if dimensions == 3:
            x, y, z = golden_spiral_point(i, n, radius)
        else:
            angle = 2 * math.pi * i / n
            x, y, z = radius * math.cos(angle), radius * math.sin(angle), 0.0
        positions[node.id] = NodePosition(x=x, y=y, z=z)
    return positions


def _force_warmup(store: GraphStore, dimensions: int, link_distance: float) -> dict[str, NodePosition]:
    """Seed positions with a spring layout, standing in for simulation warm-up ticks."""
    graph = nx.Graph()
    graph.add_nodes_from(node.id for node in store.nodes)
    graph.add_edges_from((link.source.id, link.target.id) for link in store.links)

    n = graph.number_of_nodes()
    coords = nx.spring_layout(
        graph,
        dim=dimensions,
        k=5.0 / math.sqrt(n),
        iterations=100,
        seed=42,
        scale=link_distance * math.sqrt(n),
    )

    positions = {}
    for node_id, vector in coords.items():
        values = [float(v) for v in vector]
        positions[node_id] = NodePosition(
            x=values[0],
            y=values[1],
            z=values[2] if dimensions == 3 else 0.0,
        )
    return positions


def _force(
    store: GraphStore,
    dimensions: int,
    prior_positions: dict[str, NodePosition] | None,
) -> tuple[dict[str, NodePosition], ForceConfig]:
    config = ForceConfig()
    prior = prior_positions or {}

    # Continue from wherever nodes are now; the live simulation takes it from there
    positions = {
        node.id: NodePosition(x=prior[node.id].x, y=prior[node.id].y, z=prior[node.id].z)
        for node in store.nodes
        if node.id in prior
    }
    missing = [node for node in store.nodes if node.id not in positions]
    if missing and len(store) > 1:
        seeded = _force_warmup(store, dimensions, config.link_distance)
        for node in missing:
            positions[node.id] = seeded[node.id]
    elif missing:
        positions[missing[0].id] = NodePosition()

    # Keep insertion order of the store
    return {node.id: positions[node.id] for node in store.nodes}, config


def apply_layout(
    store: GraphStore,
    layout_name: str | LayoutName = LayoutName.FORCE,
    prior_positions: dict[str, NodePosition] | None = None,
    dimensions: int = 3,
) -> LayoutState:
    """Compute a LayoutState for every node in the store.

    Unknown layout names fall back to the force layout. Empty graphs give
    an empty state; a single node always sits at the origin.
    """
    try:
        name = resolve_layout_name(layout_name, dimensions)
    except UnknownLayoutError as e:
        logger.warning(f"{e}, falling back to '{LayoutName.FORCE.value}'")
        name = LayoutName.FORCE

    state = LayoutState(name=name, dimensions=dimensions)
    if not store.nodes:
        if name is LayoutName.FORCE:
            state.force = ForceConfig()
        return state

    if name is LayoutName.FORCE:
        state.positions, state.force = _force(store, dimensions, prior_positions)
        return state

    if len(store) == 1:
        state.positions = {store.nodes[0].id: NodePosition()}
        if name is LayoutName.HIERARCHICAL:
            state.levels = {store.nodes[0].id: 0}
        return state

    if name is LayoutName.CIRCLE:
        state.positions = _circle(store)
    elif name is LayoutName.GRID:
        state.positions = _grid(store)
    elif name is LayoutName.CUBE:
        state.positions = _cube(store)
    elif name is LayoutName.SPHERE:
        state.positions = _sphere(store)
    elif name is LayoutName.HIERARCHICAL:
        state.positions, state.levels = _hierarchical(store, dimensions)
    elif name is LayoutName.CONCENTRIC:
        state.positions = _concentric(store, dimensions)

    return state
