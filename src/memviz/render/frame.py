"""Render frames: what every node and link should look like right now.

A frame is rebuilt from the store, the selection state and the current
layout on every relevant event. Renderers only ever read frames.
"""

from dataclasses import dataclass, field

from memviz.graph.store import GraphStore
from memviz.interaction.selection import HighlightMode, SelectionState
from memviz.layout import LayoutState

LINK_COLOR = "#666666"
HIGHLIGHT_LINK_COLOR = "#f39c12"
FADED_OPACITY = 0.15
HIGHLIGHT_LINK_WIDTH = 2.0
HIGHLIGHT_PARTICLES = 4
SELECTED_SIZE_FACTOR = 1.5


@dataclass
class NodeVisual:
    id: str
    label: str
    entity_type: str
    color: str
    size: float
    opacity: float = 1.0
    highlighted: bool = False
    selected: bool = False
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    fx: float | None = None
    fy: float | None = None
    fz: float | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "entityType": self.entity_type,
            "color": self.color,
            "size": self.size,
            "opacity": self.opacity,
            "highlighted": self.highlighted,
            "selected": self.selected,
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "fx": self.fx,
            "fy": self.fy,
            "fz": self.fz,
        }


@dataclass
class LinkVisual:
    id: str
    source: str
    target: str
    label: str
    color: str = LINK_COLOR
    width: float = 0.0  # 0 draws a plain line instead of a tube
    opacity: float = 1.0
    particles: int = 0
    highlighted: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "label": self.label,
            "color": self.color,
            "width": self.width,
            "opacity": self.opacity,
            "particles": self.particles,
            "highlighted": self.highlighted,
        }


@dataclass
class RenderFrame:
    """Snapshot of every visual accessor the rendering primitive needs."""

    dimensions: int
    nodes: list[NodeVisual] = field(default_factory=list)
    links: list[LinkVisual] = field(default_factory=list)
    layout: str | None = None
    force: dict | None = None  # only for the continuous layout
    mode: HighlightMode = HighlightMode.NONE

    def node(self, node_id: str) -> NodeVisual | None:
        return next((n for n in self.nodes if n.id == node_id), None)

    def link(self, link_id: str) -> LinkVisual | None:
        return next((l for l in self.links if l.id == link_id), None)

    def to_dict(self) -> dict:
        return {
            "dimensions": self.dimensions,
            "layout": self.layout,
            "force": self.force,
            "mode": self.mode.value,
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [l.to_dict() for l in self.links],
        }


def build_frame(
    store: GraphStore,
    selection: SelectionState,
    layout: LayoutState | None = None,
    dimensions: int = 3,
) -> RenderFrame:
    """Derive node and link visuals.

    With no active highlight everything is drawn at full color and
    opacity. Otherwise highlighted elements keep full opacity and the
    rest are faded; highlighted links also get width and particles.
    """
    active = selection.has_active_highlight()
    frame = RenderFrame(
        dimensions=dimensions,
        layout=layout.name.value if layout else None,
        force=layout.force.to_dict() if layout and layout.force else None,
        mode=selection.mode,
    )

    for node in store.nodes:
        highlighted = selection.is_node_highlighted(node)
        selected = selection.is_selected(node)
        visual = NodeVisual(
            id=node.id,
            label=node.label,
            entity_type=node.entity_type,
            color=node.color,
            size=node.size * SELECTED_SIZE_FACTOR if selected else node.size,
            opacity=FADED_OPACITY if active and not highlighted else 1.0,
            highlighted=highlighted,
            selected=selected,
        )
        position = layout.position_of(node.id) if layout else None
        if position is not None:
            visual.x, visual.y, visual.z = position.as_tuple()
            visual.fx, visual.fy, visual.fz = position.fx, position.fy, position.fz
        if dimensions == 2:
            visual.z = 0.0
            visual.fz = None
        frame.nodes.append(visual)

    for link in store.links:
        highlighted = selection.is_link_highlighted(link)
        visual = LinkVisual(
            id=link.id,
            source=link.source.id,
            target=link.target.id,
            label=link.relation_type,
        )
        if highlighted:
            visual.color = HIGHLIGHT_LINK_COLOR
            visual.width = HIGHLIGHT_LINK_WIDTH
            visual.particles = HIGHLIGHT_PARTICLES
            visual.highlighted = True
        elif active:
            visual.opacity = FADED_OPACITY
        frame.links.append(visual)

    return frame
