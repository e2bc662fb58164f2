"""Graph store and derived node attributes."""

from memviz.graph.colors import ENTITY_TYPE_COLORS, color_for_entity_type, node_size_for
from memviz.graph.store import GraphStore, Neighbor

__all__ = [
    "ENTITY_TYPE_COLORS",
    "GraphStore",
    "Neighbor",
    "color_for_entity_type",
    "node_size_for",
]
