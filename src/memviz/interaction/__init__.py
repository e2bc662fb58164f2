"""Selection state, interaction controller and tooltip/detail content."""

from memviz.interaction.content import (
    Connection,
    NodeDetails,
    Tooltip,
    link_tooltip,
    node_details,
    node_tooltip,
)
from memviz.interaction.controller import HoverTarget, InteractionController, InteractionState
from memviz.interaction.selection import HighlightMode, SelectionState

__all__ = [
    "Connection",
    "HighlightMode",
    "HoverTarget",
    "InteractionController",
    "InteractionState",
    "NodeDetails",
    "SelectionState",
    "Tooltip",
    "link_tooltip",
    "node_details",
    "node_tooltip",
]
