"""Selection and highlight state - the single source of truth for the renderer."""

import logging
from enum import Enum

from memviz.graph.store import GraphStore
from memviz.models import Link, Node

logger = logging.getLogger(__name__)


class HighlightMode(str, Enum):
    """Which interaction currently owns the highlight sets."""

    NONE = "none"
    SELECTION = "selection"
    SEARCH = "search"


class SelectionState:
    """
    Selected node plus highlighted node and link sets.

    Selection mode and search mode are mutually exclusive: entering
    either one replaces whatever the other had highlighted.
    """

    def __init__(self, store: GraphStore | None = None) -> None:
        self.store = store or GraphStore.empty()
        self.selected_node: str | None = None
        self.highlighted_nodes: set[str] = set()
        self.highlighted_links: set[str] = set()
        self.search_term: str = ""
        self.mode = HighlightMode.NONE

    def attach(self, store: GraphStore) -> None:
        """Point at a freshly loaded store, dropping all previous state."""
        self.clear_selection()
        self.store = store

    def select(self, node_id: str) -> Node | None:
        """Select a node and highlight it with its one-hop neighborhood.

        Unknown ids leave the state untouched and return None.
        """
        node = self.store.node_by_id(node_id)
        if node is None:
            logger.debug(f"Ignoring selection of unknown node '{node_id}'")
            return None

        self.clear_selection()
        self.selected_node = node.id
        self.highlighted_nodes.add(node.id)
        for link in self.store.incident_links(node.id):
            self.highlighted_links.add(link.id)
            self.highlighted_nodes.add(link.other_end(node.id).id)
        self.mode = HighlightMode.SELECTION
        return node

    def clear_selection(self) -> None:
        self.selected_node = None
        self.highlighted_nodes.clear()
        self.highlighted_links.clear()
        self.search_term = ""
        self.mode = HighlightMode.NONE

    def filter_by_search(self, term: str) -> list[Node]:
        """Highlight nodes whose label or entity type contains `term`.

        Matching is a case-insensitive substring test. Links with at least
        one highlighted endpoint are highlighted too. A blank term clears
        everything.
        """
        needle = (term or "").strip().lower()
        self.clear_selection()
        if not needle:
            return []

        matches = [
            node
            for node in self.store.nodes
            if needle in node.label.lower() or needle in node.entity_type.lower()
        ]
        self.highlighted_nodes.update(node.id for node in matches)
        self.highlighted_links.update(
            link.id
            for link in self.store.links
            if link.source.id in self.highlighted_nodes or link.target.id in self.highlighted_nodes
        )
        self.search_term = needle
        self.mode = HighlightMode.SEARCH
        logger.debug(f"Search '{needle}' matched {len(matches)} nodes")
        return matches

    # ==========================================================================
    # Renderer queries
    # ==========================================================================

    def has_active_highlight(self) -> bool:
        """False means render everything at full color and opacity."""
        return bool(self.highlighted_nodes or self.highlighted_links)

    def is_node_highlighted(self, node: Node | str) -> bool:
        node_id = node.id if isinstance(node, Node) else node
        return node_id in self.highlighted_nodes

    def is_link_highlighted(self, link: Link | str) -> bool:
        link_id = link.id if isinstance(link, Link) else link
        return link_id in self.highlighted_links

    def is_selected(self, node: Node | str) -> bool:
        node_id = node.id if isinstance(node, Node) else node
        return self.selected_node is not None and node_id == self.selected_node

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "selectedNode": self.selected_node,
            "highlightedNodes": sorted(self.highlighted_nodes),
            "highlightedLinks": sorted(self.highlighted_links),
            "searchTerm": self.search_term,
        }
