"""Tooltip and detail-panel content for nodes and links."""

from dataclasses import dataclass, field
from typing import Literal

from memviz.graph.store import GraphStore
from memviz.models import Direction, Link, Node, format_timestamp

MAX_TOOLTIP_OBSERVATIONS = 3
MAX_TOOLTIP_TEXT = 100


def truncate(text: str, limit: int = MAX_TOOLTIP_TEXT) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


@dataclass
class Tooltip:
    """Hover popover content."""

    kind: Literal["node", "link"]
    target_id: str
    title: str
    subtitle: str = ""
    lines: list[str] = field(default_factory=list)
    more: str | None = None  # e.g. "+2 more..."

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "targetId": self.target_id,
            "title": self.title,
            "subtitle": self.subtitle,
            "lines": self.lines,
            "more": self.more,
        }


def node_tooltip(node: Node) -> Tooltip:
    """Label, type and the first few observations of a node."""
    shown = node.observations[:MAX_TOOLTIP_OBSERVATIONS]
    hidden = len(node.observations) - len(shown)
    return Tooltip(
        kind="node",
        target_id=node.id,
        title=node.label,
        subtitle=node.entity_type,
        lines=[truncate(o.text) for o in shown],
        more=f"+{hidden} more..." if hidden > 0 else None,
    )


def _endpoint_line(node: Node, declared_type: str | None) -> str:
    entity_type = declared_type or node.entity_type
    return f"{node.label} ({entity_type})" if entity_type else node.label


def link_tooltip(link: Link) -> Tooltip:
    """Source, relation and target of a link; types prefer the link's own."""
    return Tooltip(
        kind="link",
        target_id=link.id,
        title=link.relation_type,
        lines=[
            _endpoint_line(link.source, link.from_type),
            link.relation_type,
            _endpoint_line(link.target, link.to_type),
        ],
    )


@dataclass
class Connection:
    """One row of the detail panel's connection list."""

    node_id: str
    node_label: str
    node_type: str
    relation: str
    direction: Direction

    def to_dict(self) -> dict:
        return {
            "nodeId": self.node_id,
            "nodeLabel": self.node_label,
            "nodeType": self.node_type,
            "relation": self.relation,
            "direction": self.direction,
        }


@dataclass
class NodeDetails:
    """Everything the detail panel shows for a selected node."""

    node: Node
    connections: list[Connection] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.node.id,
            "label": self.node.label,
            "entityType": self.node.entity_type,
            "color": self.node.color,
            "observations": [
                {
                    "text": o.text,
                    "timestamp": format_timestamp(o.timestamp),
                    "source": o.source,
                }
                for o in self.node.observations
            ],
            "connections": [c.to_dict() for c in self.connections],
        }


def node_details(store: GraphStore, node: Node) -> NodeDetails:
    connections = []
    for neighbor in store.neighbors_of(node.id):
        declared = neighbor.link.from_type if neighbor.direction == "incoming" else neighbor.link.to_type
        connections.append(
            Connection(
                node_id=neighbor.node.id,
                node_label=neighbor.node.label,
                node_type=declared or neighbor.node.entity_type,
                relation=neighbor.link.relation_type,
                direction=neighbor.direction,
            )
        )
    return NodeDetails(node=node, connections=connections)
