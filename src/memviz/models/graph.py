"""Graph element models - entities, relations and their observations."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

Direction = Literal["incoming", "outgoing"]

DEFAULT_ENTITY_TYPE = "Unknown"


def format_timestamp(value: str | None) -> str | None:
    """Format an ISO-8601 timestamp for display, passing through unparseable text."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%Y-%m-%d %H:%M")


@dataclass
class Observation:
    """An atomic free-text fact attached to an entity."""

    text: str
    timestamp: str | None = None  # ISO-8601
    source: str | None = None  # e.g. "code-analysis", "documentation"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "text": self.text,
            "timestamp": self.timestamp,
            "source": self.source,
        }

    @classmethod
    def from_raw(cls, raw: Any) -> "Observation":
        """Create from a dict or a legacy bare string."""
        if isinstance(raw, str):
            return cls(text=raw)
        if isinstance(raw, Observation):
            return raw
        return cls(
            text=str(raw.get("text", "")),
            timestamp=raw.get("timestamp"),
            source=raw.get("source"),
        )


@dataclass
class Node:
    """An entity in the knowledge graph.

    `degree`, `color` and `size` are derived when the store is built.
    """

    id: str
    label: str
    entity_type: str = DEFAULT_ENTITY_TYPE
    observations: list[Observation] = field(default_factory=list)

    degree: int = 0
    color: str = ""
    size: int = 30

    def to_dict(self) -> dict:
        """Convert to the camelCase wire format used by the browser client."""
        return {
            "id": self.id,
            "label": self.label,
            "entityType": self.entity_type,
            "observations": [o.to_dict() for o in self.observations],
            "degree": self.degree,
            "color": self.color,
            "size": self.size,
        }


@dataclass
class Link:
    """A directed, typed relation between two resolved nodes."""

    id: str
    source: Node
    target: Node
    relation_type: str = ""
    from_type: str | None = None
    to_type: str | None = None

    @property
    def is_self_loop(self) -> bool:
        return self.source.id == self.target.id

    def other_end(self, node_id: str) -> Node:
        """The endpoint opposite to `node_id` (the node itself for self-loops)."""
        return self.target if self.source.id == node_id else self.source

    def to_dict(self) -> dict:
        """Convert to the camelCase wire format used by the browser client."""
        return {
            "id": self.id,
            "source": self.source.id,
            "target": self.target.id,
            "relationType": self.relation_type,
            "fromType": self.from_type or "",
            "toType": self.to_type or "",
        }
