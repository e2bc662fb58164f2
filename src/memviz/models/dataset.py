"""Dataset provider contract models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


def format_file_size(size_bytes: int) -> str:
    """Human-readable file size, e.g. "1.5 MB"."""
    suffixes = ["B", "KB", "MB", "GB", "TB"]
    size = float(size_bytes)
    index = 0
    while size >= 1024 and index < len(suffixes) - 1:
        size /= 1024
        index += 1
    return f"{size:.2f}".rstrip("0").rstrip(".") + f" {suffixes[index]}"


@dataclass
class DatasetInfo:
    """An available memory database file."""

    id: str  # File name, e.g. "work.db"
    display_name: str  # File name without extension
    path: str
    size_bytes: int
    last_modified: datetime

    @property
    def size_formatted(self) -> str:
        return format_file_size(self.size_bytes)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "displayName": self.display_name,
            "filePath": self.path,
            "sizeBytes": self.size_bytes,
            "sizeFormatted": self.size_formatted,
            "lastModified": self.last_modified.isoformat(),
        }


@dataclass
class GraphPayload:
    """Raw graph as handed over by a dataset provider.

    Nodes and edges are plain dicts in the provider's camelCase format:
    nodes carry id/label/entityType/observations, edges carry
    source/target/relationType and optional id/fromType/toType.
    """

    dataset_id: str
    nodes: list[dict[str, Any]] = field(default_factory=list)
    edges: list[dict[str, Any]] = field(default_factory=list)

    @property
    def metadata(self) -> dict:
        return {
            "databaseName": self.dataset_id,
            "nodeCount": len(self.nodes),
            "edgeCount": len(self.edges),
        }

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "nodes": self.nodes,
            "edges": self.edges,
            "metadata": self.metadata,
        }
