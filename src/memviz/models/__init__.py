"""memviz data models."""

from memviz.models.dataset import DatasetInfo, GraphPayload, format_file_size
from memviz.models.graph import (
    DEFAULT_ENTITY_TYPE,
    Direction,
    Link,
    Node,
    Observation,
    format_timestamp,
)

__all__ = [
    "DEFAULT_ENTITY_TYPE",
    "DatasetInfo",
    "Direction",
    "GraphPayload",
    "Link",
    "Node",
    "Observation",
    "format_file_size",
    "format_timestamp",
]
