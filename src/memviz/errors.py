"""Error taxonomy for the visualizer core.

Only DatasetNotFoundError ever propagates out of the core. The other
errors describe conditions that are recovered from locally and logged.
"""

from __future__ import annotations


class MemvizError(Exception):
    """Base exception for visualizer failures."""


class DatasetNotFoundError(MemvizError):
    """Raised when a dataset is absent, unsafe to open, or not a memory graph."""

    def __init__(self, dataset_id: str) -> None:
        super().__init__(f"Database '{dataset_id}' not found")
        self.dataset_id = dataset_id


class MalformedInputError(MemvizError):
    """A link references a node id that is not part of the dataset."""

    def __init__(self, link_id: str, missing_id: str) -> None:
        super().__init__(f"Link {link_id} references unknown node '{missing_id}'")
        self.link_id = link_id
        self.missing_id = missing_id


class UnknownLayoutError(MemvizError):
    """An unrecognized layout name was requested."""

    def __init__(self, layout_name: str) -> None:
        super().__init__(f"Unknown layout '{layout_name}'")
        self.layout_name = layout_name


class StaleReferenceError(MemvizError):
    """An interaction targets an element that is no longer loaded."""

    def __init__(self, element_id: str) -> None:
        super().__init__(f"Element '{element_id}' is no longer present")
        self.element_id = element_id
