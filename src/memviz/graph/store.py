"""In-memory graph store for the currently loaded dataset.

The store is built once per load and never mutated afterwards. Every link
endpoint is resolved to its Node exactly once, in `GraphStore.build`, so
downstream code never has to sniff whether an endpoint is an id or a node.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from memviz.errors import MalformedInputError
from memviz.graph.colors import color_for_entity_type, node_size_for
from memviz.models import DEFAULT_ENTITY_TYPE, Direction, Link, Node, Observation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Neighbor:
    """One hop away from a node, with the link that leads there."""

    node: Node
    link: Link
    direction: Direction


def _endpoint_id(value: Any) -> str | None:
    """Normalize a raw link endpoint (id, node dict or Node) to an id."""
    if value is None:
        return None
    if isinstance(value, Node):
        return value.id
    if isinstance(value, Mapping):
        inner = value.get("id")
        return None if inner is None else str(inner)
    return str(value)


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value:
            return value
    return None


def _unused_link_id(position: int, taken: set[str]) -> str:
    """`edge_<position>`, suffixed until it clashes with no kept link."""
    candidate = f"edge_{position}"
    suffix = 0
    while candidate in taken:
        suffix += 1
        candidate = f"edge_{position}_{suffix}"
    return candidate


class GraphStore:
    """Normalized nodes and links with id and adjacency indexes."""

    def __init__(self, nodes: Iterable[Node] = (), links: Iterable[Link] = ()) -> None:
        self._nodes: tuple[Node, ...] = tuple(nodes)
        self._links: tuple[Link, ...] = tuple(links)

        self._node_index: dict[str, Node] = {n.id: n for n in self._nodes}
        self._link_index: dict[str, Link] = {l.id: l for l in self._links}
        self._incoming: dict[str, list[Link]] = {n.id: [] for n in self._nodes}
        self._outgoing: dict[str, list[Link]] = {n.id: [] for n in self._nodes}

        for link in self._links:
            self._outgoing[link.source.id].append(link)
            self._incoming[link.target.id].append(link)

        for node in self._nodes:
            node.degree = len(self._incoming[node.id]) + len(self._outgoing[node.id])

    @classmethod
    def build(
        cls,
        raw_nodes: Iterable[Mapping[str, Any]],
        raw_links: Iterable[Mapping[str, Any]],
    ) -> "GraphStore":
        """Build a store from provider-format node and edge dicts.

        Dangling links and duplicate node ids are dropped and logged rather
        than failing the whole load.
        """
        nodes: list[Node] = []
        index: dict[str, Node] = {}

        for raw in raw_nodes:
            node_id = _endpoint_id(raw.get("id"))
            if not node_id:
                logger.warning(f"Skipping node without id: {raw!r}")
                continue
            if node_id in index:
                logger.warning(f"Duplicate node id '{node_id}', keeping first occurrence")
                continue

            entity_type = _first(raw, "entityType", "entity_type") or DEFAULT_ENTITY_TYPE
            observations = [Observation.from_raw(o) for o in raw.get("observations") or []]
            node = Node(
                id=node_id,
                label=str(raw.get("label") or node_id),
                entity_type=str(entity_type),
                observations=observations,
                color=color_for_entity_type(str(entity_type)),
                size=node_size_for(len(observations)),
            )
            nodes.append(node)
            index[node_id] = node

        links: list[Link] = []
        seen_link_ids: set[str] = set()
        dropped = 0

        for position, raw in enumerate(raw_links):
            link_id = _endpoint_id(raw.get("id"))
            if not link_id or link_id in seen_link_ids:
                link_id = _unused_link_id(position, seen_link_ids)
            source_id = _endpoint_id(raw.get("source"))
            target_id = _endpoint_id(raw.get("target"))

            missing = next(
                (i for i in (source_id, target_id) if i is None or i not in index),
                None,
            )
            if missing is not None or source_id is None or target_id is None:
                error = MalformedInputError(link_id, str(missing))
                logger.warning(f"Dropping link: {error}")
                dropped += 1
                continue

            seen_link_ids.add(link_id)
            links.append(
                Link(
                    id=link_id,
                    source=index[source_id],
                    target=index[target_id],
                    relation_type=str(_first(raw, "relationType", "relation_type") or ""),
                    from_type=_first(raw, "fromType", "from_type"),
                    to_type=_first(raw, "toType", "to_type"),
                )
            )

        if dropped:
            logger.warning(f"Dropped {dropped} dangling link(s) while building graph")
        logger.debug(f"Built graph store: {len(nodes)} nodes, {len(links)} links")

        return cls(nodes, links)

    @classmethod
    def empty(cls) -> "GraphStore":
        return cls()

    # ==========================================================================
    # Lookups
    # ==========================================================================

    @property
    def nodes(self) -> tuple[Node, ...]:
        return self._nodes

    @property
    def links(self) -> tuple[Link, ...]:
        return self._links

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._node_index

    def node_by_id(self, node_id: str) -> Node | None:
        return self._node_index.get(node_id)

    def link_by_id(self, link_id: str) -> Link | None:
        return self._link_index.get(link_id)

    # ==========================================================================
    # Adjacency
    # ==========================================================================

    def outgoing(self, node_id: str) -> list[Link]:
        return list(self._outgoing.get(node_id, ()))

    def incident_links(self, node_id: str) -> list[Link]:
        """Every link touching the node, each listed once (self-loops included)."""
        links = list(self._incoming.get(node_id, ()))
        links.extend(l for l in self._outgoing.get(node_id, ()) if not l.is_self_loop)
        return links

    def in_degree(self, node_id: str) -> int:
        return len(self._incoming.get(node_id, ()))

    def out_degree(self, node_id: str) -> int:
        return len(self._outgoing.get(node_id, ()))

    def degree_of(self, node_id: str) -> int:
        """Incident link count (in + out). Unknown ids have degree 0."""
        return self.in_degree(node_id) + self.out_degree(node_id)

    def neighbors_of(self, node_id: str) -> list[Neighbor]:
        """Incoming neighbors first, then outgoing, each in link order."""
        neighbors = [
            Neighbor(node=link.source, link=link, direction="incoming")
            for link in self._incoming.get(node_id, ())
        ]
        neighbors.extend(
            Neighbor(node=link.target, link=link, direction="outgoing")
            for link in self._outgoing.get(node_id, ())
        )
        return neighbors

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GraphStore):
            return NotImplemented
        return self._nodes == other._nodes and self._links == other._links

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"GraphStore(nodes={len(self._nodes)}, links={len(self._links)})"
