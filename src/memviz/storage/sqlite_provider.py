"""SQLite memory database provider.

Each `*.db` file in the memory folder is one dataset. Two layouts are
understood:

- compact: `entities(name, entityType, observations JSON)` and
  `relations(id, fromEntity, toEntity, relationType, fromType, toType)`
- normalized: `entities(id, name, entity_type)`,
  `observations(entity_id, content, timestamp, source)` and
  `relations(id, from_entity, from_type, to_entity, to_type, relation_type)`

Databases are opened read-only. sqlite3 is blocking, so every public
method hops to a worker thread.
"""

import asyncio
import json
import logging
import sqlite3
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from memviz.config import settings
from memviz.models import DatasetInfo, GraphPayload

logger = logging.getLogger(__name__)


class SchemaKind(str, Enum):
    COMPACT = "compact"
    NORMALIZED = "normalized"


def _table_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    return {row[1] for row in conn.execute(f"PRAGMA table_info({table})")}


def detect_schema(conn: sqlite3.Connection) -> SchemaKind | None:
    """Work out which layout a database uses; None if it is not a memory graph."""
    tables = {
        row[0]
        for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    }
    if not {"entities", "relations"} <= tables:
        return None

    columns = _table_columns(conn, "entities")
    if {"name", "entityType"} <= columns:
        return SchemaKind.COMPACT
    if {"id", "name", "entity_type"} <= columns and "observations" in tables:
        return SchemaKind.NORMALIZED
    return None


def parse_observations(raw: str | None) -> list:
    """Decode the compact layout's observations column.

    Accepts a JSON array of strings or {text, timestamp, source} objects.
    Anything that is not valid JSON is kept as a single observation.
    """
    if not raw:
        return []
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        return [raw]
    if isinstance(decoded, list):
        return [o for o in decoded if isinstance(o, (str, dict))]
    if isinstance(decoded, (str, dict)):
        return [decoded]
    return []


class SqliteDatasetProvider:
    """Lists and loads memory databases from a folder."""

    def __init__(self, folder: str | Path | None = None, max_graph_nodes: int | None = None):
        self.folder = Path(folder or settings.memory_folder_path).resolve()
        self.max_graph_nodes = max_graph_nodes or settings.max_graph_nodes

    # ==========================================================================
    # Public API
    # ==========================================================================

    async def list_datasets(self) -> list[DatasetInfo]:
        return await asyncio.to_thread(self._list_datasets)

    async def load_graph(self, dataset_id: str) -> GraphPayload | None:
        """Load a dataset by file name; None when absent, unsafe or malformed."""
        return await asyncio.to_thread(self._load_graph, dataset_id)

    def resolve(self, dataset_id: str) -> Path | None:
        """Map a dataset id to a file inside the folder, or None if unsafe."""
        if not dataset_id or not dataset_id.strip():
            logger.warning("Database name is empty")
            return None

        if Path(dataset_id).name != dataset_id or dataset_id in (".", ".."):
            logger.warning(f"Potential directory traversal attempt detected: {dataset_id!r}")
            return None

        path = (self.folder / dataset_id).resolve()
        if not path.is_relative_to(self.folder):
            logger.warning(f"Directory traversal attempt blocked: {path}")
            return None
        return path

    # ==========================================================================
    # Blocking implementation
    # ==========================================================================

    def _list_datasets(self) -> list[DatasetInfo]:
        if not self.folder.is_dir():
            logger.warning(f"Memory folder does not exist: {self.folder}")
            return []

        datasets = []
        for path in self.folder.glob("*.db"):
            if not path.is_file():
                continue
            stat = path.stat()
            datasets.append(
                DatasetInfo(
                    id=path.name,
                    display_name=path.stem,
                    path=str(path),
                    size_bytes=stat.st_size,
                    last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )
            )

        datasets.sort(key=lambda d: d.display_name)
        logger.info(f"Found {len(datasets)} databases in folder: {self.folder}")
        return datasets

    def _connect(self, path: Path) -> sqlite3.Connection:
        return sqlite3.connect(f"{path.as_uri()}?mode=ro", uri=True)

    def _load_graph(self, dataset_id: str) -> GraphPayload | None:
        path = self.resolve(dataset_id)
        if path is None:
            return None
        if not path.is_file():
            logger.warning(f"Database file not found: {path}")
            return None

        try:
            conn = self._connect(path)
        except sqlite3.Error as e:
            logger.warning(f"Failed to open database {path}: {e}")
            return None

        try:
            schema = detect_schema(conn)
            if schema is None:
                logger.warning(f"Database is missing required tables: {path}")
                return None

            logger.info(f"Loading graph from database: {dataset_id} ({schema.value} schema)")
            if schema is SchemaKind.COMPACT:
                nodes, edges = self._read_compact(conn)
            else:
                nodes, edges = self._read_normalized(conn)
        except sqlite3.DatabaseError as e:
            logger.warning(f"Failed to read database {path}: {e}")
            return None
        finally:
            conn.close()

        if len(nodes) > self.max_graph_nodes:
            logger.warning(
                f"Graph has {len(nodes)} nodes which exceeds limit of "
                f"{self.max_graph_nodes}. Consider filtering."
            )

        payload = GraphPayload(dataset_id=dataset_id, nodes=nodes, edges=edges)
        logger.info(
            f"Successfully loaded graph with {len(nodes)} nodes and "
            f"{len(edges)} edges from {dataset_id}"
        )
        return payload

    def _read_compact(self, conn: sqlite3.Connection) -> tuple[list[dict], list[dict]]:
        nodes = [
            {
                "id": name,
                "label": name,
                "entityType": entity_type,
                "observations": parse_observations(observations),
            }
            for name, entity_type, observations in conn.execute(
                "SELECT name, entityType, observations FROM entities"
            )
        ]

        relation_columns = _table_columns(conn, "relations")
        id_column = "id" if "id" in relation_columns else "NULL"
        from_type = "fromType" if "fromType" in relation_columns else "NULL"
        to_type = "toType" if "toType" in relation_columns else "NULL"
        rows = conn.execute(
            f"SELECT {id_column}, fromEntity, toEntity, relationType, {from_type}, {to_type} "
            "FROM relations"
        )
        edges = [self._edge(index, *row) for index, row in enumerate(rows)]
        return nodes, edges

    def _read_normalized(self, conn: sqlite3.Connection) -> tuple[list[dict], list[dict]]:
        by_row_id: dict[int, dict] = {}
        nodes = []
        for row_id, name, entity_type in conn.execute("SELECT id, name, entity_type FROM entities"):
            node = {"id": name, "label": name, "entityType": entity_type, "observations": []}
            by_row_id[row_id] = node
            nodes.append(node)

        for entity_id, content, timestamp, source in conn.execute(
            "SELECT entity_id, content, timestamp, source FROM observations"
        ):
            node = by_row_id.get(entity_id)
            if node is not None:
                node["observations"].append(
                    {"text": content, "timestamp": timestamp, "source": source}
                )

        rows = conn.execute(
            "SELECT id, from_entity, to_entity, relation_type, from_type, to_type FROM relations"
        )
        edges = [self._edge(index, *row) for index, row in enumerate(rows)]
        return nodes, edges

    @staticmethod
    def _edge(index, edge_id, source, target, relation_type, from_type, to_type) -> dict:
        return {
            "id": str(edge_id) if edge_id is not None else f"edge_{index}",
            "source": source,
            "target": target,
            "relationType": relation_type or "",
            "fromType": from_type or "",
            "toType": to_type or "",
        }
