"""API routes for memviz.

Provides:
- /api/databases and /api/graph for raw dataset access
- /api/session/... mapping every visualizer session operation
- /api/session/export.png for snapshot download
"""

import logging
from typing import Literal

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field

from memviz.errors import DatasetNotFoundError
from memviz.render import ForceGraphAdapter
from memviz.session import VisualizerSession
from memviz.storage import SqliteDatasetProvider

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Models
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    memory_folder: str
    dataset_loaded: str | None = None
    version: str = "0.1.0"


class DatabaseInfoResponse(BaseModel):
    """One available memory database."""

    id: str
    display_name: str
    size_bytes: int
    size_formatted: str
    last_modified: str


class StatsResponse(BaseModel):
    """Counts for the loaded graph."""

    database_name: str | None = None
    node_count: int = 0
    edge_count: int = 0


class LoadRequest(BaseModel):
    database: str = Field(min_length=1)


class LayoutRequest(BaseModel):
    layout: str


class SearchRequest(BaseModel):
    term: str = ""
    immediate: bool = False


class NodeRequest(BaseModel):
    node_id: str


class HoverRequest(BaseModel):
    kind: Literal["node", "link"]
    id: str


def _stats(raw: dict) -> StatsResponse:
    return StatsResponse(
        database_name=raw["databaseName"],
        node_count=raw["nodeCount"],
        edge_count=raw["edgeCount"],
    )


def get_session(request: Request) -> VisualizerSession:
    return request.app.state.session


def get_provider(request: Request) -> SqliteDatasetProvider:
    return request.app.state.provider


def get_adapter(request: Request) -> ForceGraphAdapter:
    return request.app.state.adapter


# ============================================================================
# Dataset endpoints
# ============================================================================


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    """Health check endpoint."""
    session = get_session(request)
    return HealthResponse(
        status="healthy",
        memory_folder=str(get_provider(request).folder),
        dataset_loaded=session.dataset_id,
    )


@router.get("/api/databases", response_model=list[DatabaseInfoResponse])
async def list_databases(request: Request) -> list[DatabaseInfoResponse]:
    """List memory databases available in the memory folder."""
    try:
        datasets = await get_provider(request).list_datasets()
    except OSError as e:
        logger.exception("Failed to list databases")
        raise HTTPException(status_code=500, detail=str(e))

    return [
        DatabaseInfoResponse(
            id=d.id,
            display_name=d.display_name,
            size_bytes=d.size_bytes,
            size_formatted=d.size_formatted,
            last_modified=d.last_modified.isoformat(),
        )
        for d in datasets
    ]


@router.get("/api/graph")
async def get_graph(request: Request, database: str) -> dict:
    """Raw graph payload (nodes, edges, metadata) for one database."""
    payload = await get_provider(request).load_graph(database)
    if payload is None:
        raise HTTPException(status_code=404, detail=str(DatasetNotFoundError(database)))
    return payload.to_dict()


# ============================================================================
# Session endpoints
# ============================================================================


@router.get("/api/session")
async def session_state(request: Request) -> dict:
    """Selection, tooltip, detail panel and legend of the session."""
    return get_session(request).to_dict()


@router.get("/api/session/scene")
async def session_scene(request: Request) -> dict:
    """Scene document polled by the browser renderer."""
    return get_adapter(request).to_dict()


@router.post("/api/session/load", response_model=StatsResponse)
async def load_dataset(request: Request, body: LoadRequest) -> StatsResponse:
    """Load a database into the session and apply the initial layout."""
    session = get_session(request)
    try:
        stats = await session.load_and_render(body.database)
    except DatasetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to load database {body.database}")
        raise HTTPException(status_code=500, detail=str(e))
    return _stats(stats)


@router.get("/api/session/stats", response_model=StatsResponse)
async def session_stats(request: Request) -> StatsResponse:
    return _stats(get_session(request).stats)


@router.get("/api/session/legend")
async def session_legend(request: Request) -> list[dict]:
    return get_session(request).legend()


@router.post("/api/session/layout")
async def set_layout(request: Request, body: LayoutRequest) -> dict:
    """Switch layout; unknown names fall back to the force layout."""
    state = get_session(request).set_layout(body.layout)
    return {"layout": state.name.value, "continuous": state.is_continuous}


@router.post("/api/session/search")
async def search(request: Request, body: SearchRequest) -> dict:
    """Debounced search, or an immediate one when `immediate` is set."""
    session = get_session(request)
    if body.immediate:
        matches = session.search_now(body.term)
        return {"pending": False, "matches": [n.id for n in matches]}
    session.search(body.term)
    return {"pending": True, "matches": []}


@router.delete("/api/session/search")
async def clear_search(request: Request) -> dict:
    get_session(request).clear_search()
    return {"success": True}


@router.post("/api/session/select")
async def select_node(request: Request, body: NodeRequest) -> dict:
    session = get_session(request)
    session.select_node(body.node_id)
    details = session.details
    return {"details": details.to_dict() if details else None}


@router.delete("/api/session/selection")
async def clear_selection(request: Request) -> dict:
    get_session(request).clear_selection()
    return {"success": True}


@router.post("/api/session/navigate")
async def navigate(request: Request, body: NodeRequest) -> dict:
    """Fly the camera to a node; it is selected once the camera arrives."""
    return {"navigating": get_session(request).navigate_to_node(body.node_id)}


@router.post("/api/session/hover")
async def hover(request: Request, body: HoverRequest) -> dict:
    session = get_session(request)
    if body.kind == "node":
        session.pointer_enter_node(body.id)
    else:
        session.pointer_enter_link(body.id)
    return {"state": session.controller.state.value}


@router.delete("/api/session/hover")
async def unhover(request: Request) -> dict:
    session = get_session(request)
    session.pointer_leave()
    return {"state": session.controller.state.value}


@router.post("/api/session/fit")
async def fit_view(request: Request) -> dict:
    get_session(request).fit_view()
    return {"success": True}


@router.post("/api/session/reset")
async def reset_view(request: Request) -> dict:
    get_session(request).reset_view()
    return {"success": True}


@router.get("/api/session/export.png")
async def export_snapshot(request: Request) -> Response:
    """PNG snapshot of the current view as a download."""
    session = get_session(request)
    try:
        image = session.export_snapshot()
    except Exception as e:
        logger.exception("Snapshot export failed")
        raise HTTPException(status_code=500, detail=str(e))
    filename = session.snapshot_filename()
    return Response(
        content=image,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
