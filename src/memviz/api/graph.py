"""Browser graph view endpoint."""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from memviz.api.graph_template import GRAPH_HTML

router = APIRouter()


@router.get("/graph", response_class=HTMLResponse)
async def graph_view() -> str:
    """Interactive 3d-force-graph page driven by the session scene."""
    return GRAPH_HTML
