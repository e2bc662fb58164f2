"""FastAPI application for memviz.

Serves the memory databases, one shared visualizer session and the
browser graph view.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from memviz.api.graph import router as graph_router
from memviz.api.routes import router
from memviz.config import Settings, settings
from memviz.render import ForceGraphAdapter
from memviz.scheduling import AsyncioScheduler
from memviz.session import VisualizerSession
from memviz.storage import SqliteDatasetProvider, seed_folder_async

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan - startup and shutdown."""
    config: Settings = app.state.config

    # Startup
    logger.info("Starting memviz API...")
    logger.info(f"Memory folder: {config.memory_folder_path}")

    if config.seed_test_databases:
        created = await seed_folder_async(config.memory_folder_path)
        logger.info(f"Seeded {len(created)} sample databases")

    provider = SqliteDatasetProvider(config.memory_folder_path, config.max_graph_nodes)
    session = VisualizerSession(provider, AsyncioScheduler(), config)
    adapter = ForceGraphAdapter(config.dimensions)
    session.initialize(adapter, config.default_layout)

    app.state.provider = provider
    app.state.session = session
    app.state.adapter = adapter

    yield

    # Shutdown
    logger.info("Shutting down memviz API...")
    session.tasks.cancel_all()


def create_app(config: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="memviz",
        description="Interactive 2D/3D visualizer for knowledge-graph memory databases",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config or settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routes
    app.include_router(router)
    app.include_router(graph_router)

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "memviz.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
