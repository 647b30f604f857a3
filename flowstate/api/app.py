"""
FastAPI application factory.

Creates and configures the workflow engine API application.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flowstate import __version__
from flowstate.api.routes import router
from flowstate.config import Settings, get_settings
from flowstate.orchestrator.engine import WorkflowEngine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    
    Handles startup and shutdown events.
    """
    settings: Settings = app.state.settings
    
    logger.info(
        f"Workflow State Engine started - Environment: {settings.environment.value}"
    )
    
    yield
    
    engine: WorkflowEngine = app.state.engine
    logger.info(
        f"Workflow State Engine shutting down - {len(engine.list_definitions())} definitions, "
        f"{len(engine.instances.list_all())} instances discarded"
    )


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[WorkflowEngine] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.
    
    Args:
        settings: Settings to use instead of the environment-derived ones
        engine: Engine to serve instead of a fresh in-memory one
    """
    settings = settings or get_settings()
    
    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    
    app = FastAPI(
        title=settings.app_name,
        description="Workflow definitions with validated state transitions",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )
    
    app.state.settings = settings
    app.state.engine = engine if engine is not None else WorkflowEngine()
    
    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    # Include routers
    app.include_router(router, prefix=settings.api_prefix)
    
    # Root endpoint
    @app.get("/", tags=["root"])
    async def root():
        return {
            "name": settings.app_name,
            "version": __version__,
            "status": "running",
        }
    
    return app


# Application instance for uvicorn
app = create_app()
