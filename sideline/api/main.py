"""FastAPI application for the Sideline week/game flow."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from sideline.api.routers import flow_router
from sideline.api.services.flow_service import FlowSessionManager
from sideline.config import FlowConfig

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info("Sideline API starting up...")
    yield
    logger.info("Sideline API shutting down...")
    app.state.flow_sessions.cleanup_all()


def create_app(config: Optional[FlowConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or FlowConfig.from_env()
    for problem in config.validate():
        logger.warning(f"Config: {problem}")

    app = FastAPI(
        title="Sideline API",
        description="GM mode week and game flow",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.flow_sessions = FlowSessionManager(config)

    # Configure CORS for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(flow_router, prefix="/api/v1")

    @app.get("/")
    async def root() -> dict:
        """Root endpoint - API info."""
        return {
            "name": "Sideline API",
            "version": VERSION,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health(request: Request) -> dict:
        """Health check endpoint."""
        return {
            "status": "healthy",
            "active_sessions": len(request.app.state.flow_sessions.active_sessions),
        }

    return app


# Create app instance
app = create_app()


def run_api(host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """Run the API server."""
    uvicorn.run(
        "sideline.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    run_api(reload=True)
