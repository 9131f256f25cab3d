"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from ..schema import SchemaUnavailableError
from ..session import MappingSession
from .routes import router

logger = logging.getLogger(__name__)

# Global session instance
_session: Optional[MappingSession] = None


def get_session() -> MappingSession:
    """Get the global mapping session."""
    global _session
    if _session is None:
        _session = MappingSession()
    return _session


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    # Startup
    session = get_session()
    try:
        await session.load_schema()
    except SchemaUnavailableError as e:
        logger.error(f"Target schema not loaded on startup: {e}")
    yield
    # Shutdown
    await session.close()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="PropMapper",
        description="Maps CSV columns onto a target property schema",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API routes
    app.include_router(router, prefix="/api")

    return app
