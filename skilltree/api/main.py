"""
FastAPI application for the skill tree player.

Provides a REST API a browser front end can drive:
- Current render model
- One POST endpoint per intent (start lesson, answer, continue, practice, ...)

The catalog is loaded once at startup. A load failure is not retried; the
API answers 503 with the static error message until restarted.
"""

from __future__ import annotations

import asyncio
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from config import Settings, get_settings
from skilltree import __version__
from skilltree.catalog.loader import LOAD_FAILURE_MESSAGE
from skilltree.engine.factory import create_player
from skilltree.errors import CatalogLoadError, InvalidTransitionError

from .routers import player_router



def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application for the given settings."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load catalog and progress before serving."""
        logger.remove()
        logger.add(sys.stderr, level=settings.log_level)

        app.state.player = None
        app.state.load_error = None
        app.state.player_lock = asyncio.Lock()

        logger.info("Starting skill tree player API...")
        try:
            app.state.player = await create_player(settings)
        except CatalogLoadError as e:
            logger.error(str(e))
            app.state.load_error = LOAD_FAILURE_MESSAGE

        yield

        logger.info("Shutting down skill tree player API...")
        if app.state.player is not None:
            app.state.player.store.close()

    app = FastAPI(
        title="Skill Tree Player",
        description="Gamified lesson player: skill map, lessons, lives/score and weak-exercise practice.",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware for local development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidTransitionError)
    async def invalid_transition_handler(request: Request, exc: InvalidTransitionError) -> JSONResponse:
        logger.warning(f"Rejected intent: {exc}")
        return JSONResponse(
            status_code=409,
            content={"detail": str(exc), "intent": exc.intent, "state": exc.state},
        )

    @app.get("/health")
    async def health() -> dict:
        """Health check: ok once the catalog has loaded."""
        ready = app.state.player is not None
        return {
            "status": "ok" if ready else "error",
            "version": __version__,
            "error": app.state.load_error,
        }

    app.include_router(player_router, prefix="/api/player", tags=["player"])
    return app


app = create_app()
