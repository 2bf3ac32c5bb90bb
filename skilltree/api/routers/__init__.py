"""API routers."""

from .player_router import router as player_router

__all__ = ["player_router"]
