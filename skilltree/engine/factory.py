"""
Wiring: settings -> catalog + progress store -> LessonPlayer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from skilltree.catalog.loader import load_catalog
from skilltree.progress.backends import create_backend
from skilltree.progress.store import ProgressStore

from .session import LessonPlayer, PlayerConfig

if TYPE_CHECKING:
    from config import Settings


async def create_player(settings: Settings) -> LessonPlayer:
    """
    Load the catalog and saved progress and build a player.

    Raises:
        CatalogLoadError: If the catalog cannot be loaded
    """
    catalog = await load_catalog(settings.catalog_source, settings.catalog_timeout_seconds)
    backend = create_backend(settings.progress_backend, settings.progress_dir)
    store = ProgressStore(backend, catalog.first_skill_id, key=settings.progress_key)
    return LessonPlayer(catalog, store, PlayerConfig(**settings.get_player_config()))
