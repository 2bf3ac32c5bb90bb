"""
Read-only lesson catalog: typed models and loaders.
"""

from .loader import build_catalog, fetch_catalog, load_bundled_catalog, load_catalog, load_catalog_file
from .models import Catalog, CatalogDocument, Exercise, Lesson, Skill

__all__ = [
    "Catalog",
    "CatalogDocument",
    "Exercise",
    "Lesson",
    "Skill",
    "build_catalog",
    "fetch_catalog",
    "load_bundled_catalog",
    "load_catalog",
    "load_catalog_file",
]
