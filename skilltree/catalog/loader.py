"""
Catalog loader.

Loads the lesson catalog from:
- a local JSON file (bundled content or a path from settings)
- an HTTP(S) URL, fetched asynchronously with httpx

Any failure is wrapped in CatalogLoadError. Loading is never retried; the
presentation layer shows a static error and the user reloads.
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from skilltree.errors import CatalogLoadError
from skilltree.exercises import get_handler

from .models import Catalog

BUNDLED_CATALOG = "lessons.json"
CONTENT_PACKAGE = "skilltree.content"

# Shown by every front end when the catalog cannot be loaded
LOAD_FAILURE_MESSAGE = "Failed to load game content. Please try refreshing the page."


def build_catalog(data: Any, source: str) -> Catalog:
    """
    Validate a decoded catalog document.

    Args:
        data: Decoded JSON document
        source: Where the document came from (for error messages)

    Returns:
        Indexed Catalog

    Raises:
        CatalogLoadError: If the document does not describe a usable catalog
    """
    if not isinstance(data, dict):
        raise CatalogLoadError(source, "document root is not an object")

    try:
        catalog = Catalog.from_dict(data)
    except ValidationError as e:
        raise CatalogLoadError(source, f"invalid catalog structure ({e.error_count()} errors)") from e
    except ValueError as e:
        raise CatalogLoadError(source, str(e)) from e

    for exercise in catalog.iter_exercises():
        handler = get_handler(exercise.type)
        if handler is None or not handler.validate(exercise):
            raise CatalogLoadError(source, f"exercise '{exercise.id}' is not a valid {exercise.type.value}")

    return catalog


def load_catalog_file(path: Path) -> Catalog:
    """Load a catalog from a JSON file on disk."""
    source = str(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except OSError as e:
        raise CatalogLoadError(source, f"cannot read file ({e.strerror or e})") from e
    except json.JSONDecodeError as e:
        raise CatalogLoadError(source, f"invalid JSON at line {e.lineno}") from e

    catalog = build_catalog(data, source)
    logger.info(f"Loaded catalog from {source}: {len(catalog)} skills")
    return catalog


def load_bundled_catalog() -> Catalog:
    """Load the sample catalog shipped with the package."""
    entry = resources.files(CONTENT_PACKAGE) / BUNDLED_CATALOG
    source = f"{CONTENT_PACKAGE}/{BUNDLED_CATALOG}"
    try:
        data = json.loads(entry.read_text(encoding="utf-8-sig"))
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogLoadError(source, str(e)) from e
    return build_catalog(data, source)


async def fetch_catalog(
    url: str,
    timeout_seconds: float = 10.0,
    client: httpx.AsyncClient | None = None,
) -> Catalog:
    """
    Fetch the catalog over HTTP.

    Args:
        url: Catalog document URL
        timeout_seconds: Request timeout
        client: Optional shared client (closed by the caller)

    Returns:
        Indexed Catalog

    Raises:
        CatalogLoadError: On network, HTTP status, JSON or schema failure
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            follow_redirects=True,
        )

    try:
        response = await client.get(url)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as e:
        logger.error(f"Catalog fetch failed with HTTP {e.response.status_code}")
        raise CatalogLoadError(url, f"HTTP error! status: {e.response.status_code}") from e
    except httpx.HTTPError as e:
        logger.error(f"Catalog fetch failed: {e}")
        raise CatalogLoadError(url, f"request failed ({type(e).__name__})") from e
    except json.JSONDecodeError as e:
        raise CatalogLoadError(url, "response is not valid JSON") from e
    finally:
        if owns_client:
            await client.aclose()

    catalog = build_catalog(data, url)
    logger.info(f"Fetched catalog from {url}: {len(catalog)} skills")
    return catalog


async def load_catalog(source: str | None, timeout_seconds: float = 10.0) -> Catalog:
    """
    Load the catalog from a configured source.

    `None` or an empty string selects the bundled sample catalog; http(s)
    sources are fetched, anything else is read as a file path.
    """
    if not source:
        return load_bundled_catalog()
    if source.startswith(("http://", "https://")):
        return await fetch_catalog(source, timeout_seconds=timeout_seconds)
    return load_catalog_file(Path(source))
