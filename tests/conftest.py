"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from skilltree.catalog.models import Catalog
from skilltree.engine.session import LessonPlayer, PlayerConfig
from skilltree.progress.backends import MemoryBackend
from skilltree.progress.store import ProgressStore


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (on-disk storage)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep loguru output out of test reports."""
    from loguru import logger

    logger.remove()
    logger.add(sys.stderr, level="WARNING")
    yield


def mc(exercise_id: str, answer: str = "B", options=("A", "B", "C")) -> dict:
    """Raw multiple choice exercise."""
    return {
        "id": exercise_id,
        "type": "multiple-choice",
        "question": f"Question {exercise_id}?",
        "options": list(options),
        "answer": answer,
    }


def fib(exercise_id: str, answer: str = "volt") -> dict:
    """Raw fill-in-the-blank exercise."""
    return {
        "id": exercise_id,
        "type": "fill-in-the-blank",
        "question": f"Blank {exercise_id}: the unit is ___ here.",
        "answer": answer,
    }


@pytest.fixture
def catalog_data() -> dict:
    """
    Three-skill catalog.

    skill-1: lesson-1 (ex-1, ex-2), lesson-2 (ex-3)
    skill-2: lesson-3 (ex-4 .. ex-10)
    skill-3: lesson-4 (ex-11)
    """
    return {
        "skills": [
            {
                "id": "skill-1",
                "title": "Basics",
                "lessons": [
                    {"id": "lesson-1", "title": "First", "exercises": [mc("ex-1"), fib("ex-2")]},
                    {"id": "lesson-2", "title": "Second", "exercises": [mc("ex-3")]},
                ],
            },
            {
                "id": "skill-2",
                "title": "Intermediate",
                "lessons": [
                    {
                        "id": "lesson-3",
                        "title": "Long",
                        "exercises": [
                            mc("ex-4"), fib("ex-5"), mc("ex-6"), fib("ex-7"),
                            mc("ex-8"), fib("ex-9"), mc("ex-10"),
                        ],
                    },
                ],
            },
            {
                "id": "skill-3",
                "title": "Advanced",
                "lessons": [
                    {"id": "lesson-4", "title": "Last", "exercises": [fib("ex-11")]},
                ],
            },
        ]
    }


@pytest.fixture
def catalog(catalog_data) -> Catalog:
    return Catalog.from_dict(catalog_data)


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(backend, catalog) -> ProgressStore:
    return ProgressStore(backend, catalog.first_skill_id)


@pytest.fixture
def player(catalog, store) -> LessonPlayer:
    return LessonPlayer(catalog, store, PlayerConfig())
