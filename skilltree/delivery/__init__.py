"""
Terminal delivery for the skill tree player.

Components:
- cli: typer application (play, map, stats, reset)
- visuals: rich renderables built from render models
"""

from .cli import app, main

__all__ = ["app", "main"]
