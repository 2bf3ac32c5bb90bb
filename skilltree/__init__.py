"""
Skill Tree: a gamified lesson player.

A skill tree of lessons, multiple choice and fill-in-the-blank exercises,
a lives/score economy and persisted progress with a weak-exercise practice
mode.

Components:
- catalog: Read-only skills -> lessons -> exercises, loaded from JSON or HTTP
- exercises: Per-type handlers (validate, render, check)
- progress: Snapshot model, blob backends and the progress store
- engine: Mastery model, practice selector and the LessonPlayer state machine
- delivery: Terminal player (typer + rich)
- api: HTTP API for browser front ends (FastAPI)
"""

__version__ = "0.1.0"
