"""
Player router: one endpoint per presentation intent.

Every endpoint returns the RenderModel after the transition. Intents are
serialized with a lock so two requests never interleave or overlap saves.
"""
from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, Request
from loguru import logger
from pydantic import BaseModel, Field

from skilltree.engine.render import RenderModel
from skilltree.engine.session import LessonPlayer
from skilltree.errors import InvalidTransitionError

router = APIRouter()


# ========================================
# Request Models
# ========================================


class StartLessonRequest(BaseModel):
    """Request model for starting a catalog lesson."""

    skill_id: str = Field(..., description="Skill containing the lesson")
    lesson_id: str = Field(..., description="Lesson to start")


class SelectOptionRequest(BaseModel):
    """Request model for highlighting a multiple choice option."""

    option: str = Field(..., description="Option text exactly as rendered")


class SubmitAnswerRequest(BaseModel):
    """Request model for checking an answer."""

    answer: str | None = Field(
        None,
        description="Typed answer; omit to submit the selected option",
    )


# ========================================
# Dependencies
# ========================================


async def locked_player(request: Request) -> AsyncIterator[LessonPlayer]:
    """Yield the player while holding the intent lock."""
    player: LessonPlayer | None = request.app.state.player
    if player is None:
        detail = request.app.state.load_error or "Player is not ready"
        raise HTTPException(status_code=503, detail=detail)

    async with request.app.state.player_lock:
        yield player


# ========================================
# Endpoints
# ========================================


@router.get("", response_model=RenderModel)
async def current_view(player: LessonPlayer = Depends(locked_player)) -> RenderModel:
    """Render the current state without changing it."""
    return player.render()


@router.post("/lessons", response_model=RenderModel)
async def start_lesson(
    body: StartLessonRequest,
    player: LessonPlayer = Depends(locked_player),
) -> RenderModel:
    """Start a specific lesson of an unlocked skill."""
    logger.debug(f"start_lesson {body.skill_id}/{body.lesson_id}")
    if body.skill_id not in player.snapshot.unlocked_skill_ids:
        raise InvalidTransitionError("start_lesson", player.state.value, f"skill {body.skill_id} is locked")
    return player.start_lesson(body.skill_id, body.lesson_id)


@router.post("/skills/{skill_id}/open", response_model=RenderModel)
async def open_skill(skill_id: str, player: LessonPlayer = Depends(locked_player)) -> RenderModel:
    """Start the next lesson of a skill (skill map click)."""
    return player.open_skill(skill_id)


@router.post("/practice", response_model=RenderModel)
async def start_practice(player: LessonPlayer = Depends(locked_player)) -> RenderModel:
    """Start a practice session of weak exercises, if available."""
    return player.start_practice()


@router.post("/select", response_model=RenderModel)
async def select_option(
    body: SelectOptionRequest,
    player: LessonPlayer = Depends(locked_player),
) -> RenderModel:
    return player.select_option(body.option)


@router.post("/answer", response_model=RenderModel)
async def submit_answer(
    body: SubmitAnswerRequest,
    player: LessonPlayer = Depends(locked_player),
) -> RenderModel:
    """Check the answer for the current exercise."""
    return player.submit_answer(body.answer)


@router.post("/continue", response_model=RenderModel)
async def continue_lesson(player: LessonPlayer = Depends(locked_player)) -> RenderModel:
    return player.continue_()


@router.post("/map", response_model=RenderModel)
async def return_to_map(player: LessonPlayer = Depends(locked_player)) -> RenderModel:
    return player.return_to_map()


@router.post("/retry", response_model=RenderModel)
async def retry(player: LessonPlayer = Depends(locked_player)) -> RenderModel:
    """Restart the lesson after game over."""
    return player.retry()
