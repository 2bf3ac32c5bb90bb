"""
Skill Tree: terminal lesson player.

A Rich terminal front end over the LessonPlayer state machine. It only
forwards intents and draws render models.

Commands:
- skilltree play    - Play lessons from the skill map
- skilltree map     - Show the skill map
- skilltree stats   - Show progress and weak exercises
- skilltree reset   - Clear saved progress
"""
from __future__ import annotations

import asyncio
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from config import Settings, get_settings
from skilltree.engine.factory import create_player
from skilltree.engine.mastery import is_weak
from skilltree.engine.render import LessonPhase, PlayerState, RenderModel, SkillStatus
from skilltree.engine.session import LessonPlayer
from skilltree.errors import CatalogLoadError

from . import visuals as ui

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="skilltree",
    help="Skill Tree: gamified lesson player",
    no_args_is_help=True,
)
console = Console()


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )


def _settings(catalog: Optional[str], backend: Optional[str]) -> Settings:
    settings = get_settings()
    update = {}
    if catalog is not None:
        update["catalog_source"] = catalog
    if backend is not None:
        update["progress_backend"] = backend
    return settings.model_copy(update=update) if update else settings


@contextmanager
def _open_player(settings: Settings) -> Iterator[LessonPlayer]:
    """Build the player or show the static error view and exit. Closes storage on exit."""
    _configure_logging(settings.log_level)
    try:
        player = asyncio.run(create_player(settings))
    except CatalogLoadError as e:
        logger.error(str(e))
        console.print(ui.error_panel(e.reason))
        raise typer.Exit(1)

    try:
        yield player
    finally:
        player.store.close()


CatalogOption = typer.Option(None, "--catalog", "-c", help="Catalog JSON path or URL")
BackendOption = typer.Option(None, "--backend", "-b", help="Progress backend: json, sqlite or memory")


# =============================================================================
# Game Loop
# =============================================================================


def _skill_map_turn(player: LessonPlayer, model: RenderModel) -> bool:
    """Show the map and start something. Returns False when the player quits."""
    console.print(ui.skill_map_table(model.skills))
    hint = "Enter a skill number"
    if model.practice_available:
        hint += ", 'p' to practice weak exercises"
    console.print(f"[dim]{hint}, 'q' to quit[/dim]")

    choice = Prompt.ask("Choice").strip().lower()
    if choice == "q":
        return False
    if choice == "p":
        if not model.practice_available:
            console.print(f"[yellow]Practice unlocks after {player.config.practice_min_weak} weak exercises.[/yellow]")
            return True
        player.start_practice()
        return True

    if not choice.isdigit() or not (1 <= int(choice) <= len(model.skills)):
        console.print("[yellow]Invalid choice.[/yellow]")
        return True

    node = model.skills[int(choice) - 1]
    if node.status == SkillStatus.LOCKED:
        console.print("[yellow]That skill is still locked.[/yellow]")
        return True
    player.open_skill(node.id)
    return True


def _exercise_turn(player: LessonPlayer, model: RenderModel) -> None:
    """Ask for an answer to the current exercise."""
    exercise = model.exercise
    assert exercise is not None
    console.print(ui.status_line(model))
    console.print(ui.exercise_panel(model))

    if exercise.requires_selection:
        choice = Prompt.ask(f"Select [1-{len(exercise.options)}]")
        if not choice.isdigit() or not (1 <= int(choice) <= len(exercise.options)):
            console.print("[yellow]Invalid choice.[/yellow]")
            return
        player.select_option(exercise.options[int(choice) - 1])
        player.submit_answer()
    else:
        player.submit_answer(Prompt.ask("Your answer"))


def _run_game(player: LessonPlayer) -> None:
    while True:
        model = player.render()

        if model.state == PlayerState.AT_SKILL_MAP:
            if not _skill_map_turn(player, model):
                return

        elif model.state == PlayerState.IN_LESSON:
            if model.phase == LessonPhase.AWAITING_ANSWER:
                _exercise_turn(player, model)
            else:
                assert model.feedback is not None
                console.print(ui.feedback_panel(model.feedback))
                Prompt.ask("[dim]Press Enter to continue[/dim]", default="", show_default=False)
                player.continue_()

        elif model.state == PlayerState.LESSON_COMPLETE:
            console.print(ui.end_screen_panel(model))
            Prompt.ask("[dim]Press Enter to return to the skill map[/dim]", default="", show_default=False)
            player.return_to_map()

        elif model.state == PlayerState.GAME_OVER:
            if model.feedback is not None:
                console.print(ui.feedback_panel(model.feedback))
            console.print(ui.end_screen_panel(model))
            if Confirm.ask("Try again?", default=True):
                player.retry()
            else:
                player.return_to_map()


# =============================================================================
# Commands
# =============================================================================


@app.command()
def play(
    catalog: Optional[str] = CatalogOption,
    backend: Optional[str] = BackendOption,
) -> None:
    """
    Start playing from the skill map.

    Progress is saved after every answer and every finished lesson.
    """
    with _open_player(_settings(catalog, backend)) as player:
        console.print("\n[bold cyan]Skill Tree[/bold cyan]")
        try:
            _run_game(player)
        except KeyboardInterrupt:
            console.print("\n[yellow]Bye! Progress so far is saved.[/yellow]")


@app.command("map")
def show_map(
    catalog: Optional[str] = CatalogOption,
    backend: Optional[str] = BackendOption,
) -> None:
    """Show the skill map with lock and completion badges."""
    with _open_player(_settings(catalog, backend)) as player:
        model = player.render()
    console.print(ui.skill_map_table(model.skills))
    state = "[green]available[/green]" if model.practice_available else "[dim]locked[/dim]"
    console.print(f"Practice: {state}")


@app.command()
def stats(
    catalog: Optional[str] = CatalogOption,
    backend: Optional[str] = BackendOption,
) -> None:
    """Show completed lessons and the weakest exercises."""
    with _open_player(_settings(catalog, backend)) as player:
        snapshot = player.snapshot
        player_catalog = player.catalog

    lessons_total = sum(len(skill.lessons) for skill in player_catalog.skills)
    console.print(f"[bold]Skills unlocked:[/bold] {len(snapshot.unlocked_skill_ids)}/{len(player_catalog)}")
    console.print(f"[bold]Lessons completed:[/bold] {len(snapshot.completed_lesson_ids)}/{lessons_total}")

    table = Table(title="Weak exercises", show_lines=False)
    table.add_column("Exercise")
    table.add_column("Question")
    table.add_column("Score", justify="right")

    weak = sorted(
        (
            (record.score, exercise_id)
            for exercise_id, record in snapshot.exercise_performance.items()
            if is_weak(record.score)
        ),
    )
    for score, exercise_id in weak:
        exercise = player_catalog.get_exercise(exercise_id)
        question = exercise.question if exercise else "[dim](no longer in catalog)[/dim]"
        table.add_row(exercise_id, question, f"[red]{score}[/red]")

    if weak:
        console.print(table)
    else:
        console.print("[green]No weak exercises. Nice![/green]")


@app.command()
def reset(
    catalog: Optional[str] = CatalogOption,
    backend: Optional[str] = BackendOption,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete saved progress."""
    with _open_player(_settings(catalog, backend)) as player:
        if not yes and not Confirm.ask("Delete all saved progress?", default=False):
            raise typer.Exit(0)
        removed = player.store.reset()

    if removed:
        console.print("[green]Progress reset.[/green]")
    else:
        console.print("[dim]Nothing to reset.[/dim]")


def main() -> None:
    """Entry point for the console script."""
    app()


if __name__ == "__main__":
    main()
