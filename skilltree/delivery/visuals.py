"""
Terminal rendering of player render models.

Pure functions from RenderModel to rich renderables; no state.
"""

from __future__ import annotations

from rich import box
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from skilltree.catalog.loader import LOAD_FAILURE_MESSAGE
from skilltree.engine.render import Feedback, PlayerState, RenderModel, SkillNode, SkillStatus

# =============================================================================
# Theme
# =============================================================================

THEME = {
    "primary": "#4FC3F7",  # Sky blue - titles and borders
    "success": "#66BB6A",  # Green - correct / completed
    "warning": "#FFCA28",  # Amber - unlocked / hints
    "error": "#EF5350",  # Red - incorrect / game over
    "dim": "#78909C",  # Blue-gray - locked / secondary text
}

STYLES = {
    "primary": Style(color=THEME["primary"], bold=True),
    "success": Style(color=THEME["success"], bold=True),
    "warning": Style(color=THEME["warning"], bold=True),
    "error": Style(color=THEME["error"], bold=True),
    "dim": Style(color=THEME["dim"]),
}

STATUS_BADGES = {
    SkillStatus.LOCKED: ("locked", STYLES["dim"]),
    SkillStatus.UNLOCKED: ("unlocked", STYLES["warning"]),
    SkillStatus.COMPLETED: ("completed", STYLES["success"]),
}


# =============================================================================
# Components
# =============================================================================


def skill_map_table(skills: list[SkillNode]) -> Table:
    """Numbered skill list with status badges."""
    table = Table(box=box.SIMPLE_HEAVY, title="Skill Map", title_style=STYLES["primary"])
    table.add_column("#", justify="right", width=3)
    table.add_column("Skill")
    table.add_column("Lessons", justify="center")
    table.add_column("Status")

    for i, node in enumerate(skills, 1):
        label, style = STATUS_BADGES[node.status]
        title_style = STYLES["dim"] if node.status == SkillStatus.LOCKED else None
        table.add_row(
            str(i),
            Text(node.title, style=title_style or ""),
            f"{node.lessons_completed}/{node.lessons_total}",
            Text(label, style=style),
        )
    return table


def status_line(model: RenderModel) -> Text:
    """Score and lives for the current lesson."""
    text = Text()
    text.append(f"Score: {model.score}", style=STYLES["primary"])
    text.append("   ")
    text.append(f"Lives: {model.lives}", style=STYLES["error"] if model.lives <= 1 else STYLES["success"])
    return text


def exercise_panel(model: RenderModel) -> Panel:
    """The current exercise: question plus options or blank."""
    exercise = model.exercise
    assert exercise is not None

    body = Text()
    if exercise.requires_selection:
        body.append(exercise.question + "\n\n")
        for i, option in enumerate(exercise.options, 1):
            marker = ">" if option == model.selected_option else " "
            body.append(f" {marker} [{i}] {option}\n")
    else:
        body.append(exercise.before_blank or "")
        body.append(" [____] ", style=STYLES["warning"])
        body.append(exercise.after_blank or "")

    position = f"{(model.exercise_index or 0) + 1}/{model.exercise_count}"
    return Panel(
        body,
        title=f"[bold]{model.lesson_title}[/bold]  {position}",
        title_align="left",
        border_style=THEME["primary"],
        box=box.HEAVY,
        padding=(1, 2),
    )


def feedback_panel(feedback: Feedback) -> Panel:
    style = STYLES["success"] if feedback.is_correct else STYLES["error"]
    return Panel(Text(feedback.message, style=style), border_style=style, padding=(0, 2))


def end_screen_panel(model: RenderModel) -> Panel:
    """Lesson complete, practice complete or game over."""
    color = THEME["error"] if model.state == PlayerState.GAME_OVER else THEME["success"]
    body = Text(model.message or "")
    if model.unlocked_skill_id:
        body.append(f"\n\nNew skill unlocked: {model.unlocked_skill_id}", style=STYLES["warning"])
    return Panel(body, title=f"[bold]{model.heading}[/bold]", border_style=color, padding=(1, 2))


def error_panel(detail: str | None = None) -> Panel:
    """Static error view for a failed catalog load."""
    body = Text(LOAD_FAILURE_MESSAGE)
    if detail:
        body.append(f"\n\n{detail}", style=STYLES["dim"])
    return Panel(body, title="[bold]Oops![/bold]", border_style=THEME["error"], padding=(1, 2))
