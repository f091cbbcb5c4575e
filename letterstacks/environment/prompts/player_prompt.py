from typing import List, Optional

from ..models import RenderState
from ...utils.board_render import render_board, render_status


def format_tops(state: RenderState) -> str:
    """Visible letters as `index=LETTER` pairs, skipping empty cells."""
    return " ".join(f"{i}={top}" for i, top in enumerate(state.tops) if top)


def format_feedback(
    last_word: Optional[str] = None,
    accepted: Optional[bool] = None,
    rejection: Optional[str] = None,
    action_error: Optional[str] = None,
    spawned: int = 0,
) -> str:
    """Format feedback from the previous turn."""
    lines = []

    if action_error:
        lines.append(f"Action failed: {action_error}")

    if last_word is not None:
        if accepted:
            lines.append(f"Accepted: {last_word}")
        else:
            lines.append(f"Rejected: {last_word or '(nothing)'} - {rejection or 'invalid'}")

    if spawned:
        noun = "letter" if spawned == 1 else "letters"
        lines.append(f"{spawned} {noun} landed while you were thinking")

    return "\n".join(lines)


def build_player_prompt(
    state: RenderState,
    turn_number: int,
    words_found: Optional[List[str]] = None,
    **feedback
) -> str:
    """
    Build the player prompt with the current board and feedback.

    Args:
        state: Board snapshot
        turn_number: Current turn number
        words_found: Words accepted so far
        **feedback: Keyword arguments for format_feedback

    Returns:
        Formatted prompt string
    """
    lines = []

    lines.append(f"## Turn {turn_number}")
    lines.append("")

    text = format_feedback(**feedback)
    if text:
        lines.append("### Feedback from last turn")
        lines.append(text)
        lines.append("")

    lines.append("### Board")
    lines.append("```")
    lines.append(render_board(state))
    lines.append("```")
    lines.append(render_status(state))
    lines.append("")

    lines.append("### Playable letters")
    lines.append(format_tops(state))
    lines.append("")

    if state.pending_targets:
        lines.append(f"Next spawn lands on: {', '.join(str(i) for i in state.pending_targets)}")
        lines.append("")

    if words_found:
        lines.append(f"Words so far: {', '.join(words_found)}")
        lines.append("")

    return "\n".join(lines)
