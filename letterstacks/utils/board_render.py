"""Plain-text rendering of a board snapshot for terminals and prompts."""

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from ..environment.models import RenderState


def render_board(state: "RenderState", show_indices: bool = True) -> str:
    """
    Render the board as a text grid.

    Each cell shows its index, top letter and stack height, e.g. `07:K3`.
    Selected cells are wrapped in brackets, cells about to receive a letter
    are marked with `*`, and empty cells show `.`.

    Args:
        state: Snapshot from GameSession.render_state()
        show_indices: Prefix each cell with its index

    Returns:
        Multi-line string
    """
    selected = set(state.selection)
    pending = set(state.pending_targets)
    width = len(str(max(len(state.stacks) - 1, 0)))

    lines: List[str] = []
    for r in range(state.rows):
        cells = []
        for c in range(state.cols):
            index = r * state.cols + c
            stack = state.stacks[index]
            body = f"{stack[-1]}{len(stack)}" if stack else ". "
            if show_indices:
                body = f"{index:0{width}d}:{body}"
            mark = "*" if index in pending else " "
            cell = f"[{body}]" if index in selected else f" {body} "
            cells.append(cell + mark)
        lines.append("".join(cells).rstrip())

    return "\n".join(lines)


def render_status(state: "RenderState") -> str:
    """One-line summary of tempo and danger."""
    tallest = max((len(s) for s in state.stacks), default=0)
    noun = "tile" if state.quantity == 1 else "tiles"
    return (
        f"Level {state.level} | next spawn in {state.countdown_ms / 1000:.1f}s "
        f"({state.quantity} {noun} every {state.interval_ms / 1000:.0f}s) | "
        f"tallest {tallest}/{state.ceiling} | vowels {round(state.vowel_ratio * 100)}%"
    )
