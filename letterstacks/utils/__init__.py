"""Rendering helpers for Letter Stacks."""

from .board_render import render_board, render_status

__all__ = [
    "render_board",
    "render_status",
]
