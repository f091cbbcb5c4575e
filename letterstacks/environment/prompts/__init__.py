"""Prompt templates for Letter Stacks LLM players."""

from .system_prompt import SYSTEM_PROMPT_TEMPLATE, get_system_prompt
from .player_prompt import build_player_prompt, format_tops, format_feedback

__all__ = [
    "SYSTEM_PROMPT_TEMPLATE",
    "get_system_prompt",
    "build_player_prompt",
    "format_tops",
    "format_feedback",
]
