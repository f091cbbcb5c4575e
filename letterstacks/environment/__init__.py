"""Game environment for Letter Stacks."""

from .models import (
    Message,
    Role,
    Action,
    Tempo,
    SpawnTarget,
    SpawnEvent,
    SpawnOutcome,
    Settings,
    ScoreRecord,
    SubmissionResult,
    RenderState,
    ParsedResponse,
    TurnResult,
    PlayerConfig,
    RunConfig,
    RunResult,
)
from .bag import LetterSupply, LETTER_COUNTS, LETTER_VALUES, build_bag, bag_multiplier, is_vowel
from .board import Board
from .scheduler import SpawnScheduler, draw_balanced
from .tempo import TempoController, preset_for_level, describe_level, interval_for_word_length
from .settings import parse_settings
from .session import GameSession
from .loop import GameLoop, clamp_frame_delta
from .scores import ScoreLog, MemoryScoreLog, JsonScoreLog, format_elapsed, filter_scores
from .audit import SpawnAudit, audit_spawns
from .llm_client import LLMClient
from .player import Player
from .runner import LetterStacksRun

__all__ = [
    "Message",
    "Role",
    "Action",
    "Tempo",
    "SpawnTarget",
    "SpawnEvent",
    "SpawnOutcome",
    "Settings",
    "ScoreRecord",
    "SubmissionResult",
    "RenderState",
    "ParsedResponse",
    "TurnResult",
    "PlayerConfig",
    "RunConfig",
    "RunResult",
    "LetterSupply",
    "LETTER_COUNTS",
    "LETTER_VALUES",
    "build_bag",
    "bag_multiplier",
    "is_vowel",
    "Board",
    "SpawnScheduler",
    "draw_balanced",
    "TempoController",
    "preset_for_level",
    "describe_level",
    "interval_for_word_length",
    "parse_settings",
    "GameSession",
    "GameLoop",
    "clamp_frame_delta",
    "ScoreLog",
    "MemoryScoreLog",
    "JsonScoreLog",
    "format_elapsed",
    "filter_scores",
    "SpawnAudit",
    "audit_spawns",
    "LLMClient",
    "Player",
    "LetterStacksRun",
]
