"""
Pydantic models for the environment layer.

This module contains the data models (tempo, spawn phases, settings, scores,
render snapshots, run configuration and results) used throughout the
environment layer. The logic classes (LetterSupply, Board, SpawnScheduler,
TempoController, GameSession, Player, LetterStacksRun) live in their own files.
"""

from datetime import datetime
from typing import List, Dict, Optional, Literal
from pydantic import BaseModel, Field, ConfigDict


# Type aliases
Role = Literal["system", "user", "assistant"]
Action = Literal["SUBMIT", "DROP", "WAIT"]
SessionStatus = Literal["running", "won", "lost"]
ScoreMode = Literal["win", "survival"]
DictionaryFallback = Literal["strict", "allow_any"]


class Message(BaseModel):
    """Represents a single message in the conversation."""
    role: Role
    content: str


class Tempo(BaseModel):
    """Spawn cadence: how often a batch lands and how many letters it holds."""
    interval_ms: int = Field(..., ge=1000, le=60000)
    quantity: int = Field(..., ge=1, le=5)


class SpawnTarget(BaseModel):
    """A cell chosen to receive the next letter. The letter is not known yet."""
    model_config = ConfigDict(frozen=True)

    cell_index: int = Field(..., ge=0)


class SpawnEvent(BaseModel):
    """A letter that actually landed on a cell."""
    model_config = ConfigDict(frozen=True)

    cell_index: int = Field(..., ge=0)
    letter: str = Field(..., pattern=r'^[A-Z]$')
    height: int = Field(..., ge=1)  # Stack height after the push


class SpawnOutcome(BaseModel):
    """Result of applying spawn targets to the board."""
    events: List[SpawnEvent] = Field(default_factory=list)
    breached_cell: Optional[int] = None  # Cell that reached the ceiling, if any

    @property
    def ended(self) -> bool:
        return self.breached_cell is not None


class Settings(BaseModel):
    """Player-facing settings, always in the current (version 2) shape."""
    version: int = 2
    level: int = Field(default=1, ge=1, le=25)
    stack_ceiling: int = Field(default=6, ge=5, le=10)

    def to_dict(self) -> Dict[str, int]:
        return {"version": 2, "level": self.level, "stack_ceiling": self.stack_ceiling}


class ScoreRecord(BaseModel):
    """One finished run, appended to the score log on win or loss."""
    level: int
    elapsed_ms: int = Field(..., ge=0)
    timestamp: datetime
    ceiling: int
    mode: ScoreMode


class SubmissionResult(BaseModel):
    """Outcome of a word submission."""
    accepted: bool
    word: str = ""
    tiles: List[int] = Field(default_factory=list)
    code: Optional[str] = None  # Rejection code when not accepted
    message: str = ""
    letters_returned: List[str] = Field(default_factory=list)


class RenderState(BaseModel):
    """Everything a renderer needs to draw the board."""
    rows: int
    cols: int
    stacks: List[List[str]]
    selection: List[int] = Field(default_factory=list)
    pending_targets: List[int] = Field(default_factory=list)
    ceiling: int
    countdown_ms: float
    interval_ms: int
    quantity: int
    level: int
    status: SessionStatus
    vowel_ratio: float = 0.0

    @property
    def tops(self) -> List[Optional[str]]:
        return [stack[-1] if stack else None for stack in self.stacks]


class ParsedResponse(BaseModel):
    """Parsed components from an LLM response."""
    thinking: Optional[str] = None
    action: Action = "WAIT"
    tiles: List[int] = Field(default_factory=list)  # Cell indices in reading order
    raw_response: str = ""


class TurnResult(BaseModel):
    """Result of a single player turn."""
    turn_number: int
    action: Action
    tiles: List[int] = Field(default_factory=list)
    word: Optional[str] = None
    submission: Optional[SubmissionResult] = None
    thinking: Optional[str] = None
    think_ms: int = 0
    spawns_during_turn: int = 0
    status_after: SessionStatus = "running"
    raw_response: str = ""
    error: Optional[str] = None
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class PlayerConfig(BaseModel):
    """Configuration for the LLM player."""
    model_config = ConfigDict(extra='allow')

    model: str
    name: Optional[str] = None
    temperature: float = 1.0
    max_tokens: Optional[int] = None
    history_pairs: int = Field(default=10, ge=1)
    # Additional kwargs are allowed and passed to LiteLLM


class RunConfig(BaseModel):
    """Configuration for a headless run."""
    rows: int = Field(default=6, ge=1)
    cols: int = Field(default=5, ge=1)
    seed: Optional[int] = None
    max_turns: int = Field(default=100, ge=1)
    turn_ms: Optional[int] = Field(default=None, ge=0)  # None: use measured LLM latency
    dictionary: Optional[str] = None
    dictionary_fallback: DictionaryFallback = "strict"
    settings: Dict = Field(default_factory=dict)  # Raw mapping, see parse_settings
    scores: Optional[str] = None
    player: PlayerConfig = Field(default_factory=lambda: PlayerConfig(model="gpt-4o"))


class RunResult(BaseModel):
    """Result of a complete headless run."""
    config: RunConfig
    settings: Settings
    status: SessionStatus = "running"
    end_reason: str = ""
    total_turns: int = 0
    words: List[str] = Field(default_factory=list)
    letters_spawned: int = 0
    elapsed_ms: int = 0
    turn_history: List[TurnResult] = Field(default_factory=list)
    session_state: Dict = Field(default_factory=dict)
    conversation_history: List[Dict[str, str]] = Field(default_factory=list)
    started_at: str = ""
    ended_at: str = ""
    duration_seconds: float = 0.0
    total_prompt_tokens: int = 0
    total_completion_tokens: int = 0
    total_tokens: int = 0
