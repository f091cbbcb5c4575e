"""
The game session aggregate.

A GameSession owns everything a run mutates (board, letter supply, spawn
scheduler, tempo, selection, countdown) and is the only thing the loop,
the player and the renderer talk to.
"""

import logging
import random
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict

from .bag import LetterSupply
from .board import Board
from .models import (
    Settings,
    SessionStatus,
    ScoreRecord,
    SpawnOutcome,
    SubmissionResult,
    RenderState,
)
from .scheduler import SpawnScheduler
from .tempo import TempoController
from ..verifiers.dictionary import WordListDictionary
from ..verifiers.models import Candidate, ValidationError
from ..verifiers.words import (
    build_candidate,
    check_candidate,
    still_matches,
    rejection,
    NOT_IN_DICTIONARY,
    BOARD_CHANGED,
    SUBMIT_IN_PROGRESS,
    GAME_OVER,
)


logger = logging.getLogger(__name__)

WIN_REASON = "You cleared the board!"


class GameSession(BaseModel):
    """
    One run of Letter Stacks.

    Attributes:
        settings: Level and stack ceiling
        rows: Board rows
        cols: Board columns
        seed: Optional random seed for reproducibility
        dictionary: Async word checker (see verifiers.dictionary)
        score_log: Optional sink for finished runs
        board: Grid of letter stacks
        supply: Bag of undrawn letters
        scheduler: Spawn target selection and application
        tempo: Spawn interval and quantity
        selection: Selected cell indices in click order
        countdown_ms: Time left until the pending spawn lands
        elapsed_ms: Game time since the last reset
        status: running, won or lost
        submitting: Whether a dictionary lookup is in flight
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    settings: Settings = Field(default_factory=Settings)
    rows: int = Field(default=6, ge=1)
    cols: int = Field(default=5, ge=1)
    seed: Optional[int] = None
    dictionary: Any = Field(default_factory=WordListDictionary, exclude=True)
    score_log: Any = Field(default=None, exclude=True)
    clock: Callable[[], datetime] = Field(default=datetime.now, exclude=True)

    board: Optional[Board] = None
    supply: Optional[LetterSupply] = None
    scheduler: Optional[SpawnScheduler] = None
    tempo: Optional[TempoController] = None
    selection: List[int] = Field(default_factory=list)
    countdown_ms: float = 0.0
    elapsed_ms: float = 0.0
    status: SessionStatus = "running"
    end_reason: str = ""
    submitting: bool = False
    letters_spawned: int = 0
    words: List[str] = Field(default_factory=list)
    last_score: Optional[ScoreRecord] = None
    _rng: random.Random = None

    def model_post_init(self, __context) -> None:
        """Initialize the random generator and deal the first board."""
        self._rng = random.Random(self.seed)
        if self.board is None:
            self.reset()

    @classmethod
    def create(
        cls,
        settings: Optional[Settings] = None,
        rows: int = 6,
        cols: int = 5,
        seed: Optional[int] = None,
        dictionary: Any = None,
        score_log: Any = None,
        **kwargs: Any
    ) -> "GameSession":
        """
        Factory method to create a session ready to play.

        Args:
            settings: Level and ceiling (defaults if omitted)
            rows: Board rows
            cols: Board columns
            seed: Optional random seed for reproducibility
            dictionary: Async word checker
            score_log: Where finished runs are recorded

        Returns:
            A new GameSession with a dealt board and the first targets chosen
        """
        fields: Dict[str, Any] = dict(
            settings=settings or Settings(),
            rows=rows,
            cols=cols,
            seed=seed,
            score_log=score_log,
            **kwargs
        )
        if dictionary is not None:
            fields["dictionary"] = dictionary
        return cls(**fields)

    @property
    def ceiling(self) -> int:
        return self.settings.stack_ceiling

    @property
    def is_over(self) -> bool:
        return self.status != "running"

    @property
    def pending_targets(self) -> List[int]:
        return self.scheduler.pending_indices

    def reset(self) -> None:
        """Start a fresh run with the current settings."""
        self.supply = LetterSupply.create(self.rows, self.cols, rng=self._rng)
        self.board = Board.create(self.rows, self.cols, supply=self.supply)
        self.scheduler = SpawnScheduler(rng=self._rng)
        self.tempo = TempoController(level=self.settings.level)

        self.selection = []
        self.countdown_ms = float(self.tempo.current.interval_ms)
        self.elapsed_ms = 0.0
        self.status = "running"
        self.end_reason = ""
        self.submitting = False
        self.letters_spawned = 0
        self.words = []
        self.last_score = None

        self.scheduler.choose_targets(self.board, self.tempo.current.quantity)

    def apply_settings(self, settings: Settings) -> None:
        """Switch level/ceiling; the tempo is re-derived and the run restarts."""
        self.settings = settings
        self.reset()

    def _end(self, status: SessionStatus, reason: str) -> None:
        if self.is_over:
            return

        self.status = status
        self.end_reason = reason
        self.selection = []
        self.scheduler.pending = []

        self.last_score = ScoreRecord(
            level=self.settings.level,
            elapsed_ms=max(0, round(self.elapsed_ms)),
            timestamp=self.clock(),
            ceiling=self.ceiling,
            mode="win" if status == "won" else "survival",
        )
        if self.score_log is not None:
            self.score_log.append(self.last_score)
        logger.debug("Session %s: %s", status, reason)

    def _record_spawns(self, outcome: SpawnOutcome) -> SpawnOutcome:
        self.letters_spawned += len(outcome.events)
        if outcome.ended:
            self._end("lost", f"Stack hit x{self.ceiling}")
        return outcome

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    def tick(self, dt_ms: float) -> Optional[SpawnOutcome]:
        """
        Advance game time by one frame.

        Returns:
            The spawn outcome if the countdown expired this frame, else None
        """
        if self.is_over:
            return None

        # Safety net: a cleared board is a win even if no submission noticed it
        if self.board.is_cleared():
            self._end("won", WIN_REASON)
            return None

        self.elapsed_ms += dt_ms
        self.countdown_ms -= dt_ms
        if self.countdown_ms > 0:
            return None

        outcome = self._record_spawns(
            self.scheduler.apply_pending(self.board, self.supply, self.ceiling, self.tempo.current.quantity)
        )
        if outcome.ended:
            return outcome

        tempo = self.tempo.start_cycle()
        self.countdown_ms = float(tempo.interval_ms)
        self.scheduler.choose_targets(self.board, tempo.quantity)
        return outcome

    def drop(self) -> Optional[SpawnOutcome]:
        """
        Land the next pending letter right now and restart the countdown.

        Returns:
            The spawn outcome, or None if the run is over
        """
        if self.is_over:
            return None

        quantity = self.tempo.current.quantity
        outcome = self._record_spawns(
            self.scheduler.drop_one(self.board, self.supply, self.ceiling, quantity)
        )
        if outcome.ended:
            return outcome

        self.countdown_ms = float(self.tempo.current.interval_ms)
        if not self.scheduler.pending:
            self.scheduler.choose_targets(self.board, quantity)
        return outcome

    # ------------------------------------------------------------------
    # Selection and submission
    # ------------------------------------------------------------------

    def toggle(self, index: int) -> bool:
        """
        Select or deselect a cell. Empty cells cannot be selected.

        Returns:
            True if the cell is selected afterwards
        """
        if self.is_over:
            return False

        if index in self.selection:
            self.selection.remove(index)
            return False
        if self.board.top(index) is None:
            return False

        self.selection.append(index)
        return True

    def select(self, indices: List[int]) -> List[int]:
        """Replace the selection with these cells, in order, skipping unusable ones."""
        self.clear_selection()
        for index in indices:
            if 0 <= index < self.board.cell_count and index not in self.selection:
                self.toggle(index)
        return list(self.selection)

    def clear_selection(self) -> None:
        self.selection = []

    def current_candidate(self) -> Candidate:
        return build_candidate(self.board.stacks, self.selection)

    def _rejected(self, error: ValidationError, candidate: Optional[Candidate] = None) -> SubmissionResult:
        return SubmissionResult(
            accepted=False,
            word=candidate.word if candidate else "",
            tiles=list(candidate.tiles) if candidate else [],
            code=error.code,
            message=error.message,
        )

    async def submit(self) -> SubmissionResult:
        """
        Submit the selected tiles as a word.

        The loop may keep spawning while the dictionary answers. An accepted
        word is only applied if every tile still shows the letter it was
        read from.

        Returns:
            SubmissionResult describing what happened
        """
        if self.is_over:
            return self._rejected(rejection(GAME_OVER))
        if self.submitting:
            return self._rejected(rejection(SUBMIT_IN_PROGRESS))

        candidate = self.current_candidate()
        error = check_candidate(candidate)
        if error:
            return self._rejected(error, candidate)

        self.submitting = True
        try:
            valid = await self.dictionary.check_word(candidate.word)
        finally:
            self.submitting = False

        if self.is_over:
            return self._rejected(rejection(GAME_OVER, candidate.word), candidate)
        if not valid:
            return self._rejected(rejection(NOT_IN_DICTIONARY, candidate.word), candidate)
        if not still_matches(self.board.stacks, candidate):
            return self._rejected(rejection(BOARD_CHANGED, candidate.word), candidate)

        used = [self.board.pop(index) for index in candidate.tiles]
        self.supply.return_letters(used)
        self.clear_selection()
        self.tempo.record_word(candidate.length)
        self.words.append(candidate.word)

        if self.board.is_cleared():
            self._end("won", WIN_REASON)

        return SubmissionResult(
            accepted=True,
            word=candidate.word,
            tiles=list(candidate.tiles),
            message=f"Cleared {candidate.word}",
            letters_returned=used,
        )

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def render_state(self) -> RenderState:
        """Snapshot for renderers and prompts."""
        return RenderState(
            rows=self.rows,
            cols=self.cols,
            stacks=[list(stack) for stack in self.board.stacks],
            selection=list(self.selection),
            pending_targets=self.pending_targets,
            ceiling=self.ceiling,
            countdown_ms=max(0.0, self.countdown_ms),
            interval_ms=self.tempo.current.interval_ms,
            quantity=self.tempo.current.quantity,
            level=self.settings.level,
            status=self.status,
            vowel_ratio=self.board.vowel_ratio(),
        )

    def get_state(self) -> Dict:
        """
        Get the current session state as a dictionary.

        Useful for serialization and logging.
        """
        return {
            "status": self.status,
            "end_reason": self.end_reason,
            "settings": self.settings.to_dict(),
            "board": self.board.get_state(),
            "supply": self.supply.get_state(),
            "pending_targets": self.pending_targets,
            "cooldowns": dict(self.scheduler.cooldowns),
            "tempo": self.tempo.current.model_dump(),
            "countdown_ms": self.countdown_ms,
            "elapsed_ms": self.elapsed_ms,
            "letters_spawned": self.letters_spawned,
            "words": list(self.words),
        }
