"""
Level presets and tempo adaptation.

Each level maps to a base tempo (letters per cycle, seconds per cycle).
Within a tier the interval drops by a second per level; quantity steps up at
tier boundaries:

    1-6:   1 tile every 10..5s
    7-12:  2 tiles every 10..5s
    13-18: 3 tiles every 10..5s
    19:    3 tiles every 4s
    20:    4 tiles every 10s
    21-24: 4 tiles every 8..5s
    25:    5 tiles every 6s

After an accepted word the next cycle only is retimed from the base:
3 letters speed it up by 3s, 4 letters keep it, 5+ letters slow it by 3s.
"""

from typing import Optional
from pydantic import BaseModel

from .models import Tempo


MIN_LEVEL = 1
MAX_LEVEL = 25
MIN_INTERVAL_MS = 1000
MAX_INTERVAL_MS = 60000
MIN_QUANTITY = 1
MAX_QUANTITY = 5
WORD_LENGTH_STEP_MS = 3000


def clamp_level(level: int) -> int:
    return max(MIN_LEVEL, min(MAX_LEVEL, level))


def clamp_interval(interval_ms: int) -> int:
    return max(MIN_INTERVAL_MS, min(MAX_INTERVAL_MS, interval_ms))


def clamp_quantity(quantity: int) -> int:
    return max(MIN_QUANTITY, min(MAX_QUANTITY, quantity))


def preset_for_level(level: int) -> Tempo:
    """Base tempo for a level (clamped to 1-25)."""
    level = clamp_level(level)

    if level <= 6:
        quantity, secs = 1, 11 - level
    elif level <= 12:
        quantity, secs = 2, 10 - (level - 7)
    elif level <= 18:
        quantity, secs = 3, 10 - (level - 13)
    elif level == 19:
        quantity, secs = 3, 4
    elif level == 20:
        quantity, secs = 4, 10
    elif level <= 24:
        quantity, secs = 4, 29 - level
    else:
        quantity, secs = 5, 6

    return Tempo(interval_ms=clamp_interval(secs * 1000), quantity=clamp_quantity(quantity))


def describe_level(level: int) -> str:
    """Badge text such as "Level 7: 2 tiles every 10 sec"."""
    tempo = preset_for_level(level)
    secs = round(tempo.interval_ms / 1000)
    noun = "tile" if tempo.quantity == 1 else "tiles"
    return f"Level {clamp_level(level)}: {tempo.quantity} {noun} every {secs} sec"


def interval_for_word_length(length: int, base_interval_ms: int) -> int:
    """Interval of the cycle following an accepted word of this length."""
    if length >= 5:
        return clamp_interval(base_interval_ms + WORD_LENGTH_STEP_MS)
    if length == 4:
        return clamp_interval(base_interval_ms)
    return clamp_interval(base_interval_ms - WORD_LENGTH_STEP_MS)


class TempoController(BaseModel):
    """
    Tracks the spawn tempo for a session.

    Attributes:
        level: Current level
        base: Preset tempo for the level
        current: Tempo of the cycle in progress
        queued_interval_ms: Interval waiting for the next cycle, if a word was accepted
    """

    level: int = MIN_LEVEL
    base: Tempo = None
    current: Tempo = None
    queued_interval_ms: Optional[int] = None

    def model_post_init(self, __context) -> None:
        """Derive the tempo from the level after model creation."""
        self.reset(self.level)

    def reset(self, level: int) -> Tempo:
        """Re-derive everything from the preset table."""
        self.level = clamp_level(level)
        self.base = preset_for_level(self.level)
        self.current = self.base.model_copy()
        self.queued_interval_ms = None
        return self.current

    def record_word(self, length: int) -> int:
        """
        Queue a retimed interval for the next cycle after an accepted word.

        The cycle already counting down keeps its interval.

        Returns:
            The queued interval in milliseconds
        """
        self.queued_interval_ms = interval_for_word_length(length, self.base.interval_ms)
        return self.queued_interval_ms

    def start_cycle(self) -> Tempo:
        """
        Begin a new spawn cycle.

        Uses the queued interval once if there is one, otherwise the base.
        """
        interval = self.queued_interval_ms if self.queued_interval_ms is not None else self.base.interval_ms
        self.current = Tempo(interval_ms=interval, quantity=self.base.quantity)
        self.queued_interval_ms = None
        return self.current
