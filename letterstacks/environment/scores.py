"""
Score log collaborators.

Finished runs are appended as ScoreRecords. The log is append-only; reading
it back is only for scoreboard views.
"""

import json
import logging
import math
from pathlib import Path
from typing import List, Optional, Protocol
from pydantic import BaseModel, Field, ValidationError

from .models import ScoreRecord


logger = logging.getLogger(__name__)


class ScoreLog(Protocol):
    def append(self, record: ScoreRecord) -> None: ...

    def records(self) -> List[ScoreRecord]: ...


class MemoryScoreLog(BaseModel):
    """Score log kept in memory (tests, one-off runs)."""
    entries: List[ScoreRecord] = Field(default_factory=list)

    def append(self, record: ScoreRecord) -> None:
        self.entries.append(record)

    def records(self) -> List[ScoreRecord]:
        return list(self.entries)


class JsonScoreLog(BaseModel):
    """
    Score log stored as a JSON array on disk.

    A missing or unreadable file reads as an empty log.
    """
    path: Path

    def records(self) -> List[ScoreRecord]:
        if not self.path.exists():
            return []
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable score log %s: %s", self.path, e)
            return []
        if not isinstance(data, list):
            return []

        records = []
        for item in data:
            try:
                records.append(ScoreRecord.model_validate(item))
            except ValidationError:
                logger.warning("Skipping malformed score entry: %r", item)
        return records

    def append(self, record: ScoreRecord) -> None:
        records = self.records()
        records.append(record)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump([r.model_dump(mode="json") for r in records], f, indent=2)


def format_elapsed(elapsed_ms: float) -> str:
    """Format a duration as m:ss, rounding partial seconds up."""
    secs = max(0, math.ceil(elapsed_ms / 1000))
    return f"{secs // 60}:{secs % 60:02d}"


def filter_scores(records: List[ScoreRecord], level: Optional[int] = None) -> List[ScoreRecord]:
    """Records for one level (or all), newest first."""
    selected = [r for r in records if level is None or r.level == level]
    return sorted(selected, key=lambda r: r.timestamp, reverse=True)


def format_score(record: ScoreRecord) -> str:
    outcome = "Cleared" if record.mode == "win" else "Survived"
    when = record.timestamp.strftime("%Y-%m-%d %H:%M")
    return (
        f"Level {record.level} - {outcome} {format_elapsed(record.elapsed_ms)} "
        f"(ceiling x{record.ceiling}) - {when}"
    )
