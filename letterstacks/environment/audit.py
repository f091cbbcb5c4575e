"""
Spawn audit: run the scheduler for many cycles and measure how it behaves.

Useful for checking that the tallest-first cooldown does its job at the
higher levels. The board gets an unreachable ceiling so the run never ends
early.
"""

import random
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from .bag import LetterSupply
from .board import Board
from .scheduler import SpawnScheduler
from .tempo import preset_for_level


AUDIT_CEILING = 999


class SpawnAudit(BaseModel):
    """Counters collected by audit_spawns."""
    level: int
    cycles: int
    cycles_run: int = 0
    letters_spawned: int = 0
    tallest_fallbacks: int = 0  # Tallest picks taken while on cooldown
    random_hits_on_cooldown: int = 0  # Non-tallest picks that landed on a cooling cell
    tallest_gaps: Dict[int, List[int]] = Field(default_factory=dict)  # Cell -> cycles between tallest picks
    max_height: int = 0

    @property
    def avg_tallest_gap(self) -> Optional[float]:
        gaps = [gap for cell_gaps in self.tallest_gaps.values() for gap in cell_gaps]
        return sum(gaps) / len(gaps) if gaps else None

    @property
    def min_tallest_gap(self) -> Optional[int]:
        gaps = [gap for cell_gaps in self.tallest_gaps.values() for gap in cell_gaps]
        return min(gaps) if gaps else None

    def summary(self) -> Dict:
        return {
            "level": self.level,
            "cycles_run": self.cycles_run,
            "letters_spawned": self.letters_spawned,
            "tallest_fallbacks": self.tallest_fallbacks,
            "random_hits_on_cooldown": self.random_hits_on_cooldown,
            "avg_tallest_gap": self.avg_tallest_gap,
            "max_height": self.max_height,
        }


def audit_spawns(
    level: int = 25,
    cycles: int = 200,
    rows: int = 6,
    cols: int = 5,
    seed: Optional[int] = None,
) -> SpawnAudit:
    """
    Run the spawn scheduler on a fresh board without any submissions.

    Args:
        level: Level whose preset quantity is used every cycle
        cycles: Number of spawn cycles to run
        rows: Board rows
        cols: Board columns
        seed: Optional random seed for reproducibility

    Returns:
        SpawnAudit with the collected counters
    """
    rng = random.Random(seed)
    supply = LetterSupply.create(rows, cols, rng=rng)
    board = Board.create(rows, cols, supply=supply)
    scheduler = SpawnScheduler(rng=rng)
    quantity = preset_for_level(level).quantity

    audit = SpawnAudit(level=level, cycles=cycles)
    last_tallest: Dict[int, int] = {}

    for cycle in range(cycles):
        picks = [t.cell_index for t in scheduler.choose_targets(board, quantity)]

        if quantity >= 2 and picks:
            tallest = picks[0]
            if scheduler.last_pick_was_fallback:
                audit.tallest_fallbacks += 1
            audit.random_hits_on_cooldown += sum(1 for i in picks[1:] if i in scheduler.cooldowns)

            if tallest in last_tallest:
                audit.tallest_gaps.setdefault(tallest, []).append(cycle - last_tallest[tallest])
            last_tallest[tallest] = cycle

        outcome = scheduler.apply_pending(board, supply, AUDIT_CEILING)
        audit.letters_spawned += len(outcome.events)
        audit.cycles_run += 1
        if outcome.ended:
            break

    audit.max_height = board.max_height()
    return audit
