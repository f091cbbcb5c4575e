"""
Spawn scheduling: which cells get the next letters, and which letters they get.

Spawning is a two-phase protocol. `choose_targets` picks cells and returns
`SpawnTarget`s that carry no letter, so the highlighted cells reveal nothing
about the upcoming draw. Letters are drawn only when a target is applied,
producing a `SpawnEvent`.

Target selection:
- quantity 1 ("early"): an empty cell if there is one, otherwise any cell.
- quantity >= 2 ("weighted"): one cell by the tallest-first rule, the rest
  uniformly from the remaining cells. A tallest pick puts that cell on a
  short cooldown so the same tower is not fed every cycle.
"""

import logging
import random
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict

from .bag import LetterSupply, is_vowel
from .board import Board
from .models import SpawnTarget, SpawnEvent, SpawnOutcome


logger = logging.getLogger(__name__)

# Cycles a tallest-rule pick stays ineligible
TALL_COOLDOWN_CYCLES = 3

# Balanced draw band for the visible vowel ratio
VOWEL_RATIO_MAX = 0.35  # At or above: prefer a consonant
VOWEL_RATIO_MIN = 0.25  # At or below: prefer a vowel
SCAN_WINDOW = 64  # Letters scanned from the draw end of the bag


def draw_balanced(board: Board, supply: LetterSupply, window: int = SCAN_WINDOW) -> str:
    """
    Draw a letter with a nudge toward a playable vowel/consonant mix.

    Looks at the visible letters only. When vowels are plentiful the nearest
    consonant in the scan window is taken, when they are scarce the nearest
    vowel; otherwise (or when the window has no such letter) a plain draw.

    Args:
        board: Board whose visible letters set the bias
        supply: Bag to draw from
        window: How far from the draw end to look for the preferred kind

    Returns:
        The drawn letter
    """
    supply.ensure_stocked()
    ratio = board.vowel_ratio()

    letter = None
    if ratio >= VOWEL_RATIO_MAX:
        letter = supply.draw_preferring(lambda ch: not is_vowel(ch), window)
    elif ratio <= VOWEL_RATIO_MIN:
        letter = supply.draw_preferring(is_vowel, window)

    if letter is None:
        letter = supply.draw()
    return letter


class SpawnScheduler(BaseModel):
    """
    Chooses spawn targets and applies them to the board.

    Attributes:
        cooldowns: Cell index -> cycles left before the tallest rule may pick it again
        pending: Targets chosen for the upcoming spawn, not yet applied
        last_pick_was_fallback: Whether the last tallest pick ignored a cooldown
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    cooldowns: Dict[int, int] = Field(default_factory=dict)
    pending: List[SpawnTarget] = Field(default_factory=list)
    last_pick_was_fallback: bool = False
    rng: random.Random = Field(default_factory=random.Random, exclude=True)

    @property
    def pending_indices(self) -> List[int]:
        return [t.cell_index for t in self.pending]

    def reset(self) -> None:
        """Forget cooldowns and pending targets."""
        self.cooldowns.clear()
        self.pending = []
        self.last_pick_was_fallback = False

    def _tick_cooldowns(self) -> None:
        for index in list(self.cooldowns):
            remaining = self.cooldowns[index] - 1
            if remaining <= 0:
                del self.cooldowns[index]
            else:
                self.cooldowns[index] = remaining

    def _pick_tallest(self, board: Board) -> int:
        heights = board.heights()
        tallest = max(heights)
        candidates = [i for i, h in enumerate(heights) if h == tallest]

        fresh = [i for i in candidates if i not in self.cooldowns]
        if fresh:
            index = self.rng.choice(fresh)
            self.cooldowns[index] = TALL_COOLDOWN_CYCLES
            self.last_pick_was_fallback = False
        else:
            # Every tallest cell is cooling down; still pick one so the batch is full
            index = self.rng.choice(candidates)
            self.last_pick_was_fallback = True
        return index

    def _choose_weighted(self, board: Board, quantity: int) -> List[int]:
        picks = [self._pick_tallest(board)]
        chosen = set(picks)

        pool = [i for i in range(board.cell_count) if i not in chosen]
        self.rng.shuffle(pool)
        while len(picks) < quantity and pool:
            index = pool.pop()
            chosen.add(index)
            picks.append(index)

        # Guard: top up from whatever is left if the pool came up short
        for index in range(board.cell_count):
            if len(picks) >= quantity:
                break
            if index not in chosen:
                chosen.add(index)
                picks.append(index)

        return picks

    def _choose_early(self, board: Board, quantity: int) -> List[int]:
        empties = board.empty_cells()
        self.rng.shuffle(empties)
        picks = empties[:quantity]

        if len(picks) < quantity:
            rest = [i for i in range(board.cell_count) if i not in picks]
            self.rng.shuffle(rest)
            picks.extend(rest[:quantity - len(picks)])

        return picks

    def choose_targets(self, board: Board, quantity: int) -> List[SpawnTarget]:
        """
        Start a new cycle and choose the cells for the next spawn.

        Cooldowns are advanced first, so a cell picked by the tallest rule
        becomes eligible again three cycles later.

        Args:
            board: Current board
            quantity: Letters to spawn this cycle

        Returns:
            Distinct targets, at most one per cell
        """
        self._tick_cooldowns()
        self.last_pick_was_fallback = False

        quantity = min(max(quantity, 0), board.cell_count)
        if quantity == 0:
            picks = []
        elif quantity >= 2:
            picks = self._choose_weighted(board, quantity)
        else:
            picks = self._choose_early(board, quantity)

        self.pending = [SpawnTarget(cell_index=i) for i in picks]
        return list(self.pending)

    def _apply_target(
        self,
        target: SpawnTarget,
        board: Board,
        supply: LetterSupply,
        ceiling: int,
        outcome: SpawnOutcome,
    ) -> bool:
        letter = draw_balanced(board, supply)
        height = board.push(target.cell_index, letter)
        outcome.events.append(SpawnEvent(cell_index=target.cell_index, letter=letter, height=height))
        logger.debug("Spawned %s on cell %d (height %d)", letter, target.cell_index, height)

        if height >= ceiling:
            outcome.breached_cell = target.cell_index
            return True
        return False

    def apply_pending(
        self,
        board: Board,
        supply: LetterSupply,
        ceiling: int,
        quantity: Optional[int] = None,
    ) -> SpawnOutcome:
        """
        Land a letter on every pending target.

        The ceiling is checked after each push; the first breach stops the
        batch and the remaining targets are discarded.

        Args:
            board: Board to push onto
            supply: Bag to draw from
            ceiling: Stack height that ends the session
            quantity: Batch size to choose with if nothing is pending

        Returns:
            SpawnOutcome listing the letters that landed and any breach
        """
        if not self.pending:
            self.choose_targets(board, quantity or 1)

        outcome = SpawnOutcome()
        targets, self.pending = self.pending, []
        for target in targets:
            if self._apply_target(target, board, supply, ceiling, outcome):
                break
        return outcome

    def drop_one(
        self,
        board: Board,
        supply: LetterSupply,
        ceiling: int,
        quantity: int = 1,
    ) -> SpawnOutcome:
        """
        Land only the first pending target (manual drop).

        The other targets stay pending.
        """
        if not self.pending:
            self.choose_targets(board, quantity)

        outcome = SpawnOutcome()
        if not self.pending:
            return outcome

        target = self.pending.pop(0)
        self._apply_target(target, board, supply, ceiling, outcome)
        return outcome
