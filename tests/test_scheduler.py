"""Tests for spawn target selection, the balanced draw and spawn application."""

import random

import pytest

from letterstacks.environment import Board, LetterSupply, SpawnScheduler, SpawnTarget, draw_balanced
from letterstacks.environment.scheduler import TALL_COOLDOWN_CYCLES


def board_with_heights(heights, rows, cols, letter="A"):
    return Board(rows=rows, cols=cols, stacks=[[letter] * h for h in heights])


def board_with_tops(tops):
    return Board(rows=1, cols=len(tops), stacks=[[t] if t else [] for t in tops])


class TestEarlyRegime:
    """Quantity 1: empty cells first."""

    @pytest.mark.parametrize("seed", range(10))
    def test_empty_cell_is_preferred(self, seed):
        """With one empty cell, it is always the target."""
        board = board_with_heights([1, 0, 1, 1], rows=2, cols=2)
        scheduler = SpawnScheduler(rng=random.Random(seed))

        targets = scheduler.choose_targets(board, 1)

        assert [t.cell_index for t in targets] == [1]

    def test_any_cell_when_none_empty(self):
        """A full board still gets a target."""
        board = board_with_heights([2, 1, 3, 1], rows=2, cols=2)
        scheduler = SpawnScheduler(rng=random.Random(0))

        targets = scheduler.choose_targets(board, 1)

        assert len(targets) == 1
        assert 0 <= targets[0].cell_index < 4

    def test_early_regime_sets_no_cooldown(self):
        """Only the tallest rule sets cooldowns."""
        board = board_with_heights([2, 1, 3, 1], rows=2, cols=2)
        scheduler = SpawnScheduler(rng=random.Random(0))
        scheduler.choose_targets(board, 1)
        assert scheduler.cooldowns == {}


class TestWeightedRegime:
    """Quantity >= 2: one tallest pick plus random picks."""

    @pytest.mark.parametrize("seed", range(10))
    def test_first_target_is_tallest(self, seed):
        """Without cooldowns the first target has the maximum height."""
        board = board_with_heights([1, 3, 2, 3, 0, 1], rows=2, cols=3)
        scheduler = SpawnScheduler(rng=random.Random(seed))

        targets = scheduler.choose_targets(board, 3)

        assert targets[0].cell_index in {1, 3}
        assert scheduler.cooldowns == {targets[0].cell_index: TALL_COOLDOWN_CYCLES}
        assert scheduler.last_pick_was_fallback is False

    @pytest.mark.parametrize("seed", range(10))
    def test_no_repeats_within_batch(self, seed):
        """A batch never targets the same cell twice."""
        board = board_with_heights([1, 2, 1, 2, 1, 2], rows=2, cols=3)
        scheduler = SpawnScheduler(rng=random.Random(seed))

        indices = [t.cell_index for t in scheduler.choose_targets(board, 5)]

        assert len(indices) == 5
        assert len(set(indices)) == 5

    def test_batch_never_exceeds_board(self):
        """Asking for more targets than cells gives one per cell."""
        board = board_with_heights([1, 1, 1, 1], rows=2, cols=2)
        scheduler = SpawnScheduler(rng=random.Random(0))

        indices = [t.cell_index for t in scheduler.choose_targets(board, 5)]

        assert sorted(indices) == [0, 1, 2, 3]

    def test_cooling_tallest_cell_is_skipped(self):
        """A tied tallest cell on cooldown loses to one that is not."""
        board = board_with_heights([3, 3, 1, 1], rows=2, cols=2)
        scheduler = SpawnScheduler(cooldowns={0: 5}, rng=random.Random(0))

        targets = scheduler.choose_targets(board, 2)

        assert targets[0].cell_index == 1
        assert scheduler.last_pick_was_fallback is False

    def test_fallback_when_all_tallest_cooling(self):
        """If every tallest cell is cooling, one is picked anyway."""
        board = board_with_heights([3, 1, 1, 1], rows=2, cols=2)
        scheduler = SpawnScheduler(cooldowns={0: 5}, rng=random.Random(0))

        targets = scheduler.choose_targets(board, 2)

        assert targets[0].cell_index == 0
        assert scheduler.last_pick_was_fallback is True
        # The fallback does not refresh the cooldown
        assert scheduler.cooldowns[0] == 4

    def test_tallest_repick_waits_three_cycles(self):
        """On a level board no cell is the tallest pick twice within three cycles."""
        board = board_with_heights([1] * 6, rows=2, cols=3)
        scheduler = SpawnScheduler(rng=random.Random(11))
        last_seen = {}

        for cycle in range(60):
            first = scheduler.choose_targets(board, 2)[0].cell_index
            assert scheduler.last_pick_was_fallback is False
            if first in last_seen:
                assert cycle - last_seen[first] >= TALL_COOLDOWN_CYCLES
            last_seen[first] = cycle


class TestCooldowns:
    """Test cooldown bookkeeping."""

    def test_cooldowns_tick_once_per_cycle(self):
        """Entries decrement each cycle and disappear at zero."""
        board = board_with_heights([1, 1, 1, 1], rows=2, cols=2)
        scheduler = SpawnScheduler(cooldowns={0: 1, 1: 3}, rng=random.Random(0))

        scheduler.choose_targets(board, 1)

        assert scheduler.cooldowns == {1: 2}

    def test_reset_clears_state(self):
        """reset() forgets cooldowns and pending targets."""
        board = board_with_heights([1, 2, 1, 1], rows=2, cols=2)
        scheduler = SpawnScheduler(rng=random.Random(0))
        scheduler.choose_targets(board, 2)

        scheduler.reset()

        assert scheduler.cooldowns == {}
        assert scheduler.pending == []


class TestSpawnTargets:
    """Test the two-phase target/event protocol."""

    def test_targets_carry_no_letter(self):
        """Selection output has a cell index only."""
        assert set(SpawnTarget.model_fields) == {"cell_index"}

    def test_selection_does_not_touch_bag_or_board(self):
        """Choosing targets draws nothing."""
        board = board_with_heights([1, 1, 1, 1], rows=2, cols=2)
        supply = LetterSupply(bag=["A", "B", "C"])
        scheduler = SpawnScheduler(rng=random.Random(0))

        scheduler.choose_targets(board, 2)

        assert supply.bag == ["A", "B", "C"]
        assert board.heights() == [1, 1, 1, 1]

    def test_pending_kept_until_applied(self):
        """Chosen targets stay pending."""
        board = board_with_heights([1, 1, 1, 1], rows=2, cols=2)
        scheduler = SpawnScheduler(rng=random.Random(0))

        targets = scheduler.choose_targets(board, 2)

        assert scheduler.pending_indices == [t.cell_index for t in targets]


class TestApplyPending:
    """Test landing letters on the board."""

    def test_letters_land_on_targets(self):
        """Every pending target receives one letter."""
        board = board_with_heights([1, 2, 1, 1], rows=2, cols=2)
        supply = LetterSupply.create(2, 2, rng=random.Random(0))
        scheduler = SpawnScheduler(rng=random.Random(0))
        targets = scheduler.choose_targets(board, 2)

        outcome = scheduler.apply_pending(board, supply, ceiling=6)

        assert [e.cell_index for e in outcome.events] == [t.cell_index for t in targets]
        assert board.total_letters() == 7
        assert scheduler.pending == []
        assert not outcome.ended
        for event in outcome.events:
            assert board.top(event.cell_index) == event.letter
            assert board.height(event.cell_index) == event.height

    def test_ceiling_breach_stops_batch(self):
        """The first push that reaches the ceiling ends the batch."""
        board = board_with_heights([5, 0, 0], rows=1, cols=3)
        supply = LetterSupply.create(1, 3, rng=random.Random(0))
        scheduler = SpawnScheduler(rng=random.Random(0))
        scheduler.choose_targets(board, 3)

        outcome = scheduler.apply_pending(board, supply, ceiling=6)

        assert outcome.ended
        assert outcome.breached_cell == 0
        assert len(outcome.events) == 1
        assert board.heights() == [6, 0, 0]
        assert scheduler.pending == []

    def test_apply_without_pending_chooses_first(self):
        """Applying with nothing pending picks targets on the spot."""
        board = board_with_heights([0, 0, 0, 0], rows=2, cols=2)
        supply = LetterSupply.create(2, 2, rng=random.Random(0))
        scheduler = SpawnScheduler(rng=random.Random(0))

        outcome = scheduler.apply_pending(board, supply, ceiling=6, quantity=1)

        assert len(outcome.events) == 1

    def test_drop_one_keeps_rest_pending(self):
        """A manual drop lands only the first target."""
        board = board_with_heights([1, 1, 1, 1], rows=1, cols=4)
        supply = LetterSupply.create(1, 4, rng=random.Random(0))
        scheduler = SpawnScheduler(rng=random.Random(0))
        targets = scheduler.choose_targets(board, 3)

        outcome = scheduler.drop_one(board, supply, ceiling=6)

        assert [e.cell_index for e in outcome.events] == [targets[0].cell_index]
        assert scheduler.pending_indices == [t.cell_index for t in targets[1:]]


class TestBalancedDraw:
    """Test the vowel/consonant bias."""

    def test_vowel_heavy_board_gets_consonant(self):
        """At or above 35% visible vowels the nearest consonant is drawn."""
        board = board_with_tops(["A"] * 4)
        supply = LetterSupply(bag=["B", "E", "E"])

        assert draw_balanced(board, supply) == "B"
        assert supply.bag == ["E", "E"]

    def test_consonant_heavy_board_gets_vowel(self):
        """At or below 25% visible vowels the nearest vowel is drawn."""
        board = board_with_tops(["T"] * 4)
        supply = LetterSupply(bag=["A", "T", "T"])

        assert draw_balanced(board, supply) == "A"
        assert supply.bag == ["T", "T"]

    def test_balanced_board_draws_normally(self):
        """Inside the band the last letter is drawn."""
        board = board_with_tops(["A", "E", "I"] + ["T"] * 7)
        supply = LetterSupply(bag=["A", "T", "E"])

        assert draw_balanced(board, supply) == "E"

    def test_threshold_edges(self):
        """Exactly 25% still prefers a vowel; a third is inside the band."""
        quarter = board_with_tops(["A", "T", "T", "T"])
        supply = LetterSupply(bag=["E", "T"])
        assert draw_balanced(quarter, supply) == "E"

        third = board_with_tops(["A", "T", "T"])
        supply = LetterSupply(bag=["E", "T", "A"])
        assert draw_balanced(third, supply) == "A"

    def test_window_miss_falls_back(self):
        """No consonant in the scan window means a plain draw."""
        board = board_with_tops(["A"] * 4)
        supply = LetterSupply(bag=["B"] + ["E"] * 64)

        assert draw_balanced(board, supply) == "E"
        assert len(supply) == 64
        assert supply.bag[0] == "B"

    def test_blank_board_prefers_vowel(self):
        """A board with nothing visible counts as 0% vowels."""
        board = board_with_tops([None, None])
        supply = LetterSupply(bag=["T", "A", "T"])

        assert draw_balanced(board, supply) == "A"

    def test_empty_supply_refills(self):
        """The balanced draw also never runs dry."""
        board = board_with_tops(["A", "T"])
        supply = LetterSupply(bag=[], rows=1, cols=2, rng=random.Random(0))

        assert draw_balanced(board, supply).isalpha()
        assert supply.refills == 1
