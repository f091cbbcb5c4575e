"""
Board state: a fixed grid of letter stacks.

Each cell holds a stack whose last element is the visible, playable letter.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field, model_validator

from .bag import LetterSupply, is_vowel


class Board(BaseModel):
    """
    A rows x cols grid of letter stacks stored in row-major order.

    Attributes:
        rows: Number of rows
        cols: Number of columns
        stacks: One stack per cell, top of stack is the last element
    """

    rows: int = Field(default=6, ge=0)
    cols: int = Field(default=5, ge=0)
    stacks: List[List[str]] = Field(default_factory=list)

    @model_validator(mode="after")
    def _size_stacks(self) -> "Board":
        if not self.stacks:
            self.stacks = [[] for _ in range(self.rows * self.cols)]
        elif len(self.stacks) != self.rows * self.cols:
            raise ValueError(
                f"Board {self.rows}x{self.cols} needs {self.rows * self.cols} stacks, "
                f"got {len(self.stacks)}"
            )
        return self

    @classmethod
    def create(cls, rows: int = 6, cols: int = 5, supply: Optional[LetterSupply] = None) -> "Board":
        """
        Factory method to create a board, optionally dealing one letter per cell.

        Args:
            rows: Number of rows
            cols: Number of columns
            supply: If given, every cell starts with one letter drawn from it

        Returns:
            A new Board
        """
        board = cls(rows=rows, cols=cols)
        if supply is not None:
            for stack in board.stacks:
                stack.append(supply.draw())
        return board

    @property
    def cell_count(self) -> int:
        return len(self.stacks)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.stacks):
            raise ValueError(f"Cell index {index} out of range (0-{len(self.stacks) - 1})")

    def top(self, index: int) -> Optional[str]:
        """Visible letter of a cell, or None if the cell is empty."""
        self._check_index(index)
        stack = self.stacks[index]
        return stack[-1] if stack else None

    def height(self, index: int) -> int:
        self._check_index(index)
        return len(self.stacks[index])

    def heights(self) -> List[int]:
        return [len(stack) for stack in self.stacks]

    def max_height(self) -> int:
        return max(self.heights(), default=0)

    def push(self, index: int, letter: str) -> int:
        """
        Put a letter on top of a cell.

        Returns:
            The new stack height
        """
        self._check_index(index)
        self.stacks[index].append(letter.upper())
        return len(self.stacks[index])

    def pop(self, index: int) -> Optional[str]:
        """Remove and return a cell's top letter, or None if it is empty."""
        self._check_index(index)
        stack = self.stacks[index]
        return stack.pop() if stack else None

    def empty_cells(self) -> List[int]:
        return [i for i, stack in enumerate(self.stacks) if not stack]

    def is_cleared(self) -> bool:
        """True when every stack is empty."""
        return all(not stack for stack in self.stacks)

    def visible_letters(self) -> List[str]:
        return [stack[-1] for stack in self.stacks if stack]

    def vowel_ratio(self) -> float:
        """Fraction of vowels among visible letters (0.0 for a blank board)."""
        visible = self.visible_letters()
        if not visible:
            return 0.0
        return sum(1 for letter in visible if is_vowel(letter)) / len(visible)

    def total_letters(self) -> int:
        return sum(self.heights())

    def get_state(self) -> Dict:
        return {
            "rows": self.rows,
            "cols": self.cols,
            "heights": self.heights(),
            "tops": [stack[-1] if stack else None for stack in self.stacks],
            "total_letters": self.total_letters(),
        }
