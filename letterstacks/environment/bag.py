import math
import random
from typing import Callable, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


# English letter frequency table (98 tiles per bag)
LETTER_COUNTS: Dict[str, int] = {
    "A": 9, "B": 2, "C": 2, "D": 4, "E": 12, "F": 2, "G": 3,
    "H": 2, "I": 9, "J": 1, "K": 1, "L": 4, "M": 2, "N": 6,
    "O": 8, "P": 2, "Q": 1, "R": 6, "S": 4, "T": 6, "U": 4,
    "V": 2, "W": 2, "X": 1, "Y": 2, "Z": 1
}

# Scrabble-style letter values
LETTER_VALUES: Dict[str, int] = {
    "A": 1, "B": 3, "C": 3, "D": 2, "E": 1, "F": 4, "G": 2,
    "H": 4, "I": 1, "J": 8, "K": 5, "L": 1, "M": 3, "N": 1,
    "O": 1, "P": 3, "Q": 10, "R": 1, "S": 1, "T": 1, "U": 1,
    "V": 4, "W": 4, "X": 8, "Y": 4, "Z": 10
}

VOWELS = frozenset("AEIOU")

# Board area that gets two full bags
BASE_AREA = 36


def is_vowel(letter: Optional[str]) -> bool:
    """Check whether a letter is one of A, E, I, O, U."""
    return bool(letter) and letter.upper() in VOWELS


def bag_multiplier(rows: int, cols: int) -> int:
    """
    Number of full frequency tables in a bag for a board of this size.

    Scales linearly with area: a 6x6 board gets 2 bags, never fewer than 1.
    """
    if rows < 0 or cols < 0:
        raise ValueError(f"Board dimensions must be non-negative, got {rows}x{cols}")
    area = max(1, rows * cols)
    return max(1, math.ceil((area / BASE_AREA) * 2))


def build_bag(rows: int, cols: int, rng: Optional[random.Random] = None) -> List[str]:
    """
    Build a shuffled bag sized for a board.

    Args:
        rows: Board rows
        cols: Board columns
        rng: Random source (a fresh one if omitted)

    Returns:
        Shuffled list of uppercase letters
    """
    multiplier = bag_multiplier(rows, cols)
    bag = []
    for _ in range(multiplier):
        for letter, count in LETTER_COUNTS.items():
            bag.extend([letter] * count)

    (rng or random.Random()).shuffle(bag)
    return bag


class LetterSupply(BaseModel):
    """
    The session's bag of undrawn letters.

    Draws come off the end of the list. The bag refills itself from the
    frequency table when it runs dry, so a draw always yields a letter.

    Attributes:
        bag: Remaining letters, last element is drawn next
        rows: Board rows used to size refills
        cols: Board columns used to size refills
        refills: How many times the bag has been rebuilt after running dry
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    bag: List[str] = Field(default_factory=list)
    rows: int = Field(default=6, ge=0)
    cols: int = Field(default=5, ge=0)
    refills: int = 0
    rng: random.Random = Field(default_factory=random.Random, exclude=True)

    @classmethod
    def create(cls, rows: int = 6, cols: int = 5, rng: Optional[random.Random] = None) -> "LetterSupply":
        """
        Factory method to create a supply with a freshly shuffled bag.

        Args:
            rows: Board rows
            cols: Board columns
            rng: Random source shared with the rest of the session

        Returns:
            A new LetterSupply
        """
        rng = rng or random.Random()
        return cls(bag=build_bag(rows, cols, rng), rows=rows, cols=cols, rng=rng)

    def __len__(self) -> int:
        return len(self.bag)

    def ensure_stocked(self) -> None:
        """Refill the bag from the frequency table if it is empty."""
        if not self.bag:
            self.bag.extend(build_bag(self.rows, self.cols, self.rng))
            self.refills += 1

    def draw(self) -> str:
        """Remove and return the last letter, refilling first if needed."""
        self.ensure_stocked()
        return self.bag.pop()

    def draw_preferring(self, predicate: Callable[[str], bool], window: int = 64) -> Optional[str]:
        """
        Take the nearest letter to the draw end that satisfies a predicate.

        Only the last `window` letters are scanned.

        Args:
            predicate: Test applied to each candidate letter
            window: Maximum number of letters to look at

        Returns:
            The removed letter, or None if nothing in the window matched
        """
        self.ensure_stocked()
        start = max(0, len(self.bag) - window)
        for i in range(len(self.bag) - 1, start - 1, -1):
            if predicate(self.bag[i]):
                return self.bag.pop(i)
        return None

    def return_letters(self, letters: List[str]) -> None:
        """
        Put used letters back without making them predictable.

        Each letter goes to a random position, then a round of random swaps
        across the whole bag spreads them further from where they landed.

        Args:
            letters: Letters to put back
        """
        for letter in letters:
            pos = self.rng.randint(0, len(self.bag))
            self.bag.insert(pos, letter.upper())

        if not self.bag:
            return

        swaps = min(len(self.bag), max(10, len(letters) * 5))
        for _ in range(swaps):
            i = self.rng.randrange(len(self.bag))
            j = self.rng.randrange(len(self.bag))
            self.bag[i], self.bag[j] = self.bag[j], self.bag[i]

    def resize(self, rows: int, cols: int) -> None:
        """Change the dimensions used for future refills."""
        if rows < 0 or cols < 0:
            raise ValueError(f"Board dimensions must be non-negative, got {rows}x{cols}")
        self.rows = rows
        self.cols = cols

    def get_state(self) -> Dict:
        return {
            "letters_remaining": len(self.bag),
            "refills": self.refills,
            "rows": self.rows,
            "cols": self.cols,
        }
