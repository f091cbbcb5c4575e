"""
Candidate word construction and local checks.

A candidate is read from the top letters of the selected cells in the order
they were selected. Anything that can be rejected without the dictionary is
rejected here.
"""

from typing import List, Optional, Sequence

from .models import Candidate, ValidationError
from .dictionary import MIN_WORD_LENGTH


# Rejection codes
TOO_SHORT = "TOO_SHORT"
NOT_IN_DICTIONARY = "NOT_IN_DICTIONARY"
BOARD_CHANGED = "BOARD_CHANGED"
SUBMIT_IN_PROGRESS = "SUBMIT_IN_PROGRESS"
GAME_OVER = "GAME_OVER"

MESSAGES = {
    TOO_SHORT: f"Use at least {MIN_WORD_LENGTH} letters",
    NOT_IN_DICTIONARY: "Not in dictionary",
    BOARD_CHANGED: "The board changed while checking; select again",
    SUBMIT_IN_PROGRESS: "Still checking the last word",
    GAME_OVER: "The run is over",
}


def rejection(code: str, word: Optional[str] = None) -> ValidationError:
    return ValidationError(code=code, message=MESSAGES[code], word=word)


def build_candidate(stacks: Sequence[Sequence[str]], selection: Sequence[int]) -> Candidate:
    """
    Read the selected top letters in selection order.

    Empty cells contribute nothing and are left out of the candidate.
    """
    tiles: List[int] = []
    letters: List[str] = []
    for index in selection:
        stack = stacks[index]
        if stack:
            tiles.append(index)
            letters.append(stack[-1])
    return Candidate(word="".join(letters), tiles=tiles, letters=letters)


def check_candidate(candidate: Candidate) -> Optional[ValidationError]:
    """Reject candidates that can never be words. Returns None if the dictionary should decide."""
    if candidate.length < MIN_WORD_LENGTH:
        return rejection(TOO_SHORT, candidate.word)
    return None


def still_matches(stacks: Sequence[Sequence[str]], candidate: Candidate) -> bool:
    """True if every tile still shows the letter it contributed to the candidate."""
    for index, letter in zip(candidate.tiles, candidate.letters):
        stack = stacks[index]
        if not stack or stack[-1] != letter:
            return False
    return True
