"""Word verification for Letter Stacks."""

from .models import Candidate, ValidationError
from .dictionary import (
    Dictionary,
    WordListDictionary,
    AllowAnyDictionary,
    create_dictionary,
    load_word_list,
    normalize_word,
    is_playable,
    MIN_WORD_LENGTH,
)
from .words import (
    build_candidate,
    check_candidate,
    still_matches,
    rejection,
    TOO_SHORT,
    NOT_IN_DICTIONARY,
    BOARD_CHANGED,
    SUBMIT_IN_PROGRESS,
    GAME_OVER,
)

__all__ = [
    # Models
    "Candidate",
    "ValidationError",
    # Dictionary
    "Dictionary",
    "WordListDictionary",
    "AllowAnyDictionary",
    "create_dictionary",
    "load_word_list",
    "normalize_word",
    "is_playable",
    "MIN_WORD_LENGTH",
    # Candidate checks
    "build_candidate",
    "check_candidate",
    "still_matches",
    "rejection",
    "TOO_SHORT",
    "NOT_IN_DICTIONARY",
    "BOARD_CHANGED",
    "SUBMIT_IN_PROGRESS",
    "GAME_OVER",
]
