"""
Dictionary collaborators.

A dictionary is anything with `async check_word(word) -> bool`. Lookups are
case-insensitive, words shorter than three letters are never valid, and a
lookup never raises: an unavailable word list falls back to the configured
policy.

Word list files are either a JSON array of strings (`.json`) or one word per
line.
"""

import json
import logging
import re
from pathlib import Path
from typing import Iterable, Literal, Optional, Protocol, Set
from pydantic import BaseModel


logger = logging.getLogger(__name__)

MIN_WORD_LENGTH = 3
_ALPHA = re.compile(r'^[a-z]+$')

Fallback = Literal["strict", "allow_any"]


class Dictionary(Protocol):
    async def check_word(self, word: str) -> bool: ...


def normalize_word(word: Optional[str]) -> str:
    return (word or "").strip().lower()


def is_playable(word: str) -> bool:
    """Alphabetic and at least MIN_WORD_LENGTH letters (expects a normalized word)."""
    return len(word) >= MIN_WORD_LENGTH and bool(_ALPHA.match(word))


def load_word_list(path: str | Path) -> Set[str]:
    """
    Read a word list file into a set of playable lowercase words.

    Raises:
        OSError: If the file cannot be read
        ValueError: If a JSON word list is malformed
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")

    if path.suffix == ".json":
        data = json.loads(text)
        if not isinstance(data, list):
            raise ValueError(f"Word list {path} must be a JSON array")
        raw_words = [w for w in data if isinstance(w, str)]
    else:
        raw_words = text.splitlines()

    words = set()
    for raw in raw_words:
        word = normalize_word(raw)
        if is_playable(word):
            words.add(word)
    return words


class WordListDictionary(BaseModel):
    """
    Dictionary backed by a local word list, loaded once on first use.

    Attributes:
        path: Word list file
        fallback: What to answer if the list cannot be loaded. "strict"
            rejects everything; "allow_any" accepts any playable word.
    """

    path: Optional[Path] = None
    fallback: Fallback = "strict"
    _words: Optional[Set[str]] = None
    _load_failed: bool = False

    @classmethod
    def from_words(cls, words: Iterable[str]) -> "WordListDictionary":
        """Build a dictionary from words already in memory."""
        dictionary = cls()
        dictionary._words = {w for w in map(normalize_word, words) if is_playable(w)}
        return dictionary

    @property
    def available(self) -> bool:
        return self._ensure_loaded() is not None

    def _ensure_loaded(self) -> Optional[Set[str]]:
        if self._words is not None:
            return self._words
        if self._load_failed:
            return None
        if self.path is None:
            self._load_failed = True
            logger.warning("No word list configured; dictionary is unavailable")
            return None

        try:
            self._words = load_word_list(self.path)
        except (OSError, ValueError) as e:
            self._load_failed = True
            logger.warning("Failed to load word list %s: %s", self.path, e)
            return None

        logger.info("Loaded %d words from %s", len(self._words), self.path)
        return self._words

    async def check_word(self, word: str) -> bool:
        """Check whether a word is in the dictionary."""
        word = normalize_word(word)
        if not is_playable(word):
            return False

        words = self._ensure_loaded()
        if words is None:
            if self.fallback == "allow_any":
                logger.warning("Dictionary unavailable; accepting '%s' (allow_any fallback)", word)
                return True
            return False

        return word in words


class AllowAnyDictionary(BaseModel):
    """Debug dictionary that accepts any playable word. Announces itself when created."""

    def model_post_init(self, __context) -> None:
        logger.warning("AllowAnyDictionary active: every alphabetic word of 3+ letters is accepted")

    async def check_word(self, word: str) -> bool:
        return is_playable(normalize_word(word))


def create_dictionary(path: Optional[str | Path], fallback: Fallback = "strict") -> WordListDictionary:
    """Build the dictionary for a run from config values."""
    return WordListDictionary(path=Path(path) if path else None, fallback=fallback)
