"""Data models for word verification."""

from typing import List, Optional
from pydantic import BaseModel, Field


class Candidate(BaseModel):
    """A word read off the tops of the selected cells, in selection order."""
    word: str = ""
    tiles: List[int] = Field(default_factory=list)
    letters: List[str] = Field(default_factory=list)

    @property
    def length(self) -> int:
        return len(self.letters)


class ValidationError(BaseModel):
    """A single reason a submission was turned down."""
    code: str
    message: str
    word: Optional[str] = None
