"""
Player class for an LLM playing Letter Stacks.

Holds the LLM client and the player's running tally, and turns raw model
replies into actions.
"""

import re
from typing import List, Dict, Optional, Any
from pydantic import BaseModel, Field, ConfigDict

from .llm_client import LLMClient
from .models import ParsedResponse


class Player(BaseModel):
    """
    Manages the LLM player's state.

    Attributes:
        name: Display name for the player
        llm_client: LLM client for generating moves
        turn_count: Number of turns taken
        words_found: Words the session accepted from this player
        rejected: Number of submissions turned down
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = "Player"
    llm_client: Optional[LLMClient] = None
    turn_count: int = 0
    words_found: List[str] = Field(default_factory=list)
    rejected: int = 0

    @classmethod
    def create(
        cls,
        model: str,
        name: Optional[str] = None,
        temperature: float = 1.0,
        max_tokens: Optional[int] = None,
        history_pairs: int = 10,
        **llm_kwargs: Any
    ) -> "Player":
        """
        Factory method to create a player with an LLM client.

        Args:
            model: LLM model name (e.g., "gpt-4o")
            name: Optional display name
            temperature: LLM temperature setting
            max_tokens: Optional max tokens for responses
            history_pairs: Exchanges kept in the prompt window
            **llm_kwargs: Additional arguments for the LLM client

        Returns:
            A new Player with a configured LLM client
        """
        llm_client = LLMClient(
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            history_pairs=history_pairs,
            **llm_kwargs
        )
        return cls(name=name or model, llm_client=llm_client)

    @staticmethod
    def parse_tiles(text: str) -> List[int]:
        """Cell indices in the order written, separated by spaces or commas."""
        return [int(token) for token in re.findall(r'\d+', text)]

    @staticmethod
    def parse_response(response: str) -> ParsedResponse:
        """
        Parse an LLM response for game plan, action and tiles.

        Expected format:
        <game_plan>reasoning here</game_plan>
        <action>SUBMIT|DROP|WAIT</action>
        <tiles>12 3 7</tiles>

        A response with tiles but no action is treated as SUBMIT.

        Args:
            response: Raw LLM response text

        Returns:
            ParsedResponse with extracted components
        """
        result = ParsedResponse(raw_response=response)

        plan_match = re.search(r'<game_plan>(.*?)</game_plan>', response, re.DOTALL)
        if plan_match:
            result.thinking = plan_match.group(1).strip()

        tiles_match = re.search(r'<tiles>(.*?)</tiles>', response, re.DOTALL)
        if tiles_match:
            result.tiles = Player.parse_tiles(tiles_match.group(1))

        action_match = re.search(r'<action>(.*?)</action>', response, re.DOTALL)
        action = action_match.group(1).strip().upper() if action_match else ""
        if action.startswith("SUBMIT"):
            result.action = "SUBMIT"
        elif action.startswith("DROP"):
            result.action = "DROP"
        elif action.startswith("WAIT"):
            result.action = "WAIT"
        elif result.tiles:
            result.action = "SUBMIT"

        return result

    def record_submission(self, word: str, accepted: bool) -> None:
        if accepted:
            self.words_found.append(word)
        else:
            self.rejected += 1

    def get_state(self) -> Dict:
        """
        Get the current player state as a dictionary.

        Returns:
            Dictionary containing player state
        """
        return {
            "name": self.name,
            "model": self.llm_client.model if self.llm_client else None,
            "turn_count": self.turn_count,
            "words_found": list(self.words_found),
            "rejected": self.rejected,
        }
