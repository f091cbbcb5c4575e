from typing import List, Dict, Any, Optional
from pydantic import BaseModel, ConfigDict, Field
import litellm

from .models import Message, Role


class LLMClient(BaseModel):
    """
    Conversation with one model through LiteLLM.

    Keeps the full history for the run record but only sends the system
    prompt plus the most recent `history_pairs` exchanges, since every turn
    already restates the whole board.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra='allow')

    model: str
    temperature: float = 1.0
    max_tokens: Optional[int] = None
    history_pairs: int = Field(default=10, ge=1)
    messages: List[Dict[str, str]] = Field(default_factory=list)

    @property
    def additional_params(self) -> Dict[str, Any]:
        """Extra keyword arguments given at construction, forwarded to LiteLLM."""
        return dict(self.__pydantic_extra__ or {})

    def add_message(self, role: Role, content: str) -> None:
        """Append a message to the history."""
        self.messages.append(Message(role=role, content=content).model_dump())

    def clear_messages(self) -> None:
        self.messages = []

    def get_messages(self) -> List[Dict[str, str]]:
        """Copy of the full history in OpenAI chat format."""
        return self.messages.copy()

    def window(self) -> List[Dict[str, str]]:
        """
        Messages to send: the system prompt (if any) and the last N user/assistant pairs.
        """
        system = [m for m in self.messages if m["role"] == "system"][:1]
        conversation = [m for m in self.messages if m["role"] != "system"]
        return system + conversation[-self.history_pairs * 2:]

    def completion(self, **kwargs: Any) -> Any:
        """
        Request a completion for the current window.

        Args:
            **kwargs: Per-call overrides passed to litellm.completion()

        Returns:
            The LiteLLM response
        """
        params = {
            "model": self.model,
            "messages": self.window(),
            "temperature": self.temperature,
            **self.additional_params,
            **kwargs
        }
        if self.max_tokens is not None:
            params["max_tokens"] = self.max_tokens

        # reasoning_effort is not forwarded for every provider unless allowed explicitly
        if "reasoning_effort" in params:
            allowed = params.setdefault("allowed_openai_params", [])
            if "reasoning_effort" not in allowed:
                allowed.append("reasoning_effort")

        return litellm.completion(**params)


def response_text(response: Any) -> str:
    """Text content of the first choice (empty string if missing)."""
    return response.choices[0].message.content or ""


def response_usage(response: Any) -> Dict[str, Optional[int]]:
    """Token counts from a response, None where the provider did not report them."""
    usage = getattr(response, "usage", None)
    return {
        "prompt_tokens": getattr(usage, "prompt_tokens", None) if usage else None,
        "completion_tokens": getattr(usage, "completion_tokens", None) if usage else None,
        "total_tokens": getattr(usage, "total_tokens", None) if usage else None,
    }
