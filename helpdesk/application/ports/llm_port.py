"""Port interface for the LLM collaborator."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

ChatMessage = dict[str, str]


@dataclass(frozen=True)
class LLMReply:
    content: str
    model: str | None = None


class LLMPort(ABC):
    @abstractmethod
    async def invoke(self, prompt: str | list[ChatMessage]) -> LLMReply:
        """Send a prompt (plain text or chat messages) and return the reply text.

        May raise; retry policy belongs to the implementation's own client.
        """
        ...
