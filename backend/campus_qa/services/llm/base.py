"""
Abstract base class for all generation providers.

Each provider implements the API-specific call and returns the provider's
raw response object. Normalising that response into answer text is handled
by campus_qa.services.llm.answer.
"""

from abc import ABC, abstractmethod
from typing import Any


class GenerationProvider(ABC):
    """Abstract base class for all generation providers."""

    provider_name: str = "base"

    @abstractmethod
    async def generate(self, prompt: str) -> Any:
        """
        Send a single-turn prompt to the model and return its raw response.

        Args:
            prompt: The fully formatted prompt text

        Returns:
            Provider-specific response (a string, or an object/mapping
            carrying `content` or `text`)
        """
        ...
