"""
OpenAI Chat Completions API Provider

- client.chat.completions.create()
- the prompt is sent as one user message
- returns response.choices[0].message (its `content` holds the answer)
"""

from typing import Any

from openai import AsyncOpenAI

from campus_qa.services.llm.base import GenerationProvider


class OpenAIChatProvider(GenerationProvider):
    """Provider for OpenAI Chat Completions API (GPT-4o, GPT-4o-mini, etc.)."""

    provider_name = "openai_chat"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        client: AsyncOpenAI | None = None,
    ):
        self.client = client or AsyncOpenAI(api_key=api_key)
        self.model = model
        self.temperature = temperature

    async def generate(self, prompt: str) -> Any:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {
                    "role": "user",
                    "content": prompt,
                },
            ],
            temperature=self.temperature,
        )
        return response.choices[0].message
