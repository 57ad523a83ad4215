"""
Generation Provider Layer

A provider interface for the hosted language model plus the extraction
chain that turns provider responses into answer text.
"""

from campus_qa.services.llm.base import GenerationProvider
from campus_qa.services.llm.openai_chat import OpenAIChatProvider
from campus_qa.services.llm.answer import ANSWER_FALLBACK, extract_answer

__all__ = [
    "GenerationProvider",
    "OpenAIChatProvider",
    "ANSWER_FALLBACK",
    "extract_answer",
]
