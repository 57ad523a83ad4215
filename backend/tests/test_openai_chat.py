"""Tests for the OpenAI generation provider and pipeline wiring."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from campus_qa.core.config import Settings
from campus_qa.services.llm.answer import extract_answer
from campus_qa.services.llm.openai_chat import OpenAIChatProvider
from campus_qa.services.rag.pipeline import create_rag_pipeline
from campus_qa.services.rag.retriever import VectorRetriever


def _client(content):
    message = SimpleNamespace(role="assistant", content=content)
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        return_value=SimpleNamespace(choices=[SimpleNamespace(message=message)])
    )
    return client


def test_generate_sends_single_user_turn():
    client = _client("Xin chào")
    provider = OpenAIChatProvider(api_key="sk-test", model="gpt-4o-mini", temperature=0.3, client=client)

    message = asyncio.run(provider.generate("NGỮ CẢNH: ..."))

    client.chat.completions.create.assert_awaited_once_with(
        model="gpt-4o-mini",
        messages=[{"role": "user", "content": "NGỮ CẢNH: ..."}],
        temperature=0.3,
    )
    assert extract_answer(message) == "Xin chào"


def test_create_rag_pipeline_uses_settings():
    settings = Settings(
        _env_file=None,
        openai_api_key="sk-test",
        chroma_api_key="ck-test",
        retriever_top_k=4,
        generation_model="gpt-4o-mini",
    )
    collection = MagicMock()

    pipeline = create_rag_pipeline(settings, collection)

    assert isinstance(pipeline.retriever, VectorRetriever)
    assert pipeline.retriever.top_k == 4
    assert pipeline.retriever.collection is collection
    assert isinstance(pipeline.generator, OpenAIChatProvider)
    assert pipeline.generator.model == "gpt-4o-mini"
