"""Tests for the RAG pipeline and prompt assembly."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from campus_qa.services.rag.pipeline import RAGPipeline
from campus_qa.services.rag.prompt import (
    ANSWER_PROMPT,
    NO_INFORMATION_ANSWER,
    build_context,
    build_prompt,
)
from campus_qa.services.rag.retriever import RetrievedDocument


def _docs(*texts):
    return [RetrievedDocument(text=t) for t in texts]


def test_build_context_joins_with_one_blank_line():
    assert build_context(_docs("một", "hai", "ba")) == "một\n\nhai\n\nba"


def test_build_context_single_and_empty():
    assert build_context(_docs("chỉ một")) == "chỉ một"
    assert build_context([]) == ""


def test_build_context_keeps_fragment_whitespace():
    assert build_context(_docs("a\n", "b")) == "a\n\n\nb"


def test_prompt_template_has_context_and_question_slots():
    assert set(ANSWER_PROMPT.input_variables) == {"context", "question"}


def test_build_prompt_substitutes_both_slots():
    prompt = build_prompt("Điểm rèn luyện tối đa 100.", "Điểm rèn luyện tối đa?")

    assert "NGỮ CẢNH:\nĐiểm rèn luyện tối đa 100.\n" in prompt
    assert "CÂU HỎI:\nĐiểm rèn luyện tối đa?\n" in prompt
    assert NO_INFORMATION_ANSWER in prompt
    assert prompt.rstrip().endswith("CÂU TRẢ LỜI (bằng tiếng Việt):")


def test_build_prompt_tolerates_braces_in_context():
    prompt = build_prompt("Công thức {x} + {y}", "Công thức?")
    assert "Công thức {x} + {y}" in prompt


def _pipeline(documents, response="Trả lời"):
    retriever = MagicMock()
    retriever.retrieve = AsyncMock(return_value=documents)
    generator = MagicMock()
    generator.provider_name = "fake"
    generator.generate = AsyncMock(return_value=response)
    return RAGPipeline(retriever=retriever, generator=generator), retriever, generator


def test_pipeline_passes_joined_context_to_generator():
    pipeline, _, generator = _pipeline(_docs("đoạn 1", "đoạn 2", "đoạn 3", "đoạn 4"))

    answer = asyncio.run(pipeline.answer("Câu hỏi?"))

    assert answer == "Trả lời"
    prompt = generator.generate.await_args.args[0]
    assert prompt == build_prompt("đoạn 1\n\nđoạn 2\n\nđoạn 3\n\nđoạn 4", "Câu hỏi?")


def test_pipeline_without_documents_does_not_generate():
    pipeline, retriever, generator = _pipeline([])

    answer = asyncio.run(pipeline.answer("Câu hỏi?"))

    assert answer == NO_INFORMATION_ANSWER
    retriever.retrieve.assert_awaited_once_with("Câu hỏi?")
    generator.generate.assert_not_awaited()


def test_pipeline_normalizes_message_objects():
    pipeline, _, _ = _pipeline(_docs("x"), response=SimpleNamespace(content="Nội dung"))
    assert asyncio.run(pipeline.answer("?")) == "Nội dung"
