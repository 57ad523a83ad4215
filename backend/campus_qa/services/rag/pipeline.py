"""
RAG Query Pipeline

question → retrieve top-K chunks → build context → format prompt
→ generate → extract answer text.
"""

import logging
from typing import Protocol

from campus_qa.core.config import Settings
from campus_qa.services.llm.answer import extract_answer
from campus_qa.services.llm.base import GenerationProvider
from campus_qa.services.llm.openai_chat import OpenAIChatProvider
from campus_qa.services.rag.prompt import (
    NO_INFORMATION_ANSWER,
    build_context,
    build_prompt,
)
from campus_qa.services.rag.retriever import (
    RetrievedDocument,
    VectorRetriever,
    create_embeddings,
)

logger = logging.getLogger(__name__)


class Retriever(Protocol):
    async def retrieve(self, query: str) -> list[RetrievedDocument]: ...


class RAGPipeline:
    def __init__(self, retriever: Retriever, generator: GenerationProvider):
        self.retriever = retriever
        self.generator = generator

    async def answer(self, question: str) -> str:
        logger.info("Searching for relevant documents...")
        documents = await self.retriever.retrieve(question)

        # Nothing to ground the answer on; skip the model entirely
        if not documents:
            logger.info("No relevant documents found")
            return NO_INFORMATION_ANSWER

        logger.info("Found %d relevant documents. Generating answer...", len(documents))
        prompt = build_prompt(build_context(documents), question)
        response = await self.generator.generate(prompt)

        answer = extract_answer(response)
        logger.info("Answer generated (provider=%s)", self.generator.provider_name)
        return answer


def create_rag_pipeline(settings: Settings, collection) -> RAGPipeline:
    """Wire the OpenAI-backed retriever and generator for a collection handle."""
    retriever = VectorRetriever(
        collection=collection,
        embeddings=create_embeddings(settings),
        top_k=settings.retriever_top_k,
    )
    generator = OpenAIChatProvider(
        api_key=settings.openai_api_key,
        model=settings.generation_model,
        temperature=settings.generation_temperature,
    )
    return RAGPipeline(retriever=retriever, generator=generator)
