"""
RAG Retriever Service

Queries the managed Chroma Cloud collection at runtime to find the document
chunks that are semantically closest to a student's question.

Uses the chromadb client directly (not langchain_chroma) so results stay
plain dicts rather than LangChain Document objects.

How retrieval works:
1. The question is converted into a vector using OpenAI embeddings.
2. Chroma compares this vector against stored chunk vectors.
3. The top-K chunk texts come back ordered from most to least relevant.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import chromadb
from langchain_openai import OpenAIEmbeddings

from campus_qa.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class RetrievedDocument:
    text: str
    metadata: dict[str, Any] = field(default_factory=dict)
    distance: float | None = None


# ── Client construction ─────────────────────────────────────────────────────

def open_collection(settings: Settings) -> Any:
    """Connect to Chroma Cloud with the index credential and open the collection."""
    client = chromadb.CloudClient(
        tenant=settings.chroma_tenant,
        database=settings.chroma_database,
        api_key=settings.chroma_api_key,
    )
    return client.get_or_create_collection(settings.chroma_collection)


def create_embeddings(settings: Settings) -> OpenAIEmbeddings:
    return OpenAIEmbeddings(
        model=settings.embedding_model,
        openai_api_key=settings.openai_api_key,
    )


# ── Retrieval ────────────────────────────────────────────────────────────────

class VectorRetriever:
    """Top-K nearest-neighbour retriever bound to one collection."""

    def __init__(self, collection: Any, embeddings: Any, top_k: int = 4):
        self.collection = collection
        self.embeddings = embeddings
        self.top_k = top_k

    async def retrieve(self, query: str) -> list[RetrievedDocument]:
        """
        Retrieve the chunks most relevant to `query`.

        Returns:
            Up to top_k documents in decreasing order of relevance
        """
        query_embedding = await self.embeddings.aembed_query(query)
        # The chromadb client is synchronous
        result = await asyncio.to_thread(
            self.collection.query,
            query_embeddings=[query_embedding],
            n_results=self.top_k,
            include=["documents", "metadatas", "distances"],
        )

        # result["documents"] = [[doc1, doc2, ...]] (one list per query embedding)
        docs_list = (result.get("documents") or [[]])[0]
        metas_list = (result.get("metadatas") or [[]])[0] or []
        distances = (result.get("distances") or [[]])[0] or []

        documents = []
        for i, text in enumerate(docs_list):
            if not text:
                continue
            documents.append(
                RetrievedDocument(
                    text=text,
                    metadata=dict(metas_list[i] or {}) if i < len(metas_list) else {},
                    distance=distances[i] if i < len(distances) else None,
                )
            )

        logger.info("Retrieved %d chunks for question", len(documents))
        return documents


# ── Status ───────────────────────────────────────────────────────────────────

async def get_vector_store_status(
    settings: Settings, get_collection: Callable[[], Awaitable[Any]]
) -> dict:
    """Return status info about the vector index for the /rag/status endpoint."""
    if not settings.chroma_api_key:
        return {
            "available": False,
            "chunk_count": 0,
            "collection": settings.chroma_collection,
            "message": "CHROMA_API_KEY is not configured.",
        }

    try:
        collection = await get_collection()
        count = await asyncio.to_thread(collection.count)
    except Exception as e:
        logger.warning("Vector index unavailable: %s", e)
        return {
            "available": False,
            "chunk_count": 0,
            "collection": settings.chroma_collection,
            "message": f"Failed to reach the vector index: {e}",
        }

    return {
        "available": True,
        "chunk_count": count,
        "collection": settings.chroma_collection,
        "message": "" if count else "Collection is empty. Run ingestion first.",
    }
