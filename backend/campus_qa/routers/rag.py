"""
RAG Admin Router

Provides endpoints to check the vector index and trigger re-ingestion.
"""

import asyncio
import logging

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from campus_qa.core.context import Services
from campus_qa.services.rag.retriever import get_vector_store_status

logger = logging.getLogger(__name__)

router = APIRouter()


class RAGStatusResponse(BaseModel):
    available: bool
    chunk_count: int
    collection: str
    message: str = ""


@router.get("/status", response_model=RAGStatusResponse)
async def rag_status(services: Services):
    """Check the status of the vector index."""
    info = await get_vector_store_status(services.settings, services.collection)
    return RAGStatusResponse(**info)


@router.post("/ingest")
async def trigger_ingestion(services: Services):
    """
    Trigger document re-ingestion.

    Re-processes every document in DOCS_DIR and upserts the chunks into the
    vector index. Useful after adding new documents.
    """
    from campus_qa.services.rag.ingest import IngestionError, run_ingestion

    if not services.settings.rag_configured:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Ingestion failed: OPENAI_API_KEY and CHROMA_API_KEY must both be set.",
        )

    try:
        collection = await services.collection()
        chunk_count = await asyncio.to_thread(
            run_ingestion,
            settings=services.settings,
            collection=collection,
        )
    except IngestionError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Ingestion failed: {e}",
        )
    except Exception as e:
        logger.exception("Ingestion failed")
        detail = "Ingestion failed" if services.settings.is_production else f"Ingestion failed: {e}"
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
        )

    return {
        "status": "success",
        "message": f"Ingestion complete. {chunk_count} chunks stored.",
        "chunk_count": chunk_count,
    }
