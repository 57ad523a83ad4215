"""
Ask Router

POST /ask answers a student question from the indexed university documents.
"""

import logging
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from campus_qa.core.context import Services
from campus_qa.core.errors import QUESTION_REQUIRED

logger = logging.getLogger(__name__)

router = APIRouter()

KEYS_NOT_CONFIGURED = "API keys not configured (OPENAI_API_KEY or CHROMA_API_KEY missing)"
GENERIC_ERROR = "An error occurred"


class AskRequest(BaseModel):
    # Checked by the handler so every malformed question gets the same 400
    question: Any = None


class AskResponse(BaseModel):
    answer: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/ask", response_model=AskResponse)
async def ask(services: Services, data: AskRequest | None = None):
    """Answer a question using retrieved document context."""
    question = data.question if data else None
    if not isinstance(question, str) or not question.strip():
        return _error(status.HTTP_400_BAD_REQUEST, QUESTION_REQUIRED)
    question = question.strip()

    settings = services.settings
    if not settings.rag_configured:
        logger.error("RAG requested but API keys are missing")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, KEYS_NOT_CONFIGURED)

    try:
        pipeline = await services.rag_pipeline()
        answer = await pipeline.answer(question)
    except Exception as e:
        logger.exception("Error processing question")
        message = GENERIC_ERROR if settings.is_production else f"{GENERIC_ERROR}: {e}"
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, message)

    return AskResponse(answer=answer)
