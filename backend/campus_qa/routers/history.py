import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_qa.core.database import get_db
from campus_qa.models.chat import Chat, Message

logger = logging.getLogger(__name__)

router = APIRouter()


# Schemas
class ChatResponse(BaseModel):
    id: int
    user_id: int
    title: str | None
    created_at: datetime

    class Config:
        from_attributes = True


class MessageRowResponse(BaseModel):
    id: int
    chat_id: int
    role: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True


def _parse_id(value: str | None) -> int | None:
    if not value:
        return None
    value = value.strip()
    # ASCII only: isdigit() also accepts superscripts and other scripts' digits
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


# Endpoints
@router.get("/chats", response_model=list[ChatResponse])
async def list_chats(
    user_id: str | None = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_db),
):
    """List a user's chats, newest first."""
    parsed_id = _parse_id(user_id)
    if parsed_id is None:
        return []

    try:
        result = await db.execute(
            select(Chat)
            .where(Chat.user_id == parsed_id)
            .order_by(Chat.created_at.desc())
        )
        chats = result.scalars().all()
    except Exception:
        logger.exception("Failed to load chats for user %s", parsed_id)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=[])

    return [ChatResponse.model_validate(c) for c in chats]


@router.get("/messages", response_model=list[MessageRowResponse])
async def list_messages(
    chat_id: str | None = Query(None, alias="chatId"),
    db: AsyncSession = Depends(get_db),
):
    """List a chat's messages, oldest first."""
    parsed_id = _parse_id(chat_id)
    if parsed_id is None:
        return []

    try:
        result = await db.execute(
            select(Message)
            .where(Message.chat_id == parsed_id)
            .order_by(Message.created_at.asc())
        )
        messages = result.scalars().all()
    except Exception:
        logger.exception("Failed to load messages for chat %s", parsed_id)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=[])

    return [MessageRowResponse.model_validate(m) for m in messages]
