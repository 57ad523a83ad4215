"""
Process-wide service handles.

One ServiceContext is built when the application starts and disposed when it
shuts down. Handlers receive it through the `get_services` dependency and
never construct clients themselves.
"""

import asyncio
import logging
from typing import Annotated, Any

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from campus_qa.core.config import Settings
from campus_qa.core.database import create_engine, create_session_factory
from campus_qa.services.mail import OTPSender, create_otp_sender
from campus_qa.services.rag.pipeline import RAGPipeline, create_rag_pipeline
from campus_qa.services.rag.retriever import open_collection

logger = logging.getLogger(__name__)


class ServiceContext:
    def __init__(
        self,
        settings: Settings,
        engine: AsyncEngine,
        session_factory: async_sessionmaker[AsyncSession],
        otp_sender: OTPSender,
        rag_pipeline: RAGPipeline | None = None,
        collection: Any = None,
    ):
        self.settings = settings
        self.engine = engine
        self.session_factory = session_factory
        self.otp_sender = otp_sender
        self._rag_pipeline = rag_pipeline
        self._collection = collection
        # Serialises first use so concurrent requests open one client
        self._init_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> "ServiceContext":
        """Build the context; keyword overrides replace individual services."""
        engine = overrides.pop("engine", None) or create_engine(settings.database_url)
        return cls(
            settings=settings,
            engine=engine,
            session_factory=overrides.pop("session_factory", None)
            or create_session_factory(engine),
            otp_sender=overrides.pop("otp_sender", None) or create_otp_sender(settings),
            **overrides,
        )

    async def collection(self) -> Any:
        """The vector index collection, opened on first use."""
        async with self._init_lock:
            return await self._open_collection()

    async def rag_pipeline(self) -> RAGPipeline:
        """The RAG pipeline, built on first use and reused afterwards."""
        async with self._init_lock:
            if self._rag_pipeline is None:
                logger.info("Initializing RAG services...")
                collection = await self._open_collection()
                self._rag_pipeline = create_rag_pipeline(self.settings, collection)
            return self._rag_pipeline

    async def _open_collection(self) -> Any:
        # Caller holds _init_lock. The Chroma client connects synchronously.
        if self._collection is None:
            self._collection = await asyncio.to_thread(open_collection, self.settings)
            logger.info("Vector index collection opened: %s", self.settings.chroma_collection)
        return self._collection

    async def aclose(self) -> None:
        await self.engine.dispose()


def get_services(request: Request) -> ServiceContext:
    return request.app.state.services


Services = Annotated[ServiceContext, Depends(get_services)]
