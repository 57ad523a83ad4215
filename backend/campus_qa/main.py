import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from campus_qa.core.config import Settings, get_settings
from campus_qa.core.context import ServiceContext
from campus_qa.core.database import create_tables
from campus_qa.core.errors import validation_error_handler
from campus_qa.core.logging_config import configure_logging
from campus_qa.routers import accounts, ask, history, rag

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    services: ServiceContext | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration; defaults to the environment
        services: Pre-built service context; built from settings at startup
            when omitted
    """
    settings = settings or (services.settings if services else get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: build the shared clients once for the whole process
        configure_logging(settings.log_level)
        context = services or ServiceContext.from_settings(settings)
        if settings.create_tables:
            await create_tables(context.engine)
        app.state.services = context
        logger.info("Campus QA API started (environment=%s)", settings.environment)
        yield
        # Shutdown: release pooled connections
        await context.aclose()

    app = FastAPI(
        title="Campus QA API",
        description="Document-grounded Q&A and accounts for university students",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Include routers
    app.include_router(ask.router, tags=["Ask"])
    app.include_router(accounts.router, prefix="/api", tags=["Accounts"])
    app.include_router(history.router, prefix="/api", tags=["Chat History"])
    app.include_router(rag.router, prefix="/rag", tags=["RAG"])

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


app = create_app()


if __name__ == "__main__":
    run()
