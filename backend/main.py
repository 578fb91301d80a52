"""
Estate Chat - Main Application Entry Point

Per-session encrypted chat history for the real-estate assistant UI.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from estatechat.core.config import get_settings
from estatechat.core.logger import setup_logger

logger = setup_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    logger.info("Starting Estate Chat in %s mode...", settings.ENVIRONMENT)
    if settings.is_production and not (settings.CHAT_ENCRYPTION_KEY or settings.APP_SECRET):
        logger.warning("No encryption key configured; snapshots use the development key")

    yield

    logger.info("Shutting down Estate Chat...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Estate Chat",
        description="Encrypted per-session chat thread storage",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from estatechat.api import chat_storage

    app.include_router(chat_storage.router, prefix="/api/chat-storage", tags=["chat_storage"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "storage_backend": settings.STORAGE_BACKEND,
            "version": "0.1.0",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
