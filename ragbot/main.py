"""
Main FastAPI application entry point.
Responsibilities: App setup, router registration, error mapping, startup/shutdown hooks.
"""
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from . import config
from .routes import chat, documents
from .db.migrations import run_sql_migrations
from .errors import InputError, NotFoundError, ProviderError, StoreError
from .logging_config import logger

# -------------------------------------------------
# App setup
# -------------------------------------------------

app = FastAPI(title="RAG Chatbot API", version="1.0.0")

app.include_router(documents.router)
app.include_router(chat.router)

ERROR_STATUS = {
    InputError: 400,
    NotFoundError: 404,
    ProviderError: 502,
    StoreError: 500,
}


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception):
        if status_code >= 500:
            logger.error("Request failed", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
    return handler


for error_class, status_code in ERROR_STATUS.items():
    app.add_exception_handler(error_class, _error_handler(status_code))


@app.get("/health")
async def health():
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "message": "RAG Chatbot API is running",
    }


@app.on_event("startup")
async def startup_event():
    """Initialize database and embedding model on startup."""
    try:
        logger.info("Running database migrations...")
        run_sql_migrations()
        logger.info("Database migrations completed")

        if config.EMBED_PROVIDER == "local":
            from .dependencies import get_embedder
            logger.info("Preloading embedding model...")
            get_embedder().preload()
            logger.info("Embedding model ready")

    except Exception as e:
        logger.error("Startup initialization error", exc_info=e)
        # Continue anyway - app might still be usable


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutting down")
