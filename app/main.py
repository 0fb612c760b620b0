import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.http import (
    health_router, auth_router, documents_router, collaboration_router, files_router
)
from app.api.ws.sync import router as websocket_router
from app.core.config import settings
from app.core.db import create_tables, engine
from app.core.exceptions import DocCollabError
from app.core.logging import setup_logging
from app.infrastructure.messaging.pubsub import get_pubsub

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    pubsub = get_pubsub()
    await pubsub.connect()
    if settings.auto_create_tables:
        await create_tables()
        logger.info("Database tables created")
    logger.info("DocCollab started")

    yield

    await pubsub.disconnect()
    await engine.dispose()
    logger.info("DocCollab stopped")


app = FastAPI(
    title="DocCollab",
    description="Веб-приложение для совместного редактирования документов",
    version="1.0.0",
    lifespan=lifespan
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DocCollabError)
async def doc_collab_error_handler(request: Request, exc: DocCollabError):
    """Доменные ошибки в HTTP ответ"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error_code": exc.error_code}
    )


# Подключаем роутеры
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(documents_router)
app.include_router(collaboration_router)
app.include_router(files_router)
app.include_router(websocket_router)


@app.get("/")
async def root():
    return {
        "message": "DocCollab API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }
