from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import health_router, router
from app.errors import register_exception_handlers
from datastore.database import build_default_engine
from datastore.repository import build_default_repository
from logging_config import configure_logging
from services.records import build_default_service


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    service = build_default_service()
    try:
        yield
    finally:
        service.shutdown()
        service.repository.engine.dispose()
        build_default_service.cache_clear()
        build_default_repository.cache_clear()
        build_default_engine.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Temperature Record Service",
        description="Ingestion, hourly averages and paginated listing of IoT temperature readings.",
        version="0.1.0",
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    app.include_router(router)
    app.include_router(health_router)
    return app

app = create_app()
