# unisearch/main.py
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Import routers (routers should NOT call app.include_router() themselves)
from unisearch.api.routers.health_router import router as health_router
from unisearch.api.routers.search_router import router as search_router
from unisearch.core.settings import settings
from unisearch.utils.logging_setup import configure_basic_logging


def create_app() -> FastAPI:
    configure_basic_logging(level=settings.log_level)

    app = FastAPI(
        title="UniSearch API",
        version="0.1.0",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(health_router)
    app.include_router(search_router)

    return app


# Uvicorn entrypoint: uvicorn unisearch.main:app --reload
app = create_app()
