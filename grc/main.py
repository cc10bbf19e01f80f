"""
FastAPI application factory.
"""
import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from grc.api import evidence, thirdparties, users
from grc.core.config import Settings, get_settings
from grc.core.errors import register_error_handlers
from grc.core.logging import get_logger, setup_logging
from grc.db.session import init_db

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.DEBUG)
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
        init_db(settings)
        yield
        logger.info(f"Shutting down {settings.APP_NAME}")

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    for module in (users, evidence, thirdparties):
        app.include_router(module.router, prefix=settings.API_PREFIX)

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    app.mount(settings.UPLOADS_URL_PATH, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok", "service": settings.APP_NAME}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
