from __future__ import annotations
import asyncio
from contextlib import asynccontextmanager, suppress
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from app.web import router as web_router
from logging_config import configure_logging
from services.refresher import build_default_controller


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    controller = build_default_controller()
    refresh_task = asyncio.create_task(controller.run())
    try:
        yield
    finally:
        refresh_task.cancel()
        with suppress(asyncio.CancelledError):
            await refresh_task
        build_default_controller.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Sensory",
        description="Live lm-sensors readings parsed into sections and entries.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    app.include_router(web_router)
    return app

app = create_app()
