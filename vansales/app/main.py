from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vansales.app.api.v1.api import api_router
from vansales.app.core.config import settings
from vansales.app.services.locks import KeyedLock
from vansales.app.services.storage import open_storage

logger = logging.getLogger(__name__)


def create_app(database_url: str | None = None) -> FastAPI:
    """Build the API; *database_url* overrides ``settings.DATABASE_URL``."""
    url = database_url or settings.DATABASE_URL

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.storage = await open_storage(url, echo=settings.SQL_ECHO)
        app.state.locks = {
            "invoices": KeyedLock(),
            "returns": KeyedLock(),
            "receipts": KeyedLock(),
        }
        logger.info("Storage ready at %s", url)
        try:
            yield
        finally:
            await app.state.storage.close()

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Van Sales Documents", lifespan=lifespan)

    # ─── CORS: restrict to configured origins ───────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["Content-Type", "Accept"],
        expose_headers=["Content-Disposition"],
    )

    app.include_router(api_router)
    return app


app = create_app()
