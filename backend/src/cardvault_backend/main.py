from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cardvault_backend.api.deps import block_env, dealer_service
from cardvault_backend.api.routes import router
from cardvault_backend.config import config
from cardvault_backend.engine.models import ENGINE_VERSION
from cardvault_backend.utils.logging_utils import get_logger, setup_logging


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    setup_logging(config.log_level)
    if not config.dealer.owner_configured:
        logger.warning(
            "CARDVAULT_OWNER is not set; accepting sender %r as the dealer owner",
            config.dealer.owner,
        )
    # The repository outlives the app, so a restarted app reuses its counter.
    await dealer_service.ensure_instantiated(block_env(), owner=config.dealer.owner)
    yield


app = FastAPI(title="CardVault Backend", version=ENGINE_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors.allowed_origins,
    allow_credentials=config.cors.allow_credentials,
    allow_methods=config.cors.allow_methods,
    allow_headers=config.cors.allow_headers,
)

app.include_router(router)


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}
