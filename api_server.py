from __future__ import annotations  # FastAPI server exposing the mock marathon

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import cms_routes, routes
from cms import CmsStore, seed_catalog
from config import load_config
from config.settings import settings
from rounds import bind_gateway_feedback
from storage.migrate import migrate


logger = logging.getLogger(__name__)


def bootstrap() -> None:  # Prepare schema, seed data and the feedback model
    migrate(settings.DB_PATH)
    seed_catalog(CmsStore(Path(settings.DB_PATH)), settings.CATALOG_PATH)

    config_path = Path(settings.APP_CONFIG_PATH)
    if not config_path.exists():
        logger.warning("No LLM config at %s; round feedback uses the plain summary", config_path)
        return
    try:
        bind_gateway_feedback(load_config(config_path))
    except KeyError as exc:
        logger.warning("Round feedback route not configured: %s", exc)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    bootstrap()
    yield


app = FastAPI(title="Mock Marathon API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(routes.router)
app.include_router(cms_routes.router)


@app.get("/api/health")
def health() -> dict:
    return {"status": "ok"}
