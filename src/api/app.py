# src/api/app.py - v1
"""FastAPI application factory: health, craft (SSE) and recipe listing.

Usage:
    app = create_app(load_settings())
    uvicorn.run(app, host=settings.host, port=settings.port)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from alchemy4d.api.models import ErrorResponse, HealthResponse, RecipeListResponse
from alchemy4d.api.sse import SSE_HEADERS, sse_stream
from alchemy4d.cache.cache_factory import create_recipe_cache
from alchemy4d.config.settings import Settings
from alchemy4d.core.models import CraftValidationError, parse_craft_request
from alchemy4d.version import __version__

if TYPE_CHECKING:
    from alchemy4d.cache.base_cache_store import BaseRecipeCache
    from alchemy4d.pipeline.coordinator import CraftCoordinator

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    coordinator: CraftCoordinator | None = None,
    cache: BaseRecipeCache | None = None,
) -> FastAPI:
    """Build the HTTP application.

    Args:
        settings: Application settings. Loaded from .env if None.
        coordinator: Pre-built coordinator (tests). Built from settings if None.
        cache: Recipe cache. Taken from the coordinator, else built from settings.

    Raises:
        ConfigurationError: If a coordinator must be built and the provider
            API key is missing.
    """
    settings = settings or Settings()
    if coordinator is None:
        coordinator = build_coordinator(settings, cache)
    if cache is None:
        cache = coordinator.cache

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "alchemy4d %s ready: provider=%s, cache=%s",
            __version__, settings.llm_provider, type(cache).__name__,
        )
        yield
        cache.close()

    app = FastAPI(title="alchemy4d", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.coordinator = coordinator
    app.state.cache = cache

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(timestamp=datetime.now(timezone.utc))

    @app.post("/api/craft")
    async def craft(request: Request):
        try:
            body = await request.json()
        except (ValueError, RecursionError):
            return _bad_request("Request body must be valid JSON")
        try:
            craft_request = parse_craft_request(body)
        except CraftValidationError as e:
            logger.info("Rejected craft request: %s", e)
            return _bad_request(str(e))

        events = coordinator.stream(craft_request)
        return StreamingResponse(
            sse_stream(events), media_type="text/event-stream", headers=SSE_HEADERS,
        )

    @app.get("/api/recipes", response_model=RecipeListResponse)
    async def list_recipes() -> RecipeListResponse:
        recipes = await cache.list_entries()
        return RecipeListResponse(count=len(recipes), recipes=recipes)

    return app


def build_coordinator(
    settings: Settings, cache: BaseRecipeCache | None = None
) -> CraftCoordinator:
    """Wire cache, LLM client, generator and coordinator from settings."""
    from alchemy4d.llm.client_factory import create_llm_client
    from alchemy4d.pipeline.coordinator import CraftCoordinator
    from alchemy4d.pipeline.generator import RecipeGenerator

    settings.require_api_key()
    cache = cache if cache is not None else create_recipe_cache(settings)
    client = create_llm_client(settings.llm_provider, settings.llm_model, settings)
    generator = RecipeGenerator.from_settings(client, settings)
    return CraftCoordinator.from_settings(cache, generator, settings)


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content=ErrorResponse(error=message).model_dump())
