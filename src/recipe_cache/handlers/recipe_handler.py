"""HTTP handlers for recipe generation and stats.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import asyncio
import logging
import secrets
from collections.abc import AsyncIterator

from fastapi import HTTPException, status
from fastapi.responses import StreamingResponse

from recipe_cache.dto import (
    CachedRecipeSummary,
    ConvertRecipeRequest,
    DoneEvent,
    HealthCheckResponse,
    RecipeRequest,
    StatsResponse,
)
from recipe_cache.entities import GenerationJob
from recipe_cache.errors import InvalidInput, StoreUnavailable
from recipe_cache.keys import make_cache_key, make_conversion_key
from recipe_cache.prompts import build_conversion_prompt, build_recipe_prompt
from recipe_cache.protocols import RecipeGenerator
from recipe_cache.services import CacheService, RecipePipeline
from recipe_cache.streaming import SSE_HEADERS, collect_terminal, encode_events

logger = logging.getLogger(__name__)


class RecipeHandler:
    """HTTP handlers for recipe operations.

    This handler delegates business logic to RecipePipeline and
    CacheService and handles HTTP-specific concerns like:
    - Rejecting bad requests before any stream is opened
    - Choosing between the event stream and the buffered body
    - Admin authorization and status codes

    Example:
        ```python
        handler = RecipeHandler(pipeline=pipeline, cache_service=cache, generator=generator)

        @app.post("/api/recipe")
        async def stream_recipe(request: RecipeRequest):
            return await handler.stream_recipe(request)
        ```
    """

    def __init__(
        self,
        pipeline: RecipePipeline,
        cache_service: CacheService,
        generator: RecipeGenerator,
        admin_token: str | None = None,
    ) -> None:
        """Initialize the recipe handler.

        Args:
            pipeline: Cache-or-generate pipeline (required).
            cache_service: Cache service, used for stats (required).
            generator: Model provider, used for health checks (required).
            admin_token: Bearer token for the stats endpoint; None disables it.
        """
        self._pipeline = pipeline
        self._cache = cache_service
        self._generator = generator
        self._admin_token = admin_token

    @staticmethod
    def recipe_job(request: RecipeRequest) -> GenerationJob:
        """Normalize a meal request.

        Raises:
            HTTPException: 400 if the meal is blank
        """
        try:
            key = make_cache_key(request.meal, request.allergens)
        except InvalidInput as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        return GenerationJob(
            cache_key=key,
            meal=request.meal.strip(),
            prompt=build_recipe_prompt(request.meal.strip(), request.allergens),
            allergens=request.allergens,
            force=request.force,
        )

    @staticmethod
    def conversion_job(request: ConvertRecipeRequest) -> GenerationJob:
        """Normalize a recipe-conversion request.

        Raises:
            HTTPException: 400 if the recipe text is blank
        """
        try:
            key = make_conversion_key(request.recipe_text, request.allergens)
        except InvalidInput as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
        text = request.recipe_text.strip()
        return GenerationJob(
            cache_key=key,
            meal=text,
            prompt=build_conversion_prompt(text, request.allergens),
            allergens=request.allergens,
            force=request.force,
        )

    async def _frames(self, job: GenerationJob) -> AsyncIterator[str]:
        try:
            async for frame in encode_events(self._pipeline.events(job)):
                yield frame
        except asyncio.CancelledError:
            logger.info("Client disconnected while streaming %r", job.meal)
            raise

    def stream(self, job: GenerationJob) -> StreamingResponse:
        """Serve a job as a text/event-stream response."""
        return StreamingResponse(
            self._frames(job),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )

    async def buffered(self, job: GenerationJob) -> dict:
        """Serve a job as one JSON body ``{...recipe, _fromCache}``.

        Raises:
            HTTPException: With the provider status on generation failure,
                500 on an unparseable recipe
        """
        terminal = await collect_terminal(self._pipeline.events(job))
        if isinstance(terminal, DoneEvent):
            return terminal.to_body()
        raise HTTPException(status_code=terminal.status, detail=terminal.error)

    async def stream_recipe(self, request: RecipeRequest) -> StreamingResponse:
        """Handle POST /api/recipe requests."""
        return self.stream(self.recipe_job(request))

    async def recipe(self, request: RecipeRequest) -> dict:
        """Handle POST /api/recipe/buffered requests."""
        return await self.buffered(self.recipe_job(request))

    async def stream_conversion(self, request: ConvertRecipeRequest) -> StreamingResponse:
        """Handle POST /api/convert-recipe requests."""
        return self.stream(self.conversion_job(request))

    async def convert_recipe(self, request: ConvertRecipeRequest) -> dict:
        """Handle POST /api/convert-recipe/buffered requests."""
        return await self.buffered(self.conversion_job(request))

    def authorize_admin(self, authorization: str | None) -> None:
        """Check the admin bearer token.

        Raises:
            HTTPException: 401 if no token is configured or it does not match
        """
        expected = f"Bearer {self._admin_token}" if self._admin_token else None
        if expected is None or not secrets.compare_digest(authorization or "", expected):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    async def get_stats(self, authorization: str | None) -> StatsResponse:
        """Handle GET /api/admin/stats requests.

        Raises:
            HTTPException: 401 if unauthorized, 503 if the store is down
        """
        self.authorize_admin(authorization)
        try:
            stats = self._cache.get_stats()
        except StoreUnavailable as e:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Failed to get stats: {e}",
            ) from e

        return StatsResponse(
            api_calls=stats.api_calls,
            cache_hits=stats.cache_hits,
            total_requests=stats.total_requests,
            cache_hit_rate=stats.cache_hit_rate,
            cache_entries=stats.cache_entries,
            all_cached=[
                CachedRecipeSummary(
                    meal=entry.meal,
                    allergens=entry.allergens,
                    hit_count=entry.hit_count,
                    created_at=entry.created_at,
                    updated_at=entry.updated_at,
                )
                for entry in stats.entries
            ],
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        store_healthy = self._cache.is_healthy()
        generator_healthy = self._generator.is_available()
        return HealthCheckResponse(
            status="healthy" if store_healthy and generator_healthy else "unhealthy",
            store_healthy=store_healthy,
            generator_healthy=generator_healthy,
        )
