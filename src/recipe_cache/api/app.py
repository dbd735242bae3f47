from typing import Annotated, Any

from fastapi import FastAPI, Header
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from recipe_cache.api.dependencies import HandlerDep, lifespan
from recipe_cache.config import settings
from recipe_cache.dto import (
    ConvertRecipeRequest,
    HealthCheckResponse,
    RecipeRequest,
    StatsResponse,
)

app = FastAPI(
    title="Friendly Foods Recipe API",
    description="Allergy-safe recipe generation with caching and streamed progress",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "Friendly Foods Recipe API",
        "version": "0.1.0",
        "description": "Allergy-safe recipe generation with caching and streamed progress",
        "endpoints": {
            "recipe": "/api/recipe",
            "recipe_buffered": "/api/recipe/buffered",
            "convert": "/api/convert-recipe",
            "convert_buffered": "/api/convert-recipe/buffered",
            "stats": "/api/admin/stats",
            "health": "/health",
            "docs": "/docs",
        },
        "errors": {
            "stream": 'Once a stream is open, a failure arrives as a final {"error": <message>} event',
            "http": 'Rejected requests and buffered failures return {"detail": <message>} with the HTTP status',
        },
    }


@app.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


@app.post("/api/recipe")
async def stream_recipe(request: RecipeRequest, handler: HandlerDep) -> StreamingResponse:
    """
    Generate a recipe, streaming progress as server-sent events.

    Args:
        request: Meal, optional avoid list and force flag.

    Returns:
        text/event-stream of chunk events and one terminal event.
    """
    return await handler.stream_recipe(request)


@app.post("/api/recipe/buffered")
async def recipe(request: RecipeRequest, handler: HandlerDep) -> dict[str, Any]:
    """
    Generate a recipe and return it as a single JSON body.

    Args:
        request: Meal, optional avoid list and force flag.

    Returns:
        The recipe fields plus ``_fromCache``.
    """
    return await handler.recipe(request)


@app.post("/api/convert-recipe")
async def stream_conversion(request: ConvertRecipeRequest, handler: HandlerDep) -> StreamingResponse:
    """Convert an existing recipe, streaming progress as server-sent events."""
    return await handler.stream_conversion(request)


@app.post("/api/convert-recipe/buffered")
async def convert_recipe(request: ConvertRecipeRequest, handler: HandlerDep) -> dict[str, Any]:
    """Convert an existing recipe and return it as a single JSON body."""
    return await handler.convert_recipe(request)


@app.get("/api/admin/stats", response_model=StatsResponse)
async def admin_stats(
    handler: HandlerDep,
    authorization: Annotated[str | None, Header()] = None,
) -> StatsResponse:
    """Get API call and cache usage statistics (admin bearer token required)."""
    return await handler.get_stats(authorization)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "recipe_cache.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
