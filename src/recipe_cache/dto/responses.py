"""Response DTOs for API endpoints."""

from pydantic import BaseModel, Field


class CachedRecipeSummary(BaseModel):
    """Display fields of one cache entry (no id, no recipe body)."""

    meal: str = Field(..., description="Meal as originally requested")
    allergens: list[str] = Field(default_factory=list, description="Allergens as supplied")
    hit_count: int = Field(..., alias="hitCount", ge=0)
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")

    model_config = {"populate_by_name": True}


class StatsResponse(BaseModel):
    """Response DTO for the admin stats endpoint."""

    api_calls: int = Field(..., alias="apiCalls", description="Generations written to cache", ge=0)
    cache_hits: int = Field(..., alias="cacheHits", description="Responses served from cache", ge=0)
    total_requests: int = Field(..., alias="totalRequests", ge=0)
    cache_hit_rate: int = Field(
        ...,
        alias="cacheHitRate",
        description="Percentage of requests served from cache, rounded",
        ge=0,
        le=100,
    )
    cache_entries: int = Field(..., alias="cacheEntries", ge=0)
    all_cached: list[CachedRecipeSummary] = Field(
        default_factory=list,
        alias="allCached",
        description="Cache entries, most hit first",
    )

    model_config = {"populate_by_name": True}


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    store_healthy: bool = Field(..., description="Whether the document store is reachable")
    generator_healthy: bool = Field(..., description="Whether the model provider is configured")
