#!/usr/bin/env python3
"""
Demo script for the recipe API.

Requests the same allergy-safe recipe three times against a running server:
a miss that streams from the model, a cache hit that returns at once, and a
forced refresh. Start the server first:

    uvicorn recipe_cache.api.app:app --port 3001
"""

import os
import sys
import time

import httpx

from recipe_cache.client import RecipeStreamClient
from recipe_cache.errors import RecipeCacheError

BASE_URL = os.getenv("RECIPE_API_URL", "http://localhost:3001")


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def demo_request(client: RecipeStreamClient, meal: str, avoid: list[str], force: bool = False) -> None:
    """Request one recipe, printing progress as it streams."""
    received = 0

    def on_chunk(chunk: str) -> None:
        nonlocal received
        received += len(chunk)
        print(f"\r  ⏳ Received {received} characters...", end="", flush=True)

    start = time.time()
    done = client.generate(meal, avoid, force=force, on_chunk=on_chunk)
    duration = (time.time() - start) * 1000
    if received:
        print()

    recipe = done.recipe
    source = "CACHE HIT" if done.from_cache else "generated"
    print(f"  ✓ {recipe['title']} ({source}, {duration:.0f}ms)")
    print(f"    Serves {recipe.get('servings')}, prep {recipe.get('prepTime')}, cook {recipe.get('cookTime')}")
    for sub in recipe.get("substitutions", [])[:3]:
        print(f"    • {sub['original']} → {sub['substitute']}")


def demo_stats() -> None:
    """Print usage stats if ADMIN_TOKEN is available."""
    token = os.getenv("ADMIN_TOKEN")
    if not token:
        print("\n  (set ADMIN_TOKEN to print usage stats)")
        return

    response = httpx.get(f"{BASE_URL}/api/admin/stats", headers={"Authorization": f"Bearer {token}"})
    response.raise_for_status()
    stats = response.json()
    print(f"\n  API calls: {stats['apiCalls']}, cache hits: {stats['cacheHits']}")
    print(f"  Hit rate: {stats['cacheHitRate']}% over {stats['totalRequests']} requests")
    for entry in stats["allCached"][:5]:
        print(f"    {entry['hitCount']:>3} × {entry['meal']} (avoid: {', '.join(entry['allergens']) or 'none'})")


def main() -> None:
    """Run the demo."""
    print("\n🚀 Recipe API Demo")
    print("=" * 70)
    print(f"Server: {BASE_URL}")

    meal, avoid = "banana bread", ["Nuts", "Dairy"]

    try:
        with RecipeStreamClient(BASE_URL) as client:
            print_section("1. First request (cache miss)")
            demo_request(client, meal, avoid)

            print_section("2. Same request, different order and case (cache hit)")
            demo_request(client, "Banana Bread", ["dairy", "nuts"])

            print_section("3. Forced refresh")
            demo_request(client, meal, avoid, force=True)

        print_section("Usage stats")
        demo_stats()

        print("\n" + "=" * 70)
        print("✅ Demo completed successfully!")
        print("=" * 70)

    except (RecipeCacheError, httpx.HTTPError) as e:
        print(f"\n❌ Error: {e}")
        print("\nMake sure the server is running:")
        print("  uvicorn recipe_cache.api.app:app --port 3001")
        print("\nAnd that ANTHROPIC_API_KEY is set for the server.")
        sys.exit(1)


if __name__ == "__main__":
    main()
