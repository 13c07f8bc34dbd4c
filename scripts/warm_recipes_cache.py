#!/usr/bin/env python3
"""
Warm the Redis recipe listing cache.

Runs the same read-through path as ``GET /recipes`` so the listing is in
Redis before traffic arrives, e.g. after a deploy or a manual flush.
Executable from a developer workstation or CI job.
"""

import argparse
import asyncio
import json
from pathlib import Path
from typing import Optional
import sys

from service_recipes.app.cache.redis_cache import RedisListingCache
from service_recipes.app.persistence.postgres import PostgreSQLRecipeStore
from service_recipes.app.recipes.service import RecipeService
from shared.config import get_config
from shared.errors import RecipesException


async def warm(service: RecipeService, *, refresh: bool) -> dict:
    """Populate the listing cache and return a summary."""
    was_cached = False
    if refresh:
        await service.cache.delete(service.listing_key)
    else:
        was_cached = await service.cache.get(service.listing_key) is not None

    recipes = await service.list_recipes()
    return {
        "key": service.listing_key,
        "recipes": len(recipes),
        "refreshed": refresh,
        "already_cached": was_cached,
    }


async def _run(redis_url: str, postgres_dsn: str, listing_key: str, refresh: bool) -> dict:
    store = PostgreSQLRecipeStore(postgres_dsn, min_size=1, max_size=2)
    cache = RedisListingCache(redis_url)
    await store.start()
    try:
        await cache.start()
        try:
            return await warm(RecipeService(store, cache, listing_key=listing_key), refresh=refresh)
        finally:
            await cache.stop()
    finally:
        await store.stop()


def _parse_args() -> argparse.Namespace:
    config = get_config("recipes")
    parser = argparse.ArgumentParser(description="Warm the Redis recipe listing cache.")
    parser.add_argument("--redis-url", default=config.redis_url, help="Redis connection URL")
    parser.add_argument("--postgres-dsn", default=config.postgres_dsn, help="PostgreSQL DSN")
    parser.add_argument("--key", default=config.listing_cache_key, help="Listing cache key")
    parser.add_argument("--refresh", action="store_true", help="Drop the current entry and rebuild it from PostgreSQL")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write JSON summary")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    try:
        summary = asyncio.run(_run(args.redis_url, args.postgres_dsn, args.key, args.refresh))
    except KeyboardInterrupt:
        return 130
    except RecipesException as exc:
        print(f"[cache-warm] failed: {exc.code}: {exc.message}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))

    if args.output:
        args.output.write_text(json.dumps(summary, indent=2))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
