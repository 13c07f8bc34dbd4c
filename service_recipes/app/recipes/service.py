"""
Cache-aside recipe service.

The full recipe listing is the only cached value. ``list_recipes`` reads
through the cache and repopulates it on a miss; every successful mutation
deletes the entry so the next listing is rebuilt from the store. Single
recipe lookups always go to the store.
"""

import uuid
from typing import List, Optional

from shared.errors import CacheError, RecipeNotFoundError, ValidationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .codec import decode_listing, encode_listing
from .interfaces import ListingCache, RecipeStore
from .models import Recipe, RecipeDraft, RecipePatch, utcnow


DEFAULT_LISTING_KEY = "recipes"


class RecipeService:
    """CRUD over recipes with a read-through listing cache.

    Holds no per-request state; one instance is shared by all requests.
    """

    def __init__(
        self,
        store: RecipeStore,
        cache: ListingCache,
        listing_key: str = DEFAULT_LISTING_KEY,
        metrics: Optional[MetricsCollector] = None
    ):
        self.store = store
        self.cache = cache
        self.listing_key = listing_key
        self.metrics = metrics
        self.logger = get_logger("recipes.service")

    async def list_recipes(self) -> List[Recipe]:
        """Return all recipes, from the cache when possible."""
        cached = await self.cache.get(self.listing_key)
        if cached is not None:
            self.logger.debug("Listing served from cache", key=self.listing_key)
            self._count("recipe_cache_hits_total")
            return decode_listing(cached)

        self.logger.info("Listing cache miss, querying store", key=self.listing_key)
        self._count("recipe_cache_misses_total")

        if self.metrics:
            with self.metrics.time_operation("recipe_store_query_duration_seconds", operation="find_all"):
                recipes = await self.store.find_all()
        else:
            recipes = await self.store.find_all()

        await self.cache.set(self.listing_key, encode_listing(recipes), ttl=None)
        return recipes

    async def create_recipe(self, draft: RecipeDraft) -> Recipe:
        """Insert a new recipe with a fresh id and timestamp."""
        recipe = Recipe(
            id=uuid.uuid4().hex,
            name=draft.name,
            tags=list(draft.tags),
            ingredients=list(draft.ingredients),
            instructions=list(draft.instructions),
            published_at=utcnow()
        )

        await self.store.insert(recipe)
        self.logger.info("Recipe created", recipe_id=recipe.id, name=recipe.name)

        await self._invalidate_listing("create", recipe.id)
        return recipe

    async def get_recipe(self, recipe_id: str) -> Recipe:
        """Look up one recipe. Never consults the cache."""
        recipe = await self.store.find_by_id(recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(recipe_id)
        return recipe

    async def update_recipe(self, recipe_id: str, patch: RecipePatch) -> None:
        """Replace the supplied mutable fields of one recipe."""
        fields = patch.changes()
        if not fields:
            raise ValidationError(
                "Update must supply at least one of: name, tags, ingredients, instructions",
                {"recipe_id": recipe_id}
            )

        matched = await self.store.update_by_id(recipe_id, fields)
        if matched == 0:
            raise RecipeNotFoundError(recipe_id)

        self.logger.info("Recipe updated", recipe_id=recipe_id, fields=sorted(fields))
        await self._invalidate_listing("update", recipe_id)

    async def delete_recipe(self, recipe_id: str) -> None:
        """Remove one recipe."""
        matched = await self.store.delete_by_id(recipe_id)
        if matched == 0:
            raise RecipeNotFoundError(recipe_id)

        self.logger.info("Recipe deleted", recipe_id=recipe_id)
        await self._invalidate_listing("delete", recipe_id)

    async def _invalidate_listing(self, operation: str, recipe_id: str) -> None:
        """Drop the cached listing after a successful write.

        A failure here does not undo the write: the entry stays stale until
        the next successful invalidation.
        """
        try:
            await self.cache.delete(self.listing_key)
        except CacheError as e:
            self.logger.warning(
                "Listing cache invalidation failed",
                key=self.listing_key,
                operation=operation,
                recipe_id=recipe_id,
                error=str(e)
            )
            self._count("recipe_cache_invalidation_failures_total", operation=operation)
            return

        self.logger.info("Listing cache invalidated", key=self.listing_key, operation=operation)
        self._count("recipe_cache_invalidations_total", operation=operation)

    def _count(self, metric_name: str, **labels):
        if self.metrics:
            self.metrics.increment_counter(metric_name, **labels)
