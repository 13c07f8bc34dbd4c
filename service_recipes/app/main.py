"""
Recipes service for the Recipes API.
"""

from typing import List, Optional

from fastapi import Path

from shared.base_service import BaseService
from shared.errors import CacheError, StoreError

from .recipes.interfaces import ListingCache, RecipeStore
from .recipes.models import RecipeDraft, RecipePatch, RecipeResponse, MessageResponse
from .recipes.service import RecipeService
from .persistence.postgres import PostgreSQLRecipeStore
from .cache.redis_cache import RedisListingCache


class RecipesService(BaseService):
    """Recipes service implementation.

    ``store`` and ``cache`` default to the PostgreSQL and Redis adapters
    built from configuration; pass other implementations to run against
    different backends.
    """

    def __init__(self, store: Optional[RecipeStore] = None, cache: Optional[ListingCache] = None,
                 port: Optional[int] = None):
        super().__init__("recipes", port)

        self.store = store or PostgreSQLRecipeStore(
            self.config.postgres_dsn,
            min_size=self.config.postgres_min_pool_size,
            max_size=self.config.postgres_max_pool_size
        )
        self.cache = cache or RedisListingCache(self.config.redis_url)
        self.recipes = RecipeService(
            self.store,
            self.cache,
            listing_key=self.config.listing_cache_key,
            metrics=self.metrics
        )

        self._setup_recipes_routes()

    def _setup_recipes_routes(self):
        """Set up recipes-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "recipes",
                "message": "Recipes API",
                "version": "1.0.0",
                "capabilities": ["crud", "caching", "persistence"]
            }

        @self.app.get("/recipes", response_model=List[RecipeResponse], operation_id="recipes")
        async def list_recipes():
            """Get all recipes."""
            recipes = await self.recipes.list_recipes()
            return [RecipeResponse.from_recipe(recipe) for recipe in recipes]

        @self.app.post("/recipes", response_model=RecipeResponse, operation_id="create-recipe")
        async def create_recipe(draft: RecipeDraft):
            """Add a new recipe."""
            recipe = await self.recipes.create_recipe(draft)
            return RecipeResponse.from_recipe(recipe)

        @self.app.get("/recipes/{recipe_id}", response_model=RecipeResponse, operation_id="get-recipe-by-id")
        async def get_recipe(recipe_id: str = Path(..., description="Recipe ID")):
            """Get a recipe by ID."""
            recipe = await self.recipes.get_recipe(recipe_id)
            return RecipeResponse.from_recipe(recipe)

        @self.app.put("/recipes/{recipe_id}", response_model=MessageResponse, operation_id="update-recipe")
        async def update_recipe(patch: RecipePatch, recipe_id: str = Path(..., description="Recipe ID")):
            """Update a recipe by ID."""
            await self.recipes.update_recipe(recipe_id, patch)
            return MessageResponse(message="Recipe has been updated")

        @self.app.delete("/recipes/{recipe_id}", response_model=MessageResponse, operation_id="delete-recipe-by-id")
        async def delete_recipe(recipe_id: str = Path(..., description="Recipe ID")):
            """Delete a recipe by ID."""
            await self.recipes.delete_recipe(recipe_id)
            return MessageResponse(message="Recipe has been deleted")

    async def _check_dependencies(self):
        """Check recipes service dependencies."""
        dependencies = {}

        checks = (("redis", self.cache), ("postgres", self.store))
        for name, component in checks:
            health_check = getattr(component, "health_check", None)
            if health_check is None:
                continue
            try:
                dependencies[name] = "ok" if await health_check() else "error"
            except (StoreError, CacheError):
                dependencies[name] = "error"

        return dependencies

    async def start(self):
        """Start recipes service components."""
        for component in (self.store, self.cache):
            start = getattr(component, "start", None)
            if start is not None:
                await start()

        self.logger.info("Recipes service started")

    async def stop(self):
        """Stop recipes service components."""
        for component in (self.store, self.cache):
            stop = getattr(component, "stop", None)
            if stop is not None:
                await stop()

        self.logger.info("Recipes service stopped")


def create_app():
    """Create recipes service application."""
    service = RecipesService()
    return service.app


def main():
    """Run the recipes service with uvicorn."""
    service = RecipesService()
    service.run()


if __name__ == "__main__":
    main()
