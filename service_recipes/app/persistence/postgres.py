"""
PostgreSQL persistence layer for Recipes Service.

Each recipe is one row; the ordered string lists are kept as JSONB
documents so their order survives a round trip.
"""

import json
from typing import Dict, Any, Optional, List

import asyncpg

from shared.logging import get_logger
from shared.errors import StoreError, RecipeDecodeError, ValidationError
from ..recipes.interfaces import RecipeStore
from ..recipes.models import Recipe, MUTABLE_FIELDS


# Driver-level failures surfaced as StoreError
DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

LIST_FIELDS = ("tags", "ingredients", "instructions")


class PostgreSQLRecipeStore(RecipeStore):
    """PostgreSQL persistence layer for recipes."""

    def __init__(self, dsn: str, min_size: int = 2, max_size: int = 10,
                 pool: Optional[asyncpg.Pool] = None):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.logger = get_logger("recipes.persistence.postgres")
        self.pool: Optional[asyncpg.Pool] = pool

    async def start(self):
        """Start the persistence layer."""
        try:
            if self.pool is None:
                self.pool = await asyncpg.create_pool(
                    self.dsn,
                    min_size=self.min_size,
                    max_size=self.max_size,
                    command_timeout=30
                )

            # Create tables if they don't exist
            await self._create_tables()

            self.logger.info("PostgreSQL persistence started")

        except DRIVER_ERRORS as e:
            self.logger.error("Failed to start PostgreSQL persistence", error=str(e))
            raise StoreError("Failed to connect to PostgreSQL", {"reason": str(e)}) from e

    async def stop(self):
        """Stop the persistence layer."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("PostgreSQL persistence stopped")

    async def _create_tables(self):
        """Create database tables."""
        async with self.pool.acquire() as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS recipes (
                    id VARCHAR(64) PRIMARY KEY,
                    name TEXT NOT NULL,
                    tags JSONB NOT NULL DEFAULT '[]',
                    ingredients JSONB NOT NULL DEFAULT '[]',
                    instructions JSONB NOT NULL DEFAULT '[]',
                    published_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
                );
            """)
            await conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_recipes_published_at ON recipes(published_at);
            """)

    async def insert(self, recipe: Recipe) -> None:
        """Insert a recipe."""
        try:
            async with self._pool().acquire() as conn:
                await conn.execute("""
                    INSERT INTO recipes (id, name, tags, ingredients, instructions, published_at)
                    VALUES ($1, $2, $3::jsonb, $4::jsonb, $5::jsonb, $6)
                """,
                    recipe.id, recipe.name, json.dumps(recipe.tags),
                    json.dumps(recipe.ingredients), json.dumps(recipe.instructions),
                    recipe.published_at
                )
        except DRIVER_ERRORS as e:
            self.logger.error("Error inserting recipe", recipe_id=recipe.id, error=str(e))
            raise StoreError("Error while inserting a new recipe", {"recipe_id": recipe.id}) from e

        self.logger.debug("Recipe inserted", recipe_id=recipe.id)

    async def find_all(self) -> List[Recipe]:
        """Load all recipes."""
        try:
            async with self._pool().acquire() as conn:
                rows = await conn.fetch("""
                    SELECT id, name, tags, ingredients, instructions, published_at
                    FROM recipes ORDER BY published_at ASC, id ASC
                """)
        except DRIVER_ERRORS as e:
            self.logger.error("Error loading recipes", error=str(e))
            raise StoreError("Error loading recipes", {"reason": str(e)}) from e

        return [self._row_to_recipe(row) for row in rows]

    async def find_by_id(self, recipe_id: str) -> Optional[Recipe]:
        """Load one recipe."""
        try:
            async with self._pool().acquire() as conn:
                row = await conn.fetchrow("""
                    SELECT id, name, tags, ingredients, instructions, published_at
                    FROM recipes WHERE id = $1
                """, recipe_id)
        except DRIVER_ERRORS as e:
            self.logger.error("Error loading recipe", recipe_id=recipe_id, error=str(e))
            raise StoreError("Error loading recipe", {"recipe_id": recipe_id}) from e

        if not row:
            return None

        return self._row_to_recipe(row)

    async def update_by_id(self, recipe_id: str, fields: Dict[str, Any]) -> int:
        """Replace the given mutable fields; return the matched row count."""
        unknown = sorted(set(fields) - set(MUTABLE_FIELDS))
        if unknown or not fields:
            raise ValidationError("Unsupported update fields", {"fields": unknown})

        assignments = []
        values: List[Any] = [recipe_id]
        for name in MUTABLE_FIELDS:
            if name not in fields:
                continue
            values.append(json.dumps(fields[name]) if name in LIST_FIELDS else fields[name])
            cast = "::jsonb" if name in LIST_FIELDS else ""
            assignments.append(f"{name} = ${len(values)}{cast}")

        query = f"UPDATE recipes SET {', '.join(assignments)} WHERE id = $1"
        try:
            async with self._pool().acquire() as conn:
                result = await conn.execute(query, *values)
        except DRIVER_ERRORS as e:
            self.logger.error("Error updating recipe", recipe_id=recipe_id, error=str(e))
            raise StoreError("Error updating recipe", {"recipe_id": recipe_id}) from e

        return self._affected_rows(result)

    async def delete_by_id(self, recipe_id: str) -> int:
        """Delete one recipe; return the matched row count."""
        try:
            async with self._pool().acquire() as conn:
                result = await conn.execute("""
                    DELETE FROM recipes WHERE id = $1
                """, recipe_id)
        except DRIVER_ERRORS as e:
            self.logger.error("Error deleting recipe", recipe_id=recipe_id, error=str(e))
            raise StoreError("Error deleting recipe", {"recipe_id": recipe_id}) from e

        return self._affected_rows(result)

    async def health_check(self) -> bool:
        """Check database health."""
        if self.pool is None:
            return False
        try:
            async with self.pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
                return True
        except DRIVER_ERRORS:
            return False

    def _pool(self) -> asyncpg.Pool:
        if self.pool is None:
            raise StoreError("PostgreSQL persistence is not started")
        return self.pool

    @staticmethod
    def _affected_rows(status: str) -> int:
        """Parse the row count out of a command tag such as ``UPDATE 1``."""
        try:
            return int(status.rsplit(" ", 1)[-1])
        except (AttributeError, ValueError) as e:
            raise StoreError("Unexpected command status", {"status": str(status)}) from e

    def _row_to_recipe(self, row) -> Recipe:
        """Convert database row to Recipe object."""
        recipe_id = row['id']
        lists: Dict[str, List[str]] = {}
        for name in LIST_FIELDS:
            raw = row[name]
            try:
                value = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
            except ValueError as e:
                raise RecipeDecodeError(
                    "Stored recipe has malformed JSON",
                    {"recipe_id": recipe_id, "field": name}
                ) from e
            if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                raise RecipeDecodeError(
                    "Stored recipe field is not a list of strings",
                    {"recipe_id": recipe_id, "field": name}
                )
            lists[name] = value

        if not isinstance(row['name'], str) or row['published_at'] is None:
            raise RecipeDecodeError("Stored recipe is incomplete", {"recipe_id": recipe_id})

        return Recipe(
            id=recipe_id,
            name=row['name'],
            tags=lists["tags"],
            ingredients=lists["ingredients"],
            instructions=lists["instructions"],
            published_at=row['published_at']
        )
