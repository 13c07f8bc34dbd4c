"""
Store and cache contracts consumed by RecipeService.

Concrete adapters live in app.persistence and app.cache; tests use the
in-memory fakes from shared.test_helpers.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List

from .models import Recipe


class RecipeStore(ABC):
    """Durable collection of recipes.

    Implementations raise ``StoreError`` for driver failures and
    ``RecipeDecodeError`` for records they cannot decode.
    """

    @abstractmethod
    async def insert(self, recipe: Recipe) -> None:
        """Insert a new recipe."""

    @abstractmethod
    async def find_all(self) -> List[Recipe]:
        """Return every stored recipe."""

    @abstractmethod
    async def find_by_id(self, recipe_id: str) -> Optional[Recipe]:
        """Return the recipe with ``recipe_id``, or ``None``."""

    @abstractmethod
    async def update_by_id(self, recipe_id: str, fields: Dict[str, Any]) -> int:
        """Replace ``fields`` on one recipe; return the number of matched records."""

    @abstractmethod
    async def delete_by_id(self, recipe_id: str) -> int:
        """Remove one recipe; return the number of matched records."""


class ListingCache(ABC):
    """Key-value cache holding serialized listings.

    Implementations raise ``CacheError`` for anything other than a miss.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """Return the value under ``key``, or ``None`` on a miss."""

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl: Optional[int] = None) -> None:
        """Store ``value``; ``ttl=None`` means the entry never expires."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``. Deleting an absent key is not an error."""
