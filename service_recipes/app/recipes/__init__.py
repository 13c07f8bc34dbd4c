"""
Recipes domain package.

Modules of interest:
- models: Recipe dataclass plus request/response models.
- codec: Encoding of the cached listing.
- interfaces: Store and cache contracts.
- service: The cache-aside RecipeService.
"""

from .models import Recipe, RecipeDraft, RecipePatch
from .service import RecipeService

__all__ = ["Recipe", "RecipeDraft", "RecipePatch", "RecipeService"]
