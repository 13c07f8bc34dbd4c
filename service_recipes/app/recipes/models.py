"""
Recipe data models for Recipes Service.
"""

from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


# Fields a caller may replace through an update; id and published_at are fixed
MUTABLE_FIELDS = ("name", "tags", "ingredients", "instructions")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Recipe:
    """A stored recipe."""
    id: str
    name: str
    tags: List[str] = field(default_factory=list)
    ingredients: List[str] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    published_at: datetime = field(default_factory=utcnow)


class RecipeDraft(BaseModel):
    """Request model for recipe creation.

    Caller-supplied ``id`` and ``publishedAt`` are dropped; the service
    assigns both.
    """
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., description="Recipe name")
    tags: List[str] = Field(default_factory=list, description="Recipe tags")
    ingredients: List[str] = Field(default_factory=list, description="Ingredients, in order")
    instructions: List[str] = Field(default_factory=list, description="Instruction steps, in order")


class RecipePatch(BaseModel):
    """Request model for recipe updates. Only supplied fields are replaced."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(None, description="Recipe name")
    tags: Optional[List[str]] = Field(None, description="Recipe tags")
    ingredients: Optional[List[str]] = Field(None, description="Ingredients, in order")
    instructions: Optional[List[str]] = Field(None, description="Instruction steps, in order")

    def changes(self) -> Dict[str, Any]:
        """Return the mutable fields the caller actually supplied."""
        supplied = self.model_dump(exclude_unset=True, exclude_none=True)
        return {name: supplied[name] for name in MUTABLE_FIELDS if name in supplied}


class RecipeResponse(BaseModel):
    """Response model for a recipe."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    tags: List[str]
    ingredients: List[str]
    instructions: List[str]
    published_at: datetime = Field(..., alias="publishedAt")

    @classmethod
    def from_recipe(cls, recipe: Recipe) -> "RecipeResponse":
        return cls(
            id=recipe.id,
            name=recipe.name,
            tags=recipe.tags,
            ingredients=recipe.ingredients,
            instructions=recipe.instructions,
            published_at=recipe.published_at
        )

    def to_recipe(self) -> Recipe:
        return Recipe(
            id=self.id,
            name=self.name,
            tags=list(self.tags),
            ingredients=list(self.ingredients),
            instructions=list(self.instructions),
            published_at=self.published_at
        )


class MessageResponse(BaseModel):
    """Response model for mutations that return no recipe."""
    message: str
