"""
Shared error handling for the Recipes API.

Service code raises these exceptions; the HTTP layer is the only place
that turns them into status codes.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from .logging import get_request_id


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class RecipesException(Exception):
    """Base exception for the Recipes API."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=get_request_id(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class RecipeNotFoundError(RecipesException):
    """No recipe matches the given identifier."""

    def __init__(self, recipe_id: str, details: Optional[Dict[str, Any]] = None):
        self.recipe_id = recipe_id
        super().__init__(
            "RECIPE_NOT_FOUND",
            f"Recipe {recipe_id} not found",
            {"recipe_id": recipe_id, **(details or {})}
        )


class ValidationError(RecipesException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class InfrastructureError(RecipesException):
    """Store or cache unreachable or failing."""

    def __init__(self, message: str = "Infrastructure error", details: Optional[Dict[str, Any]] = None,
                 code: str = "INFRASTRUCTURE_ERROR"):
        super().__init__(code, message, details)


class StoreError(InfrastructureError):
    """Recipe store errors."""

    def __init__(self, message: str = "Store error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="STORE_ERROR")


class CacheError(InfrastructureError):
    """Listing cache errors."""

    def __init__(self, message: str = "Cache error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="CACHE_ERROR")


class RecipeDecodeError(InfrastructureError):
    """Stored or cached recipe data could not be decoded."""

    def __init__(self, message: str = "Malformed recipe data", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="RECIPE_DECODE_ERROR")
