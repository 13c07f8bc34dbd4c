"""
Encoding of the cached "all recipes" listing.

The payload is a UTF-8 JSON array using the same field names as the HTTP
API. Decoding is strict: a payload that does not describe a list of
complete recipes raises ``RecipeDecodeError`` instead of being skipped.
"""

from typing import List, Union

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from shared.errors import RecipeDecodeError
from .models import Recipe, RecipeResponse


_LISTING = TypeAdapter(List[RecipeResponse])


def encode_listing(recipes: List[Recipe]) -> bytes:
    """Serialize a full listing for the cache."""
    return _LISTING.dump_json(
        [RecipeResponse.from_recipe(recipe) for recipe in recipes],
        by_alias=True
    )


def decode_listing(payload: Union[bytes, str]) -> List[Recipe]:
    """Deserialize a cached listing back into recipes."""
    try:
        documents = _LISTING.validate_json(payload)
    except PydanticValidationError as e:
        raise RecipeDecodeError(
            "Cached recipe listing is malformed",
            {
                "error_count": e.error_count(),
                "errors": [
                    {"loc": [str(part) for part in err["loc"]], "msg": err["msg"]}
                    for err in e.errors()[:5]
                ]
            }
        ) from e
    return [document.to_recipe() for document in documents]
