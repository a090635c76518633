from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

LIST_FIELDS = ("tags", "ingredients", "instructions")


class RecipeValidationError(ValueError):
    """Raised when a request body does not have the shape of a recipe."""


@dataclass
class Recipe:
    """Domain object representing a stored recipe."""

    id: str = ""
    name: str = ""
    tags: List[str] = field(default_factory=list)
    ingredients: List[str] = field(default_factory=list)
    instructions: List[str] = field(default_factory=list)
    published_at: Optional[datetime] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "Recipe":
        """Build an unsaved recipe from a decoded JSON body.

        Only the caller-editable fields are read. ``id`` and ``publishedAt``
        are assigned by the storage layer and ignored here.
        """

        if not isinstance(payload, dict):
            raise RecipeValidationError("Request body must be a JSON object.")

        name = payload.get("name", "")
        if name is None:
            name = ""
        if not isinstance(name, str):
            raise RecipeValidationError("Field 'name' must be a string.")

        values = {}
        for key in LIST_FIELDS:
            value = payload.get(key)
            if value is None:
                value = []
            if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
                raise RecipeValidationError(f"Field '{key}' must be a list of strings.")
            values[key] = value

        return cls(name=name, **values)

    def to_dict(self) -> dict:
        published_at = self.published_at.isoformat() if self.published_at else None
        return {
            "id": self.id,
            "name": self.name,
            "tags": list(self.tags),
            "ingredients": list(self.ingredients),
            "instructions": list(self.instructions),
            "publishedAt": published_at,
        }


__all__ = ["Recipe", "RecipeValidationError"]
