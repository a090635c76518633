from __future__ import annotations

from typing import Iterable, List, Protocol

from .models import Recipe


class RecipeRepository(Protocol):
    """Protocol describing the behaviour required by the web layer.

    Lookups by id raise :class:`KeyError` when no recipe matches, including
    when the id is not a well-formed identifier for the backend.
    """

    def list_recipes(self) -> Iterable[Recipe]:
        """Return every stored recipe in the store's natural order."""

    def search_recipes(self, tag: str) -> List[Recipe]:
        """Return recipes carrying ``tag``, compared case-insensitively."""

    def get_recipe(self, recipe_id: str) -> Recipe:
        """Return a single recipe or raise :class:`KeyError` if missing."""

    def add_recipe(
        self,
        *,
        name: str,
        tags: List[str],
        ingredients: List[str],
        instructions: List[str],
    ) -> Recipe:
        """Persist a new recipe and return the stored instance."""

    def update_recipe(
        self,
        recipe_id: str,
        *,
        name: str,
        tags: List[str],
        ingredients: List[str],
        instructions: List[str],
    ) -> None:
        """Replace the editable fields of an existing recipe."""

    def delete_recipe(self, recipe_id: str) -> None:
        """Remove a recipe or raise :class:`KeyError` if missing."""


__all__ = ["RecipeRepository"]
