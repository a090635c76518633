from __future__ import annotations

import logging
import os
import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from bson import ObjectId
from pymongo import MongoClient
from pymongo.collection import Collection

from .models import Recipe
from .storage import RecipeRepository

logger = logging.getLogger(__name__)

DEFAULT_MONGO_URI = "mongodb://localhost:27017"
DEFAULT_TIMEOUT_MS = 10000


def _object_id(recipe_id: str) -> ObjectId:
    if not ObjectId.is_valid(recipe_id):
        raise KeyError(f"Recipe '{recipe_id}' does not exist.")
    return ObjectId(recipe_id)


def _utcnow() -> datetime:
    # BSON dates only keep milliseconds.
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class MongoRecipeStorage(RecipeRepository):
    """MongoDB backed recipe storage."""

    def __init__(
        self,
        collection: Collection,
        *,
        client: Optional[MongoClient] = None,
    ) -> None:
        self._collection = collection
        self._client = client

    @classmethod
    def from_env(cls) -> "MongoRecipeStorage":
        """Build a storage instance from environment variables."""

        uri = os.environ.get("MONGO_URI", DEFAULT_MONGO_URI)
        database_name = os.environ.get("MONGO_DATABASE", "recipes")
        collection_name = os.environ.get("RECIPES_COLLECTION", "recipes")
        timeout_ms = int(os.environ.get("MONGO_TIMEOUT_MS", DEFAULT_TIMEOUT_MS))

        client: MongoClient = MongoClient(
            uri,
            tz_aware=True,
            serverSelectionTimeoutMS=timeout_ms,
            connectTimeoutMS=timeout_ms,
        )
        collection = client[database_name][collection_name]
        return cls(collection, client=client)

    def ping(self) -> None:
        """Check connectivity, raising a :mod:`pymongo.errors` exception on failure."""

        if self._client is None:
            return
        self._client.admin.command("ping")
        logger.info("Connected to MongoDB database '%s'", self._collection.database.name)

    def list_recipes(self) -> Iterable[Recipe]:
        return [self._doc_to_recipe(doc) for doc in self._collection.find({})]

    def search_recipes(self, tag: str) -> List[Recipe]:
        if not tag:
            return []
        query = {"tags": {"$regex": f"\\A{re.escape(tag)}\\z", "$options": "i"}}
        return [self._doc_to_recipe(doc) for doc in self._collection.find(query)]

    def get_recipe(self, recipe_id: str) -> Recipe:
        doc = self._collection.find_one({"_id": _object_id(recipe_id)})
        if doc is None:
            raise KeyError(f"Recipe '{recipe_id}' does not exist.")
        return self._doc_to_recipe(doc)

    def add_recipe(
        self,
        *,
        name: str,
        tags: List[str],
        ingredients: List[str],
        instructions: List[str],
    ) -> Recipe:
        doc = {
            "_id": ObjectId(),
            "name": name,
            "tags": list(tags),
            "ingredients": list(ingredients),
            "instructions": list(instructions),
            "publishedAt": _utcnow(),
        }
        self._collection.insert_one(doc)
        logger.info("Inserted recipe %s", doc["_id"])
        return self._doc_to_recipe(doc)

    def update_recipe(
        self,
        recipe_id: str,
        *,
        name: str,
        tags: List[str],
        ingredients: List[str],
        instructions: List[str],
    ) -> None:
        result = self._collection.update_one(
            {"_id": _object_id(recipe_id)},
            {
                "$set": {
                    "name": name,
                    "instructions": list(instructions),
                    "ingredients": list(ingredients),
                    "tags": list(tags),
                }
            },
        )
        if result.matched_count == 0:
            raise KeyError(f"Recipe '{recipe_id}' does not exist.")
        logger.info("Updated recipe %s", recipe_id)

    def delete_recipe(self, recipe_id: str) -> None:
        result = self._collection.delete_one({"_id": _object_id(recipe_id)})
        if result.deleted_count == 0:
            raise KeyError(f"Recipe '{recipe_id}' does not exist.")
        logger.info("Deleted recipe %s", recipe_id)

    def _doc_to_recipe(self, data: dict) -> Recipe:
        published_at = data.get("publishedAt")
        if isinstance(published_at, datetime):
            if published_at.tzinfo is None:
                published_at = published_at.replace(tzinfo=timezone.utc)
            timestamp: Optional[datetime] = published_at
        else:
            timestamp = None

        return Recipe(
            id=str(data.get("_id", "")),
            name=data.get("name") or "",
            tags=list(data.get("tags") or []),
            ingredients=list(data.get("ingredients") or []),
            instructions=list(data.get("instructions") or []),
            published_at=timestamp,
        )


__all__ = ["MongoRecipeStorage"]
