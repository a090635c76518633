import logging
from typing import Optional, Tuple

from flask import Flask, Response, jsonify, request
from pymongo.errors import PyMongoError
from werkzeug.exceptions import BadRequest, HTTPException

from .models import Recipe, RecipeValidationError
from .mongo_storage import MongoRecipeStorage
from .openapi import load_openapi
from .storage import RecipeRepository

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Recipe not found"
INSERT_ERROR_MESSAGE = "Error while inserting a new recipe"

JsonResponse = Tuple[Response, int]


def create_app(storage: Optional[RecipeRepository] = None) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    storage:
        Optional recipe repository. When ``None`` the application will use
        :class:`MongoRecipeStorage` configured through environment variables.
        The connection is not checked here; see ``main.py``.
    """

    app = Flask(__name__)
    app.json.sort_keys = False

    if storage is None:
        storage = MongoRecipeStorage.from_env()
    app.config["RECIPE_STORAGE"] = storage

    @app.errorhandler(HTTPException)
    def http_error(exc: HTTPException) -> JsonResponse:
        return jsonify(error=exc.description), exc.code or 500

    @app.get("/openapi.json")
    def openapi_document() -> JsonResponse:
        return jsonify(load_openapi()), 200

    @app.get("/recipes")
    def list_recipes() -> JsonResponse:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        try:
            recipes = list(storage_backend.list_recipes())
        except PyMongoError as exc:
            logger.exception("Failed to list recipes")
            return jsonify(error=str(exc)), 500

        return jsonify([recipe.to_dict() for recipe in recipes]), 200

    @app.post("/recipes")
    def create_recipe() -> JsonResponse:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]

        try:
            recipe = _recipe_from_request()
        except RecipeValidationError as exc:
            return jsonify(error=str(exc)), 400

        try:
            new_recipe = storage_backend.add_recipe(
                name=recipe.name,
                tags=recipe.tags,
                ingredients=recipe.ingredients,
                instructions=recipe.instructions,
            )
        except PyMongoError:
            logger.exception("Failed to insert recipe")
            return jsonify(error=INSERT_ERROR_MESSAGE), 500

        return jsonify(new_recipe.to_dict()), 200

    @app.get("/recipes/search")
    def search_recipes() -> JsonResponse:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        tag = request.args.get("tag", "")

        try:
            recipes = storage_backend.search_recipes(tag)
        except PyMongoError as exc:
            logger.exception("Failed to search recipes by tag %r", tag)
            return jsonify(error=str(exc)), 500

        return jsonify([recipe.to_dict() for recipe in recipes]), 200

    @app.get("/recipes/<recipe_id>")
    def get_recipe(recipe_id: str) -> JsonResponse:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        try:
            recipe = storage_backend.get_recipe(recipe_id)
        except KeyError:
            return jsonify(error=NOT_FOUND_MESSAGE), 404
        except PyMongoError as exc:
            logger.exception("Failed to fetch recipe %s", recipe_id)
            return jsonify(error=str(exc)), 500

        return jsonify(recipe.to_dict()), 200

    @app.put("/recipes/<recipe_id>")
    def update_recipe(recipe_id: str) -> JsonResponse:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]

        try:
            recipe = _recipe_from_request()
        except RecipeValidationError as exc:
            return jsonify(error=str(exc)), 400

        try:
            storage_backend.update_recipe(
                recipe_id,
                name=recipe.name,
                tags=recipe.tags,
                ingredients=recipe.ingredients,
                instructions=recipe.instructions,
            )
        except KeyError:
            return jsonify(error=NOT_FOUND_MESSAGE), 404
        except PyMongoError as exc:
            logger.exception("Failed to update recipe %s", recipe_id)
            return jsonify(error=str(exc)), 500

        return jsonify(message="Recipe has been updated"), 200

    @app.delete("/recipes/<recipe_id>")
    def delete_recipe(recipe_id: str) -> JsonResponse:
        storage_backend: RecipeRepository = app.config["RECIPE_STORAGE"]
        try:
            storage_backend.delete_recipe(recipe_id)
        except KeyError:
            return jsonify(error=NOT_FOUND_MESSAGE), 404
        except PyMongoError as exc:
            logger.exception("Failed to delete recipe %s", recipe_id)
            return jsonify(error=str(exc)), 500

        return jsonify(message="Recipe has been deleted"), 200

    return app


def _recipe_from_request() -> Recipe:
    try:
        payload = request.get_json(force=True)
    except BadRequest as exc:
        raise RecipeValidationError("Request body must be valid JSON.") from exc
    return Recipe.from_payload(payload)


__all__ = ["create_app", "Recipe"]
