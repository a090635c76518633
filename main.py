"""WSGI entrypoint for the recipes API.

Run it with Gunicorn (``gunicorn main:app``) or, for local development,
``flask --app main run``. Settings are read from the environment; a ``.env``
file in the working directory is loaded first.
"""

import logging
import os
import sys

from dotenv import load_dotenv
from pymongo.errors import PyMongoError

from recipes_api import create_app
from recipes_api.mongo_storage import MongoRecipeStorage

load_dotenv()

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("recipes_api")

try:
    storage = MongoRecipeStorage.from_env()
    storage.ping()
except (PyMongoError, ValueError) as exc:
    logger.critical("MongoDB is unreachable or misconfigured: %s", exc)
    sys.exit(1)

app = create_app(storage=storage)


__all__ = ["app"]
