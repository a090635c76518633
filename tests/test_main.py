from __future__ import annotations

import importlib
from pathlib import Path
import sys

import pytest
from pymongo.errors import ServerSelectionTimeoutError

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from recipes_api.mongo_storage import MongoRecipeStorage


def import_main(monkeypatch):
    monkeypatch.delitem(sys.modules, "main", raising=False)
    return importlib.import_module("main")


def test_startup_exits_when_mongodb_is_unreachable(monkeypatch):
    def unreachable(self):
        raise ServerSelectionTimeoutError("localhost:27017: connection refused")

    monkeypatch.setattr(MongoRecipeStorage, "ping", unreachable)

    with pytest.raises(SystemExit) as excinfo:
        import_main(monkeypatch)

    assert excinfo.value.code == 1


@pytest.mark.parametrize(
    "variable,value",
    [("MONGO_URI", "not-a-mongodb-uri"), ("MONGO_TIMEOUT_MS", "soon")],
)
def test_startup_exits_on_bad_configuration(monkeypatch, variable, value):
    monkeypatch.setenv(variable, value)
    monkeypatch.setattr(MongoRecipeStorage, "ping", lambda self: None)

    with pytest.raises(SystemExit) as excinfo:
        import_main(monkeypatch)

    assert excinfo.value.code == 1


def test_startup_builds_app_when_mongodb_answers(monkeypatch):
    monkeypatch.setattr(MongoRecipeStorage, "ping", lambda self: None)

    main = import_main(monkeypatch)
    try:
        assert main.app.config["RECIPE_STORAGE"] is main.storage
    finally:
        main.storage._client.close()
        sys.modules.pop("main", None)
