from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

OPENAPI_PATH = Path(__file__).resolve().parent / "openapi.yaml"


@lru_cache(maxsize=1)
def load_openapi() -> dict[str, Any]:
    """Return the OpenAPI description of the HTTP routes."""

    parsed = yaml.safe_load(OPENAPI_PATH.read_text(encoding="utf-8"))
    if not isinstance(parsed, dict) or not isinstance(parsed.get("paths"), dict):
        raise ValueError("openapi.yaml must parse into an object with 'paths'")
    return parsed


__all__ = ["load_openapi"]
