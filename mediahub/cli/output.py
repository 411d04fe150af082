"""
CLI Output - JSON rendering shared by every command's --json flag.
"""

import json
from typing import Any

from pydantic import BaseModel

from mediahub.ui import get_console


def to_jsonable(value: Any) -> Any:
    """Dump models (and lists or dicts of them) into JSON-compatible data."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    return value


def print_json(value: Any) -> None:
    """Print a value as JSON, None prints as null."""
    get_console().print_json(json.dumps(to_jsonable(value), ensure_ascii=False))


# Export output helpers
__all__ = ["to_jsonable", "print_json"]
