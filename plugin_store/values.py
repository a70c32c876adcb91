"""
The JSON value model accepted by every store.

Values are persisted as JSON (text columns, JSON files, or native BSON that
mirrors JSON), so writes are restricted to shapes that survive a round trip
unchanged. Anything else is rejected before it reaches a backend.
"""

from __future__ import annotations

import math
from typing import Dict, List, Union

from .errors import InvalidValueError

JsonValue = Union[None, bool, int, float, str, List["JsonValue"], Dict[str, "JsonValue"]]
JsonObject = Dict[str, JsonValue]


def _check(value: object, path: str) -> None:
    if value is None or isinstance(value, (bool, int, str)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidValueError(f"{path}: non-finite float {value!r} has no JSON representation", data={"path": path})
        return
    if isinstance(value, list):
        for i, item in enumerate(value):
            _check(item, f"{path}[{i}]")
        return
    if isinstance(value, dict):
        for k, item in value.items():
            if not isinstance(k, str):
                raise InvalidValueError(f"{path}: object keys must be strings (got {k!r})", data={"path": path})
            _check(item, f"{path}.{k}")
        return
    raise InvalidValueError(
        f"{path}: {type(value).__name__} is not a JSON value",
        data={"path": path, "type": type(value).__name__},
    )


def ensure_json_value(value: object) -> JsonValue:
    """Return `value` if it is JSON-representable, else raise InvalidValueError."""
    _check(value, "value")
    return value  # type: ignore[return-value]


def is_json_value(value: object) -> bool:
    try:
        _check(value, "value")
    except InvalidValueError:
        return False
    return True
