from __future__ import annotations
import json
import uuid
from typing import Any, Mapping


def new_identifier() -> str:
    # uuid4 draws from os.urandom
    return str(uuid.uuid4())


def dumps(obj: Any, *, indent: int | None = None, ensure_ascii: bool = False) -> str:
    return json.dumps(obj, indent=indent, ensure_ascii=ensure_ascii)


def is_empty(obj: Any) -> bool:
    return isinstance(obj, Mapping) and len(obj) == 0


def is_falsy_value(value: Any) -> bool:
    """
    False, 0 and -0 are data, not missing markers.
    """
    if isinstance(value, bool):
        return value is False
    return isinstance(value, (int, float)) and value == 0
