from __future__ import annotations

from typing import Any, Iterable, List

from bson import ObjectId

from ..errors import ValidationError


def is_object_id(value: Any) -> bool:
    return isinstance(value, str) and ObjectId.is_valid(value.strip())


def require_object_id(value: Any, what: str = "ID") -> str:
    if not is_object_id(value):
        raise ValidationError(f"Invalid {what} format")
    return value.strip()


def valid_object_ids(values: Iterable[Any]) -> List[str]:
    return [v.strip() for v in values if is_object_id(v)]
