from __future__ import annotations

import dataclasses
import json
from collections.abc import Sequence
from datetime import datetime
from enum import Enum
from typing import Any


def _default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_dict(item: Any) -> dict[str, Any]:
    data = dataclasses.asdict(item)
    # activity variants are told apart by their class-level tag
    kind = getattr(item, "kind", None)
    if kind is not None:
        data = {"kind": kind, **data}
    return data


def format_json(items: Sequence[Any]) -> str:
    return json.dumps([to_dict(item) for item in items], indent=2, default=_default)
