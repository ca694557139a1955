"""
Serialization utilities for models.

to_jsonable - конвертирует любые объекты в JSON-serializable структуры.
Поддерживает:
- dataclasses (с методом to_dict или через asdict)
- Enum (конвертирует в value)
- bytes (base64)
- numpy types
- datetime
- pydantic BaseModel (по alias, как отдаёт модель)
"""
from __future__ import annotations

import base64
import json
import math
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np
from pydantic import BaseModel


def to_jsonable(obj: Any) -> Any:
    """Convert any object to JSON-serializable types.

    Порядок проверок:
    1. Enum - value (до str, т.к. Key и Language наследуют str)
    2. None, bool, int, str - as is; float - non-finite -> None
    3. dict - recursive
    4. list/tuple - recursive
    5. set/frozenset - to sorted list
    6. bytes - base64 string
    7. dataclass with to_dict() - use it
    8. dataclass without to_dict() - use asdict
    9. datetime/date/Path - to string
    10. numpy types - convert to python
    11. pydantic BaseModel - model_dump(by_alias=True)
    12. fallback - str()
    """
    if isinstance(obj, Enum):
        return obj.value

    if obj is None or isinstance(obj, (bool, int, str)):
        return obj

    if isinstance(obj, float):
        # JSON не умеет NaN/Infinity
        return obj if math.isfinite(obj) else None

    if isinstance(obj, dict):
        return {str(k.value if isinstance(k, Enum) else k): to_jsonable(v) for k, v in obj.items()}

    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]

    if isinstance(obj, (set, frozenset)):
        try:
            return [to_jsonable(v) for v in sorted(obj)]
        except TypeError:
            return [to_jsonable(v) for v in sorted(obj, key=str)]

    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")

    if is_dataclass(obj) and not isinstance(obj, type):
        if hasattr(obj, "to_dict"):
            return to_jsonable(obj.to_dict())
        return to_jsonable(asdict(obj))

    if isinstance(obj, (datetime, date)):
        return obj.isoformat()

    if isinstance(obj, Path):
        return str(obj)

    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return to_jsonable(float(obj))

    if isinstance(obj, BaseModel):
        return to_jsonable(obj.model_dump(mode="json", by_alias=True, exclude_none=True))

    if hasattr(obj, "to_dict") and callable(obj.to_dict):
        return to_jsonable(obj.to_dict())

    return str(obj)


def to_json_file(obj: Any, path: str, indent: int = 2) -> None:
    """Сохраняет объект в JSON файл."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(to_jsonable(obj), f, indent=indent, ensure_ascii=False)


def to_json_str(obj: Any, indent: int | None = None) -> str:
    """Конвертирует объект в JSON строку."""
    return json.dumps(to_jsonable(obj), indent=indent, ensure_ascii=False)
