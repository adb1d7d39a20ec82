"""Event serialization shared by the sinks."""

import json
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


def to_dict(obj: Any) -> dict:
    """Convert an event or record to a JSON-ready dictionary."""
    if is_dataclass(obj):
        return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}
    elif isinstance(obj, dict):
        return {k: serialize_value(v) for k, v in obj.items()}
    else:
        return {"value": str(obj)}


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output.

    Decimals keep their exact text, enums are written by value and dates
    as ISO-8601.
    """
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif is_dataclass(value) and not isinstance(value, type):
        return to_dict(value)
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


def event_payload(event: Any) -> dict:
    """Dictionary for an event, tagged with its ``event_type``."""
    payload = to_dict(event)
    event_type = getattr(event, "event_type", None)
    if event_type is not None:
        payload["event_type"] = event_type
    return payload


def to_json(event: Any, pretty: bool = False) -> str:
    return json.dumps(
        event_payload(event), indent=2 if pretty else None, ensure_ascii=False, default=str
    )
