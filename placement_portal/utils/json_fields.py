"""
Helpers for columns stored as JSON text and for driver-dependent date values.
"""

import json
import logging
from datetime import date, datetime
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


def dump_list(items: Any) -> str:
    """Serialize a list (of strings or pydantic models) to JSON text."""
    return json.dumps([
        item.model_dump() if hasattr(item, "model_dump") else item
        for item in (items or [])
    ])


def load_list(value: Any) -> List[Any]:
    """Read a JSON-text list column. Non-list or bad JSON yields []."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    try:
        loaded = json.loads(value)
    except (ValueError, TypeError, RecursionError):
        logger.warning("Bad JSON list column value: %r", value)
        return []
    return loaded if isinstance(loaded, list) else []


def as_date(value: Any) -> Optional[date]:
    """Date from a DATE column; SQLite hands these back as ISO strings."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])
