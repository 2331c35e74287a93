"""
Department Visibility Filter

Jobs and messages carry a department-set: either ["all"] (broadcast) or a
non-empty subset of the department enumeration. A student sees an entity
when the set contains "all" or the student's department, exact match.

WRITE side: encode_departments() validates and stores one JSON encoding.
READ side: normalize_departments() tolerates legacy rows, which may hold a
real list, a JSON string, or a JSON string of a JSON string. Anything that
cannot be decoded becomes the empty set, i.e. visible to nobody.
"""

import json
import logging
from typing import Any, Iterable, List, Set

from fastapi import HTTPException

from placement_portal.schemas.schemas import ALL_DEPARTMENTS, DEPARTMENT_NAMES

logger = logging.getLogger(__name__)


def _decode(raw: Any) -> Any:
    """Up to two rounds of JSON decoding. Bad input raises ValueError or RecursionError."""
    value = raw
    for _ in range(2):
        if not isinstance(value, (str, bytes)):
            break
        value = json.loads(value)
    return value


def normalize_departments(raw: Any) -> Set[str]:
    """
    Turn a stored department-set field into a set of labels.

    Never raises. Returns an empty set for anything malformed.
    """
    if raw is None:
        return set()

    try:
        value = _decode(raw)
    except (ValueError, TypeError, RecursionError) as e:
        logger.warning("Could not decode department set %r: %s", raw, e)
        return set()

    if not isinstance(value, (list, tuple, set)):
        logger.warning("Department set is not a list: %r", raw)
        return set()

    return {item for item in value if isinstance(item, str)}


def is_visible_to(raw_departments: Any, department: str) -> bool:
    """Whether an entity tagged with raw_departments is visible to department."""
    departments = normalize_departments(raw_departments)
    if ALL_DEPARTMENTS in departments:
        return True
    return department is not None and department in departments


def filter_visible(rows: Iterable[dict], department: str, field: str = "departments") -> List[dict]:
    """Keep rows whose department-set admits the given department."""
    return [row for row in rows if is_visible_to(row.get(field), department)]


def encode_departments(departments: Iterable[str]) -> str:
    """
    Validate a requested department-set and serialize it for storage.

    Any set containing "all" collapses to ["all"]. Unknown labels and empty
    sets are rejected with a 400.
    """
    requested = [d.strip() for d in departments if isinstance(d, str) and d.strip()]
    if not requested:
        raise HTTPException(status_code=400, detail="Select at least one department")

    if ALL_DEPARTMENTS in requested:
        return json.dumps([ALL_DEPARTMENTS])

    unknown = sorted(set(requested) - set(DEPARTMENT_NAMES))
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown department(s): {', '.join(unknown)}")

    # Keep the enumeration's order so stored values are stable
    return json.dumps([d for d in DEPARTMENT_NAMES if d in requested])


def parse_department_input(raw: Any) -> List[str]:
    """
    Read the departments field of a form submission.

    Multipart forms send either a JSON array string or repeated plain values.
    """
    if isinstance(raw, (list, tuple)):
        if len(raw) == 1 and isinstance(raw[0], str) and raw[0].lstrip().startswith("["):
            return parse_department_input(raw[0])
        return [str(item) for item in raw]
    if isinstance(raw, str):
        try:
            value = _decode(raw)
        except (ValueError, TypeError, RecursionError):
            return [raw]
        if isinstance(value, list):
            return [str(item) for item in value]
        return [str(value)]
    return []
