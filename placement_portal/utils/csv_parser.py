"""
Bulk invitation upload - CSV with `email` and `department` columns.

Header names are matched case-insensitively; blank rows are skipped.
"""

import csv
import io
from typing import List, Tuple
from fastapi import HTTPException

REQUIRED_COLUMNS = ("email", "department")


def decode_upload(content: bytes) -> str:
    """Decode CSV bytes, trying common encodings."""
    for encoding in ['utf-8-sig', 'latin-1']:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise HTTPException(status_code=400, detail="Could not decode CSV file")


def parse_invitation_csv(content: bytes) -> List[Tuple[str, str]]:
    """
    Parse an uploaded CSV into (email, department) pairs.

    Raises:
        HTTPException(400) when the file is empty or a column is missing
    """
    reader = csv.DictReader(io.StringIO(decode_upload(content)))
    if not reader.fieldnames:
        raise HTTPException(status_code=400, detail="CSV file is empty")

    columns = {name.strip().lower(): name for name in reader.fieldnames if name}
    missing = [c for c in REQUIRED_COLUMNS if c not in columns]
    if missing:
        raise HTTPException(
            status_code=400,
            detail=f"CSV is missing column(s): {', '.join(missing)}"
        )

    pairs = []
    for row in reader:
        email = (row.get(columns["email"]) or "").strip()
        department = (row.get(columns["department"]) or "").strip()
        if not email and not department:
            continue
        pairs.append((email, department))
    return pairs
