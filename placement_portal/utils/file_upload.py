"""
File Upload Utility - job documents on the local filesystem.

One optional PDF per job, stored under settings.upload_dir.
- save_job_document(): validate and write an upload, return its path
- resolve_document(): map a requested file name to a stored file
- remove_document(): delete a stored file (best effort)
"""

import logging
import os
import re
import uuid
from typing import Optional
from fastapi import UploadFile, HTTPException

from placement_portal.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'.pdf'}

_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9._-]+')


def get_upload_dir() -> str:
    """Upload directory, created on first use."""
    upload_dir = os.path.abspath(settings.upload_dir)
    os.makedirs(upload_dir, exist_ok=True)
    return upload_dir


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def safe_filename(filename: str) -> str:
    """Strip directories and unsafe characters, prefix a unique token."""
    base = os.path.basename(filename.replace('\\', '/'))
    base = _UNSAFE_CHARS.sub('_', base).strip('._') or 'document.pdf'
    return f"{uuid.uuid4().hex[:12]}_{base}"


async def save_job_document(file: UploadFile) -> str:
    """
    Validate and store an uploaded job document.

    Returns:
        Absolute path of the stored file

    Raises:
        HTTPException on validation errors
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    ext = get_file_extension(file.filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type '{ext}'. Allowed: PDF"
        )

    content = await file.read()

    max_bytes = settings.max_upload_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {settings.max_upload_mb}MB"
        )
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    path = os.path.join(get_upload_dir(), safe_filename(file.filename))
    with open(path, 'wb') as f:
        f.write(content)

    logger.info("Stored job document %s (%d bytes)", path, len(content))
    return path


def resolve_document(filename: str) -> Optional[str]:
    """
    Path of a stored document by name, or None.

    Only the basename is used, so callers may pass a full stored path.
    """
    name = os.path.basename(filename.replace('\\', '/'))
    if not name or name in ('.', '..'):
        return None
    path = os.path.join(get_upload_dir(), name)
    return path if os.path.isfile(path) else None


def remove_document(path: str) -> bool:
    """Delete a stored document. Logs and returns False on failure."""
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        logger.warning("Job document already missing: %s", path)
        return False
    except OSError as e:
        logger.error("Failed to remove job document %s: %s", path, e)
        return False
