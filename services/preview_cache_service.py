"""
Temporary storage for bulk upload previews.

The save step commits rows from here rather than trusting row data echoed
back by the browser. In-memory with TTL expiry: single process only.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
import structlog

from models.bulk_upload import PreviewRow

logger = structlog.get_logger(__name__)

DEFAULT_TTL_MINUTES = 30


@dataclass
class CachedPreview:
    rows: list[PreviewRow]
    expires_at: datetime


_cache: dict[str, CachedPreview] = {}


def store_preview(rows: list[PreviewRow], ttl_minutes: int = DEFAULT_TTL_MINUTES) -> str:
    """Store validated preview rows, return preview_id."""
    _cleanup_expired()
    preview_id = str(uuid.uuid4())
    _cache[preview_id] = CachedPreview(
        rows=[row.model_copy(deep=True) for row in rows],
        expires_at=datetime.now() + timedelta(minutes=ttl_minutes),
    )
    logger.debug("preview_cached", preview_id=preview_id, rows=len(rows), ttl_minutes=ttl_minutes)
    return preview_id


def retrieve_preview(preview_id: str) -> Optional[list[PreviewRow]]:
    """Preview rows by id. None if expired or not found."""
    entry = _cache.get(preview_id)
    if entry is None:
        return None
    if datetime.now() > entry.expires_at:
        del _cache[preview_id]
        return None
    return [row.model_copy(deep=True) for row in entry.rows]


def delete_preview(preview_id: str) -> None:
    """Remove preview after save or cancel."""
    _cache.pop(preview_id, None)


def clear() -> None:
    """Drop every cached preview."""
    _cache.clear()


def _cleanup_expired() -> None:
    now = datetime.now()
    expired = [k for k, entry in _cache.items() if now > entry.expires_at]
    for k in expired:
        del _cache[k]
