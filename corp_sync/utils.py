"""
Utility functions for Corp Name Sync
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S'


def setup_logging(level=logging.INFO):
    """Setup logging configuration"""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    return logging.getLogger(__name__)


def local_timestamp(offset_hours: int = 9, now: Optional[datetime] = None) -> str:
    """Format *now* (default: current time) in a fixed-offset local zone.

    The queue sheet stores times without an offset suffix, e.g.
    ``2026-10-19T14:03:22`` for JST.
    """
    tz = timezone(timedelta(hours=offset_hours))
    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz).strftime(TIMESTAMP_FORMAT)


def truncate(text: str, limit: int) -> str:
    """Collapse whitespace and cut *text* to at most *limit* characters."""
    text = ' '.join(str(text or '').split())
    if len(text) <= limit:
        return text
    return text[:limit]
