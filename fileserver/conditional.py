"""Last-Modified / If-Modified-Since handling."""

from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Optional


def format_http_date(moment: datetime) -> str:
    """Render a timestamp as an RFC 7231 IMF-fixdate."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def parse_http_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an HTTP date header.

    Returns:
        Timezone aware datetime, or None if the value is absent or unparsable
    """
    if not value:
        return None
    try:
        moment = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if moment is None:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def is_fresh(if_modified_since: Optional[datetime], modified_at: datetime) -> bool:
    """
    Decide whether the client's cached copy is still current.

    Args:
        if_modified_since: Parsed If-Modified-Since value, None if absent or invalid
        modified_at: File modification time

    Returns:
        True only when the header names a moment strictly after modified_at
    """
    if if_modified_since is None:
        return False
    return if_modified_since > modified_at
