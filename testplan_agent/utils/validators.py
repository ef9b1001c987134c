"""Input validators"""

import re
from typing import Any
from urllib.parse import urlparse

TICKET_ID_PATTERN = re.compile(r"^[A-Z][A-Z0-9]+-\d+$")


def validate_ticket_id(ticket_id: Any) -> bool:
    """Check a JIRA issue key such as ABC-123"""
    if not ticket_id or not isinstance(ticket_id, str):
        return False
    return bool(TICKET_ID_PATTERN.match(ticket_id.strip()))


def validate_url(url: Any) -> bool:
    """Absolute http(s) URL with a host"""
    if not url or not isinstance(url, str):
        return False
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
