# utils.py - Shared helpers for ids, emails and timestamps

import re
import secrets
import string
from datetime import datetime, timezone
from typing import Optional

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

# =============================================================================
# ID GENERATION AND VALIDATION
# =============================================================================

def generate_id() -> str:
    """Generate cryptographically secure unique ID"""
    return secrets.token_hex(16)

def validate_object_id(value) -> bool:
    """Check that a value looks like an id produced by generate_id()"""
    if not isinstance(value, str) or len(value) != 32:
        return False

    # Should be hex string of specific length
    return all(char in string.hexdigits for char in value)

def validate_email(email: str) -> bool:
    """Validate email format"""
    return bool(EMAIL_PATTERN.match(email))

# =============================================================================
# TIMESTAMPS
# =============================================================================

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 date or date-time, assuming UTC when no offset is given.

    The result is truncated to milliseconds, the precision timestamps are stored at.
    """
    try:
        parsed = datetime.fromisoformat(value.strip())
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        # Offsets near year 1 or 9999 overflow when shifted to UTC
        parsed = parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None

    return parsed.replace(microsecond=parsed.microsecond // 1000 * 1000)

def format_timestamp(value: datetime) -> str:
    """Format as fixed-width UTC ISO-8601 with milliseconds, e.g. 2024-02-01T09:00:00.000Z

    The fixed width keeps stored timestamps sortable as plain strings.
    """
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
