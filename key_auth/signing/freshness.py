"""
Timestamp Freshness
===================
Bounds the replay window without server-side nonce tracking.
"""

import re
import time
from typing import Optional

# Configuration
DEFAULT_TIMESTAMP_TOLERANCE = 300  # 5 minutes

_TIMESTAMP_RE = re.compile(r"^\s*[+-]?[0-9]{1,20}\s*$")


def parse_timestamp(raw: Optional[str]) -> Optional[int]:
    """
    Parse a claimed Unix timestamp.

    Only an optionally signed run of ASCII digits is accepted; anything
    else parses to None, which is never fresh.
    """
    if raw is None:
        return None
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if not isinstance(raw, str) or not _TIMESTAMP_RE.match(raw):
        return None
    return int(raw)


def is_fresh(claimed: Optional[int], now: int, tolerance_seconds: int = DEFAULT_TIMESTAMP_TOLERANCE) -> bool:
    """
    Check that a timestamp lies within the tolerance window around now.

    The window is symmetric to absorb clock skew in both directions.
    """
    if claimed is None:
        return False
    return abs(now - claimed) <= tolerance_seconds


def check_timestamp(
    raw: Optional[str],
    tolerance_seconds: int = DEFAULT_TIMESTAMP_TOLERANCE,
    now: Optional[int] = None,
) -> bool:
    """
    Parse and check a timestamp as received in the request.

    Args:
        raw: Timestamp header value
        tolerance_seconds: Maximum allowed skew in seconds
        now: Current Unix time (defaults to the wall clock)

    Returns:
        True if the timestamp is acceptable
    """
    current_time = int(time.time()) if now is None else int(now)
    return is_fresh(parse_timestamp(raw), current_time, tolerance_seconds)
