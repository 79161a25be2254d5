from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime; naive values are rejected on write."""
    return datetime.now(timezone.utc)
