from datetime import UTC, datetime


def utcnow() -> datetime:
    """Naive UTC now, matching the DateTime columns"""
    return datetime.now(UTC).replace(tzinfo=None)


def utc_from_timestamp(timestamp: int) -> datetime:
    """Naive UTC datetime from epoch seconds"""
    return datetime.fromtimestamp(timestamp, UTC).replace(tzinfo=None)
