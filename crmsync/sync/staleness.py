"""Staleness checks over the sync metadata."""

from datetime import UTC, datetime, timedelta


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


def is_stale(last_sync: str, interval_minutes: int, now: datetime | None = None) -> bool:
    """Whether the cache may no longer reflect the server.

    True when the cache was never synced (or the timestamp is unreadable), or
    when more than ``interval_minutes`` have passed since ``last_sync``.
    """
    synced_at = parse_timestamp(last_sync)
    if synced_at is None:
        return True
    now = now or datetime.now(UTC)
    return now - synced_at > timedelta(minutes=interval_minutes)


def format_last_sync(last_sync: str, now: datetime | None = None) -> str:
    """Short relative label such as "Just now", "12m ago" or "3d ago"."""
    synced_at = parse_timestamp(last_sync)
    if synced_at is None:
        return "Never"

    now = now or datetime.now(UTC)
    minutes = int((now - synced_at).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if minutes < 1440:
        return f"{minutes // 60}h ago"
    return f"{minutes // 1440}d ago"
