from datetime import datetime, timezone


def timezone_now() -> datetime:
    return datetime.now().astimezone()


def as_aware(moment: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment
