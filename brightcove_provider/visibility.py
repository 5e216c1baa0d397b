"""
Schedule-window visibility rules for Brightcove video records.

A record without a ``schedule`` is always visible. With a schedule, the
record is hidden until ``starts_at`` has passed, and when both bounds parse
it is visible only for ``starts_at < now <= ends_at``. A bound that cannot be
parsed is treated as absent.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Mapping, Optional

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an upstream timestamp into an aware UTC datetime.

    Accepts ISO 8601 strings (``Z`` suffix included) and datetimes. Naive
    values are taken to be UTC. Anything else yields ``None``.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_visible(record: Mapping[str, Any], now: datetime) -> bool:
    """Decide whether a record is visible at ``now``.

    Raises:
        ValueError: If ``now`` is not a datetime
    """
    if not isinstance(now, datetime):
        raise ValueError(f"now must be a datetime, got {type(now).__name__}")
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    schedule = record.get("schedule")
    if not schedule:
        return True

    starts_at = parse_timestamp(schedule.get("starts_at"))
    ends_at = parse_timestamp(schedule.get("ends_at"))

    if starts_at is not None and now <= starts_at:
        return False

    if starts_at is not None and ends_at is not None:
        return starts_at < now <= ends_at

    return True


def filter_visible(records: Iterable[Mapping[str, Any]], now: datetime) -> List[Mapping[str, Any]]:
    """Keep visible records, preserving order."""
    return [record for record in records if is_visible(record, now)]


def release_time(record: Mapping[str, Any]) -> Optional[datetime]:
    """Effective release time: schedule start when parsable, else published_at."""
    schedule = record.get("schedule") or {}
    starts_at = parse_timestamp(schedule.get("starts_at"))
    if starts_at is not None:
        return starts_at
    return parse_timestamp(record.get("published_at"))


def _sort_key(when: Optional[datetime]) -> float:
    # undated records sort after every dated one in a descending sort
    return when.timestamp() if when is not None else float("-inf")


def sort_by_release_date(records: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """Newest first by effective release time; ties keep input order."""
    return sorted(records, key=lambda record: _sort_key(release_time(record)), reverse=True)


def sort_by_published_at(records: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """Newest first by ``published_at``; ties keep input order."""
    return sorted(
        records,
        key=lambda record: _sort_key(parse_timestamp(record.get("published_at"))),
        reverse=True,
    )
