"""
Timestamp normalization.

Trip and expense dates reach the backend in three shapes: native
``date``/``datetime`` objects, ISO-8601 strings, and the document store's
``{"seconds": ..., "nanoseconds": ...}`` epoch pair. Everything downstream
compares plain calendar days, so every shape is folded into a ``date`` here,
once, at the ingestion boundary.

Example::

    >>> normalize_timestamp('2025-05-21')
    datetime.date(2025, 5, 21)
    >>> normalize_timestamp({'seconds': 1747785600, 'nanoseconds': 0})
    datetime.date(2025, 5, 21)
    >>> normalize_timestamp('not a date') is None
    True
"""

from datetime import date, datetime, timedelta, timezone as dt_timezone
from collections.abc import Mapping
from typing import Any, Optional

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime


def _to_local_date(value: datetime) -> date:
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return value.date()


def _from_epoch(seconds: Any) -> Optional[date]:
    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        return None
    try:
        moment = datetime.fromtimestamp(seconds, tz=dt_timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return _to_local_date(moment)


def _from_string(value: str) -> Optional[date]:
    value = value.strip()
    if not value:
        return None
    try:
        parsed = parse_datetime(value)
        if parsed is not None:
            return _to_local_date(parsed)
        return parse_date(value)
    except ValueError:
        # Well formed but impossible, e.g. 2025-02-30
        return None


def normalize_timestamp(value: Any) -> Optional[date]:
    """
    Fold any supported timestamp shape into a day-granular ``date``.

    Aware datetimes (and epoch pairs, which are UTC) are converted to the
    active Django time zone before truncation. Returns ``None`` for anything
    that cannot be read as a date; never raises.
    """
    if value is None or isinstance(value, (bool, timedelta)):
        return None
    if isinstance(value, datetime):
        return _to_local_date(value)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return _from_string(value)
    if isinstance(value, Mapping):
        return _from_epoch(value.get('seconds'))
    if hasattr(value, 'seconds'):
        return _from_epoch(getattr(value, 'seconds'))
    return None


def today() -> date:
    """Current calendar day in the active time zone."""
    return timezone.localdate()


def normalize_moment(value: Any) -> Optional[datetime]:
    """
    Like :func:`normalize_timestamp` but keeps the time of day.

    Used for ``created_at`` style fields that only drive display ordering.
    Bare dates become midnight; naive values are taken as local time.
    """
    if value is None or isinstance(value, (bool, timedelta)):
        return None
    moment = None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        try:
            moment = parse_datetime(value.strip())
            if moment is None:
                day = parse_date(value.strip())
                moment = datetime(day.year, day.month, day.day) if day else None
        except ValueError:
            return None
    else:
        seconds = value.get('seconds') if isinstance(value, Mapping) else getattr(value, 'seconds', None)
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            try:
                moment = datetime.fromtimestamp(seconds, tz=dt_timezone.utc)
            except (OverflowError, OSError, ValueError):
                return None
    if moment is None:
        return None
    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment)
    return moment
