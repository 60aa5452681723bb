"""Resolve loose date/time input into offset-aware timestamp strings."""

from datetime import datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as date_parser

from calendafy_crm.errors import InvalidTemporalInput

DateInput = Union[str, datetime]

# Fixed parse defaults, differing in every date part
_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTemporalInput(f"Unknown timezone: {name!r}") from e


def _parse(value: DateInput) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        raise InvalidTemporalInput(f"Invalid date/time: {value!r}")
    try:
        parsed = date_parser.parse(value.strip(), default=_DEFAULTS[0])
        # Any date part taken from the default differs between the two parses
        check = date_parser.parse(value.strip(), default=_DEFAULTS[1])
    except (ValueError, OverflowError) as e:
        raise InvalidTemporalInput(f"Invalid date/time: {value!r}") from e
    if parsed.date() != check.date():
        raise InvalidTemporalInput(f"Incomplete date/time (needs year, month and day): {value!r}")
    return parsed


def resolve_datetime(
    value: DateInput,
    timezone: Optional[str],
    default_timezone: str,
) -> datetime:
    """
    Interpret value in timezone (or default_timezone when unset).
    Naive input is taken as wall-clock time in that zone; input that already
    carries an offset is converted to it.
    """
    zone = _zone(timezone or default_timezone)
    parsed = _parse(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=zone)
    return parsed.astimezone(zone)


def resolve(value: DateInput, timezone: Optional[str], default_timezone: str) -> str:
    """Resolve to an ISO-8601 timestamp with explicit offset, e.g. 2024-01-10T09:00:00+00:00."""
    return resolve_datetime(value, timezone, default_timezone).isoformat(timespec="seconds")


def resolve_range(
    start: DateInput,
    end: DateInput,
    timezone: Optional[str],
    default_timezone: str,
    *,
    all_day: bool = False,
) -> tuple[str, str]:
    """
    Resolve a start/end pair. With all_day, the end collapses onto the start:
    the API marks all-day entries by a single instant, not a 24h span.
    """
    resolved_start = resolve(start, timezone, default_timezone)
    if all_day:
        return resolved_start, resolved_start
    return resolved_start, resolve(end, timezone, default_timezone)
