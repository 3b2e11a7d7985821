"""
Helpers for the timestamp shapes emitted by WebLab.

WebLab returns either a standard date-time string or a compact
``YYYYMMDDTHHMMSS[+ZZZZ]`` form. Unparseable values resolve to
``UNKNOWN_TIMESTAMP`` instead of raising.
"""

import logging
import re
from datetime import datetime, timezone

from dateutil import parser as date_parser

log = logging.getLogger(__name__)

UNKNOWN_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_COMPACT_REGEX = re.compile(
    r"(?P<year>\d{4})(?P<month>\d{2})(?P<day>\d{2})"
    r"T(?P<hour>\d{2})(?P<minute>\d{2})(?P<second>\d{2})"
    r"(?P<offset>[+-]\d{4})?"
)


def _try_parse(text: str) -> datetime | None:
    try:
        result = date_parser.parse(text)
    except (ValueError, OverflowError):
        return None
    # Values without an offset are UTC.
    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result


def parse_timestamp(text: str | None) -> datetime:
    """
    Parses a WebLab timestamp.

    Args:
        text: The raw timestamp string.

    Returns:
        A timezone-aware datetime (UTC when the text has no offset), or
        ``UNKNOWN_TIMESTAMP`` if the value is empty or
        cannot be parsed in either supported shape.
    """
    if not text or not text.strip():
        return UNKNOWN_TIMESTAMP

    if (result := _try_parse(text)) is not None:
        return result

    match = _COMPACT_REGEX.search(text)
    if match:
        offset = match.group("offset") or "+0000"
        fixed = (
            f"{match['year']}-{match['month']}-{match['day']}"
            f"T{match['hour']}:{match['minute']}:{match['second']}"
            f"{offset[:3]}:{offset[3:]}"
        )
        if (result := _try_parse(fixed)) is not None:
            return result

    log.debug(f"Could not parse timestamp '{text}'")
    return UNKNOWN_TIMESTAMP


def is_unknown(value: datetime) -> bool:
    """True if ``value`` is the sentinel returned for unparseable timestamps."""
    return value == UNKNOWN_TIMESTAMP


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to be UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_epoch_seconds(value: datetime) -> int:
    """Number of whole seconds between the Unix epoch and ``value``."""
    return int((_as_utc(value) - _EPOCH).total_seconds())


def to_epoch_milliseconds(value: datetime) -> int:
    """Number of whole milliseconds between the Unix epoch and ``value``."""
    delta = _as_utc(value) - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000
