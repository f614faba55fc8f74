"""Date normalization for model-extracted dates.

Models return dates in many shapes ("2024-03-15.", "2024-03-15 UTC",
"2024-10-16-2024-11-07", "around 2024-03-15"). Everything written to a date
column goes through :func:`normalize_date` first, which either returns a
strict ``YYYY-MM-DD`` string or ``None``.
"""

import re
from typing import Any, Optional

from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

MIN_YEAR = 1900
MAX_YEAR = 2100

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_EMBEDDED_DATE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_DATE_RANGE = re.compile(r"^(\d{4}-\d{2}-\d{2})-\d{4}-\d{2}-\d{2}$")
_TIMEZONE_SUFFIX = re.compile(r"\s+[A-Za-z_/]+$")


def _in_range(year: str, month: str, day: str) -> bool:
    y, m, d = int(year), int(month), int(day)
    return MIN_YEAR <= y <= MAX_YEAR and 1 <= m <= 12 and 1 <= d <= 31


def _strict(candidate: str) -> Optional[str]:
    match = _ISO_DATE.match(candidate)
    if match and _in_range(*match.groups()):
        return candidate
    return None


def normalize_date(value: Any) -> Optional[str]:
    """Normalize a loosely formatted date to ``YYYY-MM-DD``.

    Tried in order, first match wins:

    1. the cleaned string is already a valid ``YYYY-MM-DD``;
    2. a valid ``YYYY-MM-DD`` appears anywhere in the string;
    3. a ``YYYY-MM-DD-YYYY-MM-DD`` range, first date taken;
    4. a trailing timezone name (" UTC") hides a valid date.

    Never raises. Ranges are checked per component only (day 31 is accepted
    for every month); calendar validity is the caller's concern.

    Args:
        value: Anything the model put in a date field

    Returns:
        The normalized date, or None when the value cannot be trusted
    """
    if not value or not isinstance(value, str):
        if value:
            LOGGER.warning(f"Invalid date value, skipping: {value!r}")
        return None

    cleaned = value.strip()
    if cleaned.endswith("."):
        cleaned = cleaned[:-1].rstrip()

    exact = _strict(cleaned)
    if exact:
        return exact

    embedded = _EMBEDDED_DATE.search(cleaned)
    if embedded and _in_range(*embedded.groups()):
        return "-".join(embedded.groups())

    date_range = _DATE_RANGE.match(cleaned)
    if date_range and _strict(date_range.group(1)):
        return date_range.group(1)

    without_tz = _TIMEZONE_SUFFIX.sub("", cleaned)
    if without_tz != cleaned:
        stripped = _strict(without_tz)
        if stripped:
            return stripped

    LOGGER.warning(f'Invalid date format, skipping: "{value}"')
    return None
