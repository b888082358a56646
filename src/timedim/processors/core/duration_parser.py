"""ISO 8601 Duration Parsing

Durations define the amount of intervening time in an interval and follow
P[n]Y[n]M[n]W[n]DT[n]H[n]M[n]S, e.g. "P3Y6M4DT12H30M5S" or "PT10M".
"""

import re
from datetime import datetime, timedelta
from typing import Optional

from .temporal_types import IsoDuration

_NUMBER = r"(\d+(?:[.,]\d+)?)"

DURATION_PATTERN = re.compile(
    rf"^P(?:{_NUMBER}Y)?(?:{_NUMBER}M)?(?:{_NUMBER}W)?(?:{_NUMBER}D)?"
    rf"(?:T(?:{_NUMBER}H)?(?:{_NUMBER}M)?(?:{_NUMBER}S)?)?$"
)


def parse_duration(value: str) -> Optional[IsoDuration]:
    """Parse an ISO 8601 duration.

    Args:
        value: Duration string such as "P1M" or "PT10M"

    Returns:
        The parsed duration, or None when the string is not a duration
    """
    if not isinstance(value, str):
        return None

    text = value.strip().upper()
    match = DURATION_PATTERN.match(text)
    if not match or text.endswith("T"):
        return None

    groups = match.groups()
    if not any(groups):
        return None

    years, months, weeks, days, hours, minutes, seconds = (
        float(group.replace(",", ".")) if group else 0 for group in groups
    )
    return IsoDuration(
        years=years,
        months=months,
        weeks=weeks,
        days=days,
        hours=hours,
        minutes=minutes,
        seconds=seconds,
    )


def is_valid_duration(value: str) -> bool:
    return parse_duration(value) is not None


def add_months(anchor: datetime, months: int) -> datetime:
    """Move ``anchor`` by whole months, keeping its day field.

    The day is not clamped to the length of the target month: a day that
    does not exist rolls over into the following month (Jan 31 + 1 month
    gives Mar 3, or Mar 2 in a leap year).
    """
    month_index = anchor.month - 1 + months
    year = anchor.year + month_index // 12
    month = month_index % 12 + 1
    first_of_month = anchor.replace(year=year, month=month, day=1)
    return first_of_month + timedelta(days=anchor.day - 1)
