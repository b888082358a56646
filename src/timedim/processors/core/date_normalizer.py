"""Date Normalizer for ISO 8601 Dates

Canonical conversions between UTC, local, epoch-millisecond and string
representations of a single date, and the sole source of truth for what a
valid date is.

Accepted date strings (https://www.mapserver.org/ogc/wms_time.html):

    YYYY-MM-DDTHH:MM:SSZ | 2004-10-12T13:55:20Z
    YYYY-MM-DDTHH:MM:SS  | 2004-10-12T13:55:20
    YYYY-MM-DD HH:MM:SS  | 2004-10-12 13:55:20
    YYYY-MM-DDTHH:MM     | 2004-10-12T13:55
    YYYY-MM-DDTHH        | 2004-10-12T13
    YYYY-MM-DD           | 2004-10-12
    YYYY-MM              | 2004-10
    YYYY                 | 2004

Date fragments may also be separated by '/', may be one digit long, and a
time may carry fractional seconds and a fixed offset (Z, +hh:mm, -hhmm).
Strings without an offset are read as UTC.
"""

import re
from datetime import datetime, timedelta
from typing import Optional, Union

from dateutil import parser
from dateutil.tz import tzlocal, tzutc

from ...core.error_handler import InvalidDateError
from ...core.logging_manager import LoggingManager
from .temporal_types import (
    DEFAULT_DATE_PRECISION,
    DEFAULT_TIME_PRECISION,
    DatePrecision,
    TimePrecision,
)

DateInput = Union[str, datetime]

UTC = tzutc()
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
ISO_UTC_PATTERN = "YYYY-MM-DDTHH:mm:ssZ"
DEFAULT_MILLISECONDS_PATTERN = "YYYY-MM-DDTHH:mm:ss"

DATE_PATTERN = re.compile(
    r"^(?P<year>\d{4})"
    r"(?:[-/](?P<month>\d{1,2})(?:[-/](?P<day>\d{1,2}))?)?"
    r"(?:[T ](?P<hour>\d{1,2})"
    r"(?::(?P<minute>\d{1,2})(?::(?P<second>\d{1,2})(?:[.,](?P<fraction>\d+))?)?)?)?"
    r"(?P<tz>Z|[+-]\d{2}(?::?\d{2})?)?$"
)

TOKEN_PATTERN = re.compile(r"\[([^\]]*)\]|YYYY|SSS|MM|DD|HH|mm|ss|Z")

TRAILING_OFFSET_PATTERN = re.compile(r"(Z|[+-]\d{2}:\d{2})$")


def format_offset(moment: datetime) -> str:
    """Format the UTC offset of an aware datetime as +hh:mm."""
    offset = moment.utcoffset() or timedelta(0)
    total_minutes = int(offset.total_seconds() // 60)
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


class DateNormalizer:
    """Converts and validates single dates."""

    def __init__(self):
        self.logger = LoggingManager.get_logger(__name__)

    def parse(self, value: DateInput) -> datetime:
        """Parse a date into an aware datetime.

        Args:
            value: Date string or datetime (naive datetimes are UTC)

        Returns:
            Timezone-aware datetime

        Raises:
            InvalidDateError: If the value is not a valid date
        """
        if isinstance(value, datetime):
            return value if value.tzinfo is not None else value.replace(tzinfo=UTC)

        if not isinstance(value, str):
            raise InvalidDateError(value)

        match = DATE_PATTERN.match(value.strip().upper())
        if not match:
            raise InvalidDateError(value)

        try:
            moment = parser.isoparse(self._canonical_iso(match))
        except (ValueError, OverflowError) as e:
            raise InvalidDateError(value) from e

        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=UTC)
        return moment

    @staticmethod
    def _canonical_iso(match: re.Match) -> str:
        fields = match.groupdict()
        month = int(fields["month"] or 1)
        day = int(fields["day"] or 1)
        hour = int(fields["hour"] or 0)
        minute = int(fields["minute"] or 0)
        second = int(fields["second"] or 0)
        canonical = f"{fields['year']}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:{second:02d}"

        if fields["fraction"]:
            canonical += f".{fields['fraction'][:6]}"

        tz = fields["tz"]
        if tz:
            if tz != "Z":
                digits = tz[1:].replace(":", "")
                tz = f"{tz[0]}{digits[:2]}:{digits[2:] or '00'}"
            canonical += tz
        return canonical

    def is_valid_date(self, value: DateInput) -> bool:
        """Check whether a value parses as a Gregorian date."""
        try:
            self.parse(value)
        except InvalidDateError:
            return False
        return True

    def to_utc(self, value: DateInput) -> str:
        """Reformat a date as an ISO 8601 string expressed in UTC.

        Raises:
            InvalidDateError: If the value is not a valid date
        """
        return self.render(self.parse(value).astimezone(UTC), ISO_UTC_PATTERN)

    def try_to_utc(self, value: DateInput) -> str:
        """Tolerant twin of to_utc returning an empty string for invalid input."""
        try:
            return self.to_utc(value)
        except InvalidDateError:
            self.logger.debug(f"No UTC value for {value!r}")
            return ""

    def to_local(self, value: DateInput) -> str:
        """Reformat a date as ISO 8601 in the local offset of the process."""
        return self.render(self.parse(value).astimezone(tzlocal()), ISO_UTC_PATTERN)

    def to_milliseconds(self, value: DateInput) -> int:
        """Convert a date to epoch milliseconds."""
        return (self.parse(value) - EPOCH) // timedelta(milliseconds=1)

    def from_milliseconds(self, milliseconds: int, pattern: str = DEFAULT_MILLISECONDS_PATTERN) -> str:
        """Format epoch milliseconds with a pattern, in UTC.

        Raises:
            InvalidDateError: If the value is outside the supported calendar
        """
        try:
            moment = EPOCH + timedelta(milliseconds=int(milliseconds))
        except (OverflowError, TypeError, ValueError) as e:
            raise InvalidDateError(milliseconds) from e
        return self.render(moment, pattern)

    def format_with_pattern(
        self,
        value: DateInput,
        date_precision: Optional[Union[DatePrecision, str]] = None,
        time_precision: Optional[Union[TimePrecision, str]] = None
    ) -> str:
        """Render a date with precision patterns, e.g. day + minute -> YYYY-MM-DD HH:mm.

        Args:
            value: Date to render
            date_precision: Date part precision, day when both are omitted
            time_precision: Time part precision, omitted by default

        Returns:
            UTC rendering without 'T' separator nor offset
        """
        if date_precision is None and time_precision is None:
            date_precision = DatePrecision.DAY

        pattern = ""
        if date_precision is not None:
            pattern += DEFAULT_DATE_PRECISION[DatePrecision(date_precision)]
        if time_precision is not None:
            pattern += DEFAULT_TIME_PRECISION[TimePrecision(time_precision)]

        rendered = self.render(self.parse(value).astimezone(UTC), pattern)
        rendered = TRAILING_OFFSET_PATTERN.sub("", rendered)
        return rendered.replace("T", " ").strip()

    def render(self, value: DateInput, pattern: str) -> str:
        """Render a date with YYYY, MM, DD, HH, mm, ss, SSS and Z tokens.

        Text between square brackets is copied literally. The date is rendered
        in its own offset; callers convert beforehand.
        """
        moment = self.parse(value)

        def replace(token: re.Match) -> str:
            if token.group(1) is not None:
                return token.group(1)
            return {
                "YYYY": f"{moment.year:04d}",
                "MM": f"{moment.month:02d}",
                "DD": f"{moment.day:02d}",
                "HH": f"{moment.hour:02d}",
                "mm": f"{moment.minute:02d}",
                "ss": f"{moment.second:02d}",
                "SSS": f"{moment.microsecond // 1000:03d}",
                "Z": format_offset(moment),
            }[token.group(0)]

        return TOKEN_PATTERN.sub(replace, pattern)
