"""Range Parser for OGC Time Dimension Values

Classifies a WMS time dimension value and expands it into an ordered range
of date strings (https://www.mapserver.org/ogc/wms_time.html):

    discrete  1696,1701,1734,1741
    absolute  2002-09-01T00:00:00Z/2002-09-30T00:00:00Z/P1D
    relative  2022-04-27T14:50:00Z/PT10M or 2022-04-27T14:50:00Z/2022-04-27T17:50:00Z
"""

from datetime import datetime, timedelta
from typing import List, Optional

from ...core.error_handler import (
    InvalidDateError,
    InvalidTimeDimensionDurationError,
    InvalidTimeDimensionError,
)
from ...core.logging_manager import LoggingManager
from .date_normalizer import UTC, DateNormalizer
from .duration_parser import add_months, parse_duration
from .format_detector import FormatDetector
from .temporal_types import (
    MILLISECONDS_PER_LEAP_YEAR,
    MILLISECONDS_PER_YEAR,
    IsoDuration,
    RangeItems,
    RangeKind,
)


class RangeParser:
    """Turns one OGC dimension values string into a RangeItems."""

    def __init__(
        self,
        normalizer: Optional[DateNormalizer] = None,
        detector: Optional[FormatDetector] = None
    ):
        self.logger = LoggingManager.get_logger(__name__)
        self.normalizer = normalizer or DateNormalizer()
        self.detector = detector or FormatDetector(self.normalizer)

    def create_range(self, values: str) -> RangeItems:
        """Classify and expand OGC time dimension values.

        Args:
            values: The dimension values

        Returns:
            The classified, non-empty range

        Raises:
            InvalidTimeDimensionError: If the value has none of the three shapes
            InvalidDateError: If a date of an interval is invalid
            InvalidTimeDimensionDurationError: If a duration is invalid
        """
        if not isinstance(values, str) or not values.strip():
            raise InvalidTimeDimensionError(values, "empty dimension")

        text = values.strip()
        if len(text.split(",")) > 1:
            tokens = tuple(token.strip() for token in text.split(",") if token.strip())
            if not tokens:
                raise InvalidTimeDimensionError(values, "empty discrete list")
            self.logger.debug(f"Discrete dimension with {len(tokens)} values")
            return RangeItems(kind=RangeKind.DISCRETE, range=tokens)

        fields = [field.strip() for field in text.split("/")]
        if len(fields) == 3:
            items = self._create_absolute_interval(*fields)
            kind = RangeKind.ABSOLUTE
        elif len(fields) == 2:
            items = self._create_relative_interval(*fields)
            kind = RangeKind.RELATIVE
        else:
            raise InvalidTimeDimensionError(values, f"{len(fields)} '/' delimited fields")

        if not items:
            raise InvalidTimeDimensionError(values, "empty range")

        self.logger.debug(f"{kind.value.capitalize()} dimension '{text}' expanded to {len(items)} values")
        return RangeItems(kind=kind, range=tuple(items))

    def _create_absolute_interval(self, date1: str, date2: str, duration_text: str) -> List[str]:
        """Expand date1/date2/duration into every step between the two dates.

        Stepping stops at the first step that is not before date2; that step
        is kept even when it passes date2. The last value always equals date2
        rendered with the precision of date1.
        """
        for date in (date1, date2):
            if not self.normalizer.is_valid_date(date):
                raise InvalidDateError(date)

        duration = parse_duration(duration_text)
        if duration is None or (duration.milliseconds <= 0 and not duration.is_month_only):
            raise InvalidTimeDimensionDurationError(duration_text)

        ends_with_z = date1.upper().endswith("Z")
        date_format = self.detector.extract_date_format(date1)

        start = self.normalizer.parse(date1).astimezone(UTC)
        minimum = self._render(start, date_format, ends_with_z)
        maximum = self._render(self.normalizer.parse(date2), date_format, ends_with_z)
        max_moment = self.normalizer.parse(maximum)

        items = [minimum]
        previous = start
        index = 0
        while True:
            index += 1
            current = self._next_step(previous, start, index, duration)
            rendered = self._render(current, date_format, ends_with_z)
            # Steps finer than the precision of min render to the same value
            if rendered != items[-1]:
                items.append(rendered)
            if self.normalizer.parse(rendered) >= max_moment:
                break
            previous = current

        if items[-1] != maximum:
            items.append(maximum)
        return items

    def _create_relative_interval(self, date: str, other: str) -> List[str]:
        """Expand date/duration or date/date into its two end points."""
        if not self.normalizer.is_valid_date(date):
            raise InvalidDateError(date)

        start = self.normalizer.parse(date).astimezone(UTC)
        duration = parse_duration(other)
        if duration is not None:
            end = self._next_step(start, start, 1, duration)
        elif self.normalizer.is_valid_date(other):
            end = self.normalizer.parse(other)
        else:
            raise InvalidTimeDimensionDurationError(other)

        ends_with_z = date.upper().endswith("Z")
        date_format = self.detector.extract_date_format(date)
        return [
            self._render(start, date_format, ends_with_z),
            self._render(end, date_format, ends_with_z),
        ]

    @staticmethod
    def _next_step(previous: datetime, start: datetime, index: int, duration: IsoDuration) -> datetime:
        """Compute step ``index`` of an interval.

        Whole-month durations move the month field of the start date so that
        28 to 31 day months do not drift. Other durations add milliseconds to
        the previous step; an exact 365 day year that lands on another
        month/day (a leap day in between) is redone with 366 days.
        """
        if duration.is_month_only:
            return add_months(start, int(duration.months) * index)

        milliseconds = duration.milliseconds
        current = previous + timedelta(milliseconds=milliseconds)
        if milliseconds == MILLISECONDS_PER_YEAR and (current.month, current.day) != (previous.month, previous.day):
            current = previous + timedelta(milliseconds=MILLISECONDS_PER_LEAP_YEAR)
        return current

    def _render(self, moment: datetime, date_format: str, ends_with_z: bool) -> str:
        rendered = self.normalizer.render(moment.astimezone(UTC), date_format)
        if ends_with_z and rendered.endswith("+00:00"):
            rendered = f"{rendered[:-6]}Z"
        return rendered
