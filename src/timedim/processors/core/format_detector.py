"""Format Detector for Heterogeneous Service Dates

Deduces the format of a sample date, turns a format into a fragments order
and uses that order to move dates between a service's own layout and the
internal ISO UTC representation.

A fragments order holds, for the input side, the position of the year,
month, day and time fields in the service string and, for the output side,
which field is rendered in each slot, plus the separators and the fixed time
zone declared by the format:

    "DD/MM/YYYY HH:MM:SS-05:00"
        input positions  (2, 1, 0, 3)
        output positions (DAY, MONTH, YEAR, TIME)
        separators       '/', ' ', '-', '05:00'
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from dateutil.tz import tzoffset

from ...core.error_handler import (
    DateNormalizationFailedError,
    InvalidDateError,
    InvalidDateFormatError,
)
from ...core.logging_manager import LoggingManager
from .date_normalizer import UTC, DateNormalizer
from .temporal_types import (
    DAY,
    DEFAULT_DATE_PRECISION,
    DEFAULT_FRAGMENTS_ORDER,
    DEFAULT_TIME_PRECISION,
    MONTH,
    TIME,
    YEAR,
    DateFragmentsOrder,
    DatePrecision,
    TimePrecision,
)

DATE_SECTION_PATTERN = re.compile(r"^(\d+)(?:([-/])(\d+)(?:([-/])(\d+))?)?$")
TIME_SECTION_PATTERN = re.compile(
    r"^(\d{1,2})(?::(\d{1,2})(?::(\d{1,2})(?:[.,]\d+)?)?)?(Z|[+-]\d{2}(?::?\d{2})?)?$"
)
INPUT_TIME_PATTERN = re.compile(r"^([\d:.,]*)([+-]\d{2}(?::?\d{2})?)?$")
OFFSET_PATTERN = re.compile(r"^(\d{2}):?(\d{2})?$")

FIELD_LETTERS = "YMD"
TIME_FORMAT_LETTERS = set("HMS:.")
ISO_OUTPUT_PATTERN = "YYYY-MM-DDTHH:mm:ss"


class _DeduceState(Enum):
    DATE = "date"
    TIME = "time"
    DONE = "done"


@dataclass
class _DeducedFormat:
    """Working record of the deduce_format state machine."""
    date_fragments: List[str] = field(default_factory=list)
    date_separator: str = "-"
    year_first: bool = True
    time_separator: str = "T"
    time_fragments: List[str] = field(default_factory=list)
    zone: str = "Z"

    def pattern(self) -> str:
        date_part = self.date_separator.join(self.date_fragments)
        time_part = ":".join(self.time_fragments)
        return f"{date_part}{self.time_separator}{time_part}{self.zone}"


def _split_date_time(text: str) -> Tuple[str, Optional[str], str]:
    """Split at the first 'T' or space into (date, time or None, separator)."""
    for index, char in enumerate(text):
        if char in "T ":
            return text[:index], text[index + 1:], char
    return text, None, "T"


def _normalize_offset(offset: str, source: str) -> str:
    match = OFFSET_PATTERN.match(offset)
    if not match:
        raise InvalidDateFormatError(source, f"bad time zone offset '{offset}'")
    return f"{match.group(1)}:{match.group(2) or '00'}"


class FormatDetector:
    """Deduces date formats and applies fragments orders."""

    def __init__(self, normalizer: Optional[DateNormalizer] = None):
        self.logger = LoggingManager.get_logger(__name__)
        self.normalizer = normalizer or DateNormalizer()

    # ------------------------------------------------------------------
    # Format deduction
    # ------------------------------------------------------------------

    def deduce_format(self, example: str) -> str:
        """Deduce the format pattern of a sample date.

        The pattern is completed to full precision so that dates of
        ambiguous precision (e.g. "2004-10") still produce a usable order:
        "2004-10" gives "YYYY-MM-DDTHH:MM:SSZ" and "10/12/2004 13:55"
        gives "MM/DD/YYYY HH:MM:SSZ".

        Args:
            example: A date string as returned by a service

        Returns:
            The deduced format pattern

        Raises:
            InvalidDateFormatError: If the example cannot be decomposed
        """
        if not isinstance(example, str) or not example.strip():
            raise InvalidDateFormatError(example, "empty date")

        text = example.strip().upper()
        date_section, time_section, time_separator = _split_date_time(text)
        deduced = _DeducedFormat()
        state = _DeduceState.DATE

        while state is not _DeduceState.DONE:
            if state is _DeduceState.DATE:
                self._deduce_date(date_section, deduced, example)
                state = _DeduceState.TIME
            elif state is _DeduceState.TIME:
                if time_section is not None:
                    deduced.time_separator = time_separator
                    self._deduce_time(time_section, deduced, example)
                state = _DeduceState.DONE

        self._complete(deduced)
        pattern = deduced.pattern()
        self.logger.debug(f"Deduced format '{pattern}' from '{example}'")
        return pattern

    def _deduce_date(self, section: str, deduced: _DeducedFormat, source: str):
        match = DATE_SECTION_PATTERN.match(section)
        if not match:
            raise InvalidDateFormatError(source, "unrecognized date section")

        first, separator, second, other_separator, third = match.groups()
        if separator and other_separator and separator != other_separator:
            raise InvalidDateFormatError(source, "inconsistent date separators")

        runs = [run for run in (first, second, third) if run is not None]
        year_positions = [index for index, run in enumerate(runs) if len(run) == 4]
        if len(year_positions) != 1 or any(len(run) > 2 for run in runs if len(run) != 4):
            raise InvalidDateFormatError(source, "no single 4 digit year")

        year_index = year_positions[0]
        if len(runs) == 3 and year_index == 1:
            raise InvalidDateFormatError(source, "year in the middle of the date")

        deduced.date_separator = separator or "-"
        deduced.year_first = year_index == 0
        if len(runs) == 1:
            deduced.date_fragments = ["YYYY"]
        elif len(runs) == 2:
            deduced.date_fragments = ["YYYY", "MM"] if deduced.year_first else ["MM", "YYYY"]
        elif deduced.year_first:
            deduced.date_fragments = ["YYYY", "MM", "DD"]
        else:
            # The run adjacent to a trailing year is the day
            deduced.date_fragments = ["MM", "DD", "YYYY"]

    def _deduce_time(self, section: str, deduced: _DeducedFormat, source: str):
        match = TIME_SECTION_PATTERN.match(section)
        if not match:
            raise InvalidDateFormatError(source, "unrecognized time section")

        hour, minute, second, zone = match.groups()
        deduced.time_fragments = ["HH"]
        if minute is not None:
            deduced.time_fragments.append("MM")
        if second is not None:
            deduced.time_fragments.append("SS")

        if zone and zone != "Z":
            deduced.zone = f"{zone[0]}{_normalize_offset(zone[1:], source)}"

    @staticmethod
    def _complete(deduced: _DeducedFormat):
        if len(deduced.date_fragments) == 1:
            deduced.date_fragments = ["YYYY", "MM", "DD"]
        elif len(deduced.date_fragments) == 2:
            if deduced.year_first:
                deduced.date_fragments.append("DD")
            else:
                deduced.date_fragments.insert(1, "DD")

        deduced.time_fragments = ["HH", "MM", "SS"]

    def extract_date_format(self, date: str) -> str:
        """Extract the render pattern matching the precision of a date.

        Args:
            date: A valid date, e.g. "2004-10-12T13:55Z"

        Returns:
            A render pattern such as "YYYY-MM-DDTHH:mmZ" or "YYYY-MM"

        Raises:
            InvalidDateError: If the date is not valid
        """
        self.normalizer.parse(date)

        date_section, time_section, _ = _split_date_time(date.strip().upper())
        date_count = len(re.split(r"[-/]", date_section))
        if date_count == 3:
            date_precision = DatePrecision.DAY
        elif date_count == 2:
            date_precision = DatePrecision.MONTH
        else:
            date_precision = DatePrecision.YEAR

        if not time_section:
            return DEFAULT_DATE_PRECISION[date_precision]

        clock = re.split(r"[Z+-]", time_section)[0]
        time_count = len(clock[:8].split(":"))
        if time_count == 3:
            time_precision = TimePrecision.SECOND
        elif time_count == 2:
            time_precision = TimePrecision.MINUTE
        else:
            time_precision = TimePrecision.HOUR

        return f"{DEFAULT_DATE_PRECISION[date_precision]}{DEFAULT_TIME_PRECISION[time_precision]}"

    # ------------------------------------------------------------------
    # Fragments order
    # ------------------------------------------------------------------

    def get_fragment_order(self, date_format: Optional[str] = None) -> DateFragmentsOrder:
        """Build the fragments order of a date format.

        Args:
            date_format: Format such as "DD/MM/YYYY HH:MM:SS-05:00"; the ISO
                UTC order is returned when omitted

        Returns:
            The fragments order

        Raises:
            InvalidDateFormatError: If the format is inconsistent
        """
        if not date_format:
            return DEFAULT_FRAGMENTS_ORDER

        text = date_format.strip().upper()
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        date_section, time_section, time_separator = _split_date_time(text)

        separators = [char for char in date_section if char in "-/"]
        if any(char not in FIELD_LETTERS and char not in "-/" for char in date_section):
            raise InvalidDateFormatError(date_format, "unexpected character in date section")
        if len(separators) > 2:
            raise InvalidDateFormatError(date_format, "too many date separators")
        if len(separators) == 2 and separators[0] != separators[1]:
            raise InvalidDateFormatError(date_format, "inconsistent date separators")

        fragments = re.split(r"[-/]", date_section)
        if any(not fragment or len(set(fragment)) != 1 for fragment in fragments):
            raise InvalidDateFormatError(date_format, "malformed date fragment")
        letters = [fragment[0] for fragment in fragments]
        if len(set(letters)) != len(letters):
            raise InvalidDateFormatError(date_format, "repeated date fragment")

        input_positions: List[Optional[int]] = [None, None, None, None]
        output_positions: List[Optional[int]] = [None, None, None, None]
        for field_index, letter in enumerate(FIELD_LETTERS):
            if letter in letters:
                position = letters.index(letter)
                input_positions[field_index] = position
                output_positions[position] = field_index

        if input_positions[YEAR] is None:
            raise InvalidDateFormatError(date_format, "year not found")

        date_separator = separators[0] if separators else "-"
        timezone_sign, timezone_offset = "+", "00:00"
        if time_section is not None:
            input_positions[TIME] = TIME
            output_positions[TIME] = TIME
            timezone_sign, timezone_offset = self._split_time_zone(time_section, date_format)
        else:
            input_positions[TIME] = TIME
            time_separator = "T"

        if input_positions[MONTH] is None:
            input_positions[MONTH] = MONTH
        if input_positions[DAY] is None:
            input_positions[DAY] = DAY

        order = DateFragmentsOrder(
            input_positions=tuple(input_positions),
            output_positions=tuple(output_positions),
            date_separator=date_separator,
            time_separator=time_separator,
            timezone_sign=timezone_sign,
            timezone_offset=timezone_offset,
        )
        self.logger.debug(f"Fragments order for '{date_format}': {order}")
        return order

    @staticmethod
    def _split_time_zone(time_section: str, date_format: str) -> Tuple[str, str]:
        for index, char in enumerate(time_section):
            if char in "+-":
                clock, sign, offset = time_section[:index], char, time_section[index + 1:]
                break
        else:
            clock, sign, offset = time_section, "+", "00:00"

        if any(char not in TIME_FORMAT_LETTERS for char in clock):
            raise InvalidDateFormatError(date_format, "unexpected character in time section")
        return sign, _normalize_offset(offset, date_format)

    # ------------------------------------------------------------------
    # Input and output formats
    # ------------------------------------------------------------------

    def apply_input_format(
        self,
        date: str,
        order: Optional[DateFragmentsOrder] = None,
        reverse_time_zone: bool = False
    ) -> str:
        """Reorder a service date into the ISO UTC format.

        Args:
            date: Date laid out as described by ``order``
            order: Fragments order, ISO UTC when omitted
            reverse_time_zone: Flip the sign of the offset before conversion,
                used to send filter dates back in the server's time zone

        Returns:
            ISO UTC date; a trailing 'Z' in the input is kept as 'Z'

        Raises:
            DateNormalizationFailedError: If no valid UTC date results
        """
        order = order or DEFAULT_FRAGMENTS_ORDER
        if not isinstance(date, str):
            raise DateNormalizationFailedError(date)

        text = date.strip().upper()
        ends_with_z = text.endswith("Z")
        if ends_with_z:
            text = f"{text[:-1]}+00:00"

        date_section, _, time_section = text.replace(" ", "T").partition("T")
        year, month, day = self._assign_date_fragments(date_section, order, date)
        clock, zone = self._split_input_time(time_section or None, date)

        if zone is None:
            zone = order.timezone
        if reverse_time_zone and not ends_with_z:
            zone = f"{'-' if zone[0] == '+' else '+'}{zone[1:]}"

        assembled = f"{year}-{month}-{day}T{clock}{zone}"
        try:
            normalized = self.normalizer.to_utc(assembled)
        except InvalidDateError as e:
            raise DateNormalizationFailedError(date, assembled) from e

        if ends_with_z and normalized.endswith("+00:00"):
            normalized = f"{normalized[:-6]}Z"
        return normalized

    @staticmethod
    def _assign_date_fragments(
        date_section: str,
        order: DateFragmentsOrder,
        source: str
    ) -> Tuple[str, str, str]:
        fragments = [
            f"0{fragment}" if len(fragment) == 1 else fragment
            for fragment in date_section.replace("/", "-").split("-")
        ]
        if len(fragments) > 3 or not all(fragments):
            raise DateNormalizationFailedError(source)

        if len(fragments) == 3:
            year_pos, month_pos, day_pos = order.input_positions[:3]
            return fragments[year_pos], fragments[month_pos], fragments[day_pos]

        # Short dates hold a year alone or a year and a month
        year, month, day = "0000", "01", "01"
        short_fragments = []
        for fragment in fragments:
            if len(fragment) >= 3:
                year = fragment
            else:
                short_fragments.append(fragment)
        if short_fragments:
            month = short_fragments[0]
        if len(short_fragments) > 1:
            day = short_fragments[1]
        return year, month, day

    @staticmethod
    def _split_input_time(time_section: Optional[str], source: str) -> Tuple[str, Optional[str]]:
        if time_section is None:
            return "00:00:00", None

        match = INPUT_TIME_PATTERN.match(time_section)
        if not match or not match.group(1):
            raise DateNormalizationFailedError(source)

        pieces = [f"0{piece}" if len(piece) == 1 else piece for piece in match.group(1).split(":")]
        while len(pieces) < 3:
            pieces.append("00")
        return ":".join(pieces), match.group(2)

    def apply_output_format(
        self,
        date: str,
        order: Optional[DateFragmentsOrder] = None,
        reverse_time_zone: bool = False
    ) -> str:
        """Render an ISO UTC date with the output side of a fragments order.

        Slots marked unused are omitted and no offset is rendered. With
        ``reverse_time_zone`` the wall-clock time is shifted into the fixed
        offset of the order before rendering.

        Args:
            date: ISO UTC date
            order: Fragments order, ISO UTC when omitted
            reverse_time_zone: Render in the order's offset instead of UTC

        Returns:
            The display string
        """
        order = order or DEFAULT_FRAGMENTS_ORDER
        moment = self.normalizer.parse(date)
        target = self._order_zone(order) if reverse_time_zone else UTC
        iso = self.normalizer.render(moment.astimezone(target), ISO_OUTPUT_PATTERN)

        date_section, time_section = iso.split("T")
        values = dict(enumerate(date_section.split("-")))
        values[TIME] = time_section[:8]

        rendered = ""
        for field_index in order.output_positions:
            if field_index is None:
                continue
            if field_index == TIME:
                rendered += f"{order.time_separator}{values[TIME]}"
            else:
                if rendered:
                    rendered += order.date_separator
                rendered += values[field_index]
        return rendered

    @staticmethod
    def _order_zone(order: DateFragmentsOrder) -> tzoffset:
        hours, minutes = order.timezone_offset.split(":")
        seconds = int(hours) * 3600 + int(minutes) * 60
        if order.timezone_sign == "-":
            seconds = -seconds
        return tzoffset(None, seconds)
