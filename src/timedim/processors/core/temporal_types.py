"""Temporal Types for OGC/ESRI Time Dimensions

Enums, immutable records and constant tables shared by the temporal
processors. Every record is frozen: recomputation builds a new value.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


class DatePrecision(Enum):
    """Significant date components for display."""
    YEAR = "year"
    MONTH = "month"
    DAY = "day"


class TimePrecision(Enum):
    """Significant time-of-day components for display."""
    HOUR = "hour"
    MINUTE = "minute"
    SECOND = "second"


class RangeKind(Enum):
    """OGC syntactic shape of a time dimension value."""
    DISCRETE = "discrete"    # 1696,1701,1734,1741
    RELATIVE = "relative"    # 2022-04-27T14:50:00Z/PT10M
    ABSOLUTE = "absolute"    # 2022-04-27T14:50:00Z/2022-04-27T17:50:00Z/PT10M


class NearestValueMode(Enum):
    """Whether a slider snaps to produced values or moves freely between ends."""
    DISCRETE = "discrete"
    ABSOLUTE = "absolute"


DisplayPattern = Tuple[Optional[DatePrecision], Optional[TimePrecision]]

# Render patterns, see DateNormalizer.render for the token set
DEFAULT_DATE_PRECISION: Mapping[DatePrecision, str] = MappingProxyType({
    DatePrecision.YEAR: "YYYY",
    DatePrecision.MONTH: "YYYY-MM",
    DatePrecision.DAY: "YYYY-MM-DD",
})

DEFAULT_TIME_PRECISION: Mapping[TimePrecision, str] = MappingProxyType({
    TimePrecision.HOUR: "THHZ",
    TimePrecision.MINUTE: "THH:mmZ",
    TimePrecision.SECOND: "THH:mm:ssZ",
})

# ESRI timeInfo unit -> OGC duration designator
ESRI_TIME_UNITS: Mapping[str, str] = MappingProxyType({
    "esriTimeUnitsHours": "H",
    "esriTimeUnitsDays": "D",
    "esriTimeUnitsWeeks": "W",
    "esriTimeUnitsMonths": "M",
    "esriTimeUnitsYears": "Y",
})

MILLISECONDS_PER_DAY = 86_400_000
MILLISECONDS_PER_YEAR = 365 * MILLISECONDS_PER_DAY      # 31,536,000,000
MILLISECONDS_PER_LEAP_YEAR = 366 * MILLISECONDS_PER_DAY  # 31,622,400,000
MILLISECONDS_PER_MONTH = 30 * MILLISECONDS_PER_DAY

YEAR, MONTH, DAY, TIME = 0, 1, 2, 3

FragmentPositions = Tuple[Optional[int], Optional[int], Optional[int], Optional[int]]


@dataclass(frozen=True)
class DateFragmentsOrder:
    """Mapping between a date format's positional slots and its fields.

    Attributes:
        input_positions: For year, month, day and time, the position of the
            field in the input string, or None when unused
        output_positions: For each output slot, the field index (YEAR, MONTH,
            DAY, TIME) rendered there, or None when the slot is unused
        date_separator: Separator between date fragments ('-' or '/')
        time_separator: Separator between date and time ('T' or ' ')
        timezone_sign: Sign applied to the offset ('+' or '-')
        timezone_offset: Absolute offset value, e.g. '00:00'
    """
    input_positions: FragmentPositions
    output_positions: FragmentPositions
    date_separator: str = "-"
    time_separator: str = "T"
    timezone_sign: str = "+"
    timezone_offset: str = "00:00"

    @property
    def timezone(self) -> str:
        return f"{self.timezone_sign}{self.timezone_offset}"


DEFAULT_FRAGMENTS_ORDER = DateFragmentsOrder(
    input_positions=(0, 1, 2, 3),
    output_positions=(YEAR, MONTH, DAY, TIME),
)


@dataclass(frozen=True)
class IsoDuration:
    """ISO 8601 duration, P[n]Y[n]M[n]W[n]DT[n]H[n]M[n]S."""
    years: float = 0
    months: float = 0
    weeks: float = 0
    days: float = 0
    hours: float = 0
    minutes: float = 0
    seconds: float = 0

    @property
    def milliseconds(self) -> int:
        """Length in ms, with a year of 365 days and a month of 30 days."""
        total = (
            self.years * MILLISECONDS_PER_YEAR
            + self.months * MILLISECONDS_PER_MONTH
            + self.weeks * 7 * MILLISECONDS_PER_DAY
            + self.days * MILLISECONDS_PER_DAY
            + self.hours * 3_600_000
            + self.minutes * 60_000
            + self.seconds * 1000
        )
        return int(round(total))

    @property
    def is_month_only(self) -> bool:
        """True for whole-month durations such as P1M or P3M."""
        others = (self.years, self.weeks, self.days, self.hours, self.minutes, self.seconds)
        return self.months != 0 and float(self.months).is_integer() and not any(others)


@dataclass(frozen=True)
class RangeItems:
    """Classified and expanded OGC dimension values."""
    kind: RangeKind
    range: Tuple[str, ...]

    def __post_init__(self):
        if not self.range:
            raise ValueError("RangeItems.range must not be empty")


@dataclass(frozen=True)
class TimeDimension:
    """Normalized temporal dimension of one service layer.

    Attributes:
        field: Service attribute bound to the dimension
        default_value: One (single handle) or two (range handle) dates
        unit_symbol: Opaque passthrough, empty by default
        range_items: Classified range of dates
        nearest_value_mode: Snap to produced values or move freely
        single_handle: One control (an instant) or two (a range)
        display_pattern: Advisory (date, time) precision for UI rendering
    """
    field: str
    default_value: Tuple[str, ...]
    range_items: RangeItems
    nearest_value_mode: NearestValueMode
    single_handle: bool
    display_pattern: DisplayPattern
    unit_symbol: str = ""

    @property
    def is_valid(self) -> bool:
        """False when the whole range collapses to one repeated instant."""
        values = self.range_items.range
        return len(values) >= 1 and values[0] != values[-1]
