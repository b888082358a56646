"""Temporal Processing Module

Processors turning service date metadata into normalized dates, ranges and
time dimensions.
"""

from .core.date_normalizer import DateNormalizer
from .core.format_detector import FormatDetector
from .core.range_parser import RangeParser
from .core.dimension_builder import DimensionBuilder
from .core.filter_dates import FilterDates
from .core.temporal_types import (
    DateFragmentsOrder,
    DatePrecision,
    NearestValueMode,
    RangeItems,
    RangeKind,
    TimeDimension,
    TimePrecision
)

__all__ = [
    "DateNormalizer",
    "FormatDetector",
    "RangeParser",
    "DimensionBuilder",
    "FilterDates",
    "DateFragmentsOrder",
    "DatePrecision",
    "NearestValueMode",
    "RangeItems",
    "RangeKind",
    "TimeDimension",
    "TimePrecision"
]
