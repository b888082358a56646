"""Temporal Processors

Date normalization, format detection, range expansion and dimension
building for OGC and ESRI services.
"""

from .temporal_types import (
    DateFragmentsOrder,
    DatePrecision,
    IsoDuration,
    NearestValueMode,
    RangeItems,
    RangeKind,
    TimeDimension,
    TimePrecision
)
from .duration_parser import parse_duration, is_valid_duration
from .date_normalizer import DateNormalizer
from .format_detector import FormatDetector
from .range_parser import RangeParser
from .dimension_builder import DimensionBuilder
from .filter_dates import FilterDates

__all__ = [
    "DateFragmentsOrder",
    "DatePrecision",
    "IsoDuration",
    "NearestValueMode",
    "RangeItems",
    "RangeKind",
    "TimeDimension",
    "TimePrecision",
    "parse_duration",
    "is_valid_duration",
    "DateNormalizer",
    "FormatDetector",
    "RangeParser",
    "DimensionBuilder",
    "FilterDates"
]
