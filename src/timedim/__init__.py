"""timedim - Temporal Dimension Normalization

Parses, validates and normalizes the dates and date ranges of OGC WMS time
dimensions and ESRI time extents into a uniform TimeDimension record for
time slider controls.
"""

__version__ = "0.1.0"
__author__ = "timedim Team"
__description__ = "OGC/ESRI temporal dimension normalization"

from .core import ConfigManager, ErrorHandler, LoggingManager
from .processors import (
    DateNormalizer,
    DimensionBuilder,
    FilterDates,
    FormatDetector,
    RangeParser,
    TimeDimension,
)

__all__ = [
    "ConfigManager",
    "ErrorHandler",
    "LoggingManager",
    "DateNormalizer",
    "DimensionBuilder",
    "FilterDates",
    "FormatDetector",
    "RangeParser",
    "TimeDimension",
]
