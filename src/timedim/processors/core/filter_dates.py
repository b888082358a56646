"""Date Handling for Feature Values and Layer Filters

Feature attribute dates are kept internally in UTC. Filters written by users
or time sliders carry date constants that each kind of service expects in
its own layout, so every constant is normalized before the filter is sent.
"""

import re
from typing import Optional, Union

from ...core.logging_manager import LoggingManager
from .date_normalizer import TRAILING_OFFSET_PATTERN, DateNormalizer
from .format_detector import FormatDetector
from .temporal_types import DateFragmentsOrder

# ISO datetimes carrying a zone, with fractional seconds, seconds or minutes
ISO_DATETIME_PATTERN = re.compile(
    r"\d{4}-[01]\d-[0-3]\dT[0-2]\d:[0-5]\d:[0-5]\d\.\d+(?:[+-][0-2]\d:[0-5]\d|Z)"
    r"|\d{4}-[01]\d-[0-3]\dT[0-2]\d:[0-5]\d:[0-5]\d(?:[+-][0-2]\d:[0-5]\d|Z)"
    r"|\d{4}-[01]\d-[0-3]\dT[0-2]\d:[0-5]\d(?:[+-][0-2]\d:[0-5]\d|Z)",
    re.IGNORECASE,
)

# date '...' constants of ESRI image and WMS filters
DATE_CONSTANT_PATTERN = re.compile(r"(?:^|(?<=[(\s]))date\s'([\d/\-T\s:+Z]{4,25})'", re.IGNORECASE)

# Lengths of YYYY-MM-DDTHH:mm:ssZ and YYYY-MM-DDTHH:mm:ss+hh:mm
_ZONED_LENGTHS = (20, 25)


class FilterDates:
    """Normalizes feature dates and the date constants of layer filters."""

    def __init__(
        self,
        normalizer: Optional[DateNormalizer] = None,
        detector: Optional[FormatDetector] = None
    ):
        self.logger = LoggingManager.get_logger(__name__)
        self.normalizer = normalizer or DateNormalizer()
        self.detector = detector or FormatDetector(self.normalizer)

    def format_field_value(
        self,
        value: Union[str, int, float],
        server_order: Optional[DateFragmentsOrder] = None,
        external_order: Optional[DateFragmentsOrder] = None
    ) -> str:
        """Normalize the value of a date attribute.

        Args:
            value: Service date string or epoch milliseconds
            server_order: Layout of service strings, deduced from the value
                when omitted
            external_order: Layout used for display; the UTC value is
                returned when omitted

        Returns:
            The normalized date
        """
        if isinstance(value, str):
            order = server_order or self.detector.get_fragment_order(self.detector.deduce_format(value))
            normalized = self.detector.apply_input_format(value, order)
        else:
            normalized = self.normalizer.to_utc(f"{self.normalizer.from_milliseconds(value)}Z")

        if external_order is not None:
            return self.detector.apply_output_format(normalized, external_order, reverse_time_zone=True)
        return normalized

    def _normalize_constant(self, date: str, external_order: Optional[DateFragmentsOrder]) -> str:
        # Dates written with a full zone are kept in it, others are reversed
        reverse_time_zone = len(date) not in _ZONED_LENGTHS
        return self.detector.apply_input_format(date, external_order, reverse_time_zone)

    def rewrite_vector_filter(self, filter_text: str, external_order: Optional[DateFragmentsOrder] = None) -> str:
        """Normalize every zoned ISO datetime of a vector layer filter."""
        rewritten = ISO_DATETIME_PATTERN.sub(
            lambda match: self._normalize_constant(match.group(0), external_order), filter_text
        )
        self.logger.debug(f"Vector filter rewritten to: {rewritten}")
        return rewritten

    def rewrite_esri_dynamic_filter(
        self,
        filter_text: str,
        external_order: Optional[DateFragmentsOrder] = None
    ) -> str:
        """Normalize the datetimes of an ESRI dynamic filter.

        Those services reject ISO dates: the zone is dropped and the 'T'
        becomes a space.
        """
        def replace(match: re.Match) -> str:
            normalized = self._normalize_constant(match.group(0), external_order)
            return TRAILING_OFFSET_PATTERN.sub("", normalized).replace("T", " ")

        rewritten = ISO_DATETIME_PATTERN.sub(replace, filter_text)
        self.logger.debug(f"ESRI dynamic filter rewritten to: {rewritten}")
        return rewritten

    def rewrite_esri_image_or_wms_filter(
        self,
        filter_text: str,
        external_order: Optional[DateFragmentsOrder] = None
    ) -> str:
        """Replace the date '...' constants of an ESRI image or WMS filter."""
        rewritten = DATE_CONSTANT_PATTERN.sub(
            lambda match: self._normalize_constant(match.group(1), external_order), filter_text
        )
        self.logger.debug(f"ESRI image/WMS filter rewritten to: {rewritten}")
        return rewritten
