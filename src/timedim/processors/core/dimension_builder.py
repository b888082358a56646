"""Dimension Builder for OGC and ESRI Temporal Metadata

Assembles a TimeDimension from a WMS ``Dimension`` descriptor or an ArcGIS
REST ``timeInfo`` block, and guesses how the resulting dates should be shown.
"""

import json
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from ...core.error_handler import InvalidDateError, InvalidTimeDimensionError
from ...core.logging_manager import LoggingManager
from .date_normalizer import DateNormalizer
from .format_detector import FormatDetector
from .range_parser import RangeParser
from .temporal_types import (
    ESRI_TIME_UNITS,
    MILLISECONDS_PER_DAY,
    MILLISECONDS_PER_MONTH,
    MILLISECONDS_PER_YEAR,
    DatePrecision,
    DateFragmentsOrder,
    DisplayPattern,
    NearestValueMode,
    RangeItems,
    TimeDimension,
    TimePrecision,
)

OgcDescriptor = Union[Mapping[str, Any], str]

# Values of nearestValue(s) that turn snapping to produced values on
_DISABLED_FLAGS = (False, 0, "0", "false", "False")


class DimensionBuilder:
    """Builds TimeDimension records from service metadata."""

    def __init__(
        self,
        normalizer: Optional[DateNormalizer] = None,
        detector: Optional[FormatDetector] = None,
        range_parser: Optional[RangeParser] = None
    ):
        self.logger = LoggingManager.get_logger(__name__)
        self.normalizer = normalizer or DateNormalizer()
        self.detector = detector or FormatDetector(self.normalizer)
        self.range_parser = range_parser or RangeParser(self.normalizer, self.detector)

    def create_dimension_from_ogc(self, descriptor: OgcDescriptor) -> TimeDimension:
        """Create a time dimension from an OGC dimension.

        Args:
            descriptor: Mapping with ``name``, ``values`` and optionally
                ``default``, ``unitSymbol`` and ``nearestValues``; a JSON
                object string; or a bare values string

        Returns:
            Single handle time dimension

        Raises:
            InvalidTimeDimensionError: If the descriptor has no values
        """
        dimension = self._load_ogc_descriptor(descriptor)

        values = dimension.get("values")
        if not isinstance(values, str) or not values.strip():
            raise InvalidTimeDimensionError(descriptor, "missing dimension values")

        range_items = self.range_parser.create_range(values)
        default = dimension.get("default")
        default_value = (str(default),) if default not in (None, "") else (range_items.range[0],)

        nearest = NearestValueMode.ABSOLUTE
        for key in ("nearestValues", "nearestValue"):
            if key in dimension and dimension[key] in _DISABLED_FLAGS:
                nearest = NearestValueMode.DISCRETE

        time_dimension = TimeDimension(
            field=str(dimension.get("name") or ""),
            default_value=default_value,
            range_items=range_items,
            nearest_value_mode=nearest,
            single_handle=True,
            display_pattern=self.guess_display_pattern(range_items),
            unit_symbol=str(dimension.get("unitSymbol") or ""),
        )
        self.logger.debug(
            f"OGC dimension '{time_dimension.field}': {range_items.kind.value}, "
            f"{len(range_items.range)} values, {nearest.value}"
        )
        return time_dimension

    @staticmethod
    def _load_ogc_descriptor(descriptor: OgcDescriptor) -> Dict[str, Any]:
        if isinstance(descriptor, Mapping):
            return dict(descriptor)

        if isinstance(descriptor, str):
            text = descriptor.strip()
            if text.startswith("{"):
                try:
                    loaded = json.loads(text)
                except json.JSONDecodeError as e:
                    raise InvalidTimeDimensionError(descriptor, f"invalid JSON: {e.msg}") from e
                if isinstance(loaded, dict):
                    return loaded
                raise InvalidTimeDimensionError(descriptor, "JSON descriptor is not an object")
            return {"values": text}

        raise InvalidTimeDimensionError(descriptor, "unsupported descriptor type")

    def create_dimension_from_esri(
        self,
        descriptor: Mapping[str, Any],
        single_handle: bool = False,
        order: Optional[DateFragmentsOrder] = None
    ) -> TimeDimension:
        """Create a time dimension from an ESRI timeInfo block.

        Args:
            descriptor: Mapping with ``startTimeField``, ``timeExtent``
                ([min_ms, max_ms]), ``timeInterval`` and ``timeIntervalUnits``
            single_handle: True for layers that show a single instant
            order: Service date fragments order the extent is rendered through

        Returns:
            Time dimension whose range runs from the extent start to its end

        Raises:
            InvalidTimeDimensionError: If the extent does not hold two values
        """
        time_extent = descriptor.get("timeExtent")
        if not isinstance(time_extent, (list, tuple)) or len(time_extent) != 2:
            raise InvalidTimeDimensionError(time_extent, "timeExtent must hold [min, max]")

        try:
            minimum, maximum = (self._esri_extent_date(value, order) for value in time_extent)
        except InvalidDateError as e:
            raise InvalidTimeDimensionError(time_extent, "timeExtent is not epoch milliseconds") from e

        values = f"{minimum}/{maximum}"
        duration = self._esri_duration(
            descriptor.get("timeInterval"),
            descriptor.get("timeIntervalUnits", descriptor.get("timeIntervalUnit"))
        )
        if duration:
            values = f"{values}/{duration}"

        range_items = self.range_parser.create_range(values)
        start_time_field = str(descriptor.get("startTimeField") or "")
        first, last = range_items.range[0], range_items.range[-1]

        time_dimension = TimeDimension(
            field=start_time_field,
            default_value=(last,) if single_handle else (first, last),
            range_items=range_items,
            nearest_value_mode=NearestValueMode.DISCRETE if start_time_field else NearestValueMode.ABSOLUTE,
            single_handle=single_handle,
            display_pattern=self.guess_display_pattern(range_items, only_min_max=True),
        )
        self.logger.debug(f"ESRI dimension '{start_time_field}' from {values}")
        return time_dimension

    def _esri_extent_date(self, milliseconds: Any, order: Optional[DateFragmentsOrder]) -> str:
        if isinstance(milliseconds, bool) or not isinstance(milliseconds, (int, float)):
            raise InvalidDateError(milliseconds)

        date = f"{self.normalizer.from_milliseconds(int(milliseconds))}Z"
        if order is None:
            return date
        return self.detector.apply_input_format(self.detector.apply_output_format(date, order), order)

    def _esri_duration(self, interval: Any, units: Any) -> str:
        """Translate an ESRI interval into an ISO 8601 duration, '' when unusable."""
        if not interval or not units:
            return ""

        letter = ESRI_TIME_UNITS.get(units) or ESRI_TIME_UNITS.get(f"esriTimeUnits{units}")
        if letter is None:
            self.logger.warning(f"Unsupported ESRI time unit {units!r}, interval ignored")
            return ""

        if isinstance(interval, float) and interval.is_integer():
            interval = int(interval)
        if letter == "H":
            return f"PT{interval}H"
        return f"P{interval}{letter}"

    def guess_display_pattern(
        self,
        range_values: Union[RangeItems, Sequence[str]],
        only_min_max: bool = False
    ) -> DisplayPattern:
        """Guess the precision a time slider should display.

        Args:
            range_values: Produced range, or its values
            only_min_max: Measure the span from the first and last values only

        Returns:
            (DAY, MINUTE) for a single instant, (DAY, None) when the span is
            more than 24 hours, (None, MINUTE) otherwise
        """
        values = range_values.range if isinstance(range_values, RangeItems) else tuple(range_values)
        if not values:
            return DatePrecision.DAY, TimePrecision.MINUTE
        if only_min_max:
            values = (values[0], values[-1])

        try:
            milliseconds = [self.normalizer.to_milliseconds(value) for value in values]
        except InvalidDateError as e:
            self.logger.warning(f"Display pattern not guessed: {e}")
            return DatePrecision.DAY, TimePrecision.MINUTE

        span = max(milliseconds) - min(milliseconds)
        if span == 0:
            return DatePrecision.DAY, TimePrecision.MINUTE
        if span > MILLISECONDS_PER_DAY:
            return DatePrecision.DAY, None
        return None, TimePrecision.MINUTE

    @staticmethod
    def guess_estimated_step(min_value: int, max_value: int) -> Optional[int]:
        """Slider step in ms for a min/max range, None for short spans."""
        interval = max_value - min_value

        step = None
        if interval > 2 * MILLISECONDS_PER_MONTH:
            step = MILLISECONDS_PER_DAY
        if interval > 2 * MILLISECONDS_PER_YEAR:
            step = MILLISECONDS_PER_MONTH
        if interval > 10 * MILLISECONDS_PER_YEAR:
            step = MILLISECONDS_PER_YEAR
        return step
