"""
Unit tests for the DimensionBuilder component.

Tests time dimensions built from OGC and ESRI metadata, display pattern
guessing and slider step estimation.
"""

import json
import logging

import pytest

from timedim.core.error_handler import InvalidTimeDimensionError
from timedim.processors.core.temporal_types import (
    MILLISECONDS_PER_DAY,
    MILLISECONDS_PER_MONTH,
    MILLISECONDS_PER_YEAR,
    DatePrecision,
    NearestValueMode,
    RangeKind,
    TimePrecision,
)
from tests.fixtures.sample_data import SAMPLE_ESRI_TIME_INFOS, SAMPLE_OGC_DIMENSIONS


class TestOgcDimension:
    """Test suite for dimensions built from OGC descriptors"""

    @pytest.mark.unit
    def test_discrete_dimension(self, dimension_builder):
        """Test field, default and nearest values of a year list"""
        dimension = dimension_builder.create_dimension_from_ogc(SAMPLE_OGC_DIMENSIONS["discrete_years"])
        assert dimension.field == "time"
        assert dimension.default_value == ("1741",)
        assert dimension.unit_symbol == ""
        assert dimension.range_items.kind is RangeKind.DISCRETE
        assert dimension.nearest_value_mode is NearestValueMode.ABSOLUTE
        assert dimension.single_handle is True
        assert dimension.display_pattern == (DatePrecision.DAY, None)
        assert dimension.is_valid is True

    @pytest.mark.unit
    def test_nearest_values_disabled(self, dimension_builder):
        """Test an explicit nearestValues of 0 snaps to produced values"""
        dimension = dimension_builder.create_dimension_from_ogc(SAMPLE_OGC_DIMENSIONS["monthly"])
        assert dimension.nearest_value_mode is NearestValueMode.DISCRETE
        assert dimension.default_value == ("2002-04-01T00:00:00Z",)
        assert len(dimension.range_items.range) == 4

        descriptor = dict(SAMPLE_OGC_DIMENSIONS["ten_minutes"], nearestValues=False)
        dimension = dimension_builder.create_dimension_from_ogc(descriptor)
        assert dimension.nearest_value_mode is NearestValueMode.DISCRETE

    @pytest.mark.unit
    def test_default_is_first_value(self, dimension_builder):
        """Test the first range value is the default when none is declared"""
        dimension = dimension_builder.create_dimension_from_ogc(SAMPLE_OGC_DIMENSIONS["ten_minutes"])
        assert dimension.default_value == ("2022-04-27T14:50:00Z",)
        assert dimension.nearest_value_mode is NearestValueMode.ABSOLUTE
        assert dimension.display_pattern == (None, TimePrecision.MINUTE)

    @pytest.mark.unit
    def test_string_descriptors(self, dimension_builder):
        """Test JSON object strings and bare values strings"""
        dimension = dimension_builder.create_dimension_from_ogc(json.dumps(SAMPLE_OGC_DIMENSIONS["relative"]))
        assert dimension.field == "time"
        assert dimension.range_items.range == ("2022-04-27T14:50:00Z", "2022-04-27T15:00:00Z")

        dimension = dimension_builder.create_dimension_from_ogc("1696,1701")
        assert dimension.field == ""
        assert dimension.default_value == ("1696",)

    @pytest.mark.unit
    def test_degenerate_dimension(self, dimension_builder):
        """Test a single instant is parsed but not valid for a range slider"""
        dimension = dimension_builder.create_dimension_from_ogc(SAMPLE_OGC_DIMENSIONS["degenerate"])
        assert dimension.range_items.range[0] == dimension.range_items.range[-1] == "2022-01-01T00:00:00Z"
        assert dimension.is_valid is False
        assert dimension.display_pattern == (None, TimePrecision.MINUTE)

    @pytest.mark.unit
    def test_invalid_descriptors(self, dimension_builder):
        """Test descriptors without usable values"""
        invalid_descriptors = [SAMPLE_OGC_DIMENSIONS["no_values"], "{not json", '{"name": "time"}', 42]
        for descriptor in invalid_descriptors:
            with pytest.raises(InvalidTimeDimensionError):
                dimension_builder.create_dimension_from_ogc(descriptor)


class TestEsriDimension:
    """Test suite for dimensions built from ESRI timeInfo blocks"""

    @pytest.mark.unit
    def test_monthly_extent(self, dimension_builder):
        """Test extent, interval and start time field mapping"""
        dimension = dimension_builder.create_dimension_from_esri(SAMPLE_ESRI_TIME_INFOS["monthly_2005"])
        values = dimension.range_items.range
        assert dimension.range_items.kind is RangeKind.ABSOLUTE
        assert len(values) == 13
        assert values[0] == "2005-01-01T00:00:00Z"
        assert values[6] == "2005-07-01T00:00:00Z"
        assert values[-1] == "2006-01-01T00:00:00Z"
        assert dimension.field == "date_obs"
        assert dimension.nearest_value_mode is NearestValueMode.DISCRETE
        assert dimension.single_handle is False
        assert dimension.default_value == (values[0], values[-1])
        assert dimension.display_pattern == (DatePrecision.DAY, None)

    @pytest.mark.unit
    def test_single_handle_default(self, dimension_builder):
        """Test single handle layers default to the last value"""
        dimension = dimension_builder.create_dimension_from_esri(
            SAMPLE_ESRI_TIME_INFOS["monthly_2005"], single_handle=True
        )
        assert dimension.single_handle is True
        assert dimension.default_value == ("2006-01-01T00:00:00Z",)

    @pytest.mark.unit
    def test_hour_interval(self, dimension_builder):
        """Test hours become a PT duration"""
        dimension = dimension_builder.create_dimension_from_esri(SAMPLE_ESRI_TIME_INFOS["two_hours"])
        assert dimension.range_items.range == (
            "2005-01-01T00:00:00Z",
            "2005-01-01T02:00:00Z",
            "2005-01-01T04:00:00Z",
            "2005-01-01T06:00:00Z",
        )
        assert dimension.nearest_value_mode is NearestValueMode.ABSOLUTE
        assert dimension.display_pattern == (None, TimePrecision.MINUTE)

    @pytest.mark.unit
    def test_bare_unit_name(self, dimension_builder):
        """Test units without the esriTimeUnits prefix"""
        dimension = dimension_builder.create_dimension_from_esri(SAMPLE_ESRI_TIME_INFOS["bare_unit_days"])
        assert len(dimension.range_items.range) == 4

    @pytest.mark.unit
    def test_interval_omitted(self, dimension_builder, caplog):
        """Test unknown units and missing intervals give min/max only"""
        with caplog.at_level(logging.WARNING, logger="timedim"):
            dimension = dimension_builder.create_dimension_from_esri(SAMPLE_ESRI_TIME_INFOS["unknown_unit"])
        assert dimension.range_items.kind is RangeKind.RELATIVE
        assert dimension.range_items.range == ("2005-01-01T00:00:00Z", "2006-01-01T00:00:00Z")
        assert "esriTimeUnitsCenturies" in caplog.text

        dimension = dimension_builder.create_dimension_from_esri(SAMPLE_ESRI_TIME_INFOS["no_interval"])
        assert dimension.range_items.kind is RangeKind.RELATIVE
        assert len(dimension.range_items.range) == 2

    @pytest.mark.unit
    def test_single_instant_extent(self, dimension_builder):
        """Test an extent with min == max"""
        dimension = dimension_builder.create_dimension_from_esri(SAMPLE_ESRI_TIME_INFOS["single_instant"])
        assert dimension.is_valid is False
        assert dimension.display_pattern == (DatePrecision.DAY, TimePrecision.MINUTE)

    @pytest.mark.unit
    def test_service_order(self, dimension_builder, detector):
        """Test extents rendered through the service fragments order"""
        order = detector.get_fragment_order("YYYY-MM-DD")
        dimension = dimension_builder.create_dimension_from_esri(SAMPLE_ESRI_TIME_INFOS["monthly_2005"], order=order)
        assert dimension.range_items.range[0] == "2005-01-01T00:00:00+00:00"
        assert len(dimension.range_items.range) == 13

    @pytest.mark.unit
    def test_invalid_extents(self, dimension_builder):
        """Test extents without two epoch values"""
        with pytest.raises(InvalidTimeDimensionError):
            dimension_builder.create_dimension_from_esri(SAMPLE_ESRI_TIME_INFOS["broken_extent"])
        with pytest.raises(InvalidTimeDimensionError):
            dimension_builder.create_dimension_from_esri({"startTimeField": "", "timeExtent": ["a", "b"]})
        with pytest.raises(InvalidTimeDimensionError):
            dimension_builder.create_dimension_from_esri({"startTimeField": ""})


class TestGuessing:
    """Test suite for display pattern and step guessing"""

    @pytest.mark.unit
    def test_display_pattern_rules(self, dimension_builder):
        """Test the 24 hour threshold on the span of the values"""
        values = ["2022-01-01T00:00Z", "2022-01-01T12:00Z", "2022-01-05T00:00Z"]
        assert dimension_builder.guess_display_pattern(values) == (DatePrecision.DAY, None)
        assert dimension_builder.guess_display_pattern(values, only_min_max=True) == (DatePrecision.DAY, None)
        assert dimension_builder.guess_display_pattern(["2022-01-01"]) == (DatePrecision.DAY, TimePrecision.MINUTE)
        assert dimension_builder.guess_display_pattern([]) == (DatePrecision.DAY, TimePrecision.MINUTE)

    @pytest.mark.unit
    def test_display_pattern_modes_agree(self, dimension_builder):
        """Test full and min/max modes share the strict 24 hour threshold"""
        one_day = ["2022-01-01T00:00:00Z", "2022-01-02T00:00:00Z"]
        assert dimension_builder.guess_display_pattern(one_day) == (None, TimePrecision.MINUTE)
        assert dimension_builder.guess_display_pattern(one_day, only_min_max=True) == (None, TimePrecision.MINUTE)

        two_days = ["2022-01-01T00:00:00Z", "2022-01-02T00:00:00Z", "2022-01-03T00:00:00Z"]
        assert dimension_builder.guess_display_pattern(two_days) == (DatePrecision.DAY, None)
        assert dimension_builder.guess_display_pattern(two_days, only_min_max=True) == (DatePrecision.DAY, None)

    @pytest.mark.unit
    def test_display_pattern_fallback(self, dimension_builder, caplog):
        """Test unparsable values fall back with a warning"""
        with caplog.at_level(logging.WARNING, logger="timedim"):
            pattern = dimension_builder.guess_display_pattern(["first", "second"])
        assert pattern == (DatePrecision.DAY, TimePrecision.MINUTE)
        assert "Display pattern not guessed" in caplog.text

    @pytest.mark.unit
    def test_estimated_step(self, dimension_builder):
        """Test day, month and year steps by span"""
        assert dimension_builder.guess_estimated_step(0, 30 * MILLISECONDS_PER_DAY) is None
        assert dimension_builder.guess_estimated_step(0, 61 * MILLISECONDS_PER_DAY) == MILLISECONDS_PER_DAY
        assert dimension_builder.guess_estimated_step(0, 3 * MILLISECONDS_PER_YEAR) == MILLISECONDS_PER_MONTH
        assert dimension_builder.guess_estimated_step(0, 11 * MILLISECONDS_PER_YEAR) == MILLISECONDS_PER_YEAR
