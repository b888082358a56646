"""
Sample test data for the timedim testing framework.

Realistic temporal metadata as returned by OGC WMS GetCapabilities
documents and ArcGIS REST timeInfo blocks.
"""

from typing import Any, Dict, List

# OGC WMS Dimension elements
SAMPLE_OGC_DIMENSIONS: Dict[str, Dict[str, Any]] = {
    "discrete_years": {
        "name": "time",
        "units": "ISO8601",
        "unitSymbol": "",
        "default": "1741",
        "values": "1696,1701,1734,1741",
    },
    "monthly": {
        "name": "time",
        "units": "ISO8601",
        "default": "2002-04-01T00:00:00Z",
        "nearestValues": "0",
        "values": "2002-01-01T00:00:00Z/2002-04-01T00:00:00Z/P1M",
    },
    "ten_minutes": {
        "name": "time",
        "units": "ISO8601",
        "nearestValues": "1",
        "values": "2022-04-27T14:50:00Z/2022-04-27T15:30:00Z/PT10M",
    },
    "relative": {
        "name": "time",
        "values": "2022-04-27T14:50:00Z/PT10M",
    },
    "degenerate": {
        "name": "time",
        "values": "2022-01-01T00:00:00Z/2022-01-01T00:00:00Z/P1D",
    },
    "no_values": {
        "name": "time",
        "default": "2022-01-01T00:00:00Z",
    },
}

# ArcGIS REST timeInfo blocks, extents in epoch milliseconds
SAMPLE_ESRI_TIME_INFOS: Dict[str, Dict[str, Any]] = {
    "monthly_2005": {
        "startTimeField": "date_obs",
        "timeExtent": [1104537600000, 1136073600000],  # 2005-01-01, 2006-01-01
        "timeInterval": 1,
        "timeIntervalUnits": "esriTimeUnitsMonths",
    },
    "two_hours": {
        "startTimeField": "",
        "timeExtent": [1104537600000, 1104559200000],  # 2005-01-01 00:00 to 06:00
        "timeInterval": 2,
        "timeIntervalUnits": "esriTimeUnitsHours",
    },
    "bare_unit_days": {
        "startTimeField": "acquired",
        "timeExtent": [1104537600000, 1104796800000],  # 2005-01-01 to 2005-01-04
        "timeInterval": 1,
        "timeIntervalUnits": "Days",
    },
    "unknown_unit": {
        "startTimeField": "acquired",
        "timeExtent": [1104537600000, 1136073600000],
        "timeInterval": 1,
        "timeIntervalUnits": "esriTimeUnitsCenturies",
    },
    "no_interval": {
        "startTimeField": "",
        "timeExtent": [1104537600000, 1136073600000],
    },
    "single_instant": {
        "startTimeField": "",
        "timeExtent": [1104537600000, 1104537600000],
    },
    "broken_extent": {
        "startTimeField": "date_obs",
        "timeExtent": [1104537600000],
        "timeInterval": 1,
        "timeIntervalUnits": "esriTimeUnitsDays",
    },
}

# Service date strings and the format deduced from each
SAMPLE_DEDUCED_FORMATS: List[tuple] = [
    ("2004", "YYYY-MM-DDTHH:MM:SSZ"),
    ("2004-10", "YYYY-MM-DDTHH:MM:SSZ"),
    ("10-2004", "MM-DD-YYYYTHH:MM:SSZ"),
    ("2004-10-12", "YYYY-MM-DDTHH:MM:SSZ"),
    ("2004/10/12 13:55", "YYYY/MM/DD HH:MM:SSZ"),
    ("10/12/2004 13:55:20", "MM/DD/YYYY HH:MM:SSZ"),
    ("2004-10-12T13:55:20Z", "YYYY-MM-DDTHH:MM:SSZ"),
    ("2004-10-12T13:55:20-05:00", "YYYY-MM-DDTHH:MM:SS-05:00"),
]

# Layer configuration as written by map authors
SAMPLE_CONFIGURATIONS: Dict[str, Dict[str, Any]] = {
    "default": {
        "layer_dates": {
            "service_date_format": "YYYY-MM-DDTHH:MM:SSZ",
            "external_date_format": "DD/MM/YYYY",
            "reverse_time_zone": False,
            "display_language": "en",
        },
        "logging": {
            "level": "INFO",
            "log_to_console": False,
        },
    },
    "production": {
        "layer_dates": {
            "display_language": "fr",
        },
        "logging": {
            "level": "WARNING",
        },
    },
}
