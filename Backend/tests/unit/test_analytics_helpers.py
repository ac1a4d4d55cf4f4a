"""Time windows and aggregation used by the analytics endpoints."""
from datetime import date
from types import SimpleNamespace

import pytest

from onesync.core.exceptions import ValidationFailed
from onesync.services.analytics_service import aggregate, date_window, percent_change, trend


class TestDateWindow:
    @pytest.mark.parametrize("time_range,start", [
        ("7d", date(2025, 6, 8)),
        ("30d", date(2025, 5, 16)),
        ("90d", date(2025, 3, 17)),
        ("12m", date(2024, 6, 15)),
    ])
    def test_window_ends_today(self, time_range, start):
        assert date_window(time_range, today=date(2025, 6, 15)) == (start, date(2025, 6, 15))

    def test_leap_day(self):
        assert date_window("12m", today=date(2024, 2, 29)) == (date(2023, 2, 28), date(2024, 2, 29))

    def test_unknown_range(self):
        with pytest.raises(ValidationFailed):
            date_window("1y")


class TestChange:
    def test_percent_change(self):
        assert percent_change(150, 100) == 50

    def test_zero_previous_period(self):
        assert percent_change(150, 0) == 0

    def test_trend(self):
        assert trend(0) == "up"
        assert trend(-0.1) == "down"


class TestAggregate:
    def test_groups_and_counts_unknown(self):
        records = [
            SimpleNamespace(platform="spotify", country="US", plays=10, revenue=0.5),
            SimpleNamespace(platform="spotify", country=None, plays=5, revenue=0.25),
            SimpleNamespace(platform=None, country="GB", plays=1, revenue=None),
        ]
        assert aggregate(records, "platform") == {
            "spotify": {"plays": 15, "revenue": 0.75},
            "Unknown": {"plays": 1, "revenue": 0.0},
        }
        assert aggregate(records, "country")["Unknown"] == {"plays": 5, "revenue": 0.25}
