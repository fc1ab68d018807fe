"""Tests for human-readable unit formatting."""

from __future__ import annotations

import re

import pytest

from trctl.models import UnitsConfig
from trctl.utils.formatting import (
    RATIO_INF,
    RATIO_NA,
    UnitFormatter,
    format_date,
    format_duration,
    format_duration_with_total,
    format_eta,
    format_percent,
    format_ratio,
    ratio_of,
    truncate_decimal,
)

pytestmark = [pytest.mark.unit, pytest.mark.utils]


class TestDurations:
    """Test duration rendering."""

    @pytest.mark.parametrize(
        ("seconds", "expected"),
        [
            (0, "0 seconds"),
            (1, "1 second"),
            (59, "59 seconds"),
            (61, "1 minute, 1 second"),
            (120, "2 minutes"),
            (5 * 60 + 30, "5 minutes"),
            (3 * 86400 + 4 * 3600, "3 days, 4 hours"),
            (4 * 86400 + 4 * 3600, "4 days"),
            (86400, "1 day"),
            (-30, "0 seconds"),
        ],
    )
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_with_total(self):
        assert format_duration_with_total(3661) == "1 hour, 1 minute (3661 seconds)"
        assert format_duration_with_total(1) == "1 second (1 second)"

    @pytest.mark.parametrize(
        ("eta", "expected"),
        [(-1, "Unknown"), (30, "30 sec"), (600, "10 min"), (7200, "2 hrs"), (3 * 86400, "3 days")],
    )
    def test_eta(self, eta, expected):
        assert format_eta(eta) == expected

    def test_date_layout(self):
        assert re.fullmatch(r"\w{3} \w{3} \d{2} \d{2}:\d{2}:\d{2} \d{4}", format_date(1_700_000_000))

    @pytest.mark.parametrize("epoch", [10**20, -(10**20)])
    def test_date_out_of_range(self, epoch):
        assert format_date(epoch) == "Unknown"


class TestRatios:
    """Test ratio and percentage rendering."""

    def test_truncates_instead_of_rounding(self):
        assert truncate_decimal(0.99, 1) == "0.9"
        assert truncate_decimal(12.345, 2) == "12.34"
        assert truncate_decimal(7.9, 0) == "7"

    def test_percent_drops_decimal_at_hundred(self):
        assert format_percent(99.99) == "99.9"
        assert format_percent(100.0) == "100"

    def test_sentinels(self):
        assert ratio_of(5, 0) == RATIO_INF
        assert ratio_of(0, 0) == RATIO_NA
        assert format_ratio(ratio_of(5, 0)) == "Inf"
        assert format_ratio(ratio_of(0, 0)) == "None"
        assert format_ratio(RATIO_INF, infinity="∞") == "∞"

    def test_plain_ratio(self):
        assert format_ratio(ratio_of(3, 2)) == "1.5"


class TestUnitFormatter:
    """Test sizes and speeds."""

    def test_size_special_values(self):
        fmt = UnitFormatter()

        assert fmt.size(0) == "None"
        assert fmt.size(-1) == "Unknown"

    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (500, "0.50 kB"),
            (1500, "1.50 kB"),
            (1_500_000, "1.50 MB"),
            (250_000_000, "250.0 MB"),
            (2_000_000_000_000, "2.00 TB"),
        ],
    )
    def test_size(self, size, expected):
        assert UnitFormatter().size(size) == expected

    def test_mem_uses_binary_units(self):
        fmt = UnitFormatter()

        assert fmt.mem(2 * 1024 * 1024) == "2.00 MiB"
        assert fmt.mem_mb(4) == "4.00 MiB"

    @pytest.mark.parametrize(
        ("kbps", "expected"),
        [(50, "50 kB/s"), (999, "999 kB/s"), (1500, "1.50 MB/s"), (250_000, "250.0 MB/s")],
    )
    def test_speed_kbps(self, kbps, expected):
        assert UnitFormatter().speed_kbps(kbps) == expected

    def test_speed_bps(self):
        assert UnitFormatter().speed_bps(50_000) == "50 kB/s"

    def test_configured_units(self):
        units = UnitsConfig(speed_base=1024, speed_units=["KiB/s", "MiB/s", "GiB/s", "TiB/s"])
        fmt = UnitFormatter(units)

        assert fmt.kbps_value(2048) == 2.0
        assert fmt.speed_kbps(2048) == "2.00 MiB/s"

    def test_clock_is_injectable(self):
        assert UnitFormatter(clock=lambda: 1234.9).now() == 1234
