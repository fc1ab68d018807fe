"""Human-readable formatting of sizes, speeds, ratios, durations and dates.

All presenters share one :class:`UnitFormatter` so the unit bases and names
come from the ``[units]`` configuration section.
"""

from __future__ import annotations

import sys
import time
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:  # pragma: no cover
    from trctl.models import UnitsConfig

RATIO_NA = -1
RATIO_INF = -2

# Digits printed before truncation, matches DBL_DIG
_TRUNC_DIGITS = sys.float_info.dig


def truncate_decimal(x: float, precision: int) -> str:
    """Format ``x`` with ``precision`` decimals, truncating instead of rounding."""
    text = f"{x:.{_TRUNC_DIGITS}f}"
    point = text.find(".")
    if point < 0:
        return text
    return text[: point + precision + 1] if precision else text[:point]


def format_percent(x: float) -> str:
    """One truncated decimal below 100, none at or above."""
    return truncate_decimal(x, 1) if x < 100.0 else truncate_decimal(x, 0)


def format_ratio(ratio: float, infinity: str = "Inf") -> str:
    """Format a ratio, honoring the not-applicable and infinite sentinels."""
    if int(ratio) == RATIO_NA:
        return "None"
    if int(ratio) == RATIO_INF:
        return infinity
    return format_percent(ratio)


def ratio_of(numerator: int, denominator: int) -> float:
    """Divide, mapping x/0 to the infinite sentinel and 0/0 to not-applicable."""
    if denominator != 0:
        return numerator / denominator
    if numerator != 0:
        return RATIO_INF
    return RATIO_NA


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}" if n == 1 else f"{n} {unit}s"


def format_duration(seconds: int) -> str:
    """Render the two largest adjacent units, e.g. ``"3 days, 4 hours"``.

    The smaller unit is dropped when the larger one is 4 or more, or when the
    smaller one is zero. Negative input is treated as zero.
    """
    seconds = max(int(seconds), 0)
    days = seconds // 86400
    hours = (seconds % 86400) // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    pairs = (
        (days, "day", hours, "hour"),
        (hours, "hour", minutes, "minute"),
        (minutes, "minute", secs, "second"),
    )
    for big, big_unit, small, small_unit in pairs:
        if big != 0:
            if big >= 4 or small == 0:
                return _plural(big, big_unit)
            return f"{_plural(big, big_unit)}, {_plural(small, small_unit)}"
    return _plural(secs, "second")


def format_duration_with_total(seconds: int) -> str:
    """Duration followed by the total second count in parentheses."""
    total = max(int(seconds), 0)
    return f"{format_duration(total)} ({_plural(total, 'second')})"


def format_eta(eta: int) -> str:
    """Short ETA used in the torrent list column."""
    if eta < 0:
        return "Unknown"
    if eta < 60:
        return f"{eta} sec"
    if eta < 60 * 60:
        return f"{eta // 60} min"
    if eta < 60 * 60 * 24:
        return f"{eta // (60 * 60)} hrs"
    return f"{eta // (60 * 60 * 24)} days"


def format_date(epoch: int) -> str:
    """Local time in the ``ctime`` layout, ``Unknown`` outside the platform's range."""
    try:
        local = time.localtime(epoch)
    except (OverflowError, OSError, ValueError):
        return "Unknown"
    return time.strftime("%a %b %d %H:%M:%S %Y", local)


class UnitFormatter:
    """Formats byte counts and speeds with configurable unit families."""

    def __init__(
        self,
        units: UnitsConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if units is None:
            from trctl.models import UnitsConfig

            units = UnitsConfig()
        self.units = units
        self.clock = clock

    def now(self) -> int:
        """Current time as whole epoch seconds."""
        return int(self.clock())

    @property
    def speed_base(self) -> int:
        return self.units.speed_base

    @staticmethod
    def _scaled(value: float, base: int, names: list[str]) -> str:
        # unit i is worth base**(i+1); anything below one mega is shown in kilo
        scales = [base ** (i + 1) for i in range(4)]
        index = 3
        for i in range(1, 4):
            if value < scales[i]:
                index = i - 1
                break
        unit_value = scales[index]
        scaled = value / unit_value
        if unit_value == 1:
            precision = 0
        elif scaled < 100:
            precision = 2
        else:
            precision = 1
        return f"{scaled:.{precision}f} {names[index]}"

    def size(self, size_bytes: int) -> str:
        """Disk size: ``None`` for zero, ``Unknown`` for negative."""
        if size_bytes < 0:
            return "Unknown"
        if size_bytes == 0:
            return "None"
        return self._scaled(size_bytes, self.units.size_base, self.units.size_units)

    def mem(self, size_bytes: int) -> str:
        """Memory size in the binary family, ``None`` for zero."""
        if size_bytes == 0:
            return "None"
        return self._scaled(size_bytes, self.units.mem_base, self.units.mem_units)

    def mem_mb(self, megabytes: int) -> str:
        """Memory size given in mega units (the daemon's cache-size-mb)."""
        base = self.units.mem_base
        return self._scaled(
            megabytes * base * base, base, self.units.mem_units
        )

    def speed_kbps(self, kbps: float) -> str:
        """Speed given in kilo units per second."""
        base = self.speed_base
        names = self.units.speed_units
        speed = float(kbps)
        if speed <= 999.95:
            return f"{int(speed)} {names[0]}"
        speed /= base
        if speed <= 99.995:
            return f"{speed:.2f} {names[1]}"
        if speed <= 999.95:
            return f"{speed:.1f} {names[1]}"
        speed /= base
        return f"{speed:.1f} {names[2]}"

    def speed_bps(self, bps: int) -> str:
        """Speed given in bytes per second."""
        return self.speed_kbps(bps / self.speed_base)

    def kbps_value(self, bps: int) -> float:
        """Bytes per second as a plain kilo-unit number, for table columns."""
        return bps / self.speed_base
