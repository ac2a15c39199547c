"""Display formatting for benchmark values."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from benchmarkdotnet_publisher.regression.models import RegressionKind

DURATION_UNITS: tuple[str, ...] = ("ns", "µs", "ms", "s")
MEMORY_UNITS: tuple[str, ...] = ("bytes", "KB", "MB", "GB")


def format_number(value: float) -> str:
    """Format a number for display.

    Integers have no decimal places, values above 0.1 have two, and
    anything smaller is left as-is.
    """
    if float(value).is_integer():
        return f"{value:.0f}"
    if value > 0.1:
        return f"{value:.2f}"
    return str(value)


def scale_values(previous: float, current: float, kind: RegressionKind) -> tuple[str, str]:
    """Scale a previous/current pair to a shared unit and format them.

    Both values are scaled together by 1000 at a time while the smaller of
    the two is at least 1000 and a larger unit is available.

    Args:
        previous: The previous value, in nanoseconds or bytes.
        current: The current value, in nanoseconds or bytes.
        kind: Whether the values are durations or memory.

    Returns:
        The formatted previous and current values, with units.

    Example:
        >>> scale_values(1_500_000, 4_500_000, "duration")
        ('1.50 ms', '4.50 ms')
    """
    units = DURATION_UNITS if kind == "duration" else MEMORY_UNITS
    index = 0

    while min(previous, current) >= 1000 and index < len(units) - 1:
        previous *= 1e-3
        current *= 1e-3
        index += 1

    unit = units[index]
    return f"{format_number(previous)} {unit}", f"{format_number(current)} {unit}"
