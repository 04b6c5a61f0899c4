"""
Timeframe Configuration Module
==============================

Exchange interval handling for the signal pipeline:
- TimeframeSpec: Defines bar duration
- validate_interval(): Reject unknown exchange intervals early
- get_higher_timeframe(): Confirmation timeframe for multi-TF scoring

Usage:
    from ta_signal.utils.timeframe import get_higher_timeframe, interval_to_ms

    confirm = get_higher_timeframe("1h")  # -> '4h'
    step_ms = interval_to_ms("15m")       # -> 900000

Confirmation Reference:
    15m -> 1h, 1h -> 4h, 4h -> 1d, 1d -> 1w
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


# Exchange kline intervals (minutes per bar)
TIMEFRAME_MINUTES: Dict[str, int] = {
    '1m': 1,
    '3m': 3,
    '5m': 5,
    '15m': 15,
    '30m': 30,
    '1h': 60,
    '2h': 120,
    '4h': 240,
    '6h': 360,
    '8h': 480,
    '12h': 720,
    '1d': 1440,
    '3d': 4320,
    '1w': 10080,
    '1M': 43200,  # nominal 30 days
}

MS_PER_MINUTE = 60_000


def _canonical(tf: str) -> str:
    """'1M' (month) is the only case-sensitive interval."""
    tf = tf.strip()
    if tf == '1M':
        return tf
    return tf.lower()


@dataclass(frozen=True)
class TimeframeSpec:
    """Immutable timeframe specification."""
    name: str
    minutes: int

    @classmethod
    def from_string(cls, tf: str) -> TimeframeSpec:
        """
        Parse interval string like '15m', '1h', '1d'.

        Raises:
            ValueError: If interval is not recognized
        """
        name = _canonical(tf)
        if name not in TIMEFRAME_MINUTES:
            valid = list(TIMEFRAME_MINUTES.keys())
            raise ValueError(f"Unknown timeframe: '{tf}'. Valid options: {valid}")
        return cls(name=name, minutes=TIMEFRAME_MINUTES[name])

    @property
    def milliseconds(self) -> int:
        return self.minutes * MS_PER_MINUTE

    def __str__(self) -> str:
        return self.name


def validate_interval(tf: str) -> str:
    """Return the canonical interval name or raise ValueError."""
    return TimeframeSpec.from_string(tf).name


def interval_to_ms(tf: str) -> int:
    """Bar duration in milliseconds."""
    return TimeframeSpec.from_string(tf).milliseconds


# ============================================================
# Timeframe Hierarchy (for confirmation timeframe)
# ============================================================
# Ordered from highest (1w) to lowest (1m)
TF_HIERARCHY: list[str] = ['1w', '1d', '4h', '1h', '15m', '5m', '1m']


def get_higher_timeframe(tf: str) -> str | None:
    """
    Get the next higher timeframe in the hierarchy.

    Intervals outside the hierarchy (e.g. '2h', '6h') snap to the first
    hierarchy entry that is strictly longer.

    Examples:
        >>> get_higher_timeframe('15m')
        '1h'
        >>> get_higher_timeframe('4h')
        '1d'
        >>> get_higher_timeframe('1w')
        None
    """
    spec = TimeframeSpec.from_string(tf)
    longer = [t for t in TF_HIERARCHY if TIMEFRAME_MINUTES[t] > spec.minutes]
    if not longer:
        return None  # Already at highest
    return min(longer, key=lambda t: TIMEFRAME_MINUTES[t])


def get_confirmation_timeframe(tf: str) -> str:
    """Confirmation TF for multi-TF scoring; the highest TF confirms itself."""
    higher = get_higher_timeframe(tf)
    return higher if higher is not None else validate_interval(tf)
