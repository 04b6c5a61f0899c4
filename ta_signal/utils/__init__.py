"""
Utils Package
=============

Utility modules for ta_signal.
"""
from .numeric import (
    clamp,
    clamp01,
    round_half_up,
    sign,
    finite_or_none,
    format_price,
)
from .timeframe import (
    TimeframeSpec,
    TIMEFRAME_MINUTES,
    TF_HIERARCHY,
    validate_interval,
    interval_to_ms,
    get_higher_timeframe,
    get_confirmation_timeframe,
)

__all__ = [
    'clamp',
    'clamp01',
    'round_half_up',
    'sign',
    'finite_or_none',
    'format_price',
    'TimeframeSpec',
    'TIMEFRAME_MINUTES',
    'TF_HIERARCHY',
    'validate_interval',
    'interval_to_ms',
    'get_higher_timeframe',
    'get_confirmation_timeframe',
]
