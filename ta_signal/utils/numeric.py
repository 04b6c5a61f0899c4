# -*- coding: utf-8 -*-
"""
Numeric Helpers
===============

Clamp / rounding / finiteness helpers shared by the scorer, the signal
builder and the backtester.

round_half_up() is the single rounding rule: halves go toward +inf,
so round_half_up(2.5) == 3 and round_half_up(-2.5) == -2.
"""
from __future__ import annotations

import math
from typing import Optional

import numpy as np


def clamp(x: float, lo: float, hi: float) -> float:
    """x를 [lo, hi] 범위로 제한"""
    return max(lo, min(hi, x))


def clamp01(x: float) -> float:
    """x를 [0, 1] 범위로 제한"""
    return clamp(x, 0.0, 1.0)


def round_half_up(x: float) -> int:
    """Round to nearest integer, halves toward +inf."""
    return int(math.floor(x + 0.5))


def sign(x: float) -> int:
    if x > 0:
        return 1
    if x < 0:
        return -1
    return 0


def finite_or_none(value) -> Optional[float]:
    """유한한 float이면 반환, NaN/Infinity/None이면 None"""
    if value is None:
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if np.isfinite(f) else None


def format_price(value: Optional[float], precision: int = 4) -> str:
    """표시용 가격 포맷 (내부 계산은 full precision 유지)"""
    if value is None:
        return "N/A"
    return f"{value:,.{precision}f}"
