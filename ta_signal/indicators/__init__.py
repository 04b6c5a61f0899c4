"""
Indicator Engine
================

OHLCV 시리즈 → 지표 스냅샷 (마지막 값).

- core.py: pandas 기반 지표 시리즈 계산
- snapshot.py: IndicatorSnapshot + compute_indicators + indicator_frame/snapshot_at
"""
from .snapshot import (
    IndicatorSnapshot,
    MACDReading,
    StochReading,
    BollingerReading,
    compute_indicators,
    compute_indicators_from_arrays,
    indicator_frame,
    snapshot_at,
)

__all__ = [
    'IndicatorSnapshot',
    'MACDReading',
    'StochReading',
    'BollingerReading',
    'compute_indicators',
    'compute_indicators_from_arrays',
    'indicator_frame',
    'snapshot_at',
]
