"""
Data Module
===========

OHLCV Bar 레코드, DataFrame 변환 및 입력 검증.
"""
from .bars import (
    Bar,
    OHLCV_COLUMNS,
    bars_to_frame,
    frame_to_bars,
    normalize_frame,
    validate_frame,
    frame_from_arrays,
    extract_arrays,
)

__all__ = [
    'Bar',
    'OHLCV_COLUMNS',
    'bars_to_frame',
    'frame_to_bars',
    'normalize_frame',
    'validate_frame',
    'frame_from_arrays',
    'extract_arrays',
]
