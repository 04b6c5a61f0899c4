# -*- coding: utf-8 -*-
"""
OHLCV Bars
==========

Bar 레코드와 DataFrame 변환.

Series 규약:
- pandas DataFrame, 컬럼 open/high/low/close/volume (+ open_time/close_time ms)
- open_time 오름차순, 중복 timestamp 없음
- close 필수, high/low/volume은 선택 (없으면 관련 지표 생략)
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd

from ..errors import InvalidInputError


OHLCV_COLUMNS = ['open', 'high', 'low', 'close', 'volume']
TIME_COLUMNS = ['open_time', 'close_time']


@dataclass(frozen=True)
class Bar:
    """단일 캔들 (가격/거래량 float, 시간 ms)"""
    open_time: int
    open: float
    high: float
    low: float
    close: float
    volume: float
    close_time: int


def bars_to_frame(bars: Iterable[Bar]) -> pd.DataFrame:
    """Bar 리스트 → 정렬/중복제거된 DataFrame"""
    rows = [asdict(b) for b in bars]
    df = pd.DataFrame(rows, columns=TIME_COLUMNS[:1] + OHLCV_COLUMNS + TIME_COLUMNS[1:])
    return normalize_frame(df)


def frame_to_bars(df: pd.DataFrame) -> List[Bar]:
    """DataFrame → Bar 리스트 (open_time/close_time 없으면 행 번호 사용)"""
    bars = []
    for i, row in enumerate(df.itertuples(index=False)):
        rec = row._asdict()
        open_time = int(rec.get('open_time', i))
        bars.append(Bar(
            open_time=open_time,
            open=float(rec.get('open', rec['close'])),
            high=float(rec.get('high', rec['close'])),
            low=float(rec.get('low', rec['close'])),
            close=float(rec['close']),
            volume=float(rec.get('volume', 0.0)),
            close_time=int(rec.get('close_time', open_time)),
        ))
    return bars


def normalize_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    open_time 오름차순 정렬 + 중복 timestamp 제거 (마지막 값 유지).

    open_time 컬럼이 없으면 행 순서를 그대로 신뢰.
    """
    out = df.copy()
    if 'open_time' in out.columns:
        out = out.sort_values('open_time', kind='mergesort')
        out = out.drop_duplicates(subset='open_time', keep='last')
    for col in OHLCV_COLUMNS:
        if col in out.columns:
            out[col] = out[col].astype(float)
    return out.reset_index(drop=True)


def validate_frame(df: pd.DataFrame) -> None:
    """
    입력 Series 검증.

    Raises:
        InvalidInputError: 빈 프레임, close 컬럼 없음, NaN/Infinity 포함
    """
    if df is None or len(df) == 0:
        raise InvalidInputError("Empty series")
    if 'close' not in df.columns:
        raise InvalidInputError("Series has no 'close' column")
    for col in OHLCV_COLUMNS:
        if col not in df.columns:
            continue
        values = pd.to_numeric(df[col], errors='coerce').to_numpy(dtype=float)
        if not np.isfinite(values).all():
            bad = int((~np.isfinite(values)).sum())
            raise InvalidInputError(f"Column '{col}' has {bad} non-finite value(s)")


def frame_from_arrays(
    closes,
    highs=None,
    lows=None,
    volumes=None,
) -> pd.DataFrame:
    """
    병렬 배열 → DataFrame.

    Raises:
        InvalidInputError: 배열 길이 불일치
    """
    closes = np.asarray(closes, dtype=float)
    data = {'close': closes}
    for name, arr in (('high', highs), ('low', lows), ('volume', volumes)):
        if arr is None:
            continue
        arr = np.asarray(arr, dtype=float)
        if len(arr) != len(closes):
            raise InvalidInputError(
                f"Length mismatch: {name}={len(arr)} vs close={len(closes)}"
            )
        data[name] = arr
    return pd.DataFrame(data)


def extract_arrays(
    df: pd.DataFrame,
) -> Tuple[np.ndarray, Optional[np.ndarray], Optional[np.ndarray], Optional[np.ndarray]]:
    """(closes, highs, lows, volumes) - 없는 컬럼은 None"""
    def _col(name):
        return df[name].to_numpy(dtype=float) if name in df.columns else None

    return _col('close'), _col('high'), _col('low'), _col('volume')
