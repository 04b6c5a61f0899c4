# -*- coding: utf-8 -*-
"""
Indicator Snapshot
==================

Series 하나에서 각 지표의 "마지막 값"만 모은 스냅샷.

필드 규약:
- None = InsufficientData (lookback 부족 또는 입력 시리즈 없음)
- 존재하는 값은 항상 유한 (NaN/Infinity 누출 없음)
- 규칙/게이트는 snapshot.require(...)로 필요한 필드를 한번에 요청하고,
  하나라도 없으면 None을 받아 규칙 자체를 건너뜀

사용법:
```python
from ta_signal.indicators import compute_indicators

snap = compute_indicators(df)  # df: close (+ high/low/volume)
values = snap.require('ema20', 'ema50')
if values is not None:
    ema20, ema50 = values

# 봉 단위 재생 (백테스트)
ind = indicator_frame(df)
snap_i = snapshot_at(ind, i)
```
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional, Tuple

import pandas as pd

from ..data.bars import frame_from_arrays, validate_frame
from ..utils.numeric import finite_or_none
from . import core


@dataclass(frozen=True)
class MACDReading:
    macd: float
    signal: float
    histogram: float


@dataclass(frozen=True)
class StochReading:
    k: float
    d: float


@dataclass(frozen=True)
class BollingerReading:
    middle: float
    upper: float
    lower: float
    bandwidth: float
    percent_b: float  # unclamped: 밴드 밖이면 [0,1] 초과


@dataclass(frozen=True)
class IndicatorSnapshot:
    """지표 마지막 값 스냅샷 (None = 데이터 부족)"""
    rsi14: Optional[float] = None
    ema20: Optional[float] = None
    ema50: Optional[float] = None
    macd: Optional[MACDReading] = None
    stoch: Optional[StochReading] = None
    adx14: Optional[float] = None
    atr14: Optional[float] = None
    bb20: Optional[BollingerReading] = None
    obv: Optional[float] = None
    sma200: Optional[float] = None
    mfi14: Optional[float] = None
    volume: Optional[float] = None
    vol_sma20: Optional[float] = None
    obv_sma21: Optional[float] = None
    last_close: Optional[float] = None

    def require(self, *paths: str) -> Optional[Tuple[Any, ...]]:
        """
        필요한 필드를 한번에 조회.

        'macd.histogram', 'bb20.percent_b' 처럼 중첩 필드도 지원.
        하나라도 없으면 None (규칙 skip 신호).
        """
        values = []
        for path in paths:
            value: Any = self
            for part in path.split('.'):
                value = getattr(value, part, None)
                if value is None:
                    return None
            values.append(value)
        return tuple(values)

    def has(self, path: str) -> bool:
        return self.require(path) is not None

    def to_dict(self) -> Dict[str, Any]:
        """Dictionary 변환 (None 필드 제외)"""
        return {k: v for k, v in asdict(self).items() if v is not None}


def indicator_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    DataFrame → 지표 시리즈 DataFrame (입력과 같은 행 수)

    모든 지표는 과거 방향만 참조하므로 i번째 행은 df.iloc[:i + 1]만으로
    계산한 값과 같음. 백테스트는 이 프레임을 한 번 만들고 행 단위로 읽음.

    Raises:
        InvalidInputError: 빈 시리즈 / 비유한 값
    """
    validate_frame(df)
    frame = df.reset_index(drop=True)
    close = frame['close'].astype(float)
    has_hl = 'high' in frame.columns and 'low' in frame.columns
    has_vol = 'volume' in frame.columns

    line, sig, hist = core.macd(close, 12, 26, 9)
    mid, upper, lower = core.bollinger(close, 20, 2.0)
    cols: Dict[str, pd.Series] = {
        'close': close,
        'rsi14': core.rsi(close, 14),
        'ema20': core.ema(close, 20),
        'ema50': core.ema(close, 50),
        'macd': line,
        'macd_signal': sig,
        'macd_hist': hist,
        'sma200': core.sma(close, 200),
        'bb_mid': mid,
        'bb_upper': upper,
        'bb_lower': lower,
    }

    if has_hl:
        high = frame['high'].astype(float)
        low = frame['low'].astype(float)
        hlc = pd.DataFrame({'high': high, 'low': low, 'close': close})
        k, d = core.stochastic(high, low, close, 14, 3)
        cols['stoch_k'] = k
        cols['stoch_d'] = d
        cols['atr14'] = core.atr(hlc, 14)
        cols['adx14'] = core.adx(hlc, 14)

    if has_vol:
        volume = frame['volume'].astype(float)
        obv_series = core.obv(close, volume)
        cols['obv'] = obv_series
        cols['obv_sma21'] = core.sma(obv_series, 21)
        cols['volume'] = volume
        cols['vol_sma20'] = core.sma(volume, 20)
        if has_hl:
            hlcv = pd.DataFrame({'high': high, 'low': low, 'close': close, 'volume': volume})
            cols['mfi14'] = core.mfi(hlcv, 14)

    return pd.DataFrame(cols)


def _bollinger_reading(close: Optional[float], m, u, lo) -> Optional[BollingerReading]:
    if close is None or m is None or u is None or lo is None:
        return None
    width = u - lo
    return BollingerReading(
        middle=m,
        upper=u,
        lower=lo,
        bandwidth=width / (m if m != 0 else 1.0),
        percent_b=(close - lo) / (width if width != 0 else 1.0),
    )


def snapshot_at(indicators: pd.DataFrame, i: int) -> IndicatorSnapshot:
    """indicator_frame() 결과의 i번째 행 → IndicatorSnapshot (음수 인덱스 허용)"""
    row = indicators.iloc[i]

    def get(name: str) -> Optional[float]:
        return finite_or_none(row.get(name))

    macd_values = (get('macd'), get('macd_signal'), get('macd_hist'))
    k, d = get('stoch_k'), get('stoch_d')
    close = get('close')

    return IndicatorSnapshot(
        rsi14=get('rsi14'),
        ema20=get('ema20'),
        ema50=get('ema50'),
        macd=None if None in macd_values else MACDReading(*macd_values),
        stoch=None if k is None or d is None else StochReading(k=k, d=d),
        adx14=get('adx14'),
        atr14=get('atr14'),
        bb20=_bollinger_reading(close, get('bb_mid'), get('bb_upper'), get('bb_lower')),
        obv=get('obv'),
        sma200=get('sma200'),
        mfi14=get('mfi14'),
        volume=get('volume'),
        vol_sma20=get('vol_sma20'),
        obv_sma21=get('obv_sma21'),
        last_close=close,
    )


def compute_indicators(df: pd.DataFrame) -> IndicatorSnapshot:
    """
    DataFrame → IndicatorSnapshot

    Args:
        df: close 필수. high/low 없으면 Stoch/ADX/ATR/MFI 생략,
            volume 없으면 OBV/MFI/volume 계열 생략.

    Returns:
        IndicatorSnapshot (짧은 시리즈는 해당 필드 None)

    Raises:
        InvalidInputError: 빈 시리즈 / 비유한 값
    """
    return snapshot_at(indicator_frame(df), -1)


def compute_indicators_from_arrays(
    closes,
    highs=None,
    lows=None,
    volumes=None,
) -> IndicatorSnapshot:
    """병렬 배열 입력 버전 (closes 필수, 나머지 선택)"""
    return compute_indicators(frame_from_arrays(closes, highs, lows, volumes))
