"""
Technical Indicators
====================

RSI, EMA, MACD, Stochastic, ADX, ATR, Bollinger, OBV, MFI 시리즈 계산 함수.

규약:
- 입력은 RangeIndex pd.Series
- lookback이 부족한 구간은 NaN (0이 아님)
- EMA / Wilder smoothing은 첫 period개 값의 SMA로 seed
"""
from __future__ import annotations
from typing import Tuple

import numpy as np
import pandas as pd


def _nan_like(values: pd.Series) -> pd.Series:
    return pd.Series(np.nan, index=values.index, dtype=float)


def seeded_ewm(values: pd.Series, period: int, alpha: float) -> pd.Series:
    """
    SMA-seeded exponential smoothing.

    첫 유효값부터 period개의 SMA를 seed로 사용하고 이후
    y[t] = (1 - alpha) * y[t-1] + alpha * x[t].
    """
    out = _nan_like(values)
    valid = values.dropna()
    if period <= 0 or len(valid) < period:
        return out
    seed_label = valid.index[period - 1]
    tail = values.loc[seed_label:].copy()
    tail.iloc[0] = valid.iloc[:period].mean()
    out.loc[seed_label:] = tail.ewm(alpha=alpha, adjust=False).mean().to_numpy()
    return out


def sma(close: pd.Series, length: int) -> pd.Series:
    """Simple Moving Average"""
    return close.rolling(length, min_periods=length).mean()


def ema(close: pd.Series, span: int) -> pd.Series:
    """Exponential Moving Average (SMA seed)"""
    return seeded_ewm(close, span, 2.0 / (span + 1))


def wilder(values: pd.Series, length: int) -> pd.Series:
    """Wilder's smoothing (alpha = 1/length, SMA seed)"""
    return seeded_ewm(values, length, 1.0 / length)


def true_range(high: pd.Series, low: pd.Series, close: pd.Series) -> pd.Series:
    """True Range 계산 (첫 봉은 high - low)"""
    prev_close = close.shift(1)
    tr = pd.concat([
        high - low,
        (high - prev_close).abs(),
        (low - prev_close).abs()
    ], axis=1).max(axis=1)
    return tr


def rsi(close: pd.Series, length: int = 14) -> pd.Series:
    """Relative Strength Index 계산 (Wilder's smoothing)"""
    delta = close.diff()
    up = delta.clip(lower=0.0)
    down = (-delta).clip(lower=0.0)
    avg_up = wilder(up, length)
    avg_down = wilder(down, length)

    with np.errstate(divide='ignore', invalid='ignore'):
        rs = avg_up / avg_down
        out = 100.0 - (100.0 / (1.0 + rs))
    # 손실 0: 상승만 있으면 100, 완전 횡보면 50
    flat = avg_down == 0
    out = out.where(~flat, np.where(avg_up > 0, 100.0, 50.0))
    return out.where(avg_up.notna() & avg_down.notna())


def macd(
    close: pd.Series,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> Tuple[pd.Series, pd.Series, pd.Series]:
    """MACD line, signal line, histogram"""
    line = ema(close, fast) - ema(close, slow)
    sig = ema(line, signal)
    return line, sig, line - sig


def stochastic(
    high: pd.Series,
    low: pd.Series,
    close: pd.Series,
    length: int = 14,
    smooth_d: int = 3,
) -> Tuple[pd.Series, pd.Series]:
    """Stochastic %K / %D (range 0이면 %K = 50)"""
    hh = high.rolling(length, min_periods=length).max()
    ll = low.rolling(length, min_periods=length).min()
    rng = hh - ll
    with np.errstate(divide='ignore', invalid='ignore'):
        k = 100.0 * (close - ll) / rng
    k = k.where(rng != 0, 50.0).where(rng.notna())
    d = sma(k, smooth_d)
    return k, d


def atr(df: pd.DataFrame, length: int = 14) -> pd.Series:
    """Average True Range 계산 (가격 단위, % 아님)"""
    tr = true_range(df["high"], df["low"], df["close"])
    return wilder(tr, length)


def adx(df: pd.DataFrame, length: int = 14) -> pd.Series:
    """Average Directional Index 계산"""
    high, low, close = df["high"], df["low"], df["close"]
    up_move = high.diff()
    down_move = -low.diff()
    plus_dm = pd.Series(
        np.where((up_move > down_move) & (up_move > 0), up_move, 0.0), index=df.index
    ).where(up_move.notna())
    minus_dm = pd.Series(
        np.where((down_move > up_move) & (down_move > 0), down_move, 0.0), index=df.index
    ).where(down_move.notna())

    # DM과 같은 구간(두 번째 봉부터)의 TR
    tr = true_range(high, low, close).where(up_move.notna())
    atr_ = wilder(tr, length)

    with np.errstate(divide='ignore', invalid='ignore'):
        plus_di = 100.0 * wilder(plus_dm, length) / atr_
        minus_di = 100.0 * wilder(minus_dm, length) / atr_
        plus_di = plus_di.where(atr_ != 0, 0.0).where(atr_.notna())
        minus_di = minus_di.where(atr_ != 0, 0.0).where(atr_.notna())
        di_sum = plus_di + minus_di
        dx = 100.0 * (plus_di - minus_di).abs() / di_sum
    dx = dx.where(di_sum != 0, 0.0).where(di_sum.notna())
    return wilder(dx, length)


def bollinger(
    close: pd.Series,
    length: int = 20,
    mult: float = 2.0,
) -> Tuple[pd.Series, pd.Series, pd.Series]:
    """Bollinger middle / upper / lower (모집단 표준편차)"""
    mid = sma(close, length)
    sd = close.rolling(length, min_periods=length).std(ddof=0)
    return mid, mid + mult * sd, mid - mult * sd


def obv(close: pd.Series, volume: pd.Series) -> pd.Series:
    """On-Balance Volume (첫 봉 = 0)"""
    direction = np.sign(close.diff()).fillna(0.0)
    return (direction * volume).cumsum()


def mfi(df: pd.DataFrame, length: int = 14) -> pd.Series:
    """Money Flow Index (거래량 가중 RSI)"""
    tp = (df["high"] + df["low"] + df["close"]) / 3.0
    flow = tp * df["volume"]
    tp_diff = tp.diff()
    pos = flow.where(tp_diff > 0, 0.0).where(tp_diff.notna())
    neg = flow.where(tp_diff < 0, 0.0).where(tp_diff.notna())
    pos_sum = pos.rolling(length, min_periods=length).sum()
    neg_sum = neg.rolling(length, min_periods=length).sum()

    with np.errstate(divide='ignore', invalid='ignore'):
        out = 100.0 - 100.0 / (1.0 + pos_sum / neg_sum)
    out = out.where(neg_sum != 0, np.where(pos_sum > 0, 100.0, 50.0))
    return out.where(pos_sum.notna() & neg_sum.notna())
