# -*- coding: utf-8 -*-
"""
Indicator Engine Tests
======================

지표 시리즈 / 스냅샷 테스트.
"""
import math

import numpy as np
import pandas as pd
import pytest

from conftest import generate_mock_ohlcv
from ta_signal.errors import InvalidInputError
from ta_signal.indicators import (
    IndicatorSnapshot,
    MACDReading,
    compute_indicators,
    compute_indicators_from_arrays,
    indicator_frame,
    snapshot_at,
)
from ta_signal.indicators import core


def _all_values(snap: IndicatorSnapshot):
    out = []
    for v in snap.to_dict().values():
        if isinstance(v, dict):
            out.extend(v.values())
        else:
            out.append(v)
    return out


class TestCoreSeries:
    """지표 시리즈 함수 테스트"""

    def test_ema_seeded_with_sma(self):
        s = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0])
        out = core.ema(s, 3)
        assert out.iloc[:2].isna().all()
        assert out.iloc[2] == pytest.approx(2.0)
        # alpha = 0.5 → 0.5 * 2 + 0.5 * 4
        assert out.iloc[3] == pytest.approx(3.0)

    def test_sma_lookback_nan(self):
        out = core.sma(pd.Series(np.arange(10, dtype=float)), 5)
        assert out.iloc[:4].isna().all()
        assert out.iloc[4] == pytest.approx(2.0)

    def test_first_true_range_is_high_minus_low(self):
        high = pd.Series([12.0, 13.0])
        low = pd.Series([10.0, 11.5])
        close = pd.Series([11.0, 12.0])
        tr = core.true_range(high, low, close)
        assert tr.iloc[0] == pytest.approx(2.0)
        assert tr.iloc[1] == pytest.approx(2.0)  # max(1.5, 2.0, 0.5)

    def test_rsi_all_gains_is_100(self):
        s = pd.Series(np.arange(1, 40, dtype=float))
        assert core.rsi(s, 14).iloc[-1] == pytest.approx(100.0)

    def test_rsi_flat_is_50(self):
        s = pd.Series([10.0] * 40)
        assert core.rsi(s, 14).iloc[-1] == pytest.approx(50.0)

    def test_stochastic_flat_range_is_50(self):
        s = pd.Series([5.0] * 30)
        k, d = core.stochastic(s, s, s, 14, 3)
        assert k.iloc[-1] == pytest.approx(50.0)
        assert d.iloc[-1] == pytest.approx(50.0)

    def test_obv_accumulates_by_direction(self):
        close = pd.Series([1.0, 2.0, 1.5, 1.5, 3.0])
        volume = pd.Series([10.0, 20.0, 5.0, 7.0, 1.0])
        out = core.obv(close, volume)
        assert list(out) == [0.0, 20.0, 15.0, 15.0, 16.0]

    def test_atr_wilder_hand_worked(self):
        df = pd.DataFrame({
            'high': [10.0, 12.0, 11.0],
            'low': [8.0, 9.0, 9.0],
            'close': [9.0, 11.0, 10.0],
        })
        # TR = [2, 3, 2] → seed mean(2, 3) = 2.5 → 0.5 * 2.5 + 0.5 * 2
        out = core.atr(df, 2)
        assert math.isnan(out.iloc[0])
        assert out.iloc[1] == pytest.approx(2.5)
        assert out.iloc[2] == pytest.approx(2.25)

    def test_macd_hand_worked(self):
        s = pd.Series([1.0, 2.0, 4.0, 8.0, 16.0])
        line, sig, hist = core.macd(s, 2, 3, 2)
        assert line.iloc[:2].isna().all()
        assert line.iloc[2] == pytest.approx(5 / 6)
        assert line.iloc[4] == pytest.approx(239 / 108)
        assert math.isnan(sig.iloc[2])
        assert sig.iloc[3] == pytest.approx(37 / 36)
        assert sig.iloc[4] == pytest.approx(589 / 324)
        assert hist.iloc[4] == pytest.approx(128 / 324)

    def test_stochastic_hand_worked(self):
        high = pd.Series([3.0, 4.0, 5.0, 6.0])
        low = pd.Series([1.0, 2.0, 3.0, 2.0])
        close = pd.Series([2.0, 3.0, 4.0, 3.0])
        k, d = core.stochastic(high, low, close, 3, 2)
        assert k.iloc[:2].isna().all()
        assert k.iloc[2] == pytest.approx(75.0)
        assert k.iloc[3] == pytest.approx(25.0)
        assert d.iloc[3] == pytest.approx(50.0)

    def test_mfi_hand_worked(self):
        df = pd.DataFrame({
            'high': [2.0, 3.0, 2.5],
            'low': [0.0, 1.0, 0.5],
            'close': [1.0, 2.0, 1.5],
            'volume': [10.0, 10.0, 20.0],
        })
        # TP = [1, 2, 1.5] → +flow 20, -flow 30 → 100 - 100 / (1 + 2/3)
        out = core.mfi(df, 2)
        assert out.iloc[2] == pytest.approx(40.0)

    def test_rsi_in_range(self):
        df = generate_mock_ohlcv(200)
        out = core.rsi(df['close'], 14).dropna()
        assert ((out >= 0) & (out <= 100)).all()


class TestSnapshot:
    """compute_indicators 테스트"""

    def test_full_series_all_present(self, mock_ohlcv):
        snap = compute_indicators(mock_ohlcv)
        for name in ('rsi14', 'ema20', 'ema50', 'macd', 'stoch', 'adx14', 'atr14',
                     'bb20', 'obv', 'sma200', 'mfi14', 'volume', 'vol_sma20', 'obv_sma21'):
            assert snap.has(name), name

    def test_all_values_finite(self, mock_ohlcv):
        snap = compute_indicators(mock_ohlcv)
        for v in _all_values(snap):
            assert math.isfinite(v)

    def test_short_series_omits_long_lookbacks(self):
        snap = compute_indicators(generate_mock_ohlcv(30))
        assert snap.ema50 is None
        assert snap.sma200 is None
        assert snap.macd is None
        assert snap.ema20 is not None
        assert snap.rsi14 is not None
        assert snap.bb20 is not None

    def test_199_bars_has_no_sma200(self):
        assert compute_indicators(generate_mock_ohlcv(199)).sma200 is None
        assert compute_indicators(generate_mock_ohlcv(200)).sma200 is not None

    def test_closes_only(self):
        closes = generate_mock_ohlcv(120)['close'].to_numpy()
        snap = compute_indicators_from_arrays(closes)
        assert snap.rsi14 is not None
        assert snap.macd is not None
        assert snap.stoch is None
        assert snap.atr14 is None
        assert snap.adx14 is None
        assert snap.mfi14 is None
        assert snap.obv is None
        assert snap.volume is None

    def test_volume_without_high_low(self):
        df = generate_mock_ohlcv(120)
        snap = compute_indicators_from_arrays(df['close'], volumes=df['volume'])
        assert snap.obv is not None
        assert snap.vol_sma20 is not None
        assert snap.mfi14 is None

    def test_percent_b_unclamped(self):
        closes = [100.0] * 39 + [120.0]
        snap = compute_indicators_from_arrays(closes)
        assert snap.bb20.percent_b > 1.0
        assert snap.bb20.upper > snap.bb20.middle > snap.bb20.lower

    def test_flat_bollinger_width_zero(self):
        snap = compute_indicators_from_arrays([50.0] * 40)
        assert snap.bb20.bandwidth == pytest.approx(0.0, abs=1e-9)

    def test_macd_histogram_consistent(self, mock_ohlcv):
        snap = compute_indicators(mock_ohlcv)
        assert isinstance(snap.macd, MACDReading)
        assert snap.macd.histogram == pytest.approx(snap.macd.macd - snap.macd.signal)

    def test_last_close(self, mock_ohlcv):
        snap = compute_indicators(mock_ohlcv)
        assert snap.last_close == pytest.approx(mock_ohlcv['close'].iloc[-1])

    def test_require_nested(self):
        snap = IndicatorSnapshot(ema20=1.0, macd=MACDReading(1.0, 0.5, 0.5))
        assert snap.require('ema20', 'macd.histogram') == (1.0, 0.5)
        assert snap.require('ema20', 'ema50') is None
        assert snap.require('stoch.k') is None


class TestInvalidInput:
    """입력 검증 테스트"""

    def test_empty(self):
        with pytest.raises(InvalidInputError):
            compute_indicators_from_arrays([])

    def test_nan(self):
        with pytest.raises(InvalidInputError):
            compute_indicators_from_arrays([1.0, float('nan'), 2.0])

    def test_infinity(self):
        with pytest.raises(InvalidInputError):
            compute_indicators_from_arrays([1.0, 2.0], highs=[1.0, float('inf')], lows=[1.0, 2.0])

    def test_length_mismatch(self):
        with pytest.raises(InvalidInputError):
            compute_indicators_from_arrays([1.0, 2.0, 3.0], volumes=[1.0, 2.0])

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            compute_indicators_from_arrays([])


class TestReferenceValues:
    """seed 고정 mock 데이터의 마지막 값 (외부 TA 구현과 교차 검증한 값)"""

    def test_last_values(self):
        snap = compute_indicators(generate_mock_ohlcv(300))
        assert snap.atr14 == pytest.approx(1.750668, abs=1e-5)
        assert snap.adx14 == pytest.approx(16.563172, abs=1e-5)
        assert snap.rsi14 == pytest.approx(58.599038, abs=1e-5)
        assert snap.mfi14 == pytest.approx(49.460067, abs=1e-5)

    def test_series_match_snapshot(self):
        df = generate_mock_ohlcv(300)
        ind = indicator_frame(df)
        snap = compute_indicators(df)
        assert ind['atr14'].iloc[-1] == pytest.approx(snap.atr14)
        assert ind['macd_hist'].iloc[-1] == pytest.approx(snap.macd.histogram)
        assert ind['stoch_k'].iloc[-1] == pytest.approx(snap.stoch.k)


class TestSnapshotAt:
    """indicator_frame 행 = 앞부분만으로 계산한 스냅샷"""

    @pytest.mark.parametrize("i", [10, 35, 60, 150, 210, 299])
    def test_row_equals_prefix_snapshot(self, i):
        df = generate_mock_ohlcv(300)
        from_row = snapshot_at(indicator_frame(df), i)
        from_prefix = compute_indicators(df.iloc[:i + 1])
        assert from_row.to_dict().keys() == from_prefix.to_dict().keys()
        assert _all_values(from_row) == pytest.approx(_all_values(from_prefix), rel=1e-9, abs=1e-9)

    def test_negative_index_is_last_bar(self, mock_ohlcv):
        assert snapshot_at(indicator_frame(mock_ohlcv), -1) == compute_indicators(mock_ohlcv)
