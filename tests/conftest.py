# -*- coding: utf-8 -*-
"""
공통 테스트 픽스처
==================

Mock OHLCV 생성기 (seed 고정 → 결정론적).
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np
import pandas as pd
import pytest


def generate_mock_ohlcv(
    n: int = 300,
    start_price: float = 100.0,
    drift: float = 0.0,
    volatility: float = 0.01,
    seed: int = 42,
    step_ms: int = 4 * 60 * 60 * 1000,
) -> pd.DataFrame:
    """Mock OHLCV 데이터 생성 (랜덤 워크 + drift)"""
    rng = np.random.RandomState(seed)
    returns = rng.normal(drift, volatility, n)
    closes = start_price * np.cumprod(1 + returns)
    opens = np.concatenate([[start_price], closes[:-1]])
    spread = rng.uniform(0.001, volatility, n)
    highs = np.maximum(opens, closes) * (1 + spread)
    lows = np.minimum(opens, closes) * (1 - spread)
    open_time = 1_700_000_000_000 + np.arange(n, dtype=np.int64) * step_ms

    return pd.DataFrame({
        'open_time': open_time,
        'open': opens,
        'high': highs,
        'low': lows,
        'close': closes,
        'volume': rng.uniform(100, 1000, n),
        'close_time': open_time + step_ms - 1,
    })


@pytest.fixture
def mock_ohlcv():
    return generate_mock_ohlcv()


@pytest.fixture
def uptrend_ohlcv():
    return generate_mock_ohlcv(n=300, drift=0.004, volatility=0.006, seed=7)
