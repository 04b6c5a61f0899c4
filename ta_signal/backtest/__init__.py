# -*- coding: utf-8 -*-
"""
Backtest Module
===============

Walk-forward 백테스트 엔진.
"""
from .walk_forward import (
    WalkForwardConfig,
    SimulatedTrade,
    BacktestStats,
    simulate_next_bar,
    run_backtest,
    format_backtest_stats,
)

__all__ = [
    'WalkForwardConfig',
    'SimulatedTrade',
    'BacktestStats',
    'simulate_next_bar',
    'run_backtest',
    'format_backtest_stats',
]
