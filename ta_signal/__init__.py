"""
TA Signal - Quantitative Signal Synthesis
=========================================

OHLCV → long/short/neutral 신호 (strength, entry hint, 리스크 배수, 포지션).

Core Components:
- indicators/: 지표 엔진 (마지막 값 스냅샷)
- scoring/: 휴리스틱 점수 (규칙 fold)
- signal/: Multi-TF combiner + 결정론적 gate 신호
- backtest/: Walk-forward 백테스트
- providers/: 외부 candle / sentiment 연결부 (코어 밖)
- config/: YAML + env 설정
"""
from .indicators import IndicatorSnapshot, compute_indicators, compute_indicators_from_arrays
from .scoring import TARecommendation, score_indicators
from .signal import DeterministicSignal, NewsSentiment, build_signal, combine_timeframes
from .backtest import BacktestStats, run_backtest
from .pipeline import SignalReport, generate_signal, analyze_symbol, scan_symbols
from .errors import SignalError, InsufficientDataError, InvalidInputError, UpstreamUnavailableError

__version__ = "0.1.0"

__all__ = [
    'IndicatorSnapshot',
    'compute_indicators',
    'compute_indicators_from_arrays',
    'TARecommendation',
    'score_indicators',
    'DeterministicSignal',
    'NewsSentiment',
    'build_signal',
    'combine_timeframes',
    'BacktestStats',
    'run_backtest',
    'SignalReport',
    'generate_signal',
    'analyze_symbol',
    'scan_symbols',
    'SignalError',
    'InsufficientDataError',
    'InvalidInputError',
    'UpstreamUnavailableError',
]
