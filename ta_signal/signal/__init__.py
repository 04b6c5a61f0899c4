"""
Signal Module
=============

- combiner.py: Multi-TF 점수 결합
- deterministic.py: Gate 기반 결정론적 신호
- sentiment.py: 뉴스 sentiment 타입
"""
from .combiner import (
    combine_timeframes,
    timeframes_conflict,
)
from .deterministic import (
    DeterministicSignal,
    GateResult,
    build_signal,
    evaluate_gates,
    decide_direction,
    entry_hint_for,
    risk_multiples,
    base_strength,
    position_size_for,
    format_signal,
)
from .sentiment import (
    NewsSentiment,
    parse_sentiment_payload,
)

__all__ = [
    'combine_timeframes',
    'timeframes_conflict',
    'DeterministicSignal',
    'GateResult',
    'build_signal',
    'evaluate_gates',
    'decide_direction',
    'entry_hint_for',
    'risk_multiples',
    'base_strength',
    'position_size_for',
    'format_signal',
    'NewsSentiment',
    'parse_sentiment_payload',
]
