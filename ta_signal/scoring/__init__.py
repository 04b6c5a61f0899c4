"""
Scoring Module
==============

지표 스냅샷 → 휴리스틱 점수 + reason 목록.
"""
from .heuristic import (
    TARecommendation,
    ScoreState,
    SCORING_RULES,
    score_indicators,
    volume_direction,
    format_recommendation,
)

__all__ = [
    'TARecommendation',
    'ScoreState',
    'SCORING_RULES',
    'score_indicators',
    'volume_direction',
    'format_recommendation',
]
