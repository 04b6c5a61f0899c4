# -*- coding: utf-8 -*-
"""
News Sentiment
==============

외부 sentiment provider 결과 타입 + payload 검증.

- overall: 'bullish' | 'bearish' | 'neutral'
- confidence: [0, 1] clamp
- provider가 없거나 실패하면 neutral 저신뢰 기본값 사용
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Tuple

from ..utils.numeric import clamp01, finite_or_none


SentimentLabel = Literal['bullish', 'bearish', 'neutral']
SENTIMENT_LABELS = ('bullish', 'bearish', 'neutral')

DEFAULT_NEUTRAL_CONFIDENCE = 0.3
MAX_REASONS = 5


@dataclass(frozen=True)
class NewsSentiment:
    """뉴스 sentiment (외부 입력)"""
    overall: SentimentLabel = 'neutral'
    confidence: float = DEFAULT_NEUTRAL_CONFIDENCE
    reasons: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.overall not in SENTIMENT_LABELS:
            raise ValueError(f"Unknown sentiment: '{self.overall}'. Valid: {SENTIMENT_LABELS}")
        conf = finite_or_none(self.confidence)
        object.__setattr__(self, 'confidence', clamp01(conf if conf is not None else 0.0))
        object.__setattr__(self, 'reasons', tuple(self.reasons))

    @classmethod
    def neutral(
        cls,
        confidence: float = DEFAULT_NEUTRAL_CONFIDENCE,
        reason: str = "No sentiment available",
    ) -> "NewsSentiment":
        return cls(overall='neutral', confidence=confidence, reasons=(reason,))

    @property
    def direction(self) -> int:
        """bullish=+1, bearish=-1, neutral=0"""
        return {'bullish': 1, 'bearish': -1}.get(self.overall, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'overall': self.overall,
            'confidence': self.confidence,
            'reasons': list(self.reasons),
        }


def parse_sentiment_payload(payload: Any) -> NewsSentiment:
    """
    외부 JSON payload → NewsSentiment

    잘못된 overall / 파싱 실패 → neutral 0.3 ("Failed to parse sentiment").
    confidence는 [0,1] clamp, reasons는 최대 5개.
    """
    if not isinstance(payload, dict):
        return NewsSentiment.neutral(reason="Failed to parse sentiment")
    overall = payload.get('overall')
    if overall not in SENTIMENT_LABELS:
        return NewsSentiment.neutral(reason="Failed to parse sentiment")
    confidence = finite_or_none(payload.get('confidence')) or 0.0
    reasons = payload.get('reasons')
    reasons = tuple(str(r) for r in reasons[:MAX_REASONS]) if isinstance(reasons, list) else ()
    return NewsSentiment(overall=overall, confidence=confidence, reasons=reasons)
