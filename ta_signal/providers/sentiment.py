# -*- coding: utf-8 -*-
"""
Sentiment Providers
===================

외부 sentiment provider 연결부.

- SentimentProvider: analyze(symbol, timeframe, headlines) → NewsSentiment
- StaticSentimentProvider: 고정 결과 (스캔/테스트용)
- resolve_sentiment(): provider 없음/실패 → neutral 저신뢰 기본값
- select_headlines(): 심볼 관련 헤드라인 우선 선택

LLM 호출과 뉴스 수집은 이 패키지 범위 밖.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Protocol, Sequence

from ..signal.sentiment import NewsSentiment, DEFAULT_NEUTRAL_CONFIDENCE

logger = logging.getLogger(__name__)

QUOTE_SUFFIXES = re.compile(r'USDT|USDC|USDP|BUSD|PERP|USD|EUR|GBP|JPY|DAI')


class SentimentProvider(Protocol):
    def analyze(self, symbol: str, timeframe: str, headlines: Sequence[str]) -> NewsSentiment:
        ...


class StaticSentimentProvider:
    """항상 같은 sentiment 반환"""

    def __init__(self, sentiment: Optional[NewsSentiment] = None):
        self.sentiment = sentiment or NewsSentiment.neutral()

    def analyze(self, symbol: str, timeframe: str, headlines: Sequence[str]) -> NewsSentiment:
        return self.sentiment


def resolve_sentiment(
    provider: Optional[SentimentProvider],
    symbol: str,
    timeframe: str,
    headlines: Sequence[str] = (),
    *,
    default_confidence: float = DEFAULT_NEUTRAL_CONFIDENCE,
) -> NewsSentiment:
    """
    Provider 호출 + fallback

    provider가 None이거나 예외 발생 시 neutral 기본값 (파이프라인 중단 없음).
    """
    if provider is None:
        return NewsSentiment.neutral(default_confidence, "Sentiment provider not configured")
    try:
        return provider.analyze(symbol, timeframe, list(headlines))
    except Exception as e:
        logger.warning(f"Sentiment provider error for {symbol}: {e}")
        return NewsSentiment.neutral(default_confidence, f"Sentiment unavailable: {e}")


def symbol_key(symbol: str) -> str:
    """'BTCUSDT' → 'BTC' (quote 접미사 제거)"""
    return QUOTE_SUFFIXES.sub('', symbol.upper())


def select_headlines(titles: Iterable[str], symbol: str, limit: int = 10) -> List[str]:
    """
    심볼 키를 포함한 헤드라인 우선, 없으면 앞에서부터 limit개.
    """
    titles = list(titles)
    key = symbol_key(symbol)
    related = [t for t in titles if key and key in t.upper()]
    return (related or titles)[:limit]
