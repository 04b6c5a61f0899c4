"""
Providers Module
================

외부 협력자 (순수 코어 밖):
- candles.py: 거래소 klines provider + fallback 체인
- sentiment.py: sentiment provider 연결 + 기본값
"""
from .candles import (
    CandleProvider,
    BinanceCandleProvider,
    CoinbaseCandleProvider,
    CryptoCompareCandleProvider,
    FallbackCandleProvider,
    build_default_provider,
    parse_symbol,
)
from .sentiment import (
    SentimentProvider,
    StaticSentimentProvider,
    resolve_sentiment,
    symbol_key,
    select_headlines,
)

__all__ = [
    'CandleProvider',
    'BinanceCandleProvider',
    'CoinbaseCandleProvider',
    'CryptoCompareCandleProvider',
    'FallbackCandleProvider',
    'build_default_provider',
    'parse_symbol',
    'SentimentProvider',
    'StaticSentimentProvider',
    'resolve_sentiment',
    'symbol_key',
    'select_headlines',
]
