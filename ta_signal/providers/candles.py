# -*- coding: utf-8 -*-
"""
Candlestick Providers
=====================

거래소 klines → 정규화된 OHLCV DataFrame.

우선순위 fallback:
1. Binance (limit 10..1000)
2. Coinbase (15m/1h/4h/1d 만 지원, limit 10..300)
3. CryptoCompare (histominute/histohour/histoday, limit 10..2000)

FallbackCandleProvider는 순서대로 시도하고 첫 성공에서 멈춤.
실패 사유는 모두 보존 → 전부 실패 시 UpstreamUnavailableError.

사용법:
```python
from ta_signal.providers import build_default_provider

provider = build_default_provider()
df = provider.fetch("BTCUSDT", "4h", 500)
```
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

import pandas as pd
import requests

from ..data.bars import OHLCV_COLUMNS, normalize_frame
from ..errors import UpstreamUnavailableError
from ..utils.timeframe import interval_to_ms, validate_interval

logger = logging.getLogger(__name__)

QUOTE_PATTERN = re.compile(r'^(.*?)(USDT|USD|USDC|BUSD|EUR|GBP|JPY|AUD|CAD)$')


class CandleProvider(Protocol):
    name: str

    def fetch(self, symbol: str, interval: str, limit: int) -> pd.DataFrame:
        ...


def parse_symbol(symbol: str) -> Tuple[str, str]:
    """'BTCUSDT' → ('BTC', 'USDT'), 파싱 불가 시 quote = 'USD'"""
    sym = symbol.upper()
    m = QUOTE_PATTERN.match(sym)
    if m and m.group(1):
        return m.group(1), m.group(2)
    return sym, "USD"


def clamp_limit(limit: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, int(limit)))


def _rows_to_frame(rows: List[Dict[str, Any]]) -> pd.DataFrame:
    df = pd.DataFrame(rows, columns=['open_time'] + OHLCV_COLUMNS + ['close_time'])
    return normalize_frame(df)


class _HTTPProvider:
    """requests 기반 provider 공통부"""
    name = "http"

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get_json(self, url: str, params: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Any:
        res = self.session.get(url, params=params, headers=headers or {}, timeout=self.timeout)
        if res.status_code != 200:
            raise UpstreamUnavailableError(f"{self.name} {res.status_code}: {res.text[:200]}")
        return res.json()


class BinanceCandleProvider(_HTTPProvider):
    """Binance spot klines"""
    name = "binance"
    BASE_URL = "https://api.binance.com/api/v3/klines"

    def fetch(self, symbol: str, interval: str, limit: int = 500) -> pd.DataFrame:
        params = {
            "symbol": symbol.upper(),
            "interval": validate_interval(interval),
            "limit": clamp_limit(limit, 10, 1000),
        }
        raw = self._get_json(self.BASE_URL, params)
        # [open time, open, high, low, close, volume, close time, ...]
        rows = [{
            'open_time': int(k[0]),
            'open': float(k[1]),
            'high': float(k[2]),
            'low': float(k[3]),
            'close': float(k[4]),
            'volume': float(k[5]),
            'close_time': int(k[6]),
        } for k in raw]
        return _rows_to_frame(rows)


COINBASE_GRANULARITY = {'15m': 900, '1h': 3600, '4h': 14400, '1d': 86400}


class CoinbaseCandleProvider(_HTTPProvider):
    """Coinbase Exchange candles"""
    name = "coinbase"
    BASE_URL = "https://api.exchange.coinbase.com/products/{product}/candles"

    @staticmethod
    def product_id(symbol: str) -> str:
        base, quote = parse_symbol(symbol)
        return f"{base}-{'USD' if quote == 'USDT' else quote}"

    def fetch(self, symbol: str, interval: str, limit: int = 300) -> pd.DataFrame:
        granularity = COINBASE_GRANULARITY.get(validate_interval(interval))
        if granularity is None:
            raise UpstreamUnavailableError(f"coinbase: unsupported interval '{interval}'")
        url = self.BASE_URL.format(product=self.product_id(symbol))
        params = {"granularity": granularity, "limit": clamp_limit(limit, 10, 300)}
        raw = self._get_json(url, params, headers={'Accept': 'application/json'})
        # [time(s), low, high, open, close, volume] - 최신순
        rows = [{
            'open_time': int(r[0]) * 1000,
            'open': float(r[3]),
            'high': float(r[2]),
            'low': float(r[1]),
            'close': float(r[4]),
            'volume': float(r[5]),
            'close_time': int(r[0]) * 1000 + granularity * 1000 - 1,
        } for r in raw]
        return _rows_to_frame(rows)


CRYPTOCOMPARE_ENDPOINTS = {
    '15m': ('histominute', 15),
    '1h': ('histohour', 1),
    '4h': ('histohour', 4),
    '1d': ('histoday', 1),
}


class CryptoCompareCandleProvider(_HTTPProvider):
    """CryptoCompare histo* endpoints"""
    name = "cryptocompare"
    BASE_URL = "https://min-api.cryptocompare.com/data/v2/{path}"

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 10.0,
                 api_key: Optional[str] = None):
        super().__init__(session=session, timeout=timeout)
        self.api_key = api_key

    def fetch(self, symbol: str, interval: str, limit: int = 500) -> pd.DataFrame:
        tf = validate_interval(interval)
        path, aggregate = CRYPTOCOMPARE_ENDPOINTS.get(tf, ('histohour', 1))
        base, quote = parse_symbol(symbol)
        params = {
            "fsym": base,
            "tsym": 'USD' if quote == 'USDT' else quote,
            "limit": clamp_limit(limit, 10, 2000),
            "aggregate": aggregate,
        }
        headers = {'Accept': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f"Apikey {self.api_key}"
        payload = self._get_json(self.BASE_URL.format(path=path), params, headers=headers)
        if payload.get('Response') != 'Success':
            raise UpstreamUnavailableError(f"cryptocompare: {payload.get('Message') or 'error'}")
        step_ms = interval_to_ms(tf)
        rows = [{
            'open_time': int(d['time']) * 1000,
            'open': float(d['open']),
            'high': float(d['high']),
            'low': float(d['low']),
            'close': float(d['close']),
            'volume': float(d['volumefrom']),
            'close_time': int(d['time']) * 1000 + step_ms - 1,
        } for d in payload['Data']['Data']]
        return _rows_to_frame(rows)


class FallbackCandleProvider:
    """
    우선순위 provider 체인.

    첫 성공에서 short-circuit, 실패 사유는 last_failures에 보존.
    """
    name = "fallback"

    def __init__(self, providers: Sequence[CandleProvider]):
        if not providers:
            raise ValueError("FallbackCandleProvider needs at least one provider")
        self.providers = list(providers)
        self.last_failures: List[Tuple[str, str]] = []

    def fetch(self, symbol: str, interval: str, limit: int = 500) -> pd.DataFrame:
        failures: List[Tuple[str, str]] = []
        for provider in self.providers:
            try:
                logger.debug(f"{provider.name}: fetching {symbol} {interval} x{limit}")
                df = provider.fetch(symbol, interval, limit)
            except (requests.RequestException, UpstreamUnavailableError, ValueError, KeyError) as e:
                logger.warning(f"{provider.name} failed for {symbol} {interval}: {e}")
                failures.append((provider.name, str(e)))
                continue
            self.last_failures = failures
            return df
        self.last_failures = failures
        raise UpstreamUnavailableError(f"All candle providers failed for {symbol} {interval}", failures)


PROVIDER_REGISTRY = {
    'binance': BinanceCandleProvider,
    'coinbase': CoinbaseCandleProvider,
    'cryptocompare': CryptoCompareCandleProvider,
}


def build_default_provider(
    order: Optional[Sequence[str]] = None,
    timeout: float = 10.0,
    cryptocompare_api_key: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> FallbackCandleProvider:
    """설정 순서대로 provider 체인 생성"""
    session = session or requests.Session()
    providers: List[CandleProvider] = []
    for name in order or ('binance', 'coinbase', 'cryptocompare'):
        cls = PROVIDER_REGISTRY.get(name)
        if cls is None:
            raise ValueError(f"Unknown candle provider: '{name}'. Valid: {list(PROVIDER_REGISTRY)}")
        if cls is CryptoCompareCandleProvider:
            providers.append(cls(session=session, timeout=timeout, api_key=cryptocompare_api_key))
        else:
            providers.append(cls(session=session, timeout=timeout))
    return FallbackCandleProvider(providers)
