# -*- coding: utf-8 -*-
"""
Provider Tests
==============

Candle provider 파싱 / fallback 체인 / sentiment 연결 테스트.
네트워크 없이 fake session 사용.
"""
import pandas as pd
import pytest
import requests

from ta_signal.errors import UpstreamUnavailableError
from ta_signal.providers import (
    BinanceCandleProvider,
    CoinbaseCandleProvider,
    CryptoCompareCandleProvider,
    FallbackCandleProvider,
    StaticSentimentProvider,
    build_default_provider,
    parse_symbol,
    resolve_sentiment,
    select_headlines,
    symbol_key,
)
from ta_signal.signal import NewsSentiment


# =============================================================================
# Fakes
# =============================================================================

class FakeResponse:
    def __init__(self, payload, status_code: int = 200, text: str = ""):
        self._payload = payload
        self.status_code = status_code
        self.text = text

    def json(self):
        return self._payload


class FakeSession:
    """requests.Session 대체 (호출 기록)"""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({'url': url, 'params': params, 'headers': headers, 'timeout': timeout})
        if self.error is not None:
            raise self.error
        return self.response


class FakeProvider:
    def __init__(self, name, df=None, error=None):
        self.name = name
        self.df = df
        self.error = error
        self.calls = 0

    def fetch(self, symbol, interval, limit):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.df


def _binance_rows():
    # 역순 + 중복 timestamp 포함
    return [
        [2000, "2", "3", "1", "2.5", "20", 2999, "x"],
        [1000, "1", "2", "0.5", "1.5", "10", 1999, "x"],
        [2000, "2", "3.5", "1", "3", "25", 2999, "x"],
    ]


# =============================================================================
# Symbol parsing
# =============================================================================

class TestSymbols:
    """심볼 파싱"""

    def test_parse_symbol(self):
        assert parse_symbol("BTCUSDT") == ("BTC", "USDT")
        assert parse_symbol("ethusdc") == ("ETH", "USDC")
        assert parse_symbol("SOLEUR") == ("SOL", "EUR")

    def test_parse_symbol_without_quote(self):
        assert parse_symbol("XYZ") == ("XYZ", "USD")

    def test_coinbase_product(self):
        assert CoinbaseCandleProvider.product_id("BTCUSDT") == "BTC-USD"
        assert CoinbaseCandleProvider.product_id("ETHEUR") == "ETH-EUR"

    def test_symbol_key(self):
        assert symbol_key("BTCUSDT") == "BTC"
        assert symbol_key("ethusdc") == "ETH"


# =============================================================================
# Individual providers
# =============================================================================

class TestBinance:
    """Binance klines"""

    def test_parse_and_normalize(self):
        session = FakeSession(FakeResponse(_binance_rows()))
        df = BinanceCandleProvider(session=session).fetch("btcusdt", "4h", 500)
        assert list(df['open_time']) == [1000, 2000]
        assert df['close'].iloc[-1] == pytest.approx(3.0)  # 중복은 마지막 값 유지
        assert df['volume'].dtype == float
        params = session.calls[0]['params']
        assert params['symbol'] == "BTCUSDT"
        assert params['interval'] == "4h"

    def test_limit_clamped(self):
        session = FakeSession(FakeResponse([]))
        BinanceCandleProvider(session=session).fetch("BTCUSDT", "1h", 5000)
        assert session.calls[0]['params']['limit'] == 1000

    def test_http_error(self):
        session = FakeSession(FakeResponse(None, status_code=451, text="restricted"))
        with pytest.raises(UpstreamUnavailableError, match="451"):
            BinanceCandleProvider(session=session).fetch("BTCUSDT", "4h", 100)

    def test_invalid_interval(self):
        with pytest.raises(ValueError):
            BinanceCandleProvider(session=FakeSession()).fetch("BTCUSDT", "7h", 100)


class TestCoinbase:
    """Coinbase candles"""

    def test_parse_newest_first(self):
        rows = [
            [7200, 1.0, 3.0, 2.0, 2.5, 11.0],
            [3600, 0.5, 2.0, 1.0, 1.5, 10.0],
        ]
        session = FakeSession(FakeResponse(rows))
        df = CoinbaseCandleProvider(session=session).fetch("BTCUSDT", "1h", 1000)
        assert list(df['open_time']) == [3600 * 1000, 7200 * 1000]
        assert df['low'].iloc[0] == pytest.approx(0.5)
        assert df['high'].iloc[0] == pytest.approx(2.0)
        assert df['open'].iloc[0] == pytest.approx(1.0)
        assert session.calls[0]['params'] == {"granularity": 3600, "limit": 300}
        assert "BTC-USD" in session.calls[0]['url']

    def test_unsupported_interval(self):
        with pytest.raises(UpstreamUnavailableError):
            CoinbaseCandleProvider(session=FakeSession()).fetch("BTCUSDT", "5m", 100)


class TestCryptoCompare:
    """CryptoCompare histo*"""

    def test_parse(self):
        payload = {
            'Response': 'Success',
            'Data': {'Data': [
                {'time': 0, 'open': 1, 'high': 2, 'low': 0.5, 'close': 1.5, 'volumefrom': 7, 'volumeto': 10},
                {'time': 14400, 'open': 1.5, 'high': 2.5, 'low': 1, 'close': 2, 'volumefrom': 8, 'volumeto': 16},
            ]},
        }
        session = FakeSession(FakeResponse(payload))
        df = CryptoCompareCandleProvider(session=session, api_key="k").fetch("ETHUSDT", "4h", 100)
        assert len(df) == 2
        assert list(df['volume']) == [7.0, 8.0]
        call = session.calls[0]
        assert call['url'].endswith("histohour")
        assert call['params']['aggregate'] == 4
        assert call['params']['fsym'] == "ETH"
        assert call['params']['tsym'] == "USD"
        assert call['headers']['Authorization'] == "Apikey k"

    def test_error_response(self):
        session = FakeSession(FakeResponse({'Response': 'Error', 'Message': 'rate limit'}))
        with pytest.raises(UpstreamUnavailableError, match="rate limit"):
            CryptoCompareCandleProvider(session=session).fetch("BTCUSDT", "1d", 100)


# =============================================================================
# Fallback chain
# =============================================================================

class TestFallback:
    """우선순위 fallback"""

    def test_first_success_short_circuits(self):
        df = pd.DataFrame({'close': [1.0]})
        first = FakeProvider("a", df=df)
        second = FakeProvider("b", df=df)
        out = FallbackCandleProvider([first, second]).fetch("BTCUSDT", "4h", 100)
        assert out is df
        assert second.calls == 0

    def test_falls_through_in_order(self):
        df = pd.DataFrame({'close': [1.0]})
        chain = FallbackCandleProvider([
            FakeProvider("a", error=requests.ConnectionError("down")),
            FakeProvider("b", error=UpstreamUnavailableError("b 500")),
            FakeProvider("c", df=df),
        ])
        assert chain.fetch("BTCUSDT", "4h", 100) is df
        assert [name for name, _ in chain.last_failures] == ["a", "b"]

    def test_all_fail_keeps_reasons(self):
        chain = FallbackCandleProvider([
            FakeProvider("a", error=requests.Timeout("slow")),
            FakeProvider("b", error=ValueError("bad payload")),
        ])
        with pytest.raises(UpstreamUnavailableError) as exc:
            chain.fetch("BTCUSDT", "4h", 100)
        assert exc.value.failures == [("a", "slow"), ("b", "bad payload")]
        assert "a: slow" in str(exc.value)

    def test_empty_chain(self):
        with pytest.raises(ValueError):
            FallbackCandleProvider([])

    def test_build_default_order(self):
        chain = build_default_provider(session=FakeSession())
        assert [p.name for p in chain.providers] == ["binance", "coinbase", "cryptocompare"]

    def test_build_custom_order(self):
        chain = build_default_provider(order=["cryptocompare"], cryptocompare_api_key="k",
                                       session=FakeSession())
        assert chain.providers[0].api_key == "k"

    def test_build_unknown(self):
        with pytest.raises(ValueError):
            build_default_provider(order=["kraken"], session=FakeSession())


# =============================================================================
# Sentiment
# =============================================================================

class RaisingSentimentProvider:
    def analyze(self, symbol, timeframe, headlines):
        raise RuntimeError("LLM quota exceeded")


class TestSentimentProviders:
    """sentiment 연결"""

    def test_no_provider_neutral(self):
        s = resolve_sentiment(None, "BTC", "4h")
        assert s.overall == 'neutral'
        assert s.confidence == pytest.approx(0.3)
        assert s.reasons == ("Sentiment provider not configured",)

    def test_provider_error_neutral(self):
        s = resolve_sentiment(RaisingSentimentProvider(), "BTC", "4h")
        assert s.overall == 'neutral'
        assert s.confidence == pytest.approx(0.3)
        assert "LLM quota exceeded" in s.reasons[0]

    def test_static_provider(self):
        news = NewsSentiment('bullish', 0.8)
        assert resolve_sentiment(StaticSentimentProvider(news), "BTC", "4h") is news

    def test_select_headlines_prefers_symbol(self):
        titles = ["Fed holds rates", "BTC breaks 100k", "ETH upgrade", "btc miners sell"]
        assert select_headlines(titles, "BTCUSDT") == ["BTC breaks 100k", "btc miners sell"]

    def test_select_headlines_fallback(self):
        titles = [f"headline {i}" for i in range(20)]
        assert select_headlines(titles, "SOLUSDT", limit=10) == titles[:10]
