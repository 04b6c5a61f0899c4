# -*- coding: utf-8 -*-
"""
Config Loader Tests
===================

default.yaml / override 파일 / 환경변수 테스트.
"""
import pytest

from ta_signal.config import BacktestParams, load_engine_config, validate_lookback
from ta_signal.errors import InvalidInputError

ENV_VARS = (
    "TA_SIGNAL_MIN_BARS",
    "TA_SIGNAL_INTERVAL",
    "TA_SIGNAL_SCAN_WORKERS",
    "TA_SIGNAL_BACKTEST_LOOKBACK",
    "CRYPTOCOMPARE_API_KEY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    """기본값"""

    def test_default_values(self):
        config = load_engine_config(use_dotenv=False)
        assert config.pipeline.min_bars == 60
        assert config.pipeline.default_interval == "4h"
        assert config.pipeline.confirm_interval is None
        assert config.backtest.lookback == 500
        assert config.backtest.warmup_bars == 60
        assert config.backtest.stop_mult == pytest.approx(1.5)
        assert config.backtest.target_mult == pytest.approx(2.5)
        assert config.scan.max_workers == 6
        assert config.scan.sentiment_confidence == pytest.approx(0.4)
        assert config.sentiment.default_confidence == pytest.approx(0.3)
        assert config.providers.order == ["binance", "coinbase", "cryptocompare"]
        assert config.providers.cryptocompare_api_key is None


class TestOverrides:
    """YAML override + env"""

    def test_yaml_override_merges(self, tmp_path):
        path = tmp_path / "override.yaml"
        path.write_text("pipeline:\n  min_bars: 80\nscan:\n  top_n: 5\n", encoding="utf-8")
        config = load_engine_config(path, use_dotenv=False)
        assert config.pipeline.min_bars == 80
        assert config.pipeline.candle_limit == 500  # 나머지는 기본값 유지
        assert config.scan.top_n == 5
        assert config.scan.max_workers == 6

    def test_missing_override_file(self, tmp_path):
        config = load_engine_config(tmp_path / "nope.yaml", use_dotenv=False)
        assert config.pipeline.min_bars == 60

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("TA_SIGNAL_MIN_BARS", "100")
        monkeypatch.setenv("TA_SIGNAL_INTERVAL", "1H")
        monkeypatch.setenv("TA_SIGNAL_SCAN_WORKERS", "3")
        monkeypatch.setenv("TA_SIGNAL_BACKTEST_LOOKBACK", "300")
        monkeypatch.setenv("CRYPTOCOMPARE_API_KEY", "secret")
        config = load_engine_config(use_dotenv=False)
        assert config.pipeline.min_bars == 100
        assert config.pipeline.default_interval == "1h"
        assert config.scan.max_workers == 3
        assert config.backtest.lookback == 300
        assert config.providers.cryptocompare_api_key == "secret"

    def test_invalid_interval_rejected(self, monkeypatch):
        monkeypatch.setenv("TA_SIGNAL_INTERVAL", "7h")
        with pytest.raises(ValueError):
            load_engine_config(use_dotenv=False)


class TestLookback:
    """백테스트 lookback 범위"""

    def test_in_range(self):
        assert validate_lookback(200) == 200
        assert validate_lookback(1000) == 1000

    def test_out_of_range(self):
        with pytest.raises(InvalidInputError):
            validate_lookback(199)
        with pytest.raises(InvalidInputError):
            validate_lookback(1001)

    def test_custom_bounds(self):
        params = BacktestParams(min_lookback=50, max_lookback=100)
        assert validate_lookback(75, params) == 75
