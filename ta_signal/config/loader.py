"""
Config Loader
=============

YAML 기반 파이프라인 파라미터 로더.

사용법:
    from ta_signal.config import load_engine_config

    config = load_engine_config()
    print(config.pipeline.min_bars)     # 60
    print(config.scan.max_workers)      # 6

환경변수 오버라이드:
    TA_SIGNAL_MIN_BARS=80              # 최소 봉 수
    TA_SIGNAL_INTERVAL=1h              # 기본 interval
    TA_SIGNAL_SCAN_WORKERS=4           # 스캔 동시 실행 수
    TA_SIGNAL_BACKTEST_LOOKBACK=300    # 백테스트 lookback
    CRYPTOCOMPARE_API_KEY=...          # CryptoCompare API key

Gate 개수/임계값, 점수 가중치는 설정이 아닌 고정 상수.
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

from ..errors import InvalidInputError
from ..utils.timeframe import validate_interval


CONFIG_DIR = Path(__file__).parent.parent.parent / "config"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "default.yaml"


@dataclass
class PipelineParams:
    """신호 파이프라인 파라미터"""
    min_bars: int = 60
    candle_limit: int = 500
    default_interval: str = "4h"
    confirm_interval: Optional[str] = None  # None → 다음 상위 TF


@dataclass
class BacktestParams:
    """백테스트 파라미터"""
    lookback: int = 500
    min_lookback: int = 200
    max_lookback: int = 1000
    warmup_bars: int = 60
    entry_threshold: float = 8.0
    stop_mult: float = 1.5
    target_mult: float = 2.5


@dataclass
class ScanParams:
    """멀티 심볼 스캔 파라미터"""
    max_workers: int = 6
    candle_limit: int = 400
    top_n: int = 10
    max_symbols: int = 100
    sentiment_confidence: float = 0.4


@dataclass
class SentimentParams:
    """sentiment 기본값"""
    default_confidence: float = 0.3


@dataclass
class ProviderParams:
    """candle provider 파라미터"""
    order: List[str] = field(default_factory=lambda: ["binance", "coinbase", "cryptocompare"])
    timeout: float = 10.0
    cryptocompare_api_key: Optional[str] = None


@dataclass
class EngineConfig:
    """통합 설정"""
    pipeline: PipelineParams = field(default_factory=PipelineParams)
    backtest: BacktestParams = field(default_factory=BacktestParams)
    scan: ScanParams = field(default_factory=ScanParams)
    sentiment: SentimentParams = field(default_factory=SentimentParams)
    providers: ProviderParams = field(default_factory=ProviderParams)
    raw: Dict[str, Any] = field(default_factory=dict)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def _deep_merge(base: Dict, override: Dict) -> Dict:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _apply_env_overrides(config: Dict) -> Dict:
    if os.getenv("TA_SIGNAL_MIN_BARS"):
        config.setdefault("pipeline", {})
        config["pipeline"]["min_bars"] = int(os.getenv("TA_SIGNAL_MIN_BARS"))
    if os.getenv("TA_SIGNAL_INTERVAL"):
        config.setdefault("pipeline", {})
        config["pipeline"]["default_interval"] = os.getenv("TA_SIGNAL_INTERVAL")
    if os.getenv("TA_SIGNAL_SCAN_WORKERS"):
        config.setdefault("scan", {})
        config["scan"]["max_workers"] = int(os.getenv("TA_SIGNAL_SCAN_WORKERS"))
    if os.getenv("TA_SIGNAL_BACKTEST_LOOKBACK"):
        config.setdefault("backtest", {})
        config["backtest"]["lookback"] = int(os.getenv("TA_SIGNAL_BACKTEST_LOOKBACK"))
    if os.getenv("CRYPTOCOMPARE_API_KEY"):
        config.setdefault("providers", {})
        config["providers"]["cryptocompare_api_key"] = os.getenv("CRYPTOCOMPARE_API_KEY")
    return config


def load_config(path: Optional[Path] = None, use_dotenv: bool = True) -> Dict[str, Any]:
    """기본 설정 로드 (default.yaml + 선택 override 파일 + env)"""
    if use_dotenv:
        load_dotenv()
    merged = _load_yaml(DEFAULT_CONFIG_PATH)
    if path is not None:
        merged = _deep_merge(merged, _load_yaml(Path(path)))
    return _apply_env_overrides(merged)


def load_engine_config(path: Optional[Path] = None, use_dotenv: bool = True) -> EngineConfig:
    """dict 설정 → EngineConfig"""
    merged = load_config(path, use_dotenv=use_dotenv)

    pip = merged.get("pipeline", {})
    bt = merged.get("backtest", {})
    scn = merged.get("scan", {})
    snt = merged.get("sentiment", {})
    prv = merged.get("providers", {})

    return EngineConfig(
        pipeline=PipelineParams(
            min_bars=pip.get("min_bars", 60),
            candle_limit=pip.get("candle_limit", 500),
            default_interval=validate_interval(pip.get("default_interval", "4h")),
            confirm_interval=pip.get("confirm_interval"),
        ),
        backtest=BacktestParams(
            lookback=bt.get("lookback", 500),
            min_lookback=bt.get("min_lookback", 200),
            max_lookback=bt.get("max_lookback", 1000),
            warmup_bars=bt.get("warmup_bars", 60),
            entry_threshold=bt.get("entry_threshold", 8.0),
            stop_mult=bt.get("stop_mult", 1.5),
            target_mult=bt.get("target_mult", 2.5),
        ),
        scan=ScanParams(
            max_workers=scn.get("max_workers", 6),
            candle_limit=scn.get("candle_limit", 400),
            top_n=scn.get("top_n", 10),
            max_symbols=scn.get("max_symbols", 100),
            sentiment_confidence=scn.get("sentiment_confidence", 0.4),
        ),
        sentiment=SentimentParams(
            default_confidence=snt.get("default_confidence", 0.3),
        ),
        providers=ProviderParams(
            order=list(prv.get("order", ["binance", "coinbase", "cryptocompare"])),
            timeout=prv.get("timeout", 10.0),
            cryptocompare_api_key=prv.get("cryptocompare_api_key"),
        ),
        raw=merged,
    )


def validate_lookback(lookback: int, params: Optional[BacktestParams] = None) -> int:
    """
    백테스트 lookback 범위 체크

    Raises:
        InvalidInputError: [min_lookback, max_lookback] 범위 밖
    """
    params = params or BacktestParams()
    if not params.min_lookback <= lookback <= params.max_lookback:
        raise InvalidInputError(
            f"lookback {lookback} outside [{params.min_lookback}, {params.max_lookback}]"
        )
    return lookback
