"""
스크립트 공통 유틸
==================

CSV 로드 / provider 생성 / 로깅 설정.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

import pandas as pd

# 프로젝트 루트
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from ta_signal.config import EngineConfig  # noqa: E402
from ta_signal.data import normalize_frame  # noqa: E402
from ta_signal.providers import build_default_provider  # noqa: E402


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_csv(path: str) -> pd.DataFrame:
    """OHLCV CSV 로드 (컬럼명 소문자 정규화)"""
    df = pd.read_csv(path)
    df.columns = [c.strip().lower() for c in df.columns]
    return normalize_frame(df)


def make_provider(config: EngineConfig):
    return build_default_provider(
        order=config.providers.order,
        timeout=config.providers.timeout,
        cryptocompare_api_key=config.providers.cryptocompare_api_key,
    )


def load_series(config: EngineConfig, csv: Optional[str], symbol: str, interval: str, limit: int) -> pd.DataFrame:
    if csv:
        return load_csv(csv)
    return make_provider(config).fetch(symbol, interval, limit)
