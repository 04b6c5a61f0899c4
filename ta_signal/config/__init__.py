"""
Config Module
=============

파이프라인/백테스트/스캔 파라미터 관리.
YAML 파일에서 설정 로드 + 환경변수 오버라이드.
"""

from .loader import (
    load_config,
    load_engine_config,
    validate_lookback,
    EngineConfig,
    PipelineParams,
    BacktestParams,
    ScanParams,
    SentimentParams,
    ProviderParams,
)

__all__ = [
    'load_config',
    'load_engine_config',
    'validate_lookback',
    'EngineConfig',
    'PipelineParams',
    'BacktestParams',
    'ScanParams',
    'SentimentParams',
    'ProviderParams',
]
