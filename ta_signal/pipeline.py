# -*- coding: utf-8 -*-
"""
Signal Pipeline
===============

raw bars → 지표 → 휴리스틱 점수 → (confirm TF) → combined → 결정론적 신호.

핵심 흐름:
1. primary DataFrame 검증 + 최소 봉 수 체크 (기본 60)
2. primary / confirm 스냅샷 + 점수
3. combine_timeframes → build_signal
4. ATR 기반 SL/TP 가격 계산 (표시용)

엣지케이스 처리:
- confirm TF 없음 → primary를 confirm으로 사용
- confirm TF 봉 부족 → primary fallback + warning
- sentiment provider 없음/실패 → neutral 저신뢰
- 스캔: 심볼별 실패는 기록 후 skip (전체 스캔은 계속)
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .data.bars import validate_frame
from .errors import InsufficientDataError
from .indicators.snapshot import IndicatorSnapshot, compute_indicators
from .providers.candles import CandleProvider
from .providers.sentiment import SentimentProvider, resolve_sentiment, symbol_key
from .scoring.heuristic import TARecommendation, score_indicators, format_recommendation
from .signal.combiner import combine_timeframes
from .signal.deterministic import DeterministicSignal, build_signal, format_signal
from .signal.sentiment import NewsSentiment
from .utils.numeric import format_price
from .utils.timeframe import get_confirmation_timeframe, validate_interval

logger = logging.getLogger(__name__)

MIN_BARS = 60


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True)
class SignalReport:
    """단일 심볼 신호 결과"""
    snapshot: IndicatorSnapshot
    primary_ta: TARecommendation
    confirm_snapshot: IndicatorSnapshot
    confirm_ta: TARecommendation
    combined_score: int
    signal: DeterministicSignal
    sentiment: NewsSentiment
    last_close: float
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    symbol: Optional[str] = None
    interval: Optional[str] = None
    confirm_interval: Optional[str] = None
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'symbol': self.symbol,
            'interval': self.interval,
            'confirm_interval': self.confirm_interval,
            'indicators': self.snapshot.to_dict(),
            'ta': {'score': self.primary_ta.score, 'reasons': list(self.primary_ta.reasons)},
            'confirm_ta': {'score': self.confirm_ta.score, 'reasons': list(self.confirm_ta.reasons)},
            'combined_score': self.combined_score,
            'sentiment': self.sentiment.to_dict(),
            'signal': {
                **self.signal.to_dict(),
                'stop_loss': self.stop_loss,
                'take_profit': self.take_profit,
            },
            'warnings': list(self.warnings),
        }


@dataclass(frozen=True)
class ScanEntry:
    symbol: str
    interval: str
    direction: str
    strength: int
    score: int


@dataclass
class ScanResult:
    """멀티 심볼 스캔 결과"""
    interval: str
    scanned: int = 0
    top_longs: List[ScanEntry] = field(default_factory=list)
    top_shorts: List[ScanEntry] = field(default_factory=list)
    skipped: Dict[str, str] = field(default_factory=dict)


# =============================================================================
# Core
# =============================================================================

def _require_bars(df: pd.DataFrame, min_bars: int, context: str) -> None:
    validate_frame(df)
    if len(df) < min_bars:
        raise InsufficientDataError(len(df), min_bars, context)


def risk_prices(
    signal: DeterministicSignal,
    last_close: float,
    atr: Optional[float],
) -> Tuple[Optional[float], Optional[float]]:
    """방향 신호의 (stop_loss, take_profit) 가격, neutral/ATR 없음 → (None, None)"""
    if signal.direction == 'neutral' or not atr:
        return None, None
    side = 1 if signal.direction == 'long' else -1
    return (
        last_close - side * signal.stop_multiple * atr,
        last_close + side * signal.target_multiple * atr,
    )


def generate_signal(
    primary_df: pd.DataFrame,
    confirm_df: Optional[pd.DataFrame] = None,
    sentiment: Optional[NewsSentiment] = None,
    *,
    min_bars: int = MIN_BARS,
) -> SignalReport:
    """
    primary (+ confirm) 시리즈 → SignalReport

    Raises:
        InsufficientDataError: primary 봉 수 < min_bars
        InvalidInputError: 빈 시리즈 / 비유한 값
    """
    _require_bars(primary_df, min_bars, "primary")
    warnings: List[str] = []

    snapshot = compute_indicators(primary_df)
    primary_ta = score_indicators(snapshot)

    confirm_snapshot, confirm_ta = snapshot, primary_ta
    if confirm_df is not None:
        try:
            _require_bars(confirm_df, min_bars, "confirm")
            confirm_snapshot = compute_indicators(confirm_df)
            confirm_ta = score_indicators(confirm_snapshot)
        except InsufficientDataError as e:
            logger.warning(f"Confirm timeframe unusable, using primary: {e}")
            warnings.append(f"Confirm timeframe unusable: {e}")

    combined = combine_timeframes(primary_ta.score, confirm_ta.score)
    if sentiment is None:
        sentiment = NewsSentiment.neutral()
    signal = build_signal(snapshot, primary_ta, confirm_ta, combined, sentiment)

    last_close = float(primary_df['close'].iloc[-1])
    stop_loss, take_profit = risk_prices(signal, last_close, snapshot.atr14)

    return SignalReport(
        snapshot=snapshot,
        primary_ta=primary_ta,
        confirm_snapshot=confirm_snapshot,
        confirm_ta=confirm_ta,
        combined_score=combined,
        signal=signal,
        sentiment=sentiment,
        last_close=last_close,
        stop_loss=stop_loss,
        take_profit=take_profit,
        warnings=tuple(warnings),
    )


def analyze_symbol(
    symbol: str,
    interval: str,
    candle_provider: CandleProvider,
    sentiment_provider: Optional[SentimentProvider] = None,
    *,
    confirm_interval: Optional[str] = None,
    headlines: Sequence[str] = (),
    limit: int = 500,
    min_bars: int = MIN_BARS,
) -> SignalReport:
    """
    심볼 하나 전체 파이프라인 (fetch → 지표 → 점수 → 신호)

    Raises:
        InsufficientDataError: primary 봉 부족
        UpstreamUnavailableError: primary 데이터 fetch 실패
    """
    interval = validate_interval(interval)
    confirm_interval = validate_interval(confirm_interval) if confirm_interval else get_confirmation_timeframe(interval)

    primary_df = candle_provider.fetch(symbol, interval, limit)
    confirm_df = None
    fetch_warnings: List[str] = []
    if confirm_interval != interval:
        try:
            confirm_df = candle_provider.fetch(symbol, confirm_interval, limit)
        except Exception as e:
            logger.warning(f"Confirm fetch failed for {symbol} {confirm_interval}: {e}")
            fetch_warnings.append(f"Confirm fetch failed: {e}")

    sentiment = resolve_sentiment(sentiment_provider, symbol_key(symbol), interval, headlines)
    report = generate_signal(primary_df, confirm_df, sentiment, min_bars=min_bars)
    return replace(
        report,
        symbol=symbol.upper(),
        interval=interval,
        confirm_interval=interval if report.confirm_snapshot is report.snapshot else confirm_interval,
        warnings=tuple(fetch_warnings) + report.warnings,
    )


def _scan_one(
    symbol: str,
    interval: str,
    candle_provider: CandleProvider,
    limit: int,
    min_bars: int,
    sentiment: NewsSentiment,
) -> ScanEntry:
    df = candle_provider.fetch(symbol, interval, limit)
    _require_bars(df, min_bars, symbol)
    snap = compute_indicators(df)
    ta = score_indicators(snap)
    det = build_signal(snap, ta, ta, ta.score, sentiment)
    return ScanEntry(symbol=symbol, interval=interval, direction=det.direction,
                     strength=det.strength, score=ta.score)


def scan_symbols(
    symbols: Sequence[str],
    candle_provider: CandleProvider,
    interval: str = "4h",
    *,
    max_workers: int = 6,
    limit: int = 400,
    top_n: int = 10,
    min_bars: int = MIN_BARS,
    sentiment_confidence: float = 0.4,
) -> ScanResult:
    """
    멀티 심볼 스캔 (심볼별 파이프라인은 독립 → 병렬)

    동시 fetch 수는 max_workers로 제한. 실패/봉 부족 심볼은 skipped에 기록.
    """
    interval = validate_interval(interval)
    sentiment = NewsSentiment.neutral(sentiment_confidence, "Skipped per-coin for speed")
    entries: List[ScanEntry] = []
    skipped: Dict[str, str] = {}

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = {
            sym: executor.submit(_scan_one, sym, interval, candle_provider, limit, min_bars, sentiment)
            for sym in symbols
        }
        for sym, future in futures.items():
            try:
                entries.append(future.result())
            except Exception as e:
                logger.warning(f"Scan skip {sym}: {e}")
                skipped[sym] = str(e)

    # strength 내림차순 (동률은 입력 순서 유지)
    entries.sort(key=lambda r: r.strength, reverse=True)
    return ScanResult(
        interval=interval,
        scanned=len(entries),
        top_longs=[e for e in entries if e.direction == 'long'][:top_n],
        top_shorts=[e for e in entries if e.direction == 'short'][:top_n],
        skipped=skipped,
    )


# =============================================================================
# Formatting
# =============================================================================

def format_signal_report(report: SignalReport, precision: int = 4) -> str:
    """SignalReport 포맷팅"""
    title = f"{report.symbol or 'series'} {report.interval or ''}".strip()
    lines = [
        f"[{title}] last close {format_price(report.last_close, precision)}",
        format_recommendation(report.primary_ta),
        f"Confirm Score: {report.confirm_ta.score:+d} ({report.confirm_interval or 'primary'})",
        f"Combined Score: {report.combined_score:+d}",
        f"News: {report.sentiment.overall} ({report.sentiment.confidence:.0%})",
        format_signal(report.signal, report.last_close, report.snapshot.atr14),
    ]
    if report.stop_loss is not None:
        lines.append(f"Stop Loss: {format_price(report.stop_loss, precision)}")
        lines.append(f"Take Profit: {format_price(report.take_profit, precision)}")
    for w in report.warnings:
        lines.append(f"[WARN] {w}")
    return "\n".join(lines)


def format_scan_result(result: ScanResult) -> str:
    """스캔 결과 포맷팅"""
    lines = [f"Scan {result.interval}: {result.scanned} symbols scored, {len(result.skipped)} skipped"]
    for label, rows in (("Top Longs", result.top_longs), ("Top Shorts", result.top_shorts)):
        lines.append(f"--- {label} ---")
        for r in rows:
            lines.append(f"  {r.symbol:<12} strength={r.strength:3d} score={r.score:+d}")
    return "\n".join(lines)
