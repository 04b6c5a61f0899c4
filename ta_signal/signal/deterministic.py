# -*- coding: utf-8 -*-
"""
Deterministic Signal Builder
============================

Gate 기반 방향 결정 + news gating + ATR 리스크 배수 + 포지션 사이징.

핵심 흐름:
1. Gate 평가 (방향별 5개)
   - Long:  EMA20>EMA50, ADX>=25, MACD hist>0, Stoch K>D, confirm score>10
   - Short: EMA20<EMA50, ADX>=25, MACD hist<0, Stoch K<D, confirm score<-10
2. 방향: gate 4개 이상 AND combined score 임계 (>15 / <-15), 아니면 neutral
3. Entry hint: Bollinger %B 기준 pullback / breakout
4. 리스크 배수: ADX 레짐별 stop/target ATR 배수
5. Strength: TA 크기 + gate 비율 + 뉴스 정렬 블렌딩 (neutral = 50)
6. News gating: 반대 방향 뉴스 confidence >= 0.6 → strength * 0.6 (최소 15)
7. 포지션: clamp01(strength/100) * 0.5 (최대 자본 50%)

엣지케이스 처리:
- 지표 없음 → 해당 gate False (0으로 취급하지 않음)
- percentB 없음 → breakout
- ADX 없음 → 최저 레짐 (1.2 / 2.0)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

from ..indicators.snapshot import IndicatorSnapshot
from ..scoring.heuristic import TARecommendation
from ..utils.numeric import clamp01, round_half_up, format_price
from .sentiment import NewsSentiment


Direction = Literal['long', 'short', 'neutral']
EntryHint = Literal['breakout', 'pullback', 'either']

MIN_GATES = 4
LONG_SCORE_THRESHOLD = 15
SHORT_SCORE_THRESHOLD = -15
CONFIRM_THRESHOLD = 10
ADX_GATE = 25.0

NEUTRAL_STRENGTH = 50
NEWS_OVERRIDE_CONFIDENCE = 0.6
NEWS_OVERRIDE_FACTOR = 0.6
NEWS_OVERRIDE_FLOOR = 15
NEUTRAL_NEWS_ALIGN = 0.3
MAX_POSITION_PCT = 0.5

# (min ADX, stop multiple, target multiple) - 위에서부터 매칭
RISK_REGIMES: Tuple[Tuple[float, float, float], ...] = (
    (30.0, 1.7, 3.0),
    (20.0, 1.5, 2.5),
    (float('-inf'), 1.2, 2.0),
)


@dataclass(frozen=True)
class GateResult:
    """방향별 gate 평가 결과"""
    names: Tuple[str, ...]
    passed: Tuple[bool, ...]

    @property
    def hits(self) -> int:
        return sum(self.passed)

    @property
    def fraction(self) -> float:
        return self.hits / len(self.passed) if self.passed else 0.0

    def passed_names(self) -> List[str]:
        return [n for n, ok in zip(self.names, self.passed) if ok]


@dataclass(frozen=True)
class DeterministicSignal:
    """최종 결정론적 신호"""
    direction: Direction
    strength: int  # 0..100
    rationale: Tuple[str, ...]
    entry_hint: EntryHint
    stop_multiple: float
    target_multiple: float
    position_size_pct: float  # 0..0.5

    # 디버그
    details: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'direction': self.direction,
            'strength': self.strength,
            'rationale': list(self.rationale),
            'entry_hint': self.entry_hint,
            'stop_multiple': self.stop_multiple,
            'target_multiple': self.target_multiple,
            'position_size_pct': self.position_size_pct,
        }


# =============================================================================
# Gates
# =============================================================================

def _compare(snapshot: IndicatorSnapshot, a: str, b: str, op) -> bool:
    values = snapshot.require(a, b)
    return values is not None and op(values[0], values[1])


def evaluate_gates(
    snapshot: IndicatorSnapshot,
    confirm_score: float,
) -> Tuple[GateResult, GateResult]:
    """
    Long / Short gate 평가

    Returns:
        (long_gates, short_gates)
    """
    adx = snapshot.require('adx14')
    adx_strong = adx is not None and adx[0] >= ADX_GATE
    hist = snapshot.require('macd.histogram')

    long_gates = GateResult(
        names=("EMA20 above EMA50", "ADX strong (>=25)", "MACD histogram positive",
               "Stochastic K above D", "Higher timeframe confirms uptrend"),
        passed=(
            _compare(snapshot, 'ema20', 'ema50', lambda a, b: a > b),
            adx_strong,
            hist is not None and hist[0] > 0,
            _compare(snapshot, 'stoch.k', 'stoch.d', lambda a, b: a > b),
            confirm_score > CONFIRM_THRESHOLD,
        ),
    )
    short_gates = GateResult(
        names=("EMA20 below EMA50", "ADX strong (>=25)", "MACD histogram negative",
               "Stochastic K below D", "Higher timeframe confirms downtrend"),
        passed=(
            _compare(snapshot, 'ema20', 'ema50', lambda a, b: a < b),
            adx_strong,
            hist is not None and hist[0] < 0,
            _compare(snapshot, 'stoch.k', 'stoch.d', lambda a, b: a < b),
            confirm_score < -CONFIRM_THRESHOLD,
        ),
    )
    return long_gates, short_gates


def decide_direction(long_gates: GateResult, short_gates: GateResult, combined_score: float) -> Direction:
    """gate 개수 + 점수 임계 둘 다 만족해야 방향 결정"""
    if long_gates.hits >= MIN_GATES and combined_score > LONG_SCORE_THRESHOLD:
        return 'long'
    if short_gates.hits >= MIN_GATES and combined_score < SHORT_SCORE_THRESHOLD:
        return 'short'
    return 'neutral'


# =============================================================================
# Trade Parameters
# =============================================================================

def entry_hint_for(direction: Direction, percent_b: Optional[float]) -> EntryHint:
    """Bollinger %B 기반 진입 스타일 (%B 없으면 breakout)"""
    if direction == 'long':
        return 'pullback' if percent_b is not None and percent_b <= 0.35 else 'breakout'
    if direction == 'short':
        return 'pullback' if percent_b is not None and percent_b >= 0.65 else 'breakout'
    return 'either'


def risk_multiples(adx: Optional[float]) -> Tuple[float, float]:
    """ADX 레짐별 (stop, target) ATR 배수"""
    level = adx if adx is not None else 0.0
    for min_adx, stop, target in RISK_REGIMES:
        if level >= min_adx:
            return stop, target
    return RISK_REGIMES[-1][1], RISK_REGIMES[-1][2]


def news_alignment(direction: Direction, sentiment: NewsSentiment) -> float:
    """
    신호 방향과 뉴스 정렬도

    일치 +1, 반대 -1, 뉴스 neutral 0.3, 신호 neutral 0
    """
    if direction == 'neutral':
        return 0.0
    dir_sign = 1 if direction == 'long' else -1
    if sentiment.direction == 0:
        return NEUTRAL_NEWS_ALIGN
    return 1.0 if sentiment.direction == dir_sign else -1.0


def base_strength(
    combined_score: float,
    gates_fraction: float,
    sentiment: NewsSentiment,
    direction: Direction,
) -> int:
    """
    strength = round(100 * clamp01(0.5*taMag + 0.35*gates + 0.15*(0.5 + 0.5*news)))
    """
    ta_mag = clamp01(abs(combined_score) / 50.0)
    news_component = sentiment.confidence * news_alignment(direction, sentiment)
    blended = 0.5 * ta_mag + 0.35 * gates_fraction + 0.15 * (0.5 + 0.5 * news_component)
    return round_half_up(100 * clamp01(blended))


def position_size_for(strength: float) -> float:
    """자본 대비 포지션 비율 (최대 50%)"""
    return clamp01(strength / 100.0) * MAX_POSITION_PCT


# =============================================================================
# Main
# =============================================================================

def build_signal(
    snapshot: IndicatorSnapshot,
    primary_ta: TARecommendation,
    confirm_ta: TARecommendation,
    combined_score: float,
    sentiment: Optional[NewsSentiment] = None,
) -> DeterministicSignal:
    """
    결정론적 신호 생성 (예외 없음 - 모호하면 neutral/50)

    Args:
        snapshot: primary TF 지표 스냅샷
        primary_ta: primary TF 휴리스틱 결과
        confirm_ta: confirmation TF 휴리스틱 결과
        combined_score: combine_timeframes() 결과
        sentiment: 뉴스 sentiment (None이면 neutral 기본값)

    Returns:
        DeterministicSignal
    """
    if sentiment is None:
        sentiment = NewsSentiment.neutral()

    long_gates, short_gates = evaluate_gates(snapshot, confirm_ta.score)
    direction = decide_direction(long_gates, short_gates, combined_score)

    rationale: List[str] = []
    if direction == 'neutral':
        gates = None
        rationale.append("Mixed conditions")
    else:
        gates = long_gates if direction == 'long' else short_gates
        # confirm TF gate가 마지막이므로 지지 reason → confirm 노트 순서 유지
        rationale.extend(gates.passed_names())

    percent_b = snapshot.require('bb20.percent_b')
    entry_hint = entry_hint_for(direction, percent_b[0] if percent_b else None)
    stop_multiple, target_multiple = risk_multiples(snapshot.adx14)

    if direction == 'neutral':
        strength = NEUTRAL_STRENGTH
    else:
        strength = base_strength(combined_score, gates.fraction, sentiment, direction)

    news_override = False
    if sentiment.confidence >= NEWS_OVERRIDE_CONFIDENCE:
        if direction == 'long' and sentiment.overall == 'bearish':
            news_override = True
            rationale.append("Reduced by bearish news")
        elif direction == 'short' and sentiment.overall == 'bullish':
            news_override = True
            rationale.append("Reduced by bullish news")
    if news_override:
        strength = max(NEWS_OVERRIDE_FLOOR, round_half_up(strength * NEWS_OVERRIDE_FACTOR))

    return DeterministicSignal(
        direction=direction,
        strength=strength,
        rationale=tuple(rationale),
        entry_hint=entry_hint,
        stop_multiple=stop_multiple,
        target_multiple=target_multiple,
        position_size_pct=position_size_for(strength),
        details={
            'long_hits': long_gates.hits,
            'short_hits': short_gates.hits,
            'combined_score': combined_score,
            'primary_score': primary_ta.score,
            'confirm_score': confirm_ta.score,
            'news_override': news_override,
        },
    )


def format_signal(signal: DeterministicSignal, last_close: Optional[float] = None, atr: Optional[float] = None) -> str:
    """신호 포맷팅"""
    lines = [
        "=" * 50,
        f"Deterministic Signal - {signal.direction.upper()}",
        "=" * 50,
        f"Strength: {signal.strength}",
        f"Entry Hint: {signal.entry_hint}",
        f"Stop / Target: {signal.stop_multiple:.1f}x / {signal.target_multiple:.1f}x ATR",
        f"Position Size: {signal.position_size_pct:.1%}",
    ]
    if last_close is not None and atr and signal.direction != 'neutral':
        side = 1 if signal.direction == 'long' else -1
        lines.append(f"Entry: {format_price(last_close)}")
        lines.append(f"SL: {format_price(last_close - side * signal.stop_multiple * atr)}")
        lines.append(f"TP: {format_price(last_close + side * signal.target_multiple * atr)}")
    lines.append("")
    lines.append("--- Rationale ---")
    for r in signal.rationale:
        lines.append(f"  - {r}")
    lines.append("=" * 50)
    return "\n".join(lines)
