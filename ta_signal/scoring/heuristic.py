# -*- coding: utf-8 -*-
"""
Heuristic TA Scorer
===================

IndicatorSnapshot → TARecommendation (score ∈ [-100, 100] + reasons).

핵심 흐름:
- 규칙 함수 리스트를 순서대로 fold (functools.reduce)
- 각 규칙: (snapshot, ScoreState) → ScoreState
- 필요한 필드가 없는 규칙은 조용히 skip (reason 없음)
- ADX 규칙은 1~4번 규칙의 누적 점수에 의존하므로 반드시 그 뒤에 위치

규칙 순서 (reason 순서 = 발동 순서):
 1. RSI extremes          ±20
 2. EMA20 vs EMA50        ±10..20
 3. MACD histogram        ±5..10
 4. Stochastic K-D        ±3..7
 5. ADX trend filter      amplify ≤ +20% (cap 10) / dampen ≤ 15% (cap 8)
 6. Bollinger extremes    ±5
 7. EMA50 vs SMA200       ±3 (reason 없음)
 8. MFI extremes          ±8
 9. Volume confirmation   ±5
10. OBV vs OBV SMA21      ±4
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Callable, Optional, Sequence, Tuple

from ..indicators.snapshot import IndicatorSnapshot
from ..utils.numeric import round_half_up, sign


SCORE_MIN = -100
SCORE_MAX = 100
EPS = 1e-6

RSI_OVERSOLD = 30.0
RSI_OVERBOUGHT = 70.0
ADX_TRENDING = 25.0
ADX_WEAK = 15.0
BB_UPPER_EXT = 1.05
BB_LOWER_EXT = -0.05
MFI_OVERBOUGHT = 80.0
MFI_OVERSOLD = 20.0
VOLUME_SURGE_RATIO = 1.3


@dataclass(frozen=True)
class TARecommendation:
    """휴리스틱 TA 결과"""
    score: int  # -100 (strong short) ... 0 ... +100 (strong long)
    reasons: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ScoreState:
    """fold 누적 상태 (점수 + 발동한 reason 순서)"""
    score: int = 0
    reasons: Tuple[str, ...] = ()

    def add(self, delta: int, reason: Optional[str] = None) -> "ScoreState":
        reasons = self.reasons + (reason,) if reason else self.reasons
        return ScoreState(score=self.score + delta, reasons=reasons)


ScoringRule = Callable[[IndicatorSnapshot, ScoreState], ScoreState]


# =============================================================================
# Rules
# =============================================================================

def rule_rsi_extremes(snap: IndicatorSnapshot, state: ScoreState) -> ScoreState:
    values = snap.require('rsi14')
    if values is None:
        return state
    (rsi,) = values
    if rsi < RSI_OVERSOLD:
        return state.add(20, "RSI oversold (<30)")
    if rsi > RSI_OVERBOUGHT:
        return state.add(-20, "RSI overbought (>70)")
    return state


def rule_ema_spread(snap: IndicatorSnapshot, state: ScoreState) -> ScoreState:
    values = snap.require('ema20', 'ema50')
    if values is None:
        return state
    ema20, ema50 = values
    spread = ema20 - ema50
    magnitude = min(1.0, abs(spread) / (abs(ema50) * 0.01 + EPS))
    points = 10 + round_half_up(10 * magnitude)
    if spread > 0:
        return state.add(points, "EMA20 above EMA50 (bullish)")
    if spread < 0:
        return state.add(-points, "EMA20 below EMA50 (bearish)")
    return state


def rule_macd_histogram(snap: IndicatorSnapshot, state: ScoreState) -> ScoreState:
    values = snap.require('macd.histogram')
    if values is None:
        return state
    (hist,) = values
    if snap.ema50 is not None:
        ref = abs(snap.ema50)
    elif snap.ema20 is not None:
        ref = abs(snap.ema20)
    else:
        ref = 1.0
    magnitude = min(1.0, abs(hist) / (ref * 0.002 + EPS))
    points = 5 + round_half_up(5 * magnitude)
    if hist > 0:
        return state.add(points, "MACD histogram positive")
    if hist < 0:
        return state.add(-points, "MACD histogram negative")
    return state


def rule_stoch_cross(snap: IndicatorSnapshot, state: ScoreState) -> ScoreState:
    values = snap.require('stoch.k', 'stoch.d')
    if values is None:
        return state
    k, d = values
    delta = k - d
    magnitude = min(1.0, abs(delta) / 20.0)
    points = 3 + round_half_up(4 * magnitude)
    if delta > 0:
        return state.add(points, "Stochastic K above D")
    if delta < 0:
        return state.add(-points, "Stochastic K below D")
    return state


def rule_adx_filter(snap: IndicatorSnapshot, state: ScoreState) -> ScoreState:
    values = snap.require('adx14')
    if values is None or state.score == 0:
        return state
    (adx,) = values
    direction = sign(state.score)
    magnitude = abs(state.score)
    if adx >= ADX_TRENDING:
        boost = min(10, round_half_up(magnitude * 0.20))
        if boost:
            return state.add(direction * boost, "ADX strong trend (>=25) amplifies bias")
    elif adx < ADX_WEAK:
        damp = min(8, round_half_up(magnitude * 0.15))
        if damp:
            return state.add(-direction * damp, "ADX weak trend (<15) dampens bias")
    return state


def rule_bollinger_extremes(snap: IndicatorSnapshot, state: ScoreState) -> ScoreState:
    values = snap.require('bb20.percent_b')
    if values is None:
        return state
    (pb,) = values
    if pb > BB_UPPER_EXT:
        return state.add(-5, "Price extended above upper Bollinger band")
    if pb < BB_LOWER_EXT:
        return state.add(5, "Price extended below lower Bollinger band")
    return state


def rule_long_trend_bias(snap: IndicatorSnapshot, state: ScoreState) -> ScoreState:
    values = snap.require('ema50', 'sma200')
    if values is None:
        return state
    ema50, sma200 = values
    return state.add(3 * sign(ema50 - sma200))


def rule_mfi_extremes(snap: IndicatorSnapshot, state: ScoreState) -> ScoreState:
    values = snap.require('mfi14')
    if values is None:
        return state
    (mfi,) = values
    if mfi > MFI_OVERBOUGHT:
        return state.add(-8, "MFI overbought (>80)")
    if mfi < MFI_OVERSOLD:
        return state.add(8, "MFI oversold (<20)")
    return state


def volume_direction(snap: IndicatorSnapshot) -> int:
    """
    거래량 확인 방향.

    EMA 힌트(EMA20>EMA50)와 MACD 힌트(hist>0)의 합의 부호.
    둘이 엇갈리면 EMA 방향 우선, 하나만 있으면 그 방향, 둘 다 없으면 0.
    """
    ema = snap.require('ema20', 'ema50')
    hist = snap.require('macd.histogram')
    ema_hint = None if ema is None else (1 if ema[0] > ema[1] else -1)
    macd_hint = None if hist is None else (1 if hist[0] > 0 else -1)
    if ema_hint is None and macd_hint is None:
        return 0
    if ema_hint is None:
        return macd_hint
    if macd_hint is None:
        return ema_hint
    combined = sign(ema_hint + macd_hint)
    return combined if combined != 0 else ema_hint


def rule_volume_confirmation(snap: IndicatorSnapshot, state: ScoreState) -> ScoreState:
    values = snap.require('volume', 'vol_sma20')
    if values is None:
        return state
    volume, vol_sma = values
    if vol_sma <= 0 or volume / vol_sma < VOLUME_SURGE_RATIO:
        return state
    direction = volume_direction(snap)
    if direction > 0:
        return state.add(5, "Volume surge confirms up move")
    if direction < 0:
        return state.add(-5, "Volume surge confirms down move")
    return state


def rule_obv_trend(snap: IndicatorSnapshot, state: ScoreState) -> ScoreState:
    values = snap.require('obv', 'obv_sma21')
    if values is None:
        return state
    obv, obv_sma = values
    if obv > obv_sma:
        return state.add(4, "OBV above 21-SMA (accumulation)")
    if obv < obv_sma:
        return state.add(-4, "OBV below 21-SMA (distribution)")
    return state


SCORING_RULES: Tuple[ScoringRule, ...] = (
    rule_rsi_extremes,
    rule_ema_spread,
    rule_macd_histogram,
    rule_stoch_cross,
    rule_adx_filter,
    rule_bollinger_extremes,
    rule_long_trend_bias,
    rule_mfi_extremes,
    rule_volume_confirmation,
    rule_obv_trend,
)


# =============================================================================
# Main
# =============================================================================

def score_indicators(
    snapshot: IndicatorSnapshot,
    rules: Sequence[ScoringRule] = SCORING_RULES,
) -> TARecommendation:
    """
    스냅샷 → TARecommendation

    Args:
        snapshot: IndicatorSnapshot
        rules: 규칙 순서 (기본 SCORING_RULES)

    Returns:
        TARecommendation (score clamp [-100, 100])
    """
    state = reduce(lambda acc, rule: rule(snapshot, acc), rules, ScoreState())
    score = max(SCORE_MIN, min(SCORE_MAX, state.score))
    return TARecommendation(score=score, reasons=state.reasons)


def format_recommendation(ta: TARecommendation) -> str:
    """TA 결과 포맷팅"""
    lines = [f"TA Score: {ta.score:+d}"]
    for reason in ta.reasons:
        lines.append(f"  - {reason}")
    return "\n".join(lines)
