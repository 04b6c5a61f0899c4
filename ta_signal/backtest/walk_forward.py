# -*- coding: utf-8 -*-
"""
Walk-Forward Backtester
=======================

라이브 신호와 동일한 지표/휴리스틱 로직을 봉 단위로 재실행.

핵심 로직:
1. i = warmup .. len-2 (마지막 봉은 다음 봉 결과가 없음)
2. 지표 시리즈는 한 번만 계산, i번째 행 = bars[0..i]만으로 계산한 값 (lookahead 없음)
3. score > 8 → long, score < -8 → short, 그 외 skip / ATR 0 → skip
4. entry = close[i], stop = 1.5*ATR, target = 2.5*ATR
5. bar i+1의 high/low로 결과 판정
   - SL 먼저 체크 (같은 봉에서 SL/TP 모두 터치 시 SL 우선 - 보수적)
   - 둘 다 아니면 close[i+1] 청산
6. PnL은 가격 단위 (통화 정규화 없음)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

import pandas as pd

from ..data.bars import validate_frame
from ..errors import InvalidInputError
from ..indicators.snapshot import indicator_frame, snapshot_at
from ..scoring.heuristic import score_indicators
from ..utils.numeric import format_price

logger = logging.getLogger(__name__)

ExitReason = Literal['stop', 'target', 'close']


@dataclass(frozen=True)
class WalkForwardConfig:
    """Walk-forward 설정"""
    warmup_bars: int = 60         # 첫 평가 봉 인덱스
    entry_threshold: float = 8.0  # |score| > threshold 일 때만 진입
    stop_mult: float = 1.5        # SL = entry ∓ ATR * 1.5
    target_mult: float = 2.5      # TP = entry ± ATR * 2.5


@dataclass(frozen=True)
class SimulatedTrade:
    """단일 봉 시뮬레이션 거래"""
    index: int
    direction: Literal['long', 'short']
    entry: float
    exit: float
    result: float  # 가격 단위 PnL
    exit_reason: ExitReason = 'close'
    score: int = 0
    atr: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'index': self.index,
            'direction': self.direction,
            'entry': self.entry,
            'exit': self.exit,
            'result': self.result,
            'exit_reason': self.exit_reason,
        }


@dataclass(frozen=True)
class BacktestStats:
    """백테스트 통계"""
    trades: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    win_rate: float = 0.0
    avg_pnl: float = 0.0
    total_pnl: float = 0.0
    trade_log: Tuple[SimulatedTrade, ...] = field(default_factory=tuple)
    bars_evaluated: int = 0

    @classmethod
    def from_trades(cls, trades: List[SimulatedTrade], bars_evaluated: int = 0) -> "BacktestStats":
        n = len(trades)
        wins = sum(1 for t in trades if t.result > 0)
        losses = sum(1 for t in trades if t.result < 0)
        total = sum(t.result for t in trades)
        return cls(
            trades=n,
            wins=wins,
            losses=losses,
            draws=n - wins - losses,
            win_rate=wins / n if n else 0.0,
            avg_pnl=total / n if n else 0.0,
            total_pnl=total,
            trade_log=tuple(trades),
            bars_evaluated=bars_evaluated,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'trades': self.trades,
            'wins': self.wins,
            'losses': self.losses,
            'draws': self.draws,
            'win_rate': self.win_rate,
            'avg_pnl': self.avg_pnl,
            'total_pnl': self.total_pnl,
        }


def simulate_next_bar(
    direction: Literal['long', 'short'],
    entry: float,
    stop: float,
    target: float,
    next_high: float,
    next_low: float,
    next_close: float,
) -> Tuple[float, float, ExitReason]:
    """
    다음 봉 결과 판정 (SL 우선)

    Returns:
        (exit_price, result, exit_reason)
    """
    if direction == 'long':
        sl = entry - stop
        tp = entry + target
        if next_low <= sl:
            return sl, -stop, 'stop'
        if next_high >= tp:
            return tp, target, 'target'
        return next_close, next_close - entry, 'close'

    sl = entry + stop
    tp = entry - target
    if next_high >= sl:
        return sl, -stop, 'stop'
    if next_low <= tp:
        return tp, target, 'target'
    return next_close, entry - next_close, 'close'


def run_backtest(
    df: pd.DataFrame,
    lookback: Optional[int] = None,
    config: Optional[WalkForwardConfig] = None,
) -> BacktestStats:
    """
    Walk-forward 백테스트

    Args:
        df: OHLCV DataFrame (close/high/low 필수)
        lookback: 최근 N봉만 재생 (None이면 전체)
        config: WalkForwardConfig

    Returns:
        BacktestStats (동일 입력 → 동일 결과)

    Raises:
        InvalidInputError: 빈 시리즈 / 비유한 값 / high·low 컬럼 없음
    """
    cfg = config or WalkForwardConfig()
    validate_frame(df)
    if 'high' not in df.columns or 'low' not in df.columns:
        raise InvalidInputError("run_backtest needs 'high' and 'low' columns")
    frame = df.reset_index(drop=True)
    if lookback is not None and lookback < len(frame):
        frame = frame.iloc[-lookback:].reset_index(drop=True)

    closes = frame['close'].to_numpy(dtype=float)
    highs = frame['high'].to_numpy(dtype=float)
    lows = frame['low'].to_numpy(dtype=float)

    indicators = indicator_frame(frame)
    trades: List[SimulatedTrade] = []
    evaluated = 0
    for i in range(cfg.warmup_bars, len(frame) - 1):
        evaluated += 1
        snap = snapshot_at(indicators, i)
        ta = score_indicators(snap)

        if ta.score > cfg.entry_threshold:
            direction = 'long'
        elif ta.score < -cfg.entry_threshold:
            direction = 'short'
        else:
            continue

        atr = snap.atr14 or 0.0
        if atr == 0:
            logger.debug(f"bar {i}: no tradeable ATR, skip")
            continue

        entry = float(closes[i])
        stop = cfg.stop_mult * atr
        target = cfg.target_mult * atr
        exit_price, result, reason = simulate_next_bar(
            direction, entry, stop, target,
            next_high=float(highs[i + 1]),
            next_low=float(lows[i + 1]),
            next_close=float(closes[i + 1]),
        )
        trades.append(SimulatedTrade(
            index=i,
            direction=direction,
            entry=entry,
            exit=exit_price,
            result=result,
            exit_reason=reason,
            score=ta.score,
            atr=atr,
        ))

    return BacktestStats.from_trades(trades, bars_evaluated=evaluated)


def format_backtest_stats(stats: BacktestStats, precision: int = 4) -> str:
    """백테스트 통계 포맷팅"""
    lines = [
        "=" * 50,
        "Walk-Forward Backtest",
        "=" * 50,
        f"Bars evaluated: {stats.bars_evaluated}",
        f"Trades: {stats.trades} (W:{stats.wins} L:{stats.losses} D:{stats.draws})",
        f"Win Rate: {stats.win_rate:.1%}",
        f"Avg PnL: {format_price(stats.avg_pnl, precision)}",
        f"Total PnL: {format_price(stats.total_pnl, precision)}",
        "=" * 50,
    ]
    return "\n".join(lines)
