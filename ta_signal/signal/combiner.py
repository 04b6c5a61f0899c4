"""
Multi-Timeframe Combiner
========================

primary TF 점수 + confirmation TF 점수 → combined 점수.

combined = round(0.7 * primary + 0.3 * confirm)
부호가 정반대면 (0은 불일치 아님) combined = round(combined * 0.5)
"""
from ..utils.numeric import round_half_up


PRIMARY_WEIGHT = 0.7
CONFIRM_WEIGHT = 0.3
CONFLICT_PENALTY = 0.5


def timeframes_conflict(primary_score: float, confirm_score: float) -> bool:
    """한쪽 양수, 다른쪽 음수일 때만 True"""
    return (primary_score > 0 and confirm_score < 0) or (primary_score < 0 and confirm_score > 0)


def combine_timeframes(primary_score: float, confirm_score: float) -> int:
    """
    Examples:
        >>> combine_timeframes(40, 20)
        34
        >>> combine_timeframes(40, -20)
        11
    """
    combined = round_half_up(PRIMARY_WEIGHT * primary_score + CONFIRM_WEIGHT * confirm_score)
    if timeframes_conflict(primary_score, confirm_score):
        combined = round_half_up(combined * CONFLICT_PENALTY)
    return combined
