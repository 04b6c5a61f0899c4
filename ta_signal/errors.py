# -*- coding: utf-8 -*-
"""
Error Taxonomy
==============

신호 파이프라인 예외 정의.

- InsufficientDataError: 봉 개수 부족 (파이프라인 레벨에서만 fatal)
- InvalidInputError: 빈 배열 / NaN / Infinity / 길이 불일치
- UpstreamUnavailableError: 외부 provider 실패 (사유 목록 보존)

지표 하나가 계산 불가한 경우는 예외가 아니라 snapshot 필드 생략(None)으로 처리.
"""
from typing import List, Optional, Tuple


class SignalError(Exception):
    """ta_signal 예외 베이스"""


class InsufficientDataError(SignalError):
    """봉 개수가 최소 요구치보다 적음"""

    def __init__(self, bars: int, required: int, context: str = ""):
        self.bars = bars
        self.required = required
        self.context = context
        where = f" ({context})" if context else ""
        super().__init__(f"Insufficient data{where}: {bars} bars, need at least {required}")


class InvalidInputError(SignalError, ValueError):
    """입력 시리즈가 비었거나 유한하지 않은 값 포함"""


class UpstreamUnavailableError(SignalError):
    """
    외부 provider 실패.

    Attributes:
        failures: (provider_name, reason) 리스트, 시도 순서 그대로
    """

    def __init__(self, message: str, failures: Optional[List[Tuple[str, str]]] = None):
        self.failures = list(failures or [])
        if self.failures:
            detail = "; ".join(f"{name}: {reason}" for name, reason in self.failures)
            message = f"{message} [{detail}]"
        super().__init__(message)
