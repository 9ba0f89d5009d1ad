"""
core/parallel/decorators.py - 쓰로틀링 재시도 정책 및 에러 분류 유틸리티

원격 호출 1건을 지수 백오프로 감싸는 재시도 정책과
에러 분류 함수를 제공합니다.

주요 구성 요소:
- RetryConfig: 재시도 설정 (최대 5회, 2^attempt 초 대기)
- RetryPolicy: 재시도 실행기 (취소 가능한 대기)
- categorize_error: 예외를 ErrorCategory로 분류
- get_error_code: 예외에서 에러 코드 추출

Example:
    policy = RetryPolicy()
    output = policy.execute(
        lambda: client.describe_processing_job(ProcessingJobName=name),
        cancel_event=stop_event,
    )
"""

from __future__ import annotations

import logging
import random
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from core.exceptions import (
    CollectionCancelledError,
    RetryExhaustedError,
    is_access_denied,
    is_not_found,
    is_throttling,
)

from .types import ErrorCategory

logger = logging.getLogger(__name__)

T = TypeVar("T")

# 대기 함수: (delay, cancel_event) -> 취소되었으면 True
WaitFunc = Callable[[float, "threading.Event | None"], bool]


@dataclass
class RetryConfig:
    """재시도 설정

    Attributes:
        max_attempts: 최대 시도 횟수 (첫 시도 포함)
        base_delay: 기본 대기 시간 (초)
        max_delay: 최대 대기 시간 (초)
        exponential_base: 지수 백오프 밑수
        jitter: 지터 사용 여부 (대기 시간에 랜덤성 추가)
    """

    max_attempts: int = 5
    base_delay: float = 1.0
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: bool = False

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    def get_delay(self, attempt: int) -> float:
        """재시도 대기 시간 계산

        Args:
            attempt: 실패한 시도 번호 (0부터 시작)

        Returns:
            대기 시간 (초)
        """
        delay = self.base_delay * (self.exponential_base**attempt)
        delay = min(delay, self.max_delay)

        if self.jitter:
            # Full jitter: [0, delay]
            delay = random.uniform(0, delay)

        return delay


# 기본 재시도 설정
DEFAULT_RETRY_CONFIG = RetryConfig()


def _cancellable_wait(delay: float, cancel_event: threading.Event | None) -> bool:
    """delay 초 동안 대기, 중간에 cancel_event가 set되면 즉시 True 반환"""
    event = cancel_event or threading.Event()
    return event.wait(delay)


class RetryPolicy:
    """쓰로틀링 전용 지수 백오프 재시도 정책

    - 성공하면 즉시 반환
    - 쓰로틀링 에러면 2^attempt 초 대기 후 재시도 (최대 max_attempts회)
    - 그 외 에러는 재시도 없이 그대로 전파
    - 마지막 시도까지 쓰로틀링이면 RetryExhaustedError

    상태를 갖지 않으므로 여러 워커 스레드에서 하나의 인스턴스를 공유해도 됩니다.
    시도 횟수는 execute() 호출마다 새로 셉니다.
    """

    def __init__(self, config: RetryConfig | None = None, wait: WaitFunc | None = None):
        self.config = config or DEFAULT_RETRY_CONFIG
        self._wait = wait or _cancellable_wait

    def execute(
        self,
        operation: Callable[[], T],
        cancel_event: threading.Event | None = None,
        label: str = "operation",
    ) -> T:
        """operation 실행 (쓰로틀링 시 재시도)

        Args:
            operation: 인자 없는 원격 호출
            cancel_event: set되면 새 재시도 대기를 시작하지 않고 중단
            label: 로그/에러 메시지용 이름

        Returns:
            operation 반환값

        Raises:
            RetryExhaustedError: 모든 시도가 쓰로틀링으로 실패
            CollectionCancelledError: 재시도 대기 중 취소됨
            Exception: 쓰로틀링 외 에러는 원본 그대로
        """
        max_attempts = self.config.max_attempts

        for attempt in range(max_attempts):
            try:
                return operation()
            except Exception as e:
                if not is_throttling(e):
                    raise

                if attempt + 1 >= max_attempts:
                    raise RetryExhaustedError(label, max_attempts, cause=e) from e

                if cancel_event is not None and cancel_event.is_set():
                    raise CollectionCancelledError() from e

                delay = self.config.get_delay(attempt)
                logger.info(f"[{label}] 쓰로틀링 발생 (시도 {attempt + 1}/{max_attempts}), {delay:.1f}초 후 재시도")
                if self._wait(delay, cancel_event):
                    raise CollectionCancelledError() from e

        # max_attempts >= 1 이므로 도달하지 않음
        raise RetryExhaustedError(label, max_attempts)


def categorize_error(error: BaseException) -> ErrorCategory:
    """예외 객체를 분석하여 ErrorCategory로 분류

    Args:
        error: 분류할 예외

    Returns:
        에러 카테고리
    """
    if isinstance(error, CollectionCancelledError):
        return ErrorCategory.CANCELLED

    # 재시도 소진은 원인 예외 기준으로 분류
    if isinstance(error, RetryExhaustedError) and error.cause is not None:
        return categorize_error(error.cause)

    if not isinstance(error, Exception):
        return ErrorCategory.UNKNOWN

    if is_throttling(error):
        return ErrorCategory.THROTTLING
    if is_access_denied(error):
        return ErrorCategory.ACCESS_DENIED
    if is_not_found(error):
        return ErrorCategory.NOT_FOUND

    response = getattr(error, "response", None)
    if isinstance(response, dict):
        error_code = response.get("Error", {}).get("Code", "")

        if "Timeout" in error_code:
            return ErrorCategory.TIMEOUT

        if error_code in ("ExpiredToken", "ExpiredTokenException"):
            return ErrorCategory.EXPIRED_TOKEN

        if error_code.startswith(("Invalid", "Validation")):
            return ErrorCategory.INVALID_REQUEST

        if error_code in ("InternalError", "InternalFailure", "ServiceUnavailable"):
            return ErrorCategory.SERVICE_ERROR

    # 네트워크 에러
    if isinstance(error, (ConnectionError, TimeoutError, OSError)):
        return ErrorCategory.NETWORK

    return ErrorCategory.UNKNOWN


def get_error_code(error: BaseException) -> str:
    """예외 객체에서 에러 코드 문자열 추출

    ClientError의 경우 response에서 Code를 추출하고,
    그 외에는 예외 클래스명을 반환합니다.
    """
    if isinstance(error, RetryExhaustedError) and error.cause is not None:
        return get_error_code(error.cause)

    response = getattr(error, "response", None)
    if isinstance(response, dict):
        code: str = response.get("Error", {}).get("Code", "Unknown")
        return code
    return error.__class__.__name__
