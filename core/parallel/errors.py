"""
core/parallel/errors.py - 개별 리소스 실패 수집 및 관리

병렬 수집 중 워커 스레드에서 발생하는 상세 조회 실패를 일관되게
수집하고 로깅합니다. 실패한 리소스는 스킵되고 수집은 계속됩니다.

주요 구성 요소:
- ErrorSeverity: 에러 심각도 분류
- ErrorCollector: 스레드 세이프 실패 수집기

Example:
    collector = ErrorCollector("Lambda Function")

    try:
        detail = fetch_detail(ref)
    except Exception as e:
        collector.collect(ref.resource_id, e, attempts=1)

    if collector.has_errors:
        print(collector.get_summary())
"""

from __future__ import annotations

import logging
import threading
from enum import Enum

from core.exceptions import ItemFetchError

from .decorators import categorize_error, get_error_code
from .types import ErrorCategory, ItemFailure

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """에러 심각도 분류

    수집된 에러의 로깅 레벨을 결정합니다.
    """

    WARNING = "warning"  # 부분 실패 - 보고하되 계속 진행
    INFO = "info"  # 정보성 - 권한 없음, 리소스 사라짐 등
    DEBUG = "debug"  # 취소 등


def severity_for(category: ErrorCategory) -> ErrorSeverity:
    """카테고리별 기본 심각도"""
    if category in (ErrorCategory.ACCESS_DENIED, ErrorCategory.NOT_FOUND):
        return ErrorSeverity.INFO
    if category == ErrorCategory.CANCELLED:
        return ErrorSeverity.DEBUG
    return ErrorSeverity.WARNING


class ErrorCollector:
    """스레드 세이프 실패 수집기

    여러 워커 스레드에서 발생하는 실패를 안전하게 모으고 요약을 제공합니다.
    """

    def __init__(self, resource_type: str):
        """초기화

        Args:
            resource_type: 리소스 종류 표시명 (수집된 실패에 공통 적용)
        """
        self.resource_type = resource_type
        self._failures: list[ItemFailure] = []
        self._lock = threading.Lock()

    def collect(self, resource_id: str, error: BaseException, attempts: int = 1) -> ItemFailure:
        """예외를 ItemFailure로 변환하여 수집하고 로깅

        Args:
            resource_id: 실패한 리소스 ID
            error: 발생한 예외
            attempts: 시도 횟수 (ItemFetchError면 예외에 기록된 값을 우선)

        Returns:
            수집된 ItemFailure
        """
        if isinstance(error, ItemFetchError):
            attempts = error.attempts

        category = categorize_error(error)
        failure = ItemFailure(
            resource_type=self.resource_type,
            resource_id=resource_id,
            category=category,
            error_code=get_error_code(error),
            message=str(error),
            attempts=attempts,
        )

        with self._lock:
            self._failures.append(failure)

        severity = severity_for(category)
        log_msg = f"{failure} - 스킵 ({failure.message})"
        if severity == ErrorSeverity.WARNING:
            logger.warning(log_msg)
        elif severity == ErrorSeverity.INFO:
            logger.info(log_msg)
        else:
            logger.debug(log_msg)

        return failure

    @property
    def failures(self) -> list[ItemFailure]:
        """수집된 모든 실패의 복사본 반환"""
        with self._lock:
            return list(self._failures)

    @property
    def has_errors(self) -> bool:
        with self._lock:
            return len(self._failures) > 0

    def get_summary(self) -> str:
        """카테고리별 실패 건수를 포함한 요약 문자열 반환

        Returns:
            포맷팅된 요약 문자열 (예: "실패 3건 (access_denied: 1건, throttling: 2건)")
        """
        with self._lock:
            if not self._failures:
                return "에러 없음"

            by_category: dict[str, int] = {}
            for f in self._failures:
                by_category[f.category.value] = by_category.get(f.category.value, 0) + 1

            parts = [f"{k}: {v}건" for k, v in sorted(by_category.items())]
            return f"실패 {len(self._failures)}건 ({', '.join(parts)})"
