"""
core/parallel/types.py - 병렬 수집 결과 타입

주요 구성 요소:
- ErrorCategory: 에러 분류
- ItemFailure: 개별 리소스 상세 조회 실패 정보
- CollectionResult: 한 리소스 타입에 대한 전체 수집 결과
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from core.types import ResourceDetail


class ErrorCategory(Enum):
    """에러 카테고리"""

    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    THROTTLING = "throttling"
    TIMEOUT = "timeout"
    INVALID_REQUEST = "invalid_request"
    SERVICE_ERROR = "service_error"
    EXPIRED_TOKEN = "expired_token"
    NETWORK = "network"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ItemFailure:
    """개별 리소스 상세 조회 실패

    Attributes:
        resource_type: 리소스 종류 표시명
        resource_id: 실패한 리소스 ID
        category: 에러 카테고리
        error_code: 에러 코드 (ClientError Code 또는 예외 클래스명)
        message: 에러 메시지
        attempts: 시도 횟수
    """

    resource_type: str
    resource_id: str
    category: ErrorCategory
    error_code: str
    message: str
    attempts: int = 1

    def __str__(self) -> str:
        return f"[{self.category.value}] {self.resource_type}/{self.resource_id}: {self.error_code}"


@dataclass
class CollectionResult:
    """수집 결과

    목록 조회가 끝까지 성공했을 때만 만들어집니다. 순서는 보장되지 않습니다.

    Attributes:
        resource_type: 리소스 종류 표시명
        details: 수집된 ResourceDetail 목록
        failures: 스킵된 리소스의 실패 정보
        refs_seen: feeder가 큐에 넣은 ResourceRef 수
        duration_ms: 전체 소요 시간
    """

    resource_type: str = ""
    details: list[ResourceDetail] = field(default_factory=list)
    failures: list[ItemFailure] = field(default_factory=list)
    refs_seen: int = 0
    duration_ms: float = 0.0

    @property
    def success_count(self) -> int:
        return len(self.details)

    @property
    def error_count(self) -> int:
        return len(self.failures)
