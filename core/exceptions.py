"""
core/exceptions.py - 통합 예외 계층 구조

스캔 파이프라인 전체에서 사용되는 예외 클래스들을 정의합니다.
일관된 예외 처리와 에러 메시지를 제공합니다.

예외 계층 구조:
    ScanError (베이스)
    ├── ConfigError (패턴 파일/설정 오류 - 실행 전 중단)
    ├── EnumerationError (목록 조회 실패 - 해당 리소스 타입 중단)
    ├── ItemFetchError (개별 리소스 상세 조회 실패 - 스킵 후 계속)
    │   └── RetryExhaustedError
    └── CollectionCancelledError (실행 취소)

    PatternCompileWarning (UserWarning) - 개별 패턴 컴파일 실패

Usage:
    from core.exceptions import EnumerationError, is_throttling

    try:
        page = paginator_iter.__next__()
    except ClientError as e:
        raise EnumerationError("Lambda Function", cause=e)
"""

from __future__ import annotations

from typing import Any

# =============================================================================
# 베이스 예외
# =============================================================================


class ScanError(Exception):
    """secretscan 기본 예외 클래스

    모든 커스텀 예외의 베이스 클래스입니다.

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# 설정 관련 예외
# =============================================================================


class ConfigError(ScanError):
    """설정 관련 예외

    패턴 파일을 읽거나 파싱할 수 없을 때, 또는 잘못된 설정 값이
    주어졌을 때 발생합니다. 어떤 조회도 시작하기 전에 실행을 중단합니다.
    """

    def __init__(
        self,
        key: str,
        message: str,
        cause: Exception | None = None,
    ):
        full_message = f"설정 오류 [{key}]: {message}"
        super().__init__(full_message, cause)
        self.config_key = key
        self.details["config_key"] = key


class PatternCompileWarning(UserWarning):
    """개별 패턴 컴파일 실패 경고

    예외로 발생시키지 않고 PatternSet.warnings 에 기록만 합니다.
    """

    def __init__(self, pattern_name: str, expression: str, reason: str):
        super().__init__(f"패턴 컴파일 실패 [{pattern_name}]: {reason}")
        self.pattern_name = pattern_name
        self.expression = expression
        self.reason = reason


# =============================================================================
# 수집 관련 예외
# =============================================================================


class EnumerationError(ScanError):
    """리소스 목록 조회(페이지네이션) 실패

    더 이상 리소스를 발견할 수 없으므로 해당 리소스 타입의 수집 전체를
    중단합니다. 이미 수집된 결과는 버려집니다.
    """

    def __init__(
        self,
        resource_type: str,
        cause: Exception | None = None,
        pages_read: int = 0,
    ):
        super().__init__(f"목록 조회 실패 [{resource_type}]", cause)
        self.resource_type = resource_type
        self.pages_read = pages_read
        self.details.update({"resource_type": resource_type, "pages_read": pages_read})


class ItemFetchError(ScanError):
    """개별 리소스 상세 조회 실패

    해당 리소스만 스킵하고 수집은 계속됩니다.
    """

    def __init__(
        self,
        resource_id: str,
        message: str,
        cause: Exception | None = None,
        attempts: int = 1,
    ):
        super().__init__(f"상세 조회 실패 [{resource_id}]: {message}", cause)
        self.resource_id = resource_id
        self.attempts = attempts
        self.details.update({"resource_id": resource_id, "attempts": attempts})


class RetryExhaustedError(ItemFetchError):
    """쓰로틀링 재시도 횟수 소진"""

    def __init__(self, operation: str, attempts: int, cause: Exception | None = None):
        super().__init__(operation, f"최대 재시도 횟수 초과 ({attempts}회)", cause, attempts)


class CollectionCancelledError(ScanError):
    """실행 취소 요청으로 수집이 중단됨"""

    def __init__(self, resource_type: str = ""):
        message = f"수집 취소됨 [{resource_type}]" if resource_type else "수집 취소됨"
        super().__init__(message)
        self.resource_type = resource_type


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================

THROTTLING_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "RateExceeded",
    }
)

ACCESS_DENIED_CODES = frozenset(
    {
        "AccessDenied",
        "AccessDeniedException",
        "UnauthorizedAccess",
        "UnauthorizedOperation",
    }
)

NOT_FOUND_CODES = frozenset(
    {
        "ResourceNotFoundException",
        "NotFoundException",
        "NoSuchEntity",
        "NoSuchBucket",
        "NoSuchKey",
        "InvalidInstanceID.NotFound",
        "ValidationError",
    }
)


def _error_code(error: Exception) -> str:
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        return response.get("Error", {}).get("Code", "")
    return ""


def is_access_denied(error: Exception) -> bool:
    """액세스 거부 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        액세스 거부 오류이면 True
    """
    return _error_code(error) in ACCESS_DENIED_CODES


def is_throttling(error: Exception) -> bool:
    """스로틀링 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        스로틀링 오류이면 True
    """
    return _error_code(error) in THROTTLING_CODES


def is_not_found(error: Exception) -> bool:
    """리소스를 찾을 수 없는 오류인지 확인

    Args:
        error: 확인할 예외

    Returns:
        리소스 없음 오류이면 True
    """
    return _error_code(error) in NOT_FOUND_CODES


def format_error_for_user(error: Exception) -> str:
    """사용자에게 표시할 에러 메시지 포맷팅

    Args:
        error: 예외

    Returns:
        사용자 친화적인 에러 메시지
    """
    if isinstance(error, ScanError):
        # 커스텀 예외는 이미 포맷팅됨
        return str(error)

    # boto3 ClientError
    response = getattr(error, "response", None)
    if isinstance(response, dict):
        error_info = response.get("Error", {})
        code = error_info.get("Code", "UnknownError")
        message = error_info.get("Message", str(error))

        friendly_messages = {
            "AccessDenied": "권한이 없습니다. IAM 정책을 확인하세요.",
            "AccessDeniedException": "권한이 없습니다. IAM 정책을 확인하세요.",
            "ExpiredToken": "인증 토큰이 만료되었습니다. 다시 로그인하세요.",
            "InvalidClientTokenId": "잘못된 자격 증명입니다.",
            "Throttling": "요청이 너무 많습니다. 잠시 후 다시 시도하세요.",
        }

        return friendly_messages.get(code, f"{code}: {message}")

    return str(error)
