"""
core/parallel/client.py - boto3 client 생성 헬퍼

타임아웃 + 연결 풀이 설정된 boto3 client를 생성합니다.

쓰로틀링 재시도는 RetryPolicy(2^attempt 초 백오프)가 담당하므로
botocore 자체 재시도는 기본적으로 끕니다 (total_max_attempts=1, 첫 시도 포함).
botocore가 먼저 재시도하면 쓰로틀링 예외가 RetryPolicy까지 올라오지 않습니다.

Example:
    from core.parallel.client import get_client

    lambda_client = get_client(session, "lambda", region_name="ap-northeast-2", max_pool_connections=16)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal, cast

if TYPE_CHECKING:
    import boto3

RetryMode = Literal["legacy", "standard", "adaptive"]

DEFAULT_MAX_ATTEMPTS = 1
DEFAULT_RETRY_MODE: RetryMode = "standard"
DEFAULT_CONNECT_TIMEOUT = 10  # 초
DEFAULT_READ_TIMEOUT = 30  # 초
DEFAULT_MAX_POOL_CONNECTIONS = 25  # concurrency 이상 권장


def get_client(
    session: boto3.Session,
    service_name: str,
    region_name: str | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    retry_mode: RetryMode = DEFAULT_RETRY_MODE,
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
    read_timeout: int = DEFAULT_READ_TIMEOUT,
    max_pool_connections: int = DEFAULT_MAX_POOL_CONNECTIONS,
    **kwargs: Any,
) -> Any:
    """설정이 적용된 boto3 client 생성

    Args:
        session: boto3 Session
        service_name: AWS 서비스 이름 (ec2, lambda, sagemaker 등)
        region_name: 리전 (None이면 세션 기본값)
        max_attempts: botocore 총 시도 횟수, 첫 시도 포함 (기본: 1, 재시도 없음)
        retry_mode: botocore 재시도 모드
        connect_timeout: 연결 타임아웃 (초)
        read_timeout: 읽기 타임아웃 (초)
        max_pool_connections: HTTP 연결 풀 크기
        **kwargs: session.client()에 전달할 추가 인자

    Returns:
        boto3 client
    """
    from botocore.config import Config

    config = Config(
        retries={"total_max_attempts": max_attempts, "mode": retry_mode},  # pyright: ignore[reportArgumentType]
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
        max_pool_connections=max_pool_connections,
    )

    if "config" in kwargs:
        existing = kwargs.pop("config")
        config = config.merge(existing)

    # boto3-stubs는 Literal 서비스명을 요구하므로 Any로 캐스팅
    return session.client(  # pyright: ignore[reportCallIssue]
        cast(Any, service_name),
        region_name=region_name,
        config=config,
        **kwargs,
    )
