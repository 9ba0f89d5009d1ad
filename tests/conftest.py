"""
tests/conftest.py - pytest 공통 픽스처

AWS API 모킹과 테스트 헬퍼를 제공합니다.

Usage:
    def test_something(moto_ec2, sample_patterns):
        # moto_ec2: moto를 사용한 EC2 client
        # sample_patterns: 테스트용 PatternSet
        pass
"""

import os
import sys
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import moto
import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from core.parallel.decorators import RetryConfig, RetryPolicy  # noqa: E402
from core.patterns import load_patterns  # noqa: E402
from core.types import ResourceRef  # noqa: E402

# =============================================================================
# 환경 설정
# =============================================================================


@pytest.fixture(autouse=True)
def setup_test_environment():
    """테스트 환경 설정"""
    os.environ.setdefault("AWS_DEFAULT_REGION", "ap-northeast-2")
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

    yield


# =============================================================================
# 패턴 픽스처
# =============================================================================


SAMPLE_PATTERNS = {
    "AWS Access Key ID": r"AKIA[0-9A-Z]{16}",
    "AWS_Client": r"(?i)aws_client\S*",
    "Password Pattern": r"^[A-Za-z\d!@#$%^&*]{8,}$",
}


@pytest.fixture
def sample_patterns():
    """테스트용 PatternSet"""
    return load_patterns(SAMPLE_PATTERNS)


# =============================================================================
# 수집기 헬퍼
# =============================================================================


class StaticListSource:
    """미리 정한 페이지를 순서대로 반환하는 ListSource

    error_at 번째 호출에서 error 를 발생시킵니다.
    """

    def __init__(
        self,
        pages: List[List[str]],
        error_at: Optional[int] = None,
        error: Optional[Exception] = None,
    ):
        self.pages = pages
        self.error_at = error_at
        self.error = error or RuntimeError("listing failed")
        self.calls = 0
        self.lock = threading.Lock()

    def next_page(self):
        with self.lock:
            index = self.calls
            self.calls += 1

        if self.error_at is not None and index == self.error_at:
            raise self.error
        if index >= len(self.pages):
            return [], False

        refs = [ResourceRef(resource_id) for resource_id in self.pages[index]]
        return refs, index + 1 < len(self.pages)


@pytest.fixture
def no_wait_retry_policy():
    """대기 없이 재시도하는 RetryPolicy (대기 시간 기록)"""
    delays: List[float] = []

    def fake_wait(delay, cancel_event):
        delays.append(delay)
        return cancel_event is not None and cancel_event.is_set()

    policy = RetryPolicy(RetryConfig(), wait=fake_wait)
    policy.recorded_delays = delays  # type: ignore[attr-defined]
    return policy


# =============================================================================
# AWS 모킹 픽스처
# =============================================================================


@pytest.fixture
def mock_progress_tracker():
    """add_total / on_complete 호출을 기록하는 트래커"""
    tracker = MagicMock()
    tracker.add_total = MagicMock()
    tracker.on_complete = MagicMock()
    return tracker


def make_paginator(pages: List[Dict[str, Any]]) -> MagicMock:
    """paginate() 가 주어진 페이지를 돌려주는 paginator 모킹"""
    paginator = MagicMock()
    paginator.paginate.return_value = iter(pages)
    return paginator


def create_mock_client_error(
    error_code: str,
    error_message: str = "Test error",
) -> Exception:
    """ClientError 생성 헬퍼"""
    from botocore.exceptions import ClientError

    return ClientError(
        {
            "Error": {
                "Code": error_code,
                "Message": error_message,
            }
        },
        "TestOperation",
    )


# =============================================================================
# moto 통합
# =============================================================================


@pytest.fixture
def aws_credentials():
    """moto 사용 시 AWS 자격 증명 설정"""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "ap-northeast-2"


@pytest.fixture
def moto_session(aws_credentials):
    """moto를 사용한 boto3 Session"""
    with moto.mock_aws():
        import boto3

        yield boto3.Session(region_name="ap-northeast-2")


@pytest.fixture
def moto_ec2(moto_session):
    """moto를 사용한 EC2 모킹"""
    yield moto_session.client("ec2")


@pytest.fixture
def moto_s3(moto_session):
    """moto를 사용한 S3 모킹"""
    s3 = moto_session.client("s3")
    s3.create_bucket(
        Bucket="scripts-bucket",
        CreateBucketConfiguration={"LocationConstraint": "ap-northeast-2"},
    )
    yield s3


# =============================================================================
# 헬퍼 팩토리 픽스처
# =============================================================================


@pytest.fixture
def client_error():
    """ClientError 팩토리: client_error("ThrottlingException")"""
    return create_mock_client_error


@pytest.fixture
def list_source():
    """StaticListSource 팩토리: list_source([["a", "b"], ["c"]])"""
    return StaticListSource


@pytest.fixture
def paginator():
    """paginator 모킹 팩토리: paginator([{"Functions": [...]}])"""
    return make_paginator
