"""
tests/core/parallel/test_parallel_decorators.py - 재시도 정책 및 에러 분류 테스트
"""

import threading
from unittest.mock import MagicMock

import pytest

from core.exceptions import CollectionCancelledError, RetryExhaustedError
from core.parallel.decorators import (
    RetryConfig,
    RetryPolicy,
    categorize_error,
    get_error_code,
)
from core.parallel.types import ErrorCategory


def _flaky(error, failures, value="ok"):
    """failures 번 error 를 던진 뒤 value 반환"""
    calls = {"count": 0}

    def operation():
        calls["count"] += 1
        if calls["count"] <= failures:
            raise error
        return value

    operation.calls = calls  # type: ignore[attr-defined]
    return operation


class TestRetryConfig:
    """RetryConfig 테스트"""

    def test_defaults(self):
        config = RetryConfig()

        assert config.max_attempts == 5
        assert config.base_delay == 1.0
        assert config.jitter is False

    def test_exponential_delays(self):
        config = RetryConfig()

        assert [config.get_delay(i) for i in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_max_delay_cap(self):
        config = RetryConfig(max_delay=3.0)

        assert config.get_delay(5) == 3.0

    def test_jitter_within_bounds(self):
        config = RetryConfig(jitter=True)

        for _ in range(20):
            assert 0 <= config.get_delay(2) <= 4.0

    def test_invalid_max_attempts(self):
        with pytest.raises(ValueError):
            RetryConfig(max_attempts=0)


class TestRetryPolicy:
    """RetryPolicy 테스트"""

    def test_success_first_try(self, no_wait_retry_policy):
        operation = _flaky(Exception("unused"), 0)

        assert no_wait_retry_policy.execute(operation) == "ok"
        assert operation.calls["count"] == 1
        assert no_wait_retry_policy.recorded_delays == []

    @pytest.mark.parametrize("k", [1, 2, 3, 4])
    def test_throttled_k_times_then_success(self, no_wait_retry_policy, client_error, k):
        """k번 쓰로틀링 후 성공 → 대기 k번 (1, 2, 4, ...)"""
        operation = _flaky(client_error("ThrottlingException"), k)

        assert no_wait_retry_policy.execute(operation) == "ok"
        assert operation.calls["count"] == k + 1
        assert no_wait_retry_policy.recorded_delays == [float(2**i) for i in range(k)]

    def test_always_throttled_fails_after_five_attempts(self, no_wait_retry_policy, client_error):
        operation = _flaky(client_error("Throttling"), 100)

        with pytest.raises(RetryExhaustedError) as exc_info:
            no_wait_retry_policy.execute(operation, label="Glue Job/etl")

        assert operation.calls["count"] == 5
        # 마지막 시도 후에는 대기하지 않음
        assert no_wait_retry_policy.recorded_delays == [1.0, 2.0, 4.0, 8.0]
        assert exc_info.value.attempts == 5
        assert exc_info.value.resource_id == "Glue Job/etl"
        assert get_error_code(exc_info.value.cause) == "Throttling"

    def test_non_throttling_error_not_retried(self, no_wait_retry_policy, client_error):
        error = client_error("AccessDeniedException")
        operation = _flaky(error, 100)

        with pytest.raises(type(error)) as exc_info:
            no_wait_retry_policy.execute(operation)

        assert exc_info.value is error
        assert operation.calls["count"] == 1
        assert no_wait_retry_policy.recorded_delays == []

    def test_plain_exception_not_retried(self, no_wait_retry_policy):
        operation = _flaky(ValueError("boom"), 100)

        with pytest.raises(ValueError):
            no_wait_retry_policy.execute(operation)

        assert operation.calls["count"] == 1

    def test_attempt_counter_per_call(self, no_wait_retry_policy, client_error):
        """execute 호출마다 시도 횟수를 새로 셈"""
        first = _flaky(client_error("ThrottlingException"), 4)
        second = _flaky(client_error("ThrottlingException"), 4)

        assert no_wait_retry_policy.execute(first) == "ok"
        assert no_wait_retry_policy.execute(second) == "ok"

    def test_cancelled_before_wait(self, no_wait_retry_policy, client_error):
        cancel_event = threading.Event()
        cancel_event.set()
        operation = _flaky(client_error("ThrottlingException"), 100)

        with pytest.raises(CollectionCancelledError):
            no_wait_retry_policy.execute(operation, cancel_event=cancel_event)

        assert operation.calls["count"] == 1
        assert no_wait_retry_policy.recorded_delays == []

    def test_cancelled_during_wait(self, client_error):
        wait = MagicMock(return_value=True)
        policy = RetryPolicy(wait=wait)
        operation = _flaky(client_error("ThrottlingException"), 100)

        with pytest.raises(CollectionCancelledError):
            policy.execute(operation, cancel_event=threading.Event())

        assert operation.calls["count"] == 1
        wait.assert_called_once()

    def test_custom_max_attempts(self, client_error):
        policy = RetryPolicy(RetryConfig(max_attempts=2), wait=lambda delay, event: False)
        operation = _flaky(client_error("ThrottlingException"), 100)

        with pytest.raises(RetryExhaustedError):
            policy.execute(operation)

        assert operation.calls["count"] == 2


class TestCategorizeError:
    """categorize_error 테스트"""

    @pytest.mark.parametrize(
        "code,category",
        [
            ("ThrottlingException", ErrorCategory.THROTTLING),
            ("RequestLimitExceeded", ErrorCategory.THROTTLING),
            ("AccessDenied", ErrorCategory.ACCESS_DENIED),
            ("UnauthorizedOperation", ErrorCategory.ACCESS_DENIED),
            ("ResourceNotFoundException", ErrorCategory.NOT_FOUND),
            ("RequestTimeout", ErrorCategory.TIMEOUT),
            ("ExpiredToken", ErrorCategory.EXPIRED_TOKEN),
            ("InvalidParameterValue", ErrorCategory.INVALID_REQUEST),
            ("InternalError", ErrorCategory.SERVICE_ERROR),
            ("SomethingElse", ErrorCategory.UNKNOWN),
        ],
    )
    def test_client_error_codes(self, client_error, code, category):
        assert categorize_error(client_error(code)) == category

    def test_network_error(self):
        assert categorize_error(ConnectionError("reset")) == ErrorCategory.NETWORK

    def test_cancelled(self):
        assert categorize_error(CollectionCancelledError()) == ErrorCategory.CANCELLED

    def test_retry_exhausted_uses_cause(self, client_error):
        error = RetryExhaustedError("op", 5, cause=client_error("Throttling"))

        assert categorize_error(error) == ErrorCategory.THROTTLING

    def test_plain_exception(self):
        assert categorize_error(ValueError("x")) == ErrorCategory.UNKNOWN


class TestErrorCodeHelpers:
    """get_error_code 테스트"""

    def test_get_error_code_client_error(self, client_error):
        assert get_error_code(client_error("AccessDenied")) == "AccessDenied"

    def test_get_error_code_plain(self):
        assert get_error_code(KeyError("x")) == "KeyError"

    def test_get_error_code_retry_exhausted(self, client_error):
        error = RetryExhaustedError("op", 5, cause=client_error("TooManyRequestsException"))

        assert get_error_code(error) == "TooManyRequestsException"
