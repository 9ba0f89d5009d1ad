"""
tests/core/parallel/test_parallel_errors.py - core/parallel/errors.py 테스트
"""

import logging
import threading

from core.exceptions import CollectionCancelledError, RetryExhaustedError
from core.parallel.errors import ErrorCollector, ErrorSeverity, severity_for
from core.parallel.types import ErrorCategory


class TestErrorSeverity:
    """ErrorSeverity 테스트"""

    def test_severity_for_category(self):
        assert severity_for(ErrorCategory.ACCESS_DENIED) == ErrorSeverity.INFO
        assert severity_for(ErrorCategory.NOT_FOUND) == ErrorSeverity.INFO
        assert severity_for(ErrorCategory.CANCELLED) == ErrorSeverity.DEBUG
        assert severity_for(ErrorCategory.THROTTLING) == ErrorSeverity.WARNING
        assert severity_for(ErrorCategory.UNKNOWN) == ErrorSeverity.WARNING


class TestErrorCollector:
    """ErrorCollector 테스트"""

    def test_collect_client_error(self, client_error):
        collector = ErrorCollector("Lambda Function")

        failure = collector.collect("my-func", client_error("AccessDeniedException", "not allowed"))

        assert failure.resource_type == "Lambda Function"
        assert failure.resource_id == "my-func"
        assert failure.category == ErrorCategory.ACCESS_DENIED
        assert failure.error_code == "AccessDeniedException"
        assert failure.attempts == 1
        assert collector.has_errors
        assert collector.failures == [failure]

    def test_attempts_from_retry_exhausted(self, client_error):
        collector = ErrorCollector("Glue Job")

        failure = collector.collect("etl", RetryExhaustedError("Glue Job/etl", 5, cause=client_error("Throttling")))

        assert failure.attempts == 5
        assert failure.category == ErrorCategory.THROTTLING

    def test_log_level_by_severity(self, caplog, client_error):
        collector = ErrorCollector("Test")

        with caplog.at_level(logging.DEBUG, logger="core.parallel.errors"):
            collector.collect("a", client_error("InternalError"))
            collector.collect("b", client_error("AccessDenied"))
            collector.collect("c", CollectionCancelledError())

        levels = [r.levelno for r in caplog.records]
        assert levels == [logging.WARNING, logging.INFO, logging.DEBUG]

    def test_summary(self, client_error):
        collector = ErrorCollector("Test")
        assert collector.get_summary() == "에러 없음"

        collector.collect("a", client_error("Throttling"))
        collector.collect("b", client_error("Throttling"))
        collector.collect("c", client_error("AccessDenied"))

        assert collector.get_summary() == "실패 3건 (access_denied: 1건, throttling: 2건)"

    def test_failures_returns_copy(self, client_error):
        collector = ErrorCollector("Test")
        collector.collect("a", client_error("AccessDenied"))

        collector.failures.clear()

        assert len(collector.failures) == 1

    def test_thread_safety(self):
        collector = ErrorCollector("Test")

        def worker(n):
            for i in range(50):
                collector.collect(f"{n}-{i}", ValueError("x"))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(collector.failures) == 400
