"""
core/parallel - 동시 수집 모듈

페이지네이션 목록 조회와 리소스별 상세 조회를 제한된 워커 풀로 병렬 처리합니다.

주요 구성 요소:
- ConcurrentCollector: 목록 조회 → 워커 풀 → 결과 집계 파이프라인
- parallel_collect: 간편한 병렬 수집 함수
- RetryPolicy: 쓰로틀링 전용 지수 백오프 재시도
- ErrorCollector: 개별 리소스 실패 수집

Example:
    from core.parallel import PageIteratorSource, parallel_collect
    from cli.ui import parallel_progress

    source = PageIteratorSource(paginator.paginate(), extract_refs)

    with parallel_progress("Lambda 수집") as tracker:
        result = parallel_collect(source, fetch_detail, concurrency=8, progress_tracker=tracker)

    success, failed, total = tracker.stats
    print(f"완료: {success}개 성공, {failed}개 실패")
"""

from .client import get_client
from .decorators import RetryConfig, RetryPolicy, categorize_error, get_error_code
from .errors import ErrorCollector, ErrorSeverity
from .executor import (
    CollectorConfig,
    ConcurrentCollector,
    ListSource,
    PageIteratorSource,
    ProgressTracker,
    ResultAggregator,
    parallel_collect,
)
from .types import CollectionResult, ErrorCategory, ItemFailure

__all__: list[str] = [
    # Executor
    "ConcurrentCollector",
    "CollectorConfig",
    "ListSource",
    "PageIteratorSource",
    "ProgressTracker",
    "ResultAggregator",
    "parallel_collect",
    # Client
    "get_client",
    # Retry
    "RetryConfig",
    "RetryPolicy",
    "categorize_error",
    "get_error_code",
    # Error handling
    "ErrorCollector",
    "ErrorSeverity",
    # Types
    "ErrorCategory",
    "ItemFailure",
    "CollectionResult",
]
