"""
core/parallel/executor.py - 동시 수집기 (Concurrent Collector)

페이지네이션 목록 조회 → 제한된 워커 풀 → 리소스별 상세 조회(재시도 포함)
→ 스레드 세이프 결과 집계 파이프라인을 제공합니다.

구조:
    feeder (호출 스레드 1개)
        └─ list_source.next_page() 를 순서대로 호출하여 ResourceRef 를
           크기 concurrency 의 job 큐에 넣음 (큐가 가득 차면 대기 = backpressure)
    worker (ThreadPoolExecutor, concurrency 개)
        └─ 큐에서 job 을 꺼내 RetryPolicy 로 감싼 fetch_detail(ref) 실행
           → 성공 시 ResultAggregator 에 추가 (append 구간만 lock)

실패 정책:
    - 개별 상세 조회 실패: 로깅 후 해당 리소스만 스킵, 수집 계속
    - 목록 조회 실패: 전체 중단, 이미 수집된 결과도 버리고 EnumerationError
    - 취소(cancel_event): feeder 는 더 넣지 않고, 워커는 현재 시도 후 중단
      → CollectionCancelledError
    - 워커 내부 오류(진행률 추적기 등): 전체 중단 후 원래 예외를 그대로 발생

주요 구성 요소:
- ListSource: 목록 조회 Protocol (next_page)
- PageIteratorSource: boto3 paginator 어댑터
- ResultAggregator: 스레드 세이프 결과 집계기
- CollectorConfig: 수집 설정 (동시성, 재시도)
- ConcurrentCollector: 동시 수집기
- parallel_collect: 간편 래퍼 함수

Example:
    paginator = client.get_paginator("list_functions")
    source = PageIteratorSource(
        paginator.paginate(),
        lambda page: [ResourceRef(f["FunctionName"]) for f in page.get("Functions", [])],
    )

    result = parallel_collect(source, fetch_function, concurrency=8, resource_type="Lambda Function")
    print(f"수집: {result.success_count}, 실패: {result.error_count}")
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Protocol, Union

from core.exceptions import CollectionCancelledError, EnumerationError
from core.types import ResourceDetail, ResourceRef

from .decorators import RetryConfig, RetryPolicy
from .errors import ErrorCollector
from .types import CollectionResult

logger = logging.getLogger(__name__)

# fetch_detail 반환값: 상세 1건, 여러 건(버전 등), 또는 기록할 것 없음
FetchOutput = Union[ResourceDetail, Sequence[ResourceDetail], None]
FetchDetail = Callable[[ResourceRef], FetchOutput]

# 큐 put/워커 대기 시 취소 신호 확인 주기 (초)
_POLL_INTERVAL = 0.1

_SENTINEL = object()


class ListSource(Protocol):
    """페이지네이션 목록 조회 Protocol

    next_page() 는 (ResourceRef 목록, 다음 페이지 존재 여부)를 반환합니다.
    feeder 는 has_more 가 False 가 되거나 예외가 날 때까지 반복 호출합니다.
    """

    def next_page(self) -> tuple[list[ResourceRef], bool]: ...


class ProgressTracker(Protocol):
    """진행 상황 추적기 Protocol (cli.ui.progress.ParallelTracker 호환)"""

    def add_total(self, count: int) -> None: ...

    def on_complete(self, success: bool) -> None: ...


class PageIteratorSource:
    """boto3 paginator(또는 임의의 페이지 iterable) 어댑터

    has_more 를 정확히 알기 위해 다음 페이지를 한 장 미리 읽습니다.
    따라서 다음 페이지 조회 에러는 현재 페이지를 반환하는 호출에서 발생합니다.

    Args:
        pages: 페이지 iterable (예: paginator.paginate(...))
        extract: 페이지 -> ResourceRef iterable
    """

    def __init__(self, pages: Iterable[Any], extract: Callable[[Any], Iterable[ResourceRef]]):
        self._pages = pages
        self._iterator: Any = None
        self._extract = extract
        self._lookahead: Any = _SENTINEL

    def _read(self) -> Any:
        try:
            return next(self._iterator)
        except StopIteration:
            return None

    def next_page(self) -> tuple[list[ResourceRef], bool]:
        if self._iterator is None:
            self._iterator = iter(self._pages)
            page = self._read()
        elif self._lookahead is _SENTINEL:
            return [], False
        else:
            page = self._lookahead

        if page is None:
            self._lookahead = _SENTINEL
            return [], False

        refs = list(self._extract(page))
        following = self._read()
        self._lookahead = _SENTINEL if following is None else following
        return refs, following is not None


class ResultAggregator:
    """스레드 세이프 결과 집계기

    수집기 내부에서만 생성되어 워커에 참조로 전달됩니다.
    lock 은 append 구간에서만 잡습니다 (상세 조회/재시도 구간에서는 잡지 않음).
    """

    def __init__(self) -> None:
        self._items: list[ResourceDetail] = []
        self._lock = threading.Lock()

    def add(self, output: FetchOutput) -> int:
        """fetch_detail 반환값을 추가하고 추가된 건수 반환

        Raises:
            TypeError: ResourceDetail 이 아닌 값 (추가 전에 검사하므로 일부만 들어가지 않음)
        """
        if output is None:
            return 0
        if isinstance(output, ResourceDetail):
            items = [output]
        else:
            items = list(output)
            for item in items:
                if not isinstance(item, ResourceDetail):
                    raise TypeError(f"ResourceDetail 이 아닌 반환값: {type(item).__name__}")

        with self._lock:
            self._items.extend(items)
        return len(items)

    def snapshot(self) -> list[ResourceDetail]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


@dataclass
class CollectorConfig:
    """동시 수집 설정

    Attributes:
        concurrency: 워커 수이자 job 큐 용량 (1 이상)
        retry_config: 상세 조회 재시도 설정 (None이면 기본값)
    """

    concurrency: int = 4
    retry_config: RetryConfig | None = None

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")


@dataclass
class _Job:
    """feeder 와 워커 사이 큐에 들어가는 작업"""

    ref: ResourceRef
    fetch: FetchDetail


class ConcurrentCollector:
    """동시 수집기

    Example:
        collector = ConcurrentCollector(CollectorConfig(concurrency=8))
        result = collector.collect(source, fetch_detail, resource_type="EC2 Instance")
    """

    def __init__(self, config: CollectorConfig | None = None, retry_policy: RetryPolicy | None = None):
        self.config = config or CollectorConfig()
        self._retry = retry_policy or RetryPolicy(self.config.retry_config)

    def collect(
        self,
        list_source: ListSource,
        fetch_detail: FetchDetail,
        resource_type: str = "resource",
        cancel_event: threading.Event | None = None,
        progress_tracker: ProgressTracker | None = None,
    ) -> CollectionResult:
        """목록 조회 + 상세 조회를 병렬로 실행

        Args:
            list_source: 페이지네이션 목록 조회
            fetch_detail: ResourceRef -> ResourceDetail (동시 호출 안전해야 함)
            resource_type: 리소스 종류 표시명 (로깅/에러용)
            cancel_event: 외부 취소 신호
            progress_tracker: 진행 상황 추적기 (선택사항).
                페이지마다 add_total(n), job 마다 on_complete(success) 호출

        Returns:
            CollectionResult (순서 없음)

        Raises:
            EnumerationError: 목록 조회 실패 (부분 결과 없음)
            CollectionCancelledError: cancel_event 로 취소됨
        """
        concurrency = self.config.concurrency
        cancel_event = cancel_event or threading.Event()
        stop_event = threading.Event()

        jobs: queue.Queue[Any] = queue.Queue(maxsize=concurrency)
        aggregator = ResultAggregator()
        errors = ErrorCollector(resource_type)

        logger.info(f"수집 시작: {resource_type}, concurrency={concurrency}")
        start_time = time.monotonic()

        refs_seen = 0
        enumeration_error: EnumerationError | None = None

        with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="collector") as pool:
            workers = [
                pool.submit(
                    self._worker,
                    jobs,
                    aggregator,
                    errors,
                    stop_event,
                    resource_type,
                    progress_tracker,
                )
                for _ in range(concurrency)
            ]

            try:
                refs_seen, enumeration_error = self._feed(
                    list_source,
                    fetch_detail,
                    jobs,
                    resource_type,
                    cancel_event,
                    stop_event,
                    progress_tracker,
                )
            except BaseException:
                # KeyboardInterrupt 등: 워커가 남은 job 을 처리하지 않도록 중단
                stop_event.set()
                raise
            finally:
                # 워커마다 종료 신호 1개 (워커는 항상 큐를 비우므로 결국 들어감)
                for _ in range(concurrency):
                    self._put(jobs, _SENTINEL, cancel_event, stop_event, abortable=False)

                self._wait_workers(workers, cancel_event, stop_event)

        duration_ms = (time.monotonic() - start_time) * 1000

        if enumeration_error is not None:
            logger.error(f"{enumeration_error} - 수집 결과 {len(aggregator)}건 폐기")
            raise enumeration_error

        if cancel_event.is_set():
            logger.warning(f"수집 취소: {resource_type} ({len(aggregator)}건 수집 후 중단)")
            raise CollectionCancelledError(resource_type)

        result = CollectionResult(
            resource_type=resource_type,
            details=aggregator.snapshot(),
            failures=errors.failures,
            refs_seen=refs_seen,
            duration_ms=duration_ms,
        )

        logger.info(
            f"수집 완료: {resource_type} - 대상 {refs_seen}, 성공 {result.success_count}, "
            f"실패 {result.error_count}, 총 {duration_ms:.0f}ms"
        )
        if errors.has_errors:
            logger.info(f"{resource_type}: {errors.get_summary()}")

        return result

    # -------------------------------------------------------------------------
    # feeder
    # -------------------------------------------------------------------------

    def _feed(
        self,
        list_source: ListSource,
        fetch_detail: FetchDetail,
        jobs: queue.Queue[Any],
        resource_type: str,
        cancel_event: threading.Event,
        stop_event: threading.Event,
        progress_tracker: ProgressTracker | None,
    ) -> tuple[int, EnumerationError | None]:
        """페이지를 순서대로 읽어 job 큐에 넣음

        Returns:
            (큐에 넣은 ref 수, 목록 조회 에러 또는 None)
        """
        refs_seen = 0
        pages_read = 0

        while not self._should_stop(cancel_event, stop_event):
            try:
                refs, has_more = list_source.next_page()
            except Exception as e:
                stop_event.set()
                return refs_seen, EnumerationError(resource_type, cause=e, pages_read=pages_read)

            pages_read += 1
            if refs and progress_tracker:
                progress_tracker.add_total(len(refs))

            for ref in refs:
                if not self._put(jobs, _Job(ref, fetch_detail), cancel_event, stop_event):
                    return refs_seen, None
                refs_seen += 1

            if not has_more:
                break

        logger.debug(f"{resource_type}: 목록 조회 종료 ({pages_read} 페이지, {refs_seen}건)")
        return refs_seen, None

    @staticmethod
    def _should_stop(cancel_event: threading.Event, stop_event: threading.Event) -> bool:
        if cancel_event.is_set():
            stop_event.set()
        return stop_event.is_set()

    def _put(
        self,
        jobs: queue.Queue[Any],
        item: Any,
        cancel_event: threading.Event,
        stop_event: threading.Event,
        abortable: bool = True,
    ) -> bool:
        """큐가 빌 때까지 대기하며 put (대기 중에도 취소 신호 확인)

        Returns:
            넣었으면 True, abortable 이고 중단 신호가 오면 False
        """
        while True:
            if self._should_stop(cancel_event, stop_event) and abortable:
                return False
            try:
                jobs.put(item, timeout=_POLL_INTERVAL)
                return True
            except queue.Full:
                continue

    def _wait_workers(
        self,
        workers: list[Future[None]],
        cancel_event: threading.Event,
        stop_event: threading.Event,
    ) -> None:
        """모든 워커 종료 대기 (대기 중 취소 신호를 워커에 전달)"""
        pending: set[Future[None]] = set(workers)
        while pending:
            _done, not_done = wait(pending, timeout=_POLL_INTERVAL)
            pending = set(not_done)
            self._should_stop(cancel_event, stop_event)

        for future in workers:
            # 워커 내부 버그만 여기까지 올라옴
            future.result()

    # -------------------------------------------------------------------------
    # worker
    # -------------------------------------------------------------------------

    def _worker(
        self,
        jobs: queue.Queue[Any],
        aggregator: ResultAggregator,
        errors: ErrorCollector,
        stop_event: threading.Event,
        resource_type: str,
        progress_tracker: ProgressTracker | None,
    ) -> None:
        """종료 신호를 받을 때까지 큐에서 job 을 꺼내 처리

        예상하지 못한 예외는 stop_event 로 수집 전체를 중단시키고,
        종료 신호를 받을 때까지 큐를 계속 비운 뒤 다시 발생시킵니다 (future.result()).
        """
        failure: Exception | None = None
        while True:
            job = jobs.get()
            try:
                if job is _SENTINEL:
                    break
                if stop_event.is_set():
                    # 중단 중에는 큐만 비움
                    continue
                success = self._run_job(job, aggregator, errors, stop_event, resource_type)
                if progress_tracker:
                    progress_tracker.on_complete(success)
            except Exception as e:
                stop_event.set()
                if failure is None:
                    failure = e
                    logger.error(f"[{resource_type}] 워커 내부 오류로 수집 중단: {e!r}")
            finally:
                jobs.task_done()

        if failure is not None:
            raise failure

    def _run_job(
        self,
        job: _Job,
        aggregator: ResultAggregator,
        errors: ErrorCollector,
        stop_event: threading.Event,
        resource_type: str,
    ) -> bool:
        """단일 상세 조회 (재시도 포함)"""
        ref = job.ref
        label = f"{resource_type}/{ref.resource_id}"

        try:
            output = self._retry.execute(lambda: job.fetch(ref), cancel_event=stop_event, label=label)
            added = aggregator.add(output)
        except CollectionCancelledError:
            logger.debug(f"[{label}] 취소로 재시도 중단")
            return False
        except Exception as e:
            errors.collect(ref.resource_id, e)
            return False

        logger.debug(f"[{label}] 상세 {added}건 수집")
        return True


def parallel_collect(
    list_source: ListSource,
    fetch_detail: FetchDetail,
    concurrency: int = 4,
    resource_type: str = "resource",
    cancel_event: threading.Event | None = None,
    progress_tracker: ProgressTracker | None = None,
    retry_config: RetryConfig | None = None,
) -> CollectionResult:
    """병렬 수집 편의 함수

    ConcurrentCollector를 간단하게 사용할 수 있는 래퍼입니다.

    Example:
        with parallel_progress("Lambda 수집") as tracker:
            result = parallel_collect(source, fetch, concurrency=8, progress_tracker=tracker)
    """
    config = CollectorConfig(concurrency=concurrency, retry_config=retry_config)
    collector = ConcurrentCollector(config)
    return collector.collect(
        list_source,
        fetch_detail,
        resource_type=resource_type,
        cancel_event=cancel_event,
        progress_tracker=progress_tracker,
    )
