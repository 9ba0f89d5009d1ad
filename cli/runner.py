"""
cli/runner.py - 스캔 실행

서비스별 스캐너를 순서대로 실행하고, 리소스 타입마다
동시 수집 → 패턴 매칭 결과를 ServiceReport 로 만듭니다.

목록 조회 실패(EnumerationError)는 해당 리소스 타입만 실패로 기록하고
다음 리소스 타입을 계속 스캔합니다.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from core.auth import get_session
from core.config import ScanConfig
from core.exceptions import EnumerationError, format_error_for_user
from core.findings import ServiceReport
from core.parallel import CollectorConfig, ConcurrentCollector
from core.patterns import PatternSet
from scanners import ResourceScanner, get_scanners

from .ui.console import print_error_tree
from .ui.progress import parallel_progress

if TYPE_CHECKING:
    import boto3

logger = logging.getLogger(__name__)


def scan_resource_type(
    scanner: ResourceScanner,
    pattern_set: PatternSet,
    config: ScanConfig,
    cancel_event: threading.Event | None = None,
    show_progress: bool = True,
) -> ServiceReport:
    """리소스 타입 1개 수집 + 매칭

    Raises:
        CollectionCancelledError: cancel_event 로 취소됨
    """
    collector = ConcurrentCollector(CollectorConfig(concurrency=config.concurrency))

    with parallel_progress(f"{scanner.resource_type} 수집", disable=not show_progress) as tracker:
        try:
            try:
                source = scanner.list_source()
            except Exception as e:
                raise EnumerationError(scanner.resource_type, cause=e) from e

            result = collector.collect(
                source,
                scanner.fetch_detail,
                resource_type=scanner.resource_type,
                cancel_event=cancel_event,
                progress_tracker=tracker,
            )
        except EnumerationError as e:
            return ServiceReport(
                service=scanner.service,
                resource_type=scanner.resource_type,
                error=format_error_for_user(e),
            )

    if result.failures and show_progress:
        by_code: dict[str, list[str]] = {}
        for failure in result.failures:
            by_code.setdefault(failure.error_code, []).append(failure.resource_id)
        print_error_tree(list(by_code.items()), title=f"{scanner.resource_type} 스킵")

    return ServiceReport.from_result(scanner.service, result, pattern_set, config.match_mode)


def build_scanners(config: ScanConfig, session: boto3.Session | Any) -> list[ResourceScanner]:
    scanners: list[ResourceScanner] = []
    for service in config.services:
        for scanner_cls in get_scanners(service):
            scanners.append(scanner_cls(session, config.region, config.concurrency))
    return scanners


def run_scan(
    config: ScanConfig,
    pattern_set: PatternSet,
    session: boto3.Session | None = None,
    cancel_event: threading.Event | None = None,
    show_progress: bool = True,
) -> list[ServiceReport]:
    """설정된 모든 서비스 스캔

    Args:
        config: 스캔 설정
        pattern_set: 컴파일된 패턴
        session: boto3 Session (None이면 config.profile/region 으로 생성)
        cancel_event: 취소 신호
        show_progress: 진행률 표시 여부

    Returns:
        리소스 타입별 ServiceReport 목록 (실행 순서)
    """
    session = session or get_session(config.profile, config.region)

    reports = []
    for scanner in build_scanners(config, session):
        logger.info(f"스캔 시작: {scanner.service} / {scanner.resource_type}")
        reports.append(scan_resource_type(scanner, pattern_set, config, cancel_event, show_progress))
    return reports
