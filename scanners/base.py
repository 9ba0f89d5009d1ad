"""
scanners/base.py - 리소스 스캐너 베이스 클래스

스캐너 1개 = 리소스 타입 1개. 목록 조회(list_source)와 리소스별 상세 조회
(fetch_detail)만 구현하면 병렬 수집/재시도/집계는 ConcurrentCollector 가 처리합니다.

fetch_detail 은 여러 워커 스레드에서 동시에 호출됩니다.
boto3 client 는 스레드 세이프이므로 스캐너 생성 시 만든 client 를 공유합니다.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from core.parallel import RetryPolicy, get_client
from core.parallel.executor import FetchOutput, ListSource
from core.types import ResourceRef

if TYPE_CHECKING:
    import boto3


class ResourceScanner(ABC):
    """리소스 스캐너 베이스

    Attributes:
        service: 서비스 이름 (CLI -s 옵션 값)
        resource_type: 리소스 종류 표시명
    """

    service: ClassVar[str]
    resource_type: ClassVar[str]

    def __init__(
        self,
        session: boto3.Session | None,
        region: str | None = None,
        concurrency: int = 4,
        clients: Mapping[str, Any] | None = None,
    ):
        """
        Args:
            session: boto3 Session
            region: 리전 (None이면 세션 기본값)
            concurrency: 워커 수 (HTTP 연결 풀 크기 결정에 사용)
            clients: 서비스 이름 → 미리 만든 client (주입용)
        """
        self.session = session
        self.region = region
        self.concurrency = concurrency
        self._clients: dict[str, Any] = dict(clients or {})
        self._lock = threading.Lock()
        # 상세 조회 안에서 반복하는 호출(버전별 조회 등)을 개별로 재시도
        self.retry = RetryPolicy()

    def client(self, service_name: str) -> Any:
        with self._lock:
            if service_name not in self._clients:
                if self.session is None:
                    raise ValueError(f"session 없이 {service_name} client 를 만들 수 없습니다")
                self._clients[service_name] = get_client(
                    self.session,
                    service_name,
                    region_name=self.region,
                    max_pool_connections=max(self.concurrency, 10),
                )
            return self._clients[service_name]

    @abstractmethod
    def list_source(self) -> ListSource:
        """페이지네이션 목록 조회 생성"""

    @abstractmethod
    def fetch_detail(self, ref: ResourceRef) -> FetchOutput:
        """리소스 1개 상세 조회"""


class TokenPageSource:
    """NextToken 기반 수동 페이지네이션 ListSource

    boto3 paginator 가 없는 목록 API 용입니다.

    Example:
        TokenPageSource(glue.list_jobs, "JobNames", ResourceRef)
    """

    def __init__(
        self,
        call: Callable[..., dict],
        items_key: str,
        make_ref: Callable[[Any], ResourceRef],
        token_key: str = "NextToken",
        **params: Any,
    ):
        self._call = call
        self._items_key = items_key
        self._make_ref = make_ref
        self._token_key = token_key
        self._params = params
        self._token: str | None = None
        self._done = False

    def next_page(self) -> tuple[list[ResourceRef], bool]:
        if self._done:
            return [], False

        params = dict(self._params)
        if self._token:
            params[self._token_key] = self._token

        response = self._call(**params)
        refs = [self._make_ref(item) for item in response.get(self._items_key, [])]

        self._token = response.get(self._token_key)
        self._done = not self._token
        return refs, not self._done


def join_args(args: Any) -> str:
    """인자 목록을 공백으로 연결 (None/빈 값은 빈 문자열)"""
    if not args:
        return ""
    if isinstance(args, str):
        return args
    return " ".join(str(a) for a in args)
