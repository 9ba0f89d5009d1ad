"""
core/config.py - 중앙 설정 관리

스캔 실행 설정(ScanConfig)과 환경 변수 기본값, 버전 정보를 제공합니다.

환경 변수:
    SECRETSCAN_THREADS: 기본 동시성 (기본: 4)
    SECRETSCAN_MATCH_MODE: 기본 매칭 모드 (all-submatches | line)
    AWS_REGION / AWS_DEFAULT_REGION: 기본 리전

Usage:
    from core.config import ScanConfig

    config = ScanConfig.from_env(profile="dev", services=["lambda"])
    print(config.concurrency, config.match_mode)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any

from core.exceptions import ConfigError
from core.patterns import DEFAULT_PATTERNS_FILE, MatchMode

PACKAGE_NAME = "secretscan"
FALLBACK_VERSION = "0.0.0"

DEFAULT_CONCURRENCY = 4
DEFAULT_REGION = "us-east-1"

ENV_THREADS = "SECRETSCAN_THREADS"
ENV_MATCH_MODE = "SECRETSCAN_MATCH_MODE"


def get_version() -> str:
    """설치된 패키지 버전 (개발 체크아웃이면 0.0.0)"""
    try:
        return version(PACKAGE_NAME)
    except PackageNotFoundError:
        return FALLBACK_VERSION


class OutputFormat(str, Enum):
    """결과 출력 형식"""

    CONSOLE = "console"
    JSON = "json"
    EXCEL = "xlsx"

    @classmethod
    def parse(cls, value: str | OutputFormat) -> OutputFormat:
        if isinstance(value, OutputFormat):
            return value
        try:
            return cls(value.lower())
        except ValueError as e:
            raise ConfigError("format", f"지원하지 않는 출력 형식 '{value}'", cause=e) from e


@dataclass
class ScanConfig:
    """스캔 실행 설정

    Attributes:
        profile: AWS 프로파일 (None이면 기본 자격 증명 체인)
        region: AWS 리전
        services: 대상 서비스 이름 목록 (빈 목록 = 전체)
        patterns_path: 패턴 파일 경로 (JSON 또는 YAML)
        show_content: 매치 내용을 마스킹 없이 표시
        concurrency: 리소스 타입별 워커 수
        match_mode: 매칭 모드
        output_format: 출력 형식
        output_path: 결과 파일 경로 (None이면 stdout, xlsx 는 자동 파일명)
    """

    profile: str | None = None
    region: str = DEFAULT_REGION
    services: list[str] = field(default_factory=list)
    patterns_path: Path = DEFAULT_PATTERNS_FILE
    show_content: bool = False
    concurrency: int = DEFAULT_CONCURRENCY
    match_mode: MatchMode = MatchMode.ALL_SUBMATCHES
    output_format: OutputFormat = OutputFormat.CONSOLE
    output_path: Path | None = None

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ConfigError("threads", f"동시성은 1 이상이어야 합니다 (입력: {self.concurrency})")
        self.match_mode = MatchMode.parse(self.match_mode)
        self.output_format = OutputFormat.parse(self.output_format)
        self.patterns_path = Path(self.patterns_path)
        if self.output_path is not None:
            self.output_path = Path(self.output_path)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> ScanConfig:
        """환경 변수 기본값 위에 overrides(None 제외)를 적용한 설정 생성

        Raises:
            ConfigError: 환경 변수 값이 잘못됨
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        threads = env.get(ENV_THREADS)
        if threads:
            try:
                values["concurrency"] = int(threads)
            except ValueError as e:
                raise ConfigError(ENV_THREADS, f"정수가 아닙니다: {threads!r}", cause=e) from e

        match_mode = env.get(ENV_MATCH_MODE)
        if match_mode:
            values["match_mode"] = match_mode

        region = env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION")
        if region:
            values["region"] = region

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
