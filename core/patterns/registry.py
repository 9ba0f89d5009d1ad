"""
core/patterns/registry.py - 패턴 레지스트리

JSON 또는 YAML 패턴 파일(이름 → 정규식)을 읽어 컴파일된 PatternSet을 만듭니다.
확장자가 .yaml / .yml 이면 YAML, 그 외에는 JSON 으로 파싱합니다.

컴파일 규칙:
    - 파일 읽기/파싱 실패 → ConfigError (전체 로딩 실패)
    - 개별 패턴 컴파일 실패 → 경고 후 제외
    - 단, 예약 패턴 "Password Pattern" 은 기본 정규식으로 대체

PatternSet 은 로딩 후 변경되지 않으므로 여러 워커 스레드에서 lock 없이 공유합니다.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

import yaml  # type: ignore[import-untyped]

from core.exceptions import ConfigError, PatternCompileWarning

logger = logging.getLogger(__name__)

PASSWORD_PATTERN_NAME = "Password Pattern"
PASSWORD_FALLBACK_EXPRESSION = r"^[A-Za-z\d]{8,}$"

# 패턴별 제외 문자열: 후보에 포함되어 있으면 결과에서 제외
DEFAULT_EXCLUSIONS: dict[str, list[str]] = {
    "AWS_Client": ["iam:PassRole", "S3Key"],
}

DEFAULT_PATTERNS_FILE = Path(__file__).parent / "default_patterns.json"
YAML_SUFFIXES = (".yaml", ".yml")

PatternSource = Union[str, Path, Mapping[str, Any]]


@dataclass(frozen=True)
class PatternEntry:
    """컴파일된 패턴 1개

    Attributes:
        name: 패턴 이름
        regex: 컴파일된 정규식
        exclusions: 제외 문자열 목록
        strength_check: 줄 단위 비밀번호 강도 검사 대상 여부
        fallback: 원래 정규식 대신 기본 정규식을 사용 중인지 여부
    """

    name: str
    regex: re.Pattern[str]
    exclusions: tuple[str, ...] = ()
    strength_check: bool = False
    fallback: bool = False

    @property
    def expression(self) -> str:
        return self.regex.pattern

    def is_excluded(self, candidate: str) -> bool:
        return any(word in candidate for word in self.exclusions)


@dataclass(frozen=True)
class PatternSet:
    """로딩 순서를 유지하는 불변 패턴 집합"""

    entries: tuple[PatternEntry, ...] = ()
    warnings: tuple[PatternCompileWarning, ...] = field(default=(), compare=False)

    def __iter__(self) -> Iterator[PatternEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, name: object) -> bool:
        return any(entry.name == name for entry in self.entries)

    def get(self, name: str) -> PatternEntry | None:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]


def _read_source(source: PatternSource) -> Mapping[str, Any]:
    if isinstance(source, Mapping):
        return source

    path = Path(source)
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() in YAML_SUFFIXES:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except OSError as e:
        raise ConfigError("patterns", f"패턴 파일을 읽을 수 없습니다: {path}", cause=e) from e
    except json.JSONDecodeError as e:
        raise ConfigError("patterns", f"패턴 파일 JSON 파싱 실패: {path}", cause=e) from e
    except yaml.YAMLError as e:
        raise ConfigError("patterns", f"패턴 파일 YAML 파싱 실패: {path}", cause=e) from e

    if not isinstance(data, dict):
        raise ConfigError("patterns", f"패턴 파일 최상위는 객체여야 합니다: {path}")
    return data


def _compile_entry(
    name: str,
    expression: str,
    exclusions: Mapping[str, list[str]],
    warnings: list[PatternCompileWarning],
) -> PatternEntry | None:
    strength_check = name == PASSWORD_PATTERN_NAME
    fallback = False

    try:
        regex = re.compile(expression)
    except re.error as e:
        if not strength_check:
            warning = PatternCompileWarning(name, expression, str(e))
            warnings.append(warning)
            logger.warning(f"{warning} - 패턴 제외")
            return None

        logger.warning(f"'{name}' 컴파일 실패 ({e}) - 기본 패턴 {PASSWORD_FALLBACK_EXPRESSION} 사용")
        regex = re.compile(PASSWORD_FALLBACK_EXPRESSION)
        fallback = True

    return PatternEntry(
        name=name,
        regex=regex,
        exclusions=tuple(exclusions.get(name, ())),
        strength_check=strength_check,
        fallback=fallback,
    )


def load_patterns(
    source: PatternSource = DEFAULT_PATTERNS_FILE,
    exclusions: Mapping[str, list[str]] = DEFAULT_EXCLUSIONS,
) -> PatternSet:
    """패턴 설정을 읽어 PatternSet 생성

    Args:
        source: JSON/YAML 파일 경로 또는 이름 → 정규식 매핑
        exclusions: 패턴별 제외 문자열

    Returns:
        PatternSet (비어 있을 수 있음)

    Raises:
        ConfigError: 파일 읽기/파싱 실패, 정규식이 문자열이 아님
    """
    raw = _read_source(source)

    entries: list[PatternEntry] = []
    warnings: list[PatternCompileWarning] = []

    for name, expression in raw.items():
        if not isinstance(expression, str):
            raise ConfigError("patterns", f"'{name}' 의 정규식이 문자열이 아닙니다")

        if not name:
            warning = PatternCompileWarning(name, expression, "빈 패턴 이름")
            warnings.append(warning)
            logger.warning(f"{warning} - 패턴 제외")
            continue

        entry = _compile_entry(name, expression, exclusions, warnings)
        if entry is not None:
            entries.append(entry)

    logger.debug(f"패턴 {len(entries)}개 로드 (제외 {len(warnings)}개)")
    return PatternSet(entries=tuple(entries), warnings=tuple(warnings))
