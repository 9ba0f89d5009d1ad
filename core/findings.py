"""
core/findings.py - 수집된 리소스 상세에 패턴 매칭 적용

ResourceDetail 의 텍스트 필드는 필드별로 따로 매칭하고 (필드 간 병합 없음),
변수 묶음(환경 변수, 파라미터 등)은 match_variables 로 매칭합니다.

Usage:
    from core.findings import scan_details

    findings = scan_details(result.details, patterns, MatchMode.LINE)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from core.parallel.types import CollectionResult, ItemFailure
from core.patterns import MatchMode, PatternSet, format_match, match_patterns, match_variables
from core.types import ResourceDetail


@dataclass(frozen=True)
class Finding:
    """패턴 1개에 대한 매치 결과

    Attributes:
        resource_type: 리소스 종류 표시명
        resource_id: 리소스 ID
        version: 버전 (없으면 None)
        location: 매치가 나온 필드/변수 묶음 이름 (예: "UserData", "Environment")
        pattern: 패턴 이름 (변수 매치는 키 정보가 포함된 라벨)
        matches: 후보 문자열 (원문, 표시할 때 마스킹)
    """

    resource_type: str
    resource_id: str
    version: str | None
    location: str
    pattern: str
    matches: tuple[str, ...]

    def to_dict(self, show_content: bool = False) -> dict[str, Any]:
        return {
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "version": self.version,
            "location": self.location,
            "pattern": self.pattern,
            "matches": [format_match(m, show_content) for m in self.matches],
        }


def scan_detail(
    detail: ResourceDetail,
    pattern_set: PatternSet,
    mode: MatchMode | str = MatchMode.ALL_SUBMATCHES,
) -> list[Finding]:
    findings: list[Finding] = []

    def _add(location: str, match_set: dict[str, list[str]]) -> None:
        for pattern, candidates in match_set.items():
            findings.append(
                Finding(
                    resource_type=detail.resource_type,
                    resource_id=detail.resource_id,
                    version=detail.version,
                    location=location,
                    pattern=pattern,
                    matches=tuple(candidates),
                )
            )

    for location, text in detail.fields.items():
        _add(location, match_patterns(pattern_set, text, mode))

    for location, variables in detail.variables.items():
        _add(location, match_variables(pattern_set, variables, mode))

    return findings


def scan_details(
    details: Iterable[ResourceDetail],
    pattern_set: PatternSet,
    mode: MatchMode | str = MatchMode.ALL_SUBMATCHES,
) -> list[Finding]:
    findings: list[Finding] = []
    for detail in details:
        findings.extend(scan_detail(detail, pattern_set, mode))
    return findings


@dataclass
class ServiceReport:
    """리소스 타입 1개의 스캔 결과

    error 가 있으면 목록 조회가 실패한 것이며 findings 는 비어 있습니다.
    """

    service: str
    resource_type: str
    details_scanned: int = 0
    findings: list[Finding] = field(default_factory=list)
    failures: list[ItemFailure] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def from_result(
        cls,
        service: str,
        result: CollectionResult,
        pattern_set: PatternSet,
        mode: MatchMode | str,
    ) -> ServiceReport:
        return cls(
            service=service,
            resource_type=result.resource_type,
            details_scanned=result.success_count,
            findings=scan_details(result.details, pattern_set, mode),
            failures=list(result.failures),
        )

    def to_dict(self, show_content: bool = False) -> dict[str, Any]:
        return {
            "service": self.service,
            "resource_type": self.resource_type,
            "details_scanned": self.details_scanned,
            "error": self.error,
            "failures": [
                {
                    "resource_id": f.resource_id,
                    "category": f.category.value,
                    "error_code": f.error_code,
                    "attempts": f.attempts,
                }
                for f in self.failures
            ],
            "findings": [finding.to_dict(show_content) for finding in self.findings],
        }
