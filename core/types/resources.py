"""
core/types/resources.py - 리소스 참조 및 상세 레코드

목록 조회(listing)가 생성하는 가벼운 식별자(ResourceRef)와
상세 조회(detail fetch)가 생성하는 스캔 대상 레코드(ResourceDetail)를 정의합니다.

Example:
    ref = ResourceRef(resource_id="i-0123456789abcdef0")
    detail = ResourceDetail(
        resource_type="EC2 Instance",
        resource_id=ref.resource_id,
        fields={"UserData": "#!/bin/bash\\nexport TOKEN=..."},
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ResourceRef:
    """목록 조회 결과의 리소스 식별자

    파이프라인 내부에서만 존재하는 임시 값입니다.

    Attributes:
        resource_id: 리소스 ID (인스턴스 ID, 함수 이름, 스택 ID 등)
        name: 표시용 이름 (없으면 resource_id 사용)
    """

    resource_id: str
    name: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.resource_id


@dataclass(frozen=True)
class ResourceDetail:
    """상세 조회로 얻은 스캔 대상 레코드

    생성 이후 변경되지 않습니다.

    Attributes:
        resource_type: 리소스 종류 표시명 (예: "Lambda Function")
        resource_id: 리소스 이름 또는 ID
        version: 버전/한정자 (Lambda 버전, Launch Template 버전 등)
        fields: 필드명 -> 스캔할 텍스트 (UserData, Script 등)
        variables: 그룹명 -> key/value 맵 (환경 변수, 파라미터 등)
    """

    resource_type: str
    resource_id: str
    version: str | None = None
    fields: dict[str, str] = field(default_factory=dict)
    variables: dict[str, dict[str, str]] = field(default_factory=dict)
