"""
scanners - 서비스별 리소스 스캐너

서비스 이름 → 스캐너 클래스 목록 레지스트리와 -s 옵션 파서를 제공합니다.

Usage:
    from scanners import get_scanners, parse_services

    for service in parse_services("ec2,cf"):
        for scanner_cls in get_scanners(service):
            scanner = scanner_cls(session, region)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .base import ResourceScanner, TokenPageSource
from .cloudformation import StackScanner, StackSetScanner
from .codebuild import CodeBuildProjectScanner
from .ec2 import EC2InstanceScanner, LaunchTemplateScanner
from .emr import EMRClusterScanner
from .glue import GlueJobScanner
from .lambda_ import LambdaFunctionScanner
from .sagemaker import ProcessingJobScanner

logger = logging.getLogger(__name__)

ALL_SERVICES = "all"

SCANNERS: dict[str, list[type[ResourceScanner]]] = {
    "ec2": [EC2InstanceScanner, LaunchTemplateScanner],
    "lambda": [LambdaFunctionScanner],
    "cloudformation": [StackScanner, StackSetScanner],
    "codebuild": [CodeBuildProjectScanner],
    "sagemaker": [ProcessingJobScanner],
    "glue": [GlueJobScanner],
    "emr": [EMRClusterScanner],
}

SERVICE_ALIASES = {
    "cf": "cloudformation",
}


def available_services() -> list[str]:
    return list(SCANNERS)


def parse_services(value: str | Iterable[str] | None) -> list[str]:
    """서비스 선택 문자열("ec2,lambda", "all")을 서비스 이름 목록으로 변환

    별칭(cf)은 정식 이름으로 바꾸고, 알 수 없는 이름은 경고 후 무시합니다.
    빈 값이나 "all" 은 전체 서비스입니다. 순서 유지, 중복 제거.
    """
    if value is None:
        return available_services()

    tokens = value.split(",") if isinstance(value, str) else list(value)
    names = [t.strip().lower() for t in tokens if t and t.strip()]
    if not names or ALL_SERVICES in names:
        return available_services()

    services: list[str] = []
    for name in names:
        name = SERVICE_ALIASES.get(name, name)
        if name not in SCANNERS:
            logger.warning(f"알 수 없는 서비스 '{name}' - 무시 (가능: {', '.join(SCANNERS)})")
            continue
        if name not in services:
            services.append(name)
    return services


def get_scanners(service: str) -> list[type[ResourceScanner]]:
    return SCANNERS.get(SERVICE_ALIASES.get(service, service), [])


__all__: list[str] = [
    "ResourceScanner",
    "TokenPageSource",
    "SCANNERS",
    "SERVICE_ALIASES",
    "ALL_SERVICES",
    "available_services",
    "parse_services",
    "get_scanners",
    # Scanners
    "EC2InstanceScanner",
    "LaunchTemplateScanner",
    "LambdaFunctionScanner",
    "StackScanner",
    "StackSetScanner",
    "CodeBuildProjectScanner",
    "ProcessingJobScanner",
    "GlueJobScanner",
    "EMRClusterScanner",
]
