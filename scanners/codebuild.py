"""
scanners/codebuild.py - CodeBuild 프로젝트 buildspec / 소스 위치 / 환경 변수 스캔
"""

from __future__ import annotations

import logging

from core.parallel import PageIteratorSource
from core.types import ResourceDetail, ResourceRef

from .base import ResourceScanner

logger = logging.getLogger(__name__)

DEFAULT_BUILDSPEC = "buildspec.yml"


class CodeBuildProjectScanner(ResourceScanner):
    service = "codebuild"
    resource_type = "CodeBuild Project"

    def list_source(self) -> PageIteratorSource:
        paginator = self.client("codebuild").get_paginator("list_projects")
        return PageIteratorSource(
            paginator.paginate(),
            lambda page: [ResourceRef(name) for name in page.get("projects", [])],
        )

    def fetch_detail(self, ref: ResourceRef) -> ResourceDetail | None:
        response = self.client("codebuild").batch_get_projects(names=[ref.resource_id])
        projects = response.get("projects", [])
        if not projects:
            # 목록 조회 이후 삭제된 프로젝트
            logger.info(f"[{ref.resource_id}] CodeBuild 프로젝트 없음 - 스킵")
            return None

        project = projects[0]
        source = project.get("source", {})
        env_vars = project.get("environment", {}).get("environmentVariables", [])

        return ResourceDetail(
            resource_type=self.resource_type,
            resource_id=ref.resource_id,
            fields={
                "Buildspec": source.get("buildspec") or DEFAULT_BUILDSPEC,
                "Source Location": source.get("location", ""),
            },
            variables={"Environment": {v["name"]: v.get("value", "") for v in env_vars if "name" in v}},
        )
