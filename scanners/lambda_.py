"""
scanners/lambda_.py - Lambda 함수 코드/환경 변수 스캔

함수마다 모든 버전($LATEST 포함)을 조회하고, 버전별로
배포 패키지(zip)를 내려받아 안의 파일을 이어 붙인 텍스트와 환경 변수를 스캔합니다.
"""

from __future__ import annotations

import io
import logging
import zipfile

import requests

from core.parallel import PageIteratorSource
from core.types import ResourceDetail, ResourceRef

from .base import ResourceScanner

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 30  # 초
MAX_MEMBER_BYTES = 5 * 1024 * 1024  # zip 내부 파일 1개당 최대 읽기 크기


def fetch_code(location: str, timeout: int = DOWNLOAD_TIMEOUT) -> str:
    """presigned URL 에서 배포 패키지를 내려받아 파일 내용을 줄바꿈으로 연결

    다운로드/압축 해제에 실패하면 경고 후 빈 문자열을 반환합니다
    (환경 변수는 계속 스캔).
    """
    if not location:
        return ""

    try:
        response = requests.get(location, timeout=timeout)
    except requests.RequestException as e:
        logger.warning(f"Lambda 코드 다운로드 실패: {e}")
        return ""

    if response.status_code != 200:
        logger.warning(f"Lambda 코드 다운로드 실패: HTTP {response.status_code}")
        return ""

    try:
        archive = zipfile.ZipFile(io.BytesIO(response.content))
    except zipfile.BadZipFile as e:
        logger.warning(f"Lambda 코드 압축 해제 실패: {e}")
        return ""

    parts = []
    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            with archive.open(info) as member:
                content = member.read(MAX_MEMBER_BYTES)
            parts.append(content.decode("utf-8", errors="replace") + "\n")

    return "".join(parts)


class LambdaFunctionScanner(ResourceScanner):
    """Lambda 함수 (버전별)"""

    service = "lambda"
    resource_type = "Lambda Function"

    def list_source(self) -> PageIteratorSource:
        paginator = self.client("lambda").get_paginator("list_functions")
        return PageIteratorSource(
            paginator.paginate(),
            lambda page: [ResourceRef(f["FunctionName"]) for f in page.get("Functions", [])],
        )

    def list_versions(self, function_name: str) -> list[str]:
        paginator = self.client("lambda").get_paginator("list_versions_by_function")
        versions = []
        for page in paginator.paginate(FunctionName=function_name):
            versions.extend(v["Version"] for v in page.get("Versions", []))
        return versions

    def fetch_detail(self, ref: ResourceRef) -> list[ResourceDetail]:
        lambda_client = self.client("lambda")
        details = []

        for version in self.list_versions(ref.resource_id):
            # 쓰로틀링 시 이미 받은 버전은 다시 내려받지 않음
            response = self.retry.execute(
                lambda: lambda_client.get_function(FunctionName=ref.resource_id, Qualifier=version),
                label=f"{ref.resource_id}:{version}",
            )
            configuration = response.get("Configuration", {})
            env_vars = configuration.get("Environment", {}).get("Variables") or {}
            code = fetch_code(response.get("Code", {}).get("Location", ""))

            details.append(
                ResourceDetail(
                    resource_type=self.resource_type,
                    resource_id=ref.resource_id,
                    version=version,
                    fields={"Code": code},
                    variables={"Environment": dict(env_vars)},
                )
            )

        return details
