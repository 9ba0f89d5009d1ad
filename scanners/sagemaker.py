"""
scanners/sagemaker.py - SageMaker Processing Job 컨테이너 인자 / 환경 변수 스캔
"""

from __future__ import annotations

from core.parallel import PageIteratorSource
from core.types import ResourceDetail, ResourceRef

from .base import ResourceScanner, join_args


class ProcessingJobScanner(ResourceScanner):
    service = "sagemaker"
    resource_type = "SageMaker Processing Job"

    def list_source(self) -> PageIteratorSource:
        paginator = self.client("sagemaker").get_paginator("list_processing_jobs")
        return PageIteratorSource(
            paginator.paginate(),
            lambda page: [ResourceRef(j["ProcessingJobName"]) for j in page.get("ProcessingJobSummaries", [])],
        )

    def fetch_detail(self, ref: ResourceRef) -> ResourceDetail:
        job = self.client("sagemaker").describe_processing_job(ProcessingJobName=ref.resource_id)
        app = job.get("AppSpecification", {})

        return ResourceDetail(
            resource_type=self.resource_type,
            resource_id=ref.resource_id,
            fields={
                "Container Entrypoint": join_args(app.get("ContainerEntrypoint")),
                "Container Arguments": join_args(app.get("ContainerArguments")),
            },
            variables={"Environment": dict(job.get("Environment") or {})},
        )
