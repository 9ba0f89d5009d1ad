"""
scanners/glue.py - Glue Job 스크립트 / 기본 인자 스캔
"""

from __future__ import annotations

from core.types import ResourceDetail, ResourceRef

from .base import ResourceScanner, TokenPageSource
from .s3 import download_s3_text


class GlueJobScanner(ResourceScanner):
    service = "glue"
    resource_type = "Glue Job"

    def list_source(self) -> TokenPageSource:
        return TokenPageSource(self.client("glue").list_jobs, "JobNames", ResourceRef)

    def fetch_detail(self, ref: ResourceRef) -> ResourceDetail:
        job = self.client("glue").get_job(JobName=ref.resource_id).get("Job", {})
        script_location = job.get("Command", {}).get("ScriptLocation", "")

        return ResourceDetail(
            resource_type=self.resource_type,
            resource_id=ref.resource_id,
            fields={
                "Script Location": script_location,
                "Script Content": download_s3_text(self.client("s3"), script_location),
            },
            variables={"Job Parameters": dict(job.get("DefaultArguments") or {})},
        )
