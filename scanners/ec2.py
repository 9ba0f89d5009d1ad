"""
scanners/ec2.py - EC2 인스턴스 / Launch Template UserData 스캔
"""

from __future__ import annotations

import base64
import binascii
import logging

from core.parallel import PageIteratorSource
from core.types import ResourceDetail, ResourceRef

from .base import ResourceScanner

logger = logging.getLogger(__name__)


def decode_user_data(encoded: str | None, resource_id: str) -> str:
    """base64 UserData 디코딩 (실패 시 원문 그대로 스캔)"""
    if not encoded:
        return ""
    try:
        return base64.b64decode(encoded).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError):
        logger.warning(f"[{resource_id}] UserData base64 디코딩 실패 - 원문으로 스캔")
        return encoded


class EC2InstanceScanner(ResourceScanner):
    """EC2 인스턴스 UserData"""

    service = "ec2"
    resource_type = "EC2 Instance"

    def list_source(self) -> PageIteratorSource:
        paginator = self.client("ec2").get_paginator("describe_instances")

        def extract(page: dict) -> list[ResourceRef]:
            refs = []
            for reservation in page.get("Reservations", []):
                for instance in reservation.get("Instances", []):
                    tags = {t["Key"]: t["Value"] for t in instance.get("Tags", []) if "Key" in t}
                    refs.append(ResourceRef(instance["InstanceId"], name=tags.get("Name", "")))
            return refs

        return PageIteratorSource(paginator.paginate(), extract)

    def fetch_detail(self, ref: ResourceRef) -> ResourceDetail | None:
        response = self.client("ec2").describe_instance_attribute(
            InstanceId=ref.resource_id,
            Attribute="userData",
        )
        user_data = decode_user_data(response.get("UserData", {}).get("Value"), ref.resource_id)
        if not user_data:
            return None

        return ResourceDetail(
            resource_type=self.resource_type,
            resource_id=ref.resource_id,
            fields={"UserData": user_data},
        )


class LaunchTemplateScanner(ResourceScanner):
    """Launch Template 모든 버전의 UserData"""

    service = "ec2"
    resource_type = "Launch Template"

    def list_source(self) -> PageIteratorSource:
        paginator = self.client("ec2").get_paginator("describe_launch_templates")
        return PageIteratorSource(
            paginator.paginate(),
            lambda page: [
                ResourceRef(lt["LaunchTemplateId"], name=lt.get("LaunchTemplateName", ""))
                for lt in page.get("LaunchTemplates", [])
            ],
        )

    def fetch_detail(self, ref: ResourceRef) -> list[ResourceDetail]:
        paginator = self.client("ec2").get_paginator("describe_launch_template_versions")
        details = []

        for page in paginator.paginate(LaunchTemplateId=ref.resource_id):
            for version in page.get("LaunchTemplateVersions", []):
                encoded = version.get("LaunchTemplateData", {}).get("UserData")
                user_data = decode_user_data(encoded, ref.resource_id)
                if not user_data:
                    continue
                details.append(
                    ResourceDetail(
                        resource_type=self.resource_type,
                        resource_id=ref.display_name,
                        version=str(version.get("VersionNumber", "")),
                        fields={"UserData": user_data},
                    )
                )

        return details
