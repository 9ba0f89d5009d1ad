"""
scanners/emr.py - 활성 EMR 클러스터의 Step 인자 / 부트스트랩 액션 스캔

부트스트랩 스크립트가 s3:// 경로면 내용을 내려받아 함께 스캔합니다.
이름이 같은 Step / 부트스트랩 액션이 흔하므로 필드 키에는 Step ID, 액션 순번을 붙입니다.
"""

from __future__ import annotations

from core.parallel import PageIteratorSource
from core.types import ResourceDetail, ResourceRef

from .base import ResourceScanner, join_args
from .s3 import S3_SCHEME, download_s3_text

ACTIVE_CLUSTER_STATES = ["STARTING", "BOOTSTRAPPING", "RUNNING", "WAITING"]


def step_label(step: dict) -> str:
    """'이름 (Step ID)', 이름이 없으면 Step ID"""
    step_id = step.get("Id", "")
    name = step.get("Name", "")
    if name and step_id:
        return f"{name} ({step_id})"
    return name or step_id


class EMRClusterScanner(ResourceScanner):
    service = "emr"
    resource_type = "EMR Cluster"

    def list_source(self) -> PageIteratorSource:
        paginator = self.client("emr").get_paginator("list_clusters")
        return PageIteratorSource(
            paginator.paginate(ClusterStates=ACTIVE_CLUSTER_STATES),
            lambda page: [ResourceRef(c["Id"], name=c.get("Name", "")) for c in page.get("Clusters", [])],
        )

    def fetch_detail(self, ref: ResourceRef) -> ResourceDetail:
        emr = self.client("emr")
        fields: dict[str, str] = {}

        for page in emr.get_paginator("list_steps").paginate(ClusterId=ref.resource_id):
            for step in page.get("Steps", []):
                fields[f"Step: {step_label(step)}"] = join_args(step.get("Config", {}).get("Args"))

        index = 0
        for page in emr.get_paginator("list_bootstrap_actions").paginate(ClusterId=ref.resource_id):
            for action in page.get("BootstrapActions", []):
                index += 1
                prefix = f"Bootstrap Action #{index}: {action.get('Name', '')}"
                script_path = action.get("ScriptPath", "")
                fields[f"{prefix} (Args)"] = join_args(action.get("Args"))
                fields[f"{prefix} (Script Path)"] = script_path
                if script_path.startswith(S3_SCHEME):
                    fields[f"{prefix} (Script)"] = download_s3_text(self.client("s3"), script_path)

        return ResourceDetail(
            resource_type=self.resource_type,
            resource_id=ref.display_name,
            fields=fields,
        )
