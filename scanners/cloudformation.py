"""
scanners/cloudformation.py - CloudFormation 스택 / 스택 세트 템플릿 + 파라미터 스캔

삭제된 스택도 90일간 템플릿 조회가 가능하므로 DELETE_COMPLETE 를 포함합니다.
"""

from __future__ import annotations

import json
from typing import Any

from core.parallel import PageIteratorSource
from core.types import ResourceDetail, ResourceRef

from .base import ResourceScanner

STACK_STATUS_FILTER = [
    "CREATE_COMPLETE",
    "UPDATE_COMPLETE",
    "UPDATE_ROLLBACK_COMPLETE",
    "IMPORT_COMPLETE",
    "IMPORT_ROLLBACK_COMPLETE",
    "DELETE_COMPLETE",
    "DELETE_FAILED",
]


def template_text(body: Any) -> str:
    """TemplateBody 를 문자열로 (JSON 템플릿은 boto3 가 dict 로 파싱해서 돌려줌)"""
    if body is None:
        return ""
    if isinstance(body, str):
        return body
    return json.dumps(body, indent=2, ensure_ascii=False, default=str)


def parameter_map(parameters: list[dict] | None) -> dict[str, str]:
    return {p.get("ParameterKey", ""): p.get("ParameterValue", "") or "" for p in parameters or []}


class StackScanner(ResourceScanner):
    service = "cloudformation"
    resource_type = "CloudFormation Stack"

    def list_source(self) -> PageIteratorSource:
        paginator = self.client("cloudformation").get_paginator("list_stacks")
        return PageIteratorSource(
            paginator.paginate(StackStatusFilter=STACK_STATUS_FILTER),
            lambda page: [
                ResourceRef(s["StackId"], name=s.get("StackName", "")) for s in page.get("StackSummaries", [])
            ],
        )

    def fetch_detail(self, ref: ResourceRef) -> ResourceDetail:
        cf = self.client("cloudformation")

        template = cf.get_template(StackName=ref.resource_id)
        stacks = cf.describe_stacks(StackName=ref.resource_id).get("Stacks", [])
        parameters = stacks[0].get("Parameters") if stacks else None

        return ResourceDetail(
            resource_type=self.resource_type,
            resource_id=ref.display_name,
            fields={"Template": template_text(template.get("TemplateBody"))},
            variables={"Parameters": parameter_map(parameters)},
        )


class StackSetScanner(ResourceScanner):
    service = "cloudformation"
    resource_type = "CloudFormation StackSet"

    def list_source(self) -> PageIteratorSource:
        paginator = self.client("cloudformation").get_paginator("list_stack_sets")
        return PageIteratorSource(
            paginator.paginate(),
            lambda page: [ResourceRef(s["StackSetName"]) for s in page.get("Summaries", [])],
        )

    def fetch_detail(self, ref: ResourceRef) -> ResourceDetail:
        response = self.client("cloudformation").describe_stack_set(StackSetName=ref.resource_id)
        stack_set = response.get("StackSet", {})

        return ResourceDetail(
            resource_type=self.resource_type,
            resource_id=ref.resource_id,
            fields={"Template": template_text(stack_set.get("TemplateBody"))},
            variables={"Parameters": parameter_map(stack_set.get("Parameters"))},
        )
