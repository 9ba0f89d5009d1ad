"""
core/types - 파이프라인 공용 데이터 타입
"""

from .resources import ResourceDetail, ResourceRef

__all__: list[str] = ["ResourceRef", "ResourceDetail"]
