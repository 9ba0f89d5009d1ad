"""
scanners/s3.py - S3 스크립트 다운로드 헬퍼

Glue 잡 스크립트, EMR 부트스트랩 스크립트처럼 s3:// 경로로 지정된
텍스트 파일을 읽습니다.
"""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import ClientError

from core.exceptions import is_throttling

logger = logging.getLogger(__name__)

S3_SCHEME = "s3://"


def parse_s3_uri(uri: str) -> tuple[str, str]:
    """s3://bucket/key → (bucket, key)

    Raises:
        ValueError: s3:// 경로가 아니거나 key 가 없음
    """
    if not uri.startswith(S3_SCHEME):
        raise ValueError(f"S3 경로가 아닙니다: {uri}")

    bucket, _, key = uri[len(S3_SCHEME) :].partition("/")
    if not bucket or not key:
        raise ValueError(f"bucket/key 를 찾을 수 없습니다: {uri}")
    return bucket, key


def download_s3_text(s3_client: Any, uri: str) -> str:
    """S3 객체를 텍스트로 읽음

    스크립트를 읽을 수 없어도 리소스의 나머지 필드는 스캔할 수 있으므로
    경고만 남기고 빈 문자열을 반환합니다. 쓰로틀링은 재시도되도록 전파합니다.
    """
    if not uri or not uri.startswith(S3_SCHEME):
        return ""

    try:
        bucket, key = parse_s3_uri(uri)
        response = s3_client.get_object(Bucket=bucket, Key=key)
        body = response["Body"].read()
    except ClientError as e:
        if is_throttling(e):
            raise
        logger.warning(f"S3 스크립트 다운로드 실패 ({uri}): {e.response.get('Error', {}).get('Code', e)}")
        return ""
    except ValueError as e:
        logger.warning(str(e))
        return ""

    return body.decode("utf-8", errors="replace")
