"""
core/auth/session.py - boto3 Session 생성

프로파일 + 리전으로 boto3 Session 을 만듭니다.
자격 증명 자체는 boto3 기본 체인(환경 변수, 프로파일, SSO, 인스턴스 역할)에 맡깁니다.
"""

from __future__ import annotations

import logging

import boto3
from botocore.exceptions import ProfileNotFound

from core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def get_session(profile: str | None = None, region: str | None = None) -> boto3.Session:
    """boto3 Session 생성

    Args:
        profile: AWS 프로파일 이름 (None이면 기본 자격 증명 체인)
        region: 리전 (None이면 프로파일/환경 기본값)

    Raises:
        ConfigError: 프로파일을 찾을 수 없음
    """
    try:
        session = boto3.Session(profile_name=profile, region_name=region)
    except ProfileNotFound as e:
        raise ConfigError("profile", f"AWS 프로파일을 찾을 수 없습니다: {profile}", cause=e) from e

    logger.debug(f"세션 생성: profile={profile or 'default'}, region={session.region_name}")
    return session
