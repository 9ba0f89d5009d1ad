"""
core/auth - AWS 인증

Usage:
    from core.auth import get_session

    session = get_session(profile="dev", region="ap-northeast-2")
"""

from .session import get_session

__all__: list[str] = ["get_session"]
