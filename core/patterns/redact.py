"""
core/patterns/redact.py - 매치 문자열 마스킹/자르기
"""

from __future__ import annotations

VISIBLE_CHARS = 4
MASK = "******"
MAX_DISPLAY_LENGTH = 150
ELLIPSIS = "..."


def redact(text: str) -> str:
    """앞 4자만 남기고 마스킹

    4자 이하는 같은 길이의 '*', 그보다 길면 앞 4자 + '******' (원래 길이는 숨김)
    """
    if len(text) <= VISIBLE_CHARS:
        return "*" * len(text)
    return text[:VISIBLE_CHARS] + MASK


def truncate(text: str, limit: int = MAX_DISPLAY_LENGTH) -> str:
    if len(text) > limit:
        return text[: limit - len(ELLIPSIS)] + ELLIPSIS
    return text


def format_match(text: str, show_content: bool = False) -> str:
    """표시용 매치 문자열

    show_content 가 False면 마스킹 후 자르고 앞뒤 공백 제거
    """
    value = text if show_content else redact(text)
    return truncate(value).strip()
