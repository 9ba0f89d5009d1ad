"""
core/patterns/matcher.py - 패턴 매칭

텍스트 1건에 대해 PatternSet 의 모든 패턴을 적용하여 MatchSet
(패턴 이름 → 후보 문자열 목록)을 만듭니다.

매칭 모드:
    all-submatches: 텍스트 전체에서 겹치지 않는 모든 매치 (후보 = 매치 문자열)
    line: 줄 단위로 검사 (후보 = 매치가 포함된 줄 전체)

strength_check 패턴은 모드와 무관하게 줄 단위로 기본 정규식 + 문자 구성
(대문자, 소문자, 숫자, 특수문자 각 1개 이상)을 검사합니다.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum

from core.exceptions import ConfigError

from .registry import PatternEntry, PatternSet

MatchSet = dict[str, list[str]]

LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")
SPECIAL_CHARACTERS = frozenset("!@#$%^&*")


class MatchMode(str, Enum):
    """매칭 모드"""

    ALL_SUBMATCHES = "all-submatches"
    LINE = "line"

    @classmethod
    def parse(cls, value: str | MatchMode) -> MatchMode:
        """문자열을 MatchMode로 변환

        Raises:
            ConfigError: 지원하지 않는 모드
        """
        if isinstance(value, MatchMode):
            return value
        try:
            return cls(value)
        except ValueError as e:
            valid = ", ".join(m.value for m in cls)
            raise ConfigError("match_mode", f"지원하지 않는 매칭 모드 '{value}' (가능: {valid})", cause=e) from e


def split_lines(text: str) -> list[str]:
    return LINE_SPLIT_RE.split(text)


def is_strong_password(line: str) -> bool:
    """대문자, 소문자, 숫자, 특수문자(!@#$%^&*)를 각각 1개 이상 포함하는지"""
    has_upper = has_lower = has_digit = has_special = False
    for char in line:
        if "A" <= char <= "Z":
            has_upper = True
        elif "a" <= char <= "z":
            has_lower = True
        elif "0" <= char <= "9":
            has_digit = True
        elif char in SPECIAL_CHARACTERS:
            has_special = True
    return has_upper and has_lower and has_digit and has_special


class Matcher:
    """PatternSet 기반 매처

    상태가 없으므로 여러 스레드에서 공유할 수 있습니다.
    """

    def __init__(self, pattern_set: PatternSet):
        self.pattern_set = pattern_set

    def match(self, text: str, mode: MatchMode | str = MatchMode.ALL_SUBMATCHES) -> MatchSet:
        mode = MatchMode.parse(mode)
        if not text:
            return {}

        lines: list[str] | None = None
        matches: MatchSet = {}

        for entry in self.pattern_set:
            if entry.strength_check or mode == MatchMode.LINE:
                if lines is None:
                    lines = split_lines(text)
                candidates = self._match_lines(entry, lines)
            else:
                candidates = self._match_all(entry, text)

            survivors = [c for c in candidates if not entry.is_excluded(c)]
            if survivors:
                matches[entry.name] = survivors

        return matches

    @staticmethod
    def _match_all(entry: PatternEntry, text: str) -> list[str]:
        # 빈 매치는 후보로 보지 않음
        return [m.group(0) for m in entry.regex.finditer(text) if m.group(0)]

    @staticmethod
    def _match_lines(entry: PatternEntry, lines: list[str]) -> list[str]:
        candidates = []
        for line in lines:
            if not entry.regex.search(line):
                continue
            if entry.strength_check and not is_strong_password(line):
                continue
            candidates.append(line)
        return candidates


def match_patterns(pattern_set: PatternSet, text: str, mode: MatchMode | str = MatchMode.ALL_SUBMATCHES) -> MatchSet:
    return Matcher(pattern_set).match(text, mode)


def match_variables(
    pattern_set: PatternSet,
    variables: Mapping[str, str],
    mode: MatchMode | str = MatchMode.ALL_SUBMATCHES,
) -> MatchSet:
    """키/값 변수 묶음(환경 변수, 파라미터 등) 매칭

    키가 패턴에 매치되면 해당 값을 통째로 후보로 기록하고,
    값에서 나온 매치는 값의 후보 목록으로 기록합니다.

    Returns:
        "Key Matched in env variable: <key> (Pattern: <p>)" → [value]
        "Value of Key: <key> (Pattern: <p>)" → 후보 목록
    """
    matcher = Matcher(pattern_set)
    matches: MatchSet = {}

    for key, value in variables.items():
        for pattern_name in matcher.match(key, mode):
            matches[f"Key Matched in env variable: {key} (Pattern: {pattern_name})"] = [value]

        for pattern_name, candidates in matcher.match(value or "", mode).items():
            matches[f"Value of Key: {key} (Pattern: {pattern_name})"] = candidates

    return matches
