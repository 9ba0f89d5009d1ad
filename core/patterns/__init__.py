"""
core/patterns - 민감 정보 패턴 엔진

- registry: JSON/YAML 패턴 파일 → PatternSet
- matcher: 텍스트 → MatchSet (all-submatches / line)
- redact: 표시용 마스킹/자르기

Example:
    from core.patterns import load_patterns, match_patterns, format_match

    patterns = load_patterns("patterns.json")
    for name, candidates in match_patterns(patterns, user_data, "line").items():
        for candidate in candidates:
            print(name, format_match(candidate, show_content=False))
"""

from .matcher import MatchMode, Matcher, MatchSet, is_strong_password, match_patterns, match_variables, split_lines
from .redact import format_match, redact, truncate
from .registry import (
    DEFAULT_EXCLUSIONS,
    DEFAULT_PATTERNS_FILE,
    PASSWORD_FALLBACK_EXPRESSION,
    PASSWORD_PATTERN_NAME,
    PatternEntry,
    PatternSet,
    load_patterns,
)

__all__: list[str] = [
    # Registry
    "load_patterns",
    "PatternSet",
    "PatternEntry",
    "DEFAULT_EXCLUSIONS",
    "DEFAULT_PATTERNS_FILE",
    "PASSWORD_PATTERN_NAME",
    "PASSWORD_FALLBACK_EXPRESSION",
    # Matcher
    "MatchMode",
    "Matcher",
    "MatchSet",
    "match_patterns",
    "match_variables",
    "is_strong_password",
    "split_lines",
    # Redact
    "redact",
    "truncate",
    "format_match",
]
