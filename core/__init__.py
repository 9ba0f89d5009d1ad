# core/__init__.py
"""
core - secretscan 스캔 엔진

CLI 와 서비스별 스캐너가 공유하는 최상위 패키지입니다.
인증, 동시 수집, 패턴 매칭, 결과 모델을 통합합니다.

아키텍처:
    core/
    ├── auth/           # boto3 Session 생성
    ├── parallel/       # 동시 수집기 (feeder + worker 풀, 재시도 정책)
    ├── patterns/       # 패턴 레지스트리, 매처, 마스킹
    ├── types/          # ResourceRef, ResourceDetail
    ├── config.py       # 스캔 설정 (ScanConfig)
    ├── findings.py     # 상세 레코드 → Finding / ServiceReport
    └── exceptions.py   # 통합 예외 계층

Usage:
    # 패턴 로딩 + 매칭
    from core.patterns import load_patterns, match_patterns
    patterns = load_patterns()
    matches = match_patterns(patterns, user_data, "line")

    # 예외 처리
    from core.exceptions import EnumerationError, is_throttling
    try:
        result = parallel_collect(source, fetch_detail)
    except EnumerationError as e:
        print(f"목록 조회 실패: {e}")
"""

from core import auth, config, exceptions, findings, parallel, patterns, types

__all__: list[str] = [
    # 서브패키지
    "auth",
    "parallel",
    "patterns",
    "types",
    # 모듈
    "config",
    "exceptions",
    "findings",
]
