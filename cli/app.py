"""
cli/app.py - 메인 CLI 엔트리포인트

Click 기반의 CLI 애플리케이션 진입점입니다.

명령어 구조:
    secretscan --version                 # 버전 표시
    secretscan scan [OPTIONS]            # AWS 리소스 스캔
    secretscan patterns [FILE]           # 패턴 파일 검증/목록

    예시:
    secretscan scan -p dev -r ap-northeast-2 -s lambda,cf
    secretscan scan -s all --match-mode line -t 16
    secretscan scan -s ec2 -f json -o result.json
    secretscan scan -f xlsx                  # secretscan-<시각>.xlsx
    secretscan patterns ./my_patterns.json

종료 코드:
    0: 정상 완료 (매치 유무와 무관)
    1: 설정 오류, 또는 목록 조회에 실패한 리소스 타입이 있음
    130: 사용자 취소
"""

from __future__ import annotations

import threading
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from core.config import OutputFormat, ScanConfig, get_version
from core.exceptions import CollectionCancelledError, ConfigError
from core.patterns import DEFAULT_PATTERNS_FILE, load_patterns
from scanners import ALL_SERVICES, SERVICE_ALIASES, available_services, parse_services

from .excel import write_excel
from .report import render_console, render_summary, write_json
from .runner import run_scan
from .ui.console import (
    console,
    print_error,
    print_execution_summary,
    print_success,
    print_warning,
    setup_logging,
)

VERSION = get_version()

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130


def _services_help() -> str:
    aliases = ", ".join(f"{k}={v}" for k, v in SERVICE_ALIASES.items())
    return f"스캔할 서비스 (쉼표 구분: {', '.join(available_services())}, {ALL_SERVICES}) 별칭: {aliases}"


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(VERSION, prog_name="secretscan")
def cli() -> None:
    """secretscan - AWS 리소스 민감 정보 스캐너

    \b
    EC2 UserData, Lambda 코드/환경 변수, CloudFormation 템플릿,
    CodeBuild, SageMaker, Glue, EMR 설정에서 비밀 값을 찾습니다.
    """


@cli.command("scan")
@click.option("-p", "--profile", default=None, help="AWS 프로파일 (기본: 기본 자격 증명 체인)")
@click.option("-r", "--region", default=None, help="AWS 리전 (기본: AWS_REGION 또는 us-east-1)")
@click.option("-s", "--service", "services", default=ALL_SERVICES, show_default=True, help=_services_help())
@click.option(
    "--patterns",
    "patterns_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="패턴 파일 JSON/YAML (기본: 내장 패턴)",
)
@click.option("--show", "show_content", is_flag=True, help="매치 내용을 마스킹 없이 표시")
@click.option("-t", "--threads", type=int, default=None, help="리소스 타입별 동시 조회 수 (기본: 4)")
@click.option("--match-mode", default=None, help="매칭 모드: all-submatches | line")
@click.option(
    "-f",
    "--format",
    "output_format",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.CONSOLE.value,
    show_default=True,
)
@click.option("-o", "--output", "output_path", type=click.Path(dir_okay=False, path_type=Path), default=None, help="출력 파일 경로")
@click.option("-v", "--verbose", count=True, help="로그 상세도 (-v: INFO, -vv: DEBUG)")
def scan_command(
    profile: str | None,
    region: str | None,
    services: str,
    patterns_path: Path | None,
    show_content: bool,
    threads: int | None,
    match_mode: str | None,
    output_format: str,
    output_path: Path | None,
    verbose: int,
) -> None:
    """AWS 리소스 스캔

    \b
    Examples:
        secretscan scan -s lambda              # Lambda 만
        secretscan scan -s ec2,cf --show       # 마스킹 없이 표시
        secretscan scan -f json -o out.json    # JSON 파일로 저장
        secretscan scan -f xlsx                # Excel 보고서
    """
    setup_logging(verbose)

    try:
        config = ScanConfig.from_env(
            profile=profile,
            region=region,
            services=parse_services(services),
            patterns_path=patterns_path,
            show_content=show_content,
            concurrency=threads,
            match_mode=match_mode,
            output_format=output_format,
            output_path=output_path,
        )
        pattern_set = load_patterns(config.patterns_path)
    except ConfigError as e:
        print_error(str(e))
        raise SystemExit(EXIT_FAILURE) from e

    if not config.services:
        print_error("스캔할 서비스가 없습니다")
        raise SystemExit(EXIT_FAILURE)

    for warning in pattern_set.warnings:
        print_warning(str(warning))

    print_execution_summary(
        config.profile,
        config.region,
        config.services,
        config.concurrency,
        config.match_mode.value,
    )

    cancel_event = threading.Event()
    try:
        reports = run_scan(config, pattern_set, cancel_event=cancel_event)
    except ConfigError as e:
        print_error(str(e))
        raise SystemExit(EXIT_FAILURE) from e
    except (KeyboardInterrupt, CollectionCancelledError) as e:
        cancel_event.set()
        print_warning("스캔이 취소되었습니다")
        raise SystemExit(EXIT_CANCELLED) from e

    if config.output_format == OutputFormat.JSON:
        write_json(reports, config.output_path, config.show_content)
    elif config.output_format == OutputFormat.EXCEL:
        render_summary(reports)
        config.output_path = write_excel(reports, config.output_path, config.show_content)
    elif config.output_path is not None:
        config.output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config.output_path, "w", encoding="utf-8") as f:
            render_console(reports, config.show_content, Console(file=f, width=120, color_system=None))
    else:
        render_console(reports, config.show_content)

    if config.output_path is not None:
        print_success(f"결과 저장: {config.output_path}")

    failed = [r for r in reports if r.failed]
    if failed:
        print_error(f"목록 조회 실패: {', '.join(r.resource_type for r in failed)}")
        raise SystemExit(EXIT_FAILURE)


@cli.command("patterns")
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path), required=False)
def patterns_command(file: Path | None) -> None:
    """패턴 파일을 컴파일하고 목록 표시

    \b
    Examples:
        secretscan patterns                    # 내장 패턴
        secretscan patterns ./patterns.json    # 사용자 패턴 검증
    """
    source = file or DEFAULT_PATTERNS_FILE
    try:
        pattern_set = load_patterns(source)
    except ConfigError as e:
        print_error(str(e))
        raise SystemExit(EXIT_FAILURE) from e

    table = Table(title=f"패턴 ({source})", show_header=True)
    table.add_column("이름", style="cyan")
    table.add_column("정규식", overflow="fold")
    table.add_column("비고", style="yellow")

    for entry in pattern_set:
        notes = []
        if entry.strength_check:
            notes.append("강도 검사")
        if entry.fallback:
            notes.append("기본 정규식 대체")
        if entry.exclusions:
            notes.append(f"제외: {', '.join(entry.exclusions)}")
        table.add_row(escape(entry.name), escape(entry.expression), ", ".join(notes))

    console.print(table)

    for warning in pattern_set.warnings:
        print_warning(str(warning))

    print_success(f"{len(pattern_set)}개 패턴 사용 가능 (제외 {len(pattern_set.warnings)}개)")
