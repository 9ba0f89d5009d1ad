"""
cli/ui/console.py - Rich 콘솔 유틸리티

일관된 콘솔 출력을 위한 함수들

stdout 은 스캔 결과 전용 (console), 로그와 진행률은 stderr (err_console)로 보냅니다.
JSON 출력을 파이프로 넘겨도 로그가 섞이지 않습니다.
"""

import logging
import platform

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.tree import Tree

# botocore 노이즈 로그 제한
NOISY_LOGGERS = (
    "botocore",
    "boto3",
    "urllib3",
    "botocore.httpchecksum",
    "botocore.credentials",
)


def get_console(stderr: bool = False) -> Console:
    """Rich Console 인스턴스를 생성하고 반환합니다."""
    is_windows = platform.system().lower() == "windows"

    return Console(
        stderr=stderr,
        color_system="auto",
        highlight=False,
        soft_wrap=True,
        markup=True,
        emoji=not is_windows,
    )


# 전역 콘솔 인스턴스
console = get_console()
err_console = get_console(stderr=True)


def setup_logging(verbosity: int = 0) -> None:
    """루트 logger 에 RichHandler 설치

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2 이상 = DEBUG
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(console=err_console, rich_tracebacks=True, show_path=verbosity >= 2)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.addHandler(handler)
    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


# =============================================================================
# 표준 출력 스타일 (이모지 없이 Rich 스타일만 사용)
# =============================================================================

# 상태 심볼
SYMBOL_SUCCESS = "✓"  # 완료
SYMBOL_ERROR = "✗"  # 에러
SYMBOL_WARNING = "!"  # 경고


def print_success(message: str) -> None:
    """성공 메시지 출력 (초록색 체크마크)"""
    err_console.print(f"[green]{SYMBOL_SUCCESS} {escape(message)}[/green]")


def print_error(message: str) -> None:
    """에러 메시지 출력 (빨간색 X)"""
    err_console.print(f"[red]{SYMBOL_ERROR} {escape(message)}[/red]")


def print_warning(message: str) -> None:
    """경고 메시지 출력 (노란색 경고)"""
    err_console.print(f"[yellow]{SYMBOL_WARNING} {escape(message)}[/yellow]")


def print_rule(title: str = "", style: str = "dim", target: Console | None = None) -> None:
    """Rich Rule로 구분선 출력

    Args:
        title: 구분선 제목 (빈 문자열이면 제목 없는 구분선)
        style: 스타일 (기본: dim)
        target: 출력 콘솔 (기본: console)
    """
    out = target or console
    if title:
        out.print(Rule(title=title, style=style))
    else:
        out.print(Rule(style=style))


def print_error_tree(errors: list[tuple[str, list[str]]], title: str = "오류 요약") -> None:
    """에러를 카테고리별 계층 트리로 출력

    Args:
        errors: (category, [detail_items]) 튜플 리스트
        title: 트리 루트 제목

    Example:
        print_error_tree([
            ("AccessDeniedException", ["my-function", "other-function"]),
            ("ThrottlingException", ["job-1"]),
        ])
    """
    tree = Tree(f"[bold yellow]{escape(title)}[/bold yellow]")
    for category, items in errors:
        branch = tree.add(f"[red]{escape(category)}[/red] ({len(items)}건)")
        for item in items[:3]:
            branch.add(f"[dim]{escape(item)}[/dim]")
        if len(items) > 3:
            branch.add(f"[dim]... 외 {len(items) - 3}건[/dim]")
    err_console.print(tree)


def print_execution_summary(
    profile: str | None,
    region: str,
    services: list[str],
    concurrency: int,
    match_mode: str,
) -> None:
    """실행 요약 박스 출력"""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan", width=12)
    table.add_column()
    table.add_row("프로필", profile or "(기본)")
    table.add_row("리전", region)
    table.add_row("서비스", ", ".join(services))
    table.add_row("동시성", str(concurrency))
    table.add_row("매칭 모드", match_mode)
    err_console.print(Panel(table, title="secretscan", border_style="#FF9900"))
