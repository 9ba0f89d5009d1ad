"""
cli/report.py - 스캔 결과 출력 (Rich 콘솔 / JSON)

콘솔 출력은 리소스별로 묶고, 버전은 $LATEST 를 먼저 그 다음 최신 번호순으로 표시합니다.
매치 문자열은 show_content 가 아니면 마스킹합니다.
"""

from __future__ import annotations

import json
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from core.config import get_version
from core.findings import Finding, ServiceReport
from core.patterns import format_match

from .ui.console import console as default_console
from .ui.console import print_rule

LATEST_VERSION = "$LATEST"


def version_sort_key(version: str | None) -> tuple[int, int, str]:
    """$LATEST → 숫자 버전(내림차순) → 그 외 문자열 → 버전 없음"""
    if version == LATEST_VERSION:
        return (0, 0, "")
    if version is None:
        return (3, 0, "")
    if version.isdigit():
        return (1, -int(version), "")
    return (2, 0, version)


def group_findings(findings: list[Finding]) -> dict[str, dict[str | None, list[Finding]]]:
    """resource_id → version → findings (리소스는 등장 순, 버전은 version_sort_key 순)"""
    grouped: dict[str, dict[str | None, list[Finding]]] = defaultdict(lambda: defaultdict(list))
    for finding in findings:
        grouped[finding.resource_id][finding.version].append(finding)

    return {
        resource_id: {v: by_version[v] for v in sorted(by_version, key=version_sort_key)}
        for resource_id, by_version in grouped.items()
    }


def render_report(report: ServiceReport, show_content: bool = False, console: Console | None = None) -> None:
    out = console or default_console
    print_rule(escape(report.resource_type), style="cyan", target=out)

    if report.failed:
        out.print(f"[red]✗ {escape(report.error or '')}[/red]")
        return

    if not report.findings:
        out.print(f"[dim]매치 없음 (리소스 {report.details_scanned}건 스캔)[/dim]")
        return

    for resource_id, by_version in group_findings(report.findings).items():
        tree = Tree(f"[bold cyan]{escape(report.resource_type)}: {escape(resource_id)}[/bold cyan]")
        for version, findings in by_version.items():
            branch = tree if version is None else tree.add(f"[bright_cyan]Version: {escape(version)}[/bright_cyan]")
            for finding in findings:
                node = branch.add(
                    f"[bold green]Pattern: {escape(finding.pattern)}[/bold green] [dim]({escape(finding.location)})[/dim]"
                )
                for match in finding.matches:
                    node.add(f"[yellow]Matched Data: {escape(format_match(match, show_content))}[/yellow]")
        out.print(tree)


def render_summary(reports: list[ServiceReport], console: Console | None = None) -> None:
    out = console or default_console

    table = Table(title="스캔 요약", show_header=True, header_style="bold")
    table.add_column("서비스", style="cyan")
    table.add_column("리소스 타입")
    table.add_column("스캔", justify="right")
    table.add_column("매치", justify="right")
    table.add_column("스킵", justify="right")
    table.add_column("상태")

    for report in reports:
        status = "[red]목록 조회 실패[/red]" if report.failed else "[green]완료[/green]"
        finding_style = "yellow" if report.findings else "dim"
        table.add_row(
            report.service,
            report.resource_type,
            str(report.details_scanned),
            f"[{finding_style}]{len(report.findings)}[/{finding_style}]",
            str(len(report.failures)),
            status,
        )

    out.print()
    out.print(table)


def render_console(reports: list[ServiceReport], show_content: bool = False, console: Console | None = None) -> None:
    for report in reports:
        render_report(report, show_content, console)
    render_summary(reports, console)


def build_json(reports: list[ServiceReport], show_content: bool = False) -> dict[str, Any]:
    return {
        "version": get_version(),
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "show_content": show_content,
        "reports": [report.to_dict(show_content) for report in reports],
    }


def write_json(
    reports: list[ServiceReport],
    output_path: Path | None = None,
    show_content: bool = False,
    console: Console | None = None,
) -> None:
    """JSON 결과를 파일 또는 stdout 으로 출력"""
    payload = json.dumps(build_json(reports, show_content), ensure_ascii=False, indent=2, default=str)

    if output_path is None:
        out = console or default_console
        out.print(payload, markup=False, highlight=False, soft_wrap=True)
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(payload + "\n", encoding="utf-8")
