"""
cli/excel.py - 스캔 결과 Excel 보고서

시트 구성:
    Summary: 리소스 타입별 스캔/매치/스킵 건수와 상태
    Findings: 매치 1건당 1행 (리소스 → 버전 순서는 콘솔 출력과 동일)
    Skipped: 상세 조회에 실패해 건너뛴 리소스
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from core.config import get_version
from core.findings import ServiceReport
from core.patterns import format_match

from .report import group_findings

logger = logging.getLogger(__name__)

COLOR_HEADER_BG = "4472C4"
COLOR_HEADER_FG = "FFFFFF"
COLOR_WARNING = "FFEB9C"
COLOR_DANGER = "FFC7CE"

FONT_NAME = "맑은 고딕"

# Excel 셀 최대 문자 수
MAX_CELL_LENGTH = 32767

# 이 문자로 시작하는 문자열은 Excel 이 수식으로 해석
FORMULA_PREFIXES = ("=", "+", "-", "@")

SUMMARY_HEADERS = ["Service", "Resource Type", "스캔", "매치", "스킵", "상태"]
FINDING_HEADERS = ["Service", "Resource Type", "Resource ID", "Version", "Location", "Pattern", "Matched Data"]
SKIPPED_HEADERS = ["Resource Type", "Resource ID", "Category", "Error Code", "Message", "Attempts"]


def default_output_path(now: datetime | None = None) -> Path:
    """-o 가 없을 때 사용하는 파일명 (현재 디렉토리)"""
    timestamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return Path(f"secretscan-{timestamp}.xlsx")


def _fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def _thin_border() -> Border:
    side = Side(style="thin", color="808080")
    return Border(left=side, right=side, top=side, bottom=side)


def _cell_value(value):
    if not isinstance(value, str):
        return value
    return ILLEGAL_CHARACTERS_RE.sub("", value)[:MAX_CELL_LENGTH]


def _write_header(ws: Worksheet, headers: list[str], row: int = 1) -> None:
    fill = _fill(COLOR_HEADER_BG)
    font = Font(name=FONT_NAME, size=10, bold=True, color=COLOR_HEADER_FG)
    alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
    border = _thin_border()

    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=row, column=col, value=header)
        cell.fill = fill
        cell.font = font
        cell.alignment = alignment
        cell.border = border


def _write_row(ws: Worksheet, row: int, values: list, fill: PatternFill | None = None) -> None:
    font = Font(name=FONT_NAME, size=10)
    border = _thin_border()

    for col, value in enumerate(values, 1):
        cell = ws.cell(row=row, column=col, value=_cell_value(value))
        if isinstance(cell.value, str) and cell.value.startswith(FORMULA_PREFIXES):
            # 스캔된 데이터는 항상 텍스트로 저장
            cell.data_type = "s"
        cell.font = font
        cell.border = border
        if fill is not None:
            cell.fill = fill


def _fit_columns(ws: Worksheet) -> None:
    for col in ws.columns:
        max_len = max(len(str(c.value)) if c.value is not None else 0 for c in col)
        ws.column_dimensions[get_column_letter(col[0].column)].width = min(max(max_len + 2, 10), 60)


def _summary_sheet(wb: Workbook, reports: list[ServiceReport]) -> None:
    ws = wb.create_sheet("Summary")
    ws["A1"] = "secretscan 스캔 보고서"
    ws["A1"].font = Font(name=FONT_NAME, bold=True, size=14)
    ws["A2"] = f"v{get_version()} / {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}"

    _write_header(ws, SUMMARY_HEADERS, row=4)
    danger = _fill(COLOR_DANGER)
    warning = _fill(COLOR_WARNING)

    for row, report in enumerate(reports, 5):
        if report.failed:
            status, fill = report.error, danger
        else:
            status, fill = "완료", warning if report.findings else None
        _write_row(
            ws,
            row,
            [
                report.service,
                report.resource_type,
                report.details_scanned,
                len(report.findings),
                len(report.failures),
                status,
            ],
            fill,
        )


def _findings_sheet(wb: Workbook, reports: list[ServiceReport], show_content: bool) -> int:
    ws = wb.create_sheet("Findings")
    _write_header(ws, FINDING_HEADERS)

    row = 1
    for report in reports:
        for resource_id, by_version in group_findings(report.findings).items():
            for version, findings in by_version.items():
                for finding in findings:
                    for match in finding.matches:
                        row += 1
                        _write_row(
                            ws,
                            row,
                            [
                                report.service,
                                report.resource_type,
                                resource_id,
                                version or "",
                                finding.location,
                                finding.pattern,
                                format_match(match, show_content),
                            ],
                        )
    return row - 1


def _skipped_sheet(wb: Workbook, reports: list[ServiceReport]) -> None:
    ws = wb.create_sheet("Skipped")
    _write_header(ws, SKIPPED_HEADERS)

    row = 1
    for report in reports:
        for failure in report.failures:
            row += 1
            _write_row(
                ws,
                row,
                [
                    failure.resource_type,
                    failure.resource_id,
                    failure.category.value,
                    failure.error_code,
                    failure.message,
                    failure.attempts,
                ],
            )


def write_excel(reports: list[ServiceReport], output_path: Path | None = None, show_content: bool = False) -> Path:
    """Excel 보고서 저장

    Args:
        reports: 리소스 타입별 스캔 결과
        output_path: 저장 경로 (None이면 secretscan-<시각>.xlsx)
        show_content: 매치 내용을 마스킹 없이 기록

    Returns:
        저장된 파일 경로
    """
    path = output_path or default_output_path()

    wb = Workbook()
    if wb.active:
        wb.remove(wb.active)

    _summary_sheet(wb, reports)
    rows = _findings_sheet(wb, reports, show_content)
    _skipped_sheet(wb, reports)

    for ws in wb.worksheets:
        _fit_columns(ws)
    wb["Findings"].freeze_panes = "A2"
    wb["Skipped"].freeze_panes = "A2"

    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    logger.info(f"Excel 보고서 저장: {path} (매치 {rows}행)")
    return path
