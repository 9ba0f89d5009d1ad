# cli/ui - 콘솔 UI 컴포넌트 (rich)
"""
콘솔 출력, 로깅 핸들러, 진행률 표시
"""

from .console import (
    SYMBOL_ERROR,
    SYMBOL_SUCCESS,
    SYMBOL_WARNING,
    console,
    err_console,
    get_console,
    print_error,
    print_error_tree,
    print_execution_summary,
    print_rule,
    print_success,
    print_warning,
    setup_logging,
)
from .progress import ParallelTracker, SuccessFailColumn, parallel_progress

__all__: list[str] = [
    # Console
    "console",
    "err_console",
    "get_console",
    "setup_logging",
    "SYMBOL_SUCCESS",
    "SYMBOL_ERROR",
    "SYMBOL_WARNING",
    "print_success",
    "print_error",
    "print_warning",
    "print_rule",
    "print_error_tree",
    "print_execution_summary",
    # Progress
    "ParallelTracker",
    "SuccessFailColumn",
    "parallel_progress",
]
