"""Exercise checking: check primitives, definitions, runner and reports."""

from .checks import (
    CHECKS,
    CheckResult,
    check_coefficient_significant,
    check_columns,
    check_equal,
    check_exists,
    check_file_written,
    check_shape,
    check_type,
    check_value_range,
)
from .report import format_report, render_report_table
from .runner import (
    ExerciseDefinition,
    ExerciseReport,
    load_exercise,
    parse_exercise,
    run_checks,
    run_exercise,
)

__all__ = [
    "CHECKS",
    "CheckResult",
    "ExerciseDefinition",
    "ExerciseReport",
    "check_coefficient_significant",
    "check_columns",
    "check_equal",
    "check_exists",
    "check_file_written",
    "check_shape",
    "check_type",
    "check_value_range",
    "format_report",
    "load_exercise",
    "parse_exercise",
    "render_report_table",
    "run_checks",
    "run_exercise",
]
