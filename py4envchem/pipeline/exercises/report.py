"""Textual reporting of exercise results.

``format_report`` produces plain PASS/FAIL lines (what the exercise
documents print inline); ``render_report_table`` builds a Rich table for
the command line.
"""

from __future__ import annotations

from rich.table import Table

from .runner import ExerciseReport


def format_report(report: ExerciseReport) -> str:
    """Return a plain-text report, one line per check plus a summary line.

    Examples
    --------
    >>> from py4envchem.pipeline.exercises.checks import CheckResult
    >>> rep = ExerciseReport("ex01", "Importing", [CheckResult("df exists", True, "ok")])
    >>> print(format_report(rep))
    ex01: Importing
      PASS  df exists - ok
    1/1 checks passed
    """
    lines = [f"{report.exercise_id}: {report.title}"]
    for result in report.results:
        status = "PASS" if result.passed else "FAIL"
        lines.append(f"  {status}  {result.name} - {result.message}")
    lines.append(report.summary())
    return "\n".join(lines)


def render_report_table(report: ExerciseReport) -> Table:
    """Build a Rich table summarising ``report``."""
    table = Table(
        title=f"{report.exercise_id}: {report.title}",
        show_header=True,
        header_style="bold blue",
        caption=report.summary(),
    )
    table.add_column("Check", style="bold")
    table.add_column("Status")
    table.add_column("Details")
    for result in report.results:
        status = "[green]✅ PASS[/green]" if result.passed else "[red]❌ FAIL[/red]"
        table.add_row(result.name, status, result.message)
    return table
