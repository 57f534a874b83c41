"""Load exercise definitions and run their checks against student scripts.

An exercise definition is a small JSON document::

    {
      "id": "ex02-reshape",
      "title": "Reshaping lake metal data",
      "script": "ex02_reshape.py",
      "checks": [
        {"type": "exists", "name": "metals_long"},
        {"type": "columns", "name": "metals_long", "columns": ["lake", "metal", "conc_ug_l"]}
      ]
    }

``run_exercise`` executes the student script as ``__main__`` from the
script's own directory and evaluates each check against the
variables the script defined. Errors raised by the student's code are
reported as a failed ``script runs`` check rather than propagated.
"""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import matplotlib

matplotlib.use("Agg", force=True)
import matplotlib.pyplot as plt

from py4envchem.config import EXERCISE_SCRIPT_CHECK_NAME
from py4envchem.exceptions import ConfigurationError, ExerciseCheckError
from py4envchem.fs_utils import working_directory

from .checks import CHECKS, CheckResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckSpec:
    """One configured check: its type and the keyword parameters to pass."""

    type: str
    params: dict[str, Any]


@dataclass(frozen=True)
class ExerciseDefinition:
    """A parsed exercise definition file."""

    id: str
    title: str
    script: Path | None
    checks: list[CheckSpec]
    source: Path | None = None


@dataclass
class ExerciseReport:
    """Results of every check of one exercise run."""

    exercise_id: str
    title: str
    results: list[CheckResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return bool(self.results) and all(r.passed for r in self.results)

    @property
    def n_passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    def summary(self) -> str:
        return f"{self.n_passed}/{len(self.results)} checks passed"


def _parse_check(raw: Mapping[str, Any], index: int) -> CheckSpec:
    if not isinstance(raw, Mapping) or "type" not in raw:
        raise ExerciseCheckError(
            f"Check #{index + 1} must be an object with a 'type'",
            context={"check": raw},
        )
    params = {k: v for k, v in raw.items() if k != "type"}
    check_type = str(raw["type"])
    func = CHECKS.get(check_type)
    if func is None:
        raise ConfigurationError(
            f"Unknown check type '{check_type}'", context={"available": sorted(CHECKS)}
        )
    try:
        inspect.signature(func).bind({}, **params)
    except TypeError as exc:
        raise ExerciseCheckError(
            f"Check #{index + 1} ({check_type}) has invalid parameters: {exc}",
            context={"params": params},
        ) from exc
    return CheckSpec(check_type, params)


def parse_exercise(data: Mapping[str, Any], base_dir: Path | None = None) -> ExerciseDefinition:
    """Build an ``ExerciseDefinition`` from already-decoded JSON data.

    Raises
    ------
    ExerciseCheckError
        If required keys are missing or a check has invalid parameters.
    ConfigurationError
        If a check names an unknown type.
    """
    for key in ("id", "checks"):
        if key not in data:
            raise ExerciseCheckError(f"Exercise definition is missing '{key}'")
    checks = [_parse_check(raw, i) for i, raw in enumerate(data["checks"])]
    script = data.get("script")
    script_path: Path | None = None
    if script:
        script_path = Path(script)
        if base_dir is not None and not script_path.is_absolute():
            script_path = base_dir / script_path
    return ExerciseDefinition(
        id=str(data["id"]),
        title=str(data.get("title", data["id"])),
        script=script_path,
        checks=checks,
    )


def load_exercise(path: Path | str) -> ExerciseDefinition:
    """Read and validate an exercise definition JSON file.

    The ``script`` entry is resolved relative to the definition file.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ExerciseCheckError(
            f"{path.name} is not valid JSON: {exc}", context={"path": str(path)}
        ) from exc
    definition = parse_exercise(data, base_dir=path.parent)
    return ExerciseDefinition(
        id=definition.id,
        title=definition.title,
        script=definition.script,
        checks=definition.checks,
        source=path,
    )


def run_checks(
    definition: ExerciseDefinition, namespace: Mapping[str, Any]
) -> ExerciseReport:
    """Evaluate every check of ``definition`` against ``namespace``.

    Useful from a notebook or an exercise document: ``run_checks(ex, globals())``.
    """
    report = ExerciseReport(definition.id, definition.title)
    for spec in definition.checks:
        report.results.append(CHECKS[spec.type](namespace, **spec.params))
    return report


def _run_script(script: Path) -> dict[str, Any]:
    """Execute ``script`` as ``__main__`` and return its global namespace.

    ``sys.exit()`` with a zero or empty status counts as normal completion.
    """
    namespace: dict[str, Any] = {"__name__": "__main__", "__file__": str(script)}
    code = compile(script.read_text(encoding="utf-8"), str(script), "exec")
    try:
        exec(code, namespace)
    except SystemExit as exc:
        if exc.code not in (0, None):
            raise
        logger.debug("Student script exited early with status %r", exc.code)
    return namespace


def run_exercise(
    definition: ExerciseDefinition, script_path: Path | str | None = None
) -> ExerciseReport:
    """Execute a student script and check the variables it defines.

    Parameters
    ----------
    definition : ExerciseDefinition
        The exercise to check.
    script_path : Path | str | None, optional
        The student's script; defaults to the script named by the definition.

    Returns
    -------
    ExerciseReport
        One result per check, or a single failed ``script runs`` result when
        the script itself raised.

    Raises
    ------
    ConfigurationError
        If no script is given and the definition names none.
    FileNotFoundError
        If the script does not exist.
    """
    script = Path(script_path) if script_path is not None else definition.script
    if script is None:
        raise ConfigurationError(
            f"Exercise '{definition.id}' names no script; pass one explicitly"
        )
    script = script.resolve()
    if not script.exists():
        raise FileNotFoundError(script)
    logger.info("Running exercise %s against %s", definition.id, script)
    try:
        with working_directory(script.parent):
            namespace = _run_script(script)
    except (Exception, SystemExit) as exc:
        logger.info("Student script raised %s", type(exc).__name__)
        report = ExerciseReport(definition.id, definition.title)
        report.results.append(
            CheckResult(
                EXERCISE_SCRIPT_CHECK_NAME,
                False,
                f"{type(exc).__name__}: {exc}",
            )
        )
        return report
    finally:
        plt.close("all")
    with working_directory(script.parent):
        report = run_checks(definition, namespace)
    report.results.insert(
        0, CheckResult(EXERCISE_SCRIPT_CHECK_NAME, True, "script ran without errors")
    )
    return report
