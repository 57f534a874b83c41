"""Compare the installed environment against ``requirements.lock``.

The book is rendered against pinned library versions so that printed
numbers and figures do not drift between builds. ``check_lock_status``
reports, for every pinned distribution, whether the installed version
matches the pin. The CI job runs this before rendering.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from importlib import metadata
from pathlib import Path

from py4envchem.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_PIN = re.compile(r"^([A-Za-z0-9][A-Za-z0-9._-]*)(?:\[[^\]]*\])?\s*===?\s*([^\s;#]+)")

STATE_OK = "ok"
STATE_MISSING = "missing"
STATE_MISMATCH = "mismatch"


def normalize_name(name: str) -> str:
    """Normalise a distribution name (PEP 503).

    Examples
    --------
    >>> normalize_name("Python_Dotenv")
    'python-dotenv'
    """
    return re.sub(r"[-_.]+", "-", name).lower()


@dataclass(frozen=True)
class LockStatus:
    """Pinned versus installed version of one distribution."""

    name: str
    locked_version: str
    installed_version: str | None
    state: str


def parse_lockfile(path: Path | str) -> dict[str, str]:
    """Return ``{normalised name: pinned version}`` from a pip lockfile.

    Blank lines, comments, pip options (``-r``, ``--hash`` continuation
    lines) and environment markers are ignored.

    Raises
    ------
    ConfigurationError
        If the lockfile does not exist or a requirement line is not pinned
        with ``==``.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(
            f"Lockfile not found: {path}", context={"path": str(path)}
        )
    pins: dict[str, str] = {}
    for number, raw in enumerate(path.read_text(encoding="utf-8").splitlines(), 1):
        line = raw.split("#", 1)[0].strip().rstrip("\\").strip()
        if not line or line.startswith("-"):
            continue
        match = _PIN.match(line)
        if match is None:
            raise ConfigurationError(
                f"{path.name}:{number}: requirement is not pinned: {line}",
                context={"line": number},
            )
        pins[normalize_name(match.group(1))] = match.group(2)
    return pins


def check_lock_status(path: Path | str) -> list[LockStatus]:
    """Check every pinned distribution against the installed version."""
    statuses: list[LockStatus] = []
    for name, locked in sorted(parse_lockfile(path).items()):
        try:
            installed: str | None = metadata.version(name)
        except metadata.PackageNotFoundError:
            installed = None
        if installed is None:
            state = STATE_MISSING
        elif installed == locked:
            state = STATE_OK
        else:
            state = STATE_MISMATCH
        if state != STATE_OK:
            logger.warning(
                "%s: locked %s, installed %s", name, locked, installed or "none"
            )
        statuses.append(LockStatus(name, locked, installed, state))
    return statuses


def is_synchronised(statuses: list[LockStatus]) -> bool:
    """True when every pinned distribution is installed at its pinned version."""
    return all(s.state == STATE_OK for s in statuses)
