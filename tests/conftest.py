"""Pytest configuration for test environment setup.

- Forces ``DISABLE_FILE_LOGS=1`` to avoid writing log files during tests.
- Forces the non-interactive matplotlib ``Agg`` backend.
- Ensures the project root is available on ``sys.path`` for imports.
- Applies a per-test timeout (``PYTEST_TEST_TIMEOUT`` seconds).
"""

import logging
import os
import signal
import sys
from pathlib import Path

os.environ.setdefault("DISABLE_FILE_LOGS", "1")  # Avoid creating log files during tests
os.environ.setdefault("MPLBACKEND", "Agg")

import matplotlib

matplotlib.use("Agg", force=True)

import pytest

# Ensure project root is on sys.path
ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

_TEST_TIMEOUT = int(os.environ.get("PYTEST_TEST_TIMEOUT", "60"))

_SETTINGS_ENV = (
    "PY4EC_BOOK_DIR",
    "PY4EC_OUTPUT_DIR",
    "PY4EC_LOG_LEVEL",
    "PY4EC_FIGURE_DPI",
    "PY4EC_FORMATS",
)


def _timeout_handler(signum, frame):
    """Test Timeout handler."""
    raise TimeoutError(f"Test exceeded {_TEST_TIMEOUT} seconds timeout")


def pytest_runtest_setup(item):
    """Test Pytest runtest setup."""
    if hasattr(signal, "SIGALRM"):
        signal.signal(signal.SIGALRM, _timeout_handler)
        signal.alarm(_TEST_TIMEOUT)


def pytest_runtest_teardown(item, nextitem):
    """Test Pytest runtest teardown."""
    if hasattr(signal, "SIGALRM"):
        signal.alarm(0)


@pytest.fixture(autouse=True)
def _isolated_settings_env(monkeypatch):
    """Keep a developer's PY4EC_* variables out of the tests."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _close_figures():
    """Close any figure a test leaves open."""
    yield
    import matplotlib.pyplot as plt

    plt.close("all")


@pytest.fixture
def project_root() -> Path:
    """Return the repository root."""
    return ROOT


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Undo handler and level changes made by ``configure_logging``."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
