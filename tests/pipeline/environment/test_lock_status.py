"""Tests for comparing the environment against a lockfile."""

from importlib import metadata

import pytest

from py4envchem.exceptions import ConfigurationError
from py4envchem.pipeline.environment.lock_status import (
    check_lock_status,
    is_synchronised,
    normalize_name,
    parse_lockfile,
)


def test_normalize_name():
    """Test Normalize name."""
    assert normalize_name("Python_Dotenv") == "python-dotenv"
    assert normalize_name("zope.interface") == "zope-interface"


def test_parse_lockfile_skips_comments_options_and_markers(tmp_path):
    """Test Parse lockfile skips comments options and markers."""
    lock = tmp_path / "requirements.lock"
    lock.write_text(
        "# generated\n"
        "--index-url https://pypi.org/simple\n"
        "\n"
        "pandas==2.2.3 \\\n"
        "    --hash=sha256:abc\n"
        "Markdown2==2.5.2  # site rendering\n"
        "tzdata==2024.2 ; sys_platform == 'win32'\n"
        "uvicorn[standard]==0.30.0\n",
        encoding="utf-8",
    )
    assert parse_lockfile(lock) == {
        "pandas": "2.2.3",
        "markdown2": "2.5.2",
        "tzdata": "2024.2",
        "uvicorn": "0.30.0",
    }


def test_parse_lockfile_rejects_unpinned(tmp_path):
    """Test Parse lockfile rejects unpinned."""
    lock = tmp_path / "requirements.lock"
    lock.write_text("pandas==2.2.3\nnumpy>=1.24\n", encoding="utf-8")
    with pytest.raises(ConfigurationError) as excinfo:
        parse_lockfile(lock)
    assert excinfo.value.context["line"] == 2


def test_parse_lockfile_missing(tmp_path):
    """Test Parse lockfile missing."""
    with pytest.raises(ConfigurationError):
        parse_lockfile(tmp_path / "nope.lock")


def test_check_lock_status_states(tmp_path):
    """Test Check lock status states."""
    installed = metadata.version("pandas")
    lock = tmp_path / "requirements.lock"
    lock.write_text(
        f"pandas=={installed}\n"
        "numpy==0.0.1\n"
        "definitely-not-installed-pkg==1.0\n",
        encoding="utf-8",
    )
    statuses = {s.name: s for s in check_lock_status(lock)}
    assert statuses["pandas"].state == "ok"
    assert statuses["numpy"].state == "mismatch"
    assert statuses["numpy"].installed_version == metadata.version("numpy")
    assert statuses["definitely-not-installed-pkg"].state == "missing"
    assert statuses["definitely-not-installed-pkg"].installed_version is None
    assert not is_synchronised(list(statuses.values()))
    assert is_synchronised([statuses["pandas"]])


def test_bundled_lockfile_is_fully_pinned(project_root):
    """Test Bundled lockfile is fully pinned."""
    pins = parse_lockfile(project_root / "requirements.lock")
    for name in ("pandas", "numpy", "scipy", "statsmodels", "matplotlib", "markdown2", "reportlab"):
        assert name in pins
