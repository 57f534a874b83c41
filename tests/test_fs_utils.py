"""Tests for filesystem helpers."""

import os
from pathlib import Path

import pytest

from py4envchem import config as app_config
from py4envchem.fs_utils import copy_tree, create_safe_path, safe_rmtree, working_directory


def test_working_directory_restores_cwd(tmp_path):
    """Test Working directory restores cwd."""
    before = Path.cwd()
    with pytest.raises(RuntimeError):
        with working_directory(tmp_path):
            assert Path.cwd() == tmp_path.resolve()
            raise RuntimeError("inside")
    assert Path.cwd() == before


@pytest.mark.parametrize(
    "target",
    [
        lambda: Path("/"),
        lambda: Path.home(),
        lambda: app_config.PROJECT_ROOT,
        lambda: app_config.BOOK_DIR,
        lambda: app_config.PROJECT_ROOT.parent,
    ],
)
def test_create_safe_path_refuses_protected(target):
    """Test Create safe path refuses protected."""
    with pytest.raises(PermissionError):
        create_safe_path(target())


def test_safe_rmtree_removes_output_dir(tmp_path):
    """Test Safe rmtree removes output dir."""
    target = tmp_path / "site" / "figures"
    target.mkdir(parents=True)
    (target / "a.png").write_bytes(b"x")
    safe_rmtree(create_safe_path(tmp_path / "site"))
    assert not (tmp_path / "site").exists()
    safe_rmtree(tmp_path / "site")


def test_copy_tree_merges_and_counts(tmp_path):
    """Test Copy tree merges and counts."""
    src = tmp_path / "src"
    (src / "sub").mkdir(parents=True)
    (src / "a.csv").write_text("1", encoding="utf-8")
    (src / "sub" / "b.csv").write_text("2", encoding="utf-8")
    dst = tmp_path / "dst"
    dst.mkdir()
    (dst / "keep.txt").write_text("k", encoding="utf-8")
    assert copy_tree(src, dst) == 2
    assert sorted(os.listdir(dst)) == ["a.csv", "keep.txt", "sub"]
