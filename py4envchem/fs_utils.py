"""Filesystem helpers shared by the book builder and the exercise runner.

Functions
---------
- ``working_directory``: Temporarily change the process working directory.
- ``create_safe_path``: Validate and stamp a directory as safe to clear.
- ``safe_rmtree``: Remove a validated directory tree.
- ``copy_tree``: Copy a directory tree, merging into an existing target.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import NewType

from py4envchem import config as _config

logger = logging.getLogger(__name__)

# NewType used as a static "seal" to indicate the path is validated for removal.
_ValidatedPath = NewType("_ValidatedPath", Path)


@contextmanager
def working_directory(path: Path) -> Iterator[Path]:
    """Run the body of a ``with`` block from ``path``, restoring the cwd after."""
    previous = Path.cwd()
    os.chdir(path)
    try:
        yield Path(path)
    finally:
        os.chdir(previous)


def create_safe_path(path_to_validate: Path) -> _ValidatedPath:
    r"""Validate and stamp a directory as safe for destructive operations.

    Refuses the filesystem root, the user's home directory, the project
    root, the book sources and any ancestor of those. Everything else (an
    output directory, a publish worktree) is allowed.

    Parameters
    ----------
    path_to_validate : Path
        The directory path to be validated for removal.

    Returns
    -------
    _ValidatedPath
        The resolved path, stamped for use by removal helpers.

    Raises
    ------
    PermissionError
        If the path is protected.

    Examples
    --------
    >>> from pathlib import Path
    >>> create_safe_path(Path("/"))  # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
      ...
    PermissionError: SECURITY STOP: Refusing to remove protected path '/'.
    """
    target_path = Path(path_to_validate).resolve()
    protected = [
        Path(target_path.anchor),
        Path.home().resolve(),
        _config.PROJECT_ROOT.resolve(),
        _config.BOOK_DIR.resolve(),
        _config.PACKAGE_DIR.resolve(),
    ]
    for guarded in protected:
        if target_path == guarded or guarded.is_relative_to(target_path):
            raise PermissionError(
                f"SECURITY STOP: Refusing to remove protected path '{target_path}'."
            )
    return _ValidatedPath(target_path)


def safe_rmtree(safe_path: _ValidatedPath | Path) -> None:
    """Remove a directory tree after validating it with ``create_safe_path``."""
    validated = create_safe_path(Path(safe_path))
    if validated.exists():
        logger.info("Removing %s", validated)
        shutil.rmtree(validated)


def copy_tree(source: Path, target: Path) -> int:
    """Copy ``source`` into ``target`` (merging) and return the number of files."""
    shutil.copytree(source, target, dirs_exist_ok=True)
    return sum(1 for p in Path(source).rglob("*") if p.is_file())
