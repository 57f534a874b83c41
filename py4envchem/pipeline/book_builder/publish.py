"""Copy a rendered site into a hosting directory.

The destination is typically a checkout of the hosting branch. Its
previous content is cleared first (a ``.git`` entry is kept) so pages
for removed chapters disappear, then the site is copied in, including
``.nojekyll``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from py4envchem.config import INDEX_PAGE_NAME, NOJEKYLL_FILENAME
from py4envchem.exceptions import ConfigurationError
from py4envchem.fs_utils import copy_tree, create_safe_path, safe_rmtree

logger = logging.getLogger(__name__)

_KEEP = {".git"}


def clear_directory(directory: Path) -> None:
    """Remove everything in ``directory`` except ``.git``.

    Raises
    ------
    PermissionError
        If ``directory`` is a protected location.
    """
    safe = create_safe_path(directory)
    if not safe.exists():
        return
    for entry in safe.iterdir():
        if entry.name in _KEEP:
            continue
        if entry.is_dir() and not entry.is_symlink():
            safe_rmtree(entry)
        else:
            entry.unlink()


def publish(output_dir: Path, destination: Path, clean: bool = True) -> int:
    """Copy the rendered site in ``output_dir`` into ``destination``.

    Parameters
    ----------
    output_dir : Path
        A rendered site (must contain ``index.html``).
    destination : Path
        Hosting directory; created when missing.
    clean : bool, optional
        Clear the destination before copying.

    Returns
    -------
    int
        Number of files copied.

    Raises
    ------
    ConfigurationError
        If ``output_dir`` holds no rendered site, or it and the destination
        overlap (one inside the other).
    PermissionError
        If the destination is a protected location.
    """
    output_dir = Path(output_dir).resolve()
    destination = Path(destination).resolve()
    if not (output_dir / INDEX_PAGE_NAME).is_file():
        raise ConfigurationError(
            f"No rendered site in {output_dir}; run 'render' first",
            context={"output_dir": str(output_dir)},
        )
    if output_dir.is_relative_to(destination) or destination.is_relative_to(output_dir):
        raise ConfigurationError(
            "Publish destination and output directory must not contain each other",
            context={"output_dir": str(output_dir), "destination": str(destination)},
        )
    if clean:
        clear_directory(destination)
    destination.mkdir(parents=True, exist_ok=True)
    copied = copy_tree(output_dir, destination)
    (destination / NOJEKYLL_FILENAME).touch()
    logger.info("Published %d files from %s to %s", copied, output_dir, destination)
    return copied
