"""Incremental build cache.

The manifest stored in the output directory maps each chapter slug to a
content hash. A chapter is re-rendered only when its hash changes or its
page is missing. The hash covers the chapter source, the dependency
lockfile, the page template, the book's data files and the chapter
navigation, so a change to any of them invalidates every affected page.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from py4envchem.config import BUILD_MANIFEST_FILENAME

logger = logging.getLogger(__name__)


def _read_bytes(path: Path | None) -> bytes:
    if path is None or not path.is_file():
        return b""
    return path.read_bytes()


def directory_digest(directory: Path) -> str:
    """Return a digest of every file's relative path and content under ``directory``."""
    digest = hashlib.sha256()
    if directory.is_dir():
        for path in sorted(p for p in directory.rglob("*") if p.is_file()):
            digest.update(path.relative_to(directory).as_posix().encode("utf-8"))
            digest.update(b"\0")
            digest.update(path.read_bytes())
    return digest.hexdigest()


def chapter_hash(
    chapter_text: str,
    lockfile: Path | None = None,
    template: Path | None = None,
    extra: str = "",
) -> str:
    """Hash the inputs that determine a chapter's rendered page.

    Examples
    --------
    >>> chapter_hash("# A") == chapter_hash("# A")
    True
    >>> chapter_hash("# A") == chapter_hash("# B")
    False
    """
    digest = hashlib.sha256()
    for part in (
        chapter_text.encode("utf-8"),
        _read_bytes(lockfile),
        _read_bytes(template),
        extra.encode("utf-8"),
    ):
        digest.update(hashlib.sha256(part).digest())
    return digest.hexdigest()


@dataclass
class BuildManifest:
    """Chapter hashes from the previous build of an output directory."""

    path: Path
    hashes: dict[str, str] = field(default_factory=dict)

    @classmethod
    def load(cls, output_dir: Path) -> "BuildManifest":
        """Read the manifest from ``output_dir``; an unreadable one counts as empty."""
        path = output_dir / BUILD_MANIFEST_FILENAME
        if not path.exists():
            return cls(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable build manifest %s", path)
            return cls(path)
        if not isinstance(data, dict):
            return cls(path)
        return cls(path, {str(k): str(v) for k, v in data.items()})

    def is_current(self, slug: str, digest: str, page: Path) -> bool:
        return self.hashes.get(slug) == digest and page.exists()

    def record(self, slug: str, digest: str) -> None:
        self.hashes[slug] = digest

    def prune(self, slugs: set[str]) -> None:
        """Forget chapters no longer in the book."""
        for slug in set(self.hashes) - slugs:
            del self.hashes[slug]

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(self.hashes, indent=2, sort_keys=True) + "\n", encoding="utf-8"
        )
