"""Environment checks for reproducible book builds."""

from .lock_status import (
    LockStatus,
    check_lock_status,
    is_synchronised,
    normalize_name,
    parse_lockfile,
)

__all__ = [
    "LockStatus",
    "check_lock_status",
    "is_synchronised",
    "normalize_name",
    "parse_lockfile",
]
