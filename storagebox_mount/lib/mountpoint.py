from __future__ import annotations

import logging
import os
import re
from itertools import islice
from pathlib import Path
from typing import List

from ..errors import ValidationError
from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

SYSTEM_DIRS = frozenset(
    {"/", "/bin", "/boot", "/dev", "/etc", "/lib", "/proc", "/root", "/sbin", "/sys", "/usr"}
)
_DISALLOWED = re.compile(r"[<>|:,\s]")


def validate_mount_point(path: str) -> str:
    """Reject relative paths, system directories and shell/option metacharacters."""

    if not path or not path.startswith("/"):
        raise ValidationError(f"Invalid mount point: {path!r} (must be an absolute path)")
    if _DISALLOWED.search(path):
        raise ValidationError(f"Invalid mount point: {path!r} (contains disallowed characters)")
    normalized = os.path.normpath(path)
    # normpath keeps a leading "//"; treat it like "/"
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    if normalized in SYSTEM_DIRS:
        raise ValidationError(f"Invalid mount point: {path!r} (system directory)")
    return normalized


def is_mounted(path: str) -> bool:
    return os.path.ismount(path)


def list_entries(path: str, limit: int = 5) -> List[str]:
    p = Path(path)
    if not p.is_dir():
        return []
    return sorted(c.name for c in islice(p.iterdir(), limit))


def unmount(path: str, *, dry_run: bool = False) -> CmdResult:
    return run_cmd(["umount", path], check=False, dry_run=dry_run)
