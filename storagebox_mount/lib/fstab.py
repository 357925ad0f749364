from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

AUTOMOUNT_FLAGS = ("_netdev", "x-systemd.automount")


@dataclass(frozen=True)
class FstabEntry:
    spec: str
    mountpoint: str
    fstype: str
    options: str
    dump: int = 0
    passno: int = 0

    def render(self) -> str:
        return f"{self.spec} {self.mountpoint} {self.fstype} {self.options} {self.dump} {self.passno}"


def boot_options(options: str, *, idle_timeout: int = 60) -> str:
    """Mount options plus the deferred-activation flags for boot."""
    return ",".join([options, *AUTOMOUNT_FLAGS, f"x-systemd.idle-timeout={idle_timeout}"])


def _mountpoint_field(line: str) -> Optional[str]:
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    fields = stripped.split()
    return fields[1] if len(fields) >= 2 else None


def references(line: str, mount_point: str) -> bool:
    """True when the line's mount-point field is exactly ``mount_point``."""
    mp = _mountpoint_field(line)
    return mp is not None and mp.rstrip("/") == mount_point.rstrip("/")


def remove_mount_point(text: str, mount_point: str) -> Tuple[str, int]:
    kept: List[str] = []
    removed = 0
    for line in text.splitlines(keepends=True):
        if references(line, mount_point):
            removed += 1
            continue
        kept.append(line)
    return "".join(kept), removed


def entries_for(path: str, mount_point: str) -> List[str]:
    p = Path(path)
    if not p.exists():
        return []
    return [ln for ln in p.read_text(encoding="utf-8").splitlines() if references(ln, mount_point)]


def _backup(p: Path, suffix: str, *, dry_run: bool) -> str:
    backup = f"{p}{suffix}"
    if dry_run:
        logger.info("[DRY RUN] Would back up %s to %s", p, backup)
    else:
        shutil.copy2(p, backup)
        logger.info("Backed up fstab to: %s", backup)
    return backup


def drop_entries(path: str, mount_point: str, *, backup_suffix: str, dry_run: bool = False) -> int:
    """Remove every line for ``mount_point`` (backing up first). Returns lines removed."""

    p = Path(path)
    if not entries_for(path, mount_point):
        return 0
    text, removed = remove_mount_point(p.read_text(encoding="utf-8"), mount_point)
    _backup(p, backup_suffix, dry_run=dry_run)
    if dry_run:
        logger.info("[DRY RUN] Would remove %d fstab line(s) for %s", removed, mount_point)
    else:
        p.write_text(text, encoding="utf-8")
        logger.warning("Removed %d existing fstab entr(y/ies) for %s", removed, mount_point)
    return removed


def upsert_entry(path: str, entry: FstabEntry, *, backup_suffix: str, dry_run: bool = False) -> Optional[str]:
    """Replace any line for ``entry.mountpoint`` with ``entry``.

    Returns the backup path (None when there was no table to back up).
    """

    p = Path(path)
    backup: Optional[str] = None
    text = ""
    if p.exists():
        backup = _backup(p, backup_suffix, dry_run=dry_run)
        text = p.read_text(encoding="utf-8")

    text, removed = remove_mount_point(text, entry.mountpoint)
    if removed:
        logger.warning("Replaced existing fstab entry for %s", entry.mountpoint)
    if text and not text.endswith("\n"):
        text += "\n"
    text += entry.render() + "\n"

    if dry_run:
        logger.info("[DRY RUN] Would write %s with: %s", p, entry.render())
        return backup

    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    logger.info("fstab entry added with automount support")
    return backup
