from __future__ import annotations

import logging
import string
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

_SAFE = set(string.ascii_letters + string.digits + ":_.")


def escape_path(path: str) -> str:
    """Same result as ``systemd-escape --path``."""

    parts = [p for p in path.split("/") if p and p != "."]
    if not parts:
        return "-"
    out: List[str] = []
    for i, ch in enumerate("/".join(parts)):
        if ch == "/":
            out.append("-")
        elif ch in _SAFE and not (i == 0 and ch == "."):
            out.append(ch)
        else:
            out.extend(f"\\x{b:02x}" for b in ch.encode("utf-8"))
    return "".join(out)


@dataclass(frozen=True)
class UnitPair:
    base: str
    unit_dir: str

    @classmethod
    def for_mount_point(cls, mount_point: str, unit_dir: str) -> "UnitPair":
        return cls(base=escape_path(mount_point), unit_dir=unit_dir)

    @property
    def mount_unit(self) -> str:
        return f"{self.base}.mount"

    @property
    def automount_unit(self) -> str:
        return f"{self.base}.automount"

    @property
    def mount_path(self) -> Path:
        return Path(self.unit_dir) / self.mount_unit

    @property
    def automount_path(self) -> Path:
        return Path(self.unit_dir) / self.automount_unit

    def exists(self) -> bool:
        return self.mount_path.exists() or self.automount_path.exists()


def render_mount_unit(*, what: str, where: str, options: str, description: str) -> str:
    return "\n".join(
        [
            "[Unit]",
            f"Description={description}",
            "After=network-online.target",
            "Wants=network-online.target",
            "",
            "[Mount]",
            f"What={what}",
            f"Where={where}",
            "Type=cifs",
            f"Options={options},_netdev",
            "TimeoutSec=30",
            "",
            "[Install]",
            "WantedBy=multi-user.target",
            "",
        ]
    )


def render_automount_unit(*, where: str, description: str, idle_timeout: int = 60) -> str:
    return "\n".join(
        [
            "[Unit]",
            f"Description={description}",
            "After=network-online.target",
            "Wants=network-online.target",
            "",
            "[Automount]",
            f"Where={where}",
            f"TimeoutIdleSec={idle_timeout}",
            "",
            "[Install]",
            "WantedBy=multi-user.target",
            "",
        ]
    )


def _write_file(p: Path, contents: str, *, dry_run: bool) -> None:
    if dry_run:
        logger.info("[DRY RUN] Would write %s", str(p))
        return
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(contents, encoding="utf-8")
    logger.info("Wrote %s", str(p))


def write_units(units: UnitPair, *, mount_unit: str, automount_unit: str, dry_run: bool = False) -> List[str]:
    _write_file(units.mount_path, mount_unit, dry_run=dry_run)
    _write_file(units.automount_path, automount_unit, dry_run=dry_run)
    return [str(units.mount_path), str(units.automount_path)]


def systemctl(*args: str, dry_run: bool = False) -> CmdResult:
    return run_cmd(["systemctl", *args], check=False, dry_run=dry_run)


def remove_units(units: UnitPair, *, dry_run: bool = False) -> List[str]:
    """Disable and delete a stale unit pair. Returns the files removed."""

    if not units.exists():
        return []
    systemctl("disable", "--now", units.automount_unit, dry_run=dry_run)
    systemctl("disable", units.mount_unit, dry_run=dry_run)
    removed: List[str] = []
    for p in (units.automount_path, units.mount_path):
        if not p.exists():
            continue
        if dry_run:
            logger.info("[DRY RUN] Would remove %s", str(p))
        else:
            p.unlink()
            logger.warning("Removed stale unit %s", str(p))
        removed.append(str(p))
    systemctl("daemon-reload", dry_run=dry_run)
    return removed


def failure_hint(result: CmdResult, unit: str) -> Optional[str]:
    if result.ok:
        return None
    return f"{result.output or 'exit status %d' % result.returncode}. Run: journalctl -u {unit} -xe"
