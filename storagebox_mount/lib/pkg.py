from __future__ import annotations

import logging
import shutil
from typing import Dict, List, Sequence

from ..errors import StorageBoxError
from .command import run_cmd

logger = logging.getLogger(__name__)

REQUIRED_PACKAGES = ("cifs-utils", "keyutils")
MOUNT_HELPER = "mount.cifs"

_REFRESH: Dict[str, List[str]] = {
    "apt": ["apt-get", "update"],
    "dnf": ["dnf", "makecache"],
    "yum": ["yum", "makecache"],
    "zypper": ["zypper", "--non-interactive", "refresh"],
}

_INSTALL: Dict[str, List[str]] = {
    "apt": ["apt-get", "install", "-y", "--no-install-recommends"],
    "dnf": ["dnf", "install", "-y"],
    "yum": ["yum", "install", "-y"],
    "zypper": ["zypper", "--non-interactive", "install"],
}


def helper_available() -> bool:
    return shutil.which(MOUNT_HELPER) is not None


def refresh_index(package_manager: str, *, dry_run: bool = False) -> bool:
    """Best-effort package index refresh."""

    argv = _REFRESH.get(package_manager)
    if argv is None:
        raise StorageBoxError(f"Unsupported package manager: {package_manager}")
    r = run_cmd(argv, check=False, env={"DEBIAN_FRONTEND": "noninteractive"}, dry_run=dry_run)
    if not r.ok:
        logger.warning("Failed to update package lists (non-critical)")
    return r.ok


def install_packages(
    package_manager: str,
    packages: Sequence[str] = REQUIRED_PACKAGES,
    *,
    dry_run: bool = False,
) -> None:
    if not packages:
        return
    argv = _INSTALL.get(package_manager)
    if argv is None:
        raise StorageBoxError(f"Unsupported package manager: {package_manager}")
    run_cmd([*argv, *packages], env={"DEBIAN_FRONTEND": "noninteractive"}, dry_run=dry_run)


def ensure_mount_helper(package_manager: str | None, *, dry_run: bool = False) -> None:
    if helper_available():
        logger.info("%s available", MOUNT_HELPER)
        return
    if package_manager is None:
        if dry_run:
            logger.warning("[DRY RUN] %s missing and no supported package manager found", MOUNT_HELPER)
            return
        raise StorageBoxError("No supported package manager found (apt, dnf, yum, zypper)")

    logger.info("Installing %s via %s", ", ".join(REQUIRED_PACKAGES), package_manager)
    refresh_index(package_manager, dry_run=dry_run)
    install_packages(package_manager, dry_run=dry_run)

    if not dry_run and not helper_available():
        raise StorageBoxError(f"{MOUNT_HELPER} not found after installation")
