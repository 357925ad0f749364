from __future__ import annotations

import logging
import platform
import shutil
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

PACKAGE_MANAGERS = ("apt-get", "dnf", "yum", "zypper")


def _read_text(path: Path) -> Optional[str]:
    try:
        txt = path.read_text(encoding="utf-8", errors="ignore").strip()
        return txt or None
    except Exception:
        return None


def parse_os_release(text: str) -> Dict[str, str]:
    """KEY=value pairs from os-release, without evaluating anything."""

    out: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        out[key.strip()] = value.strip().strip('"').strip("'")
    return out


def detect_distro(root: str = "/") -> Dict[str, str]:
    base = Path(root)
    for rel in ("etc/os-release", "usr/lib/os-release"):
        txt = _read_text(base / rel)
        if txt:
            info = parse_os_release(txt)
            distro = info.get("ID", "unknown").lower()
            return {
                "id": distro,
                "version": info.get("VERSION_ID", "unknown"),
                "name": info.get("PRETTY_NAME") or f"{distro} {info.get('VERSION_ID', '')}".strip(),
            }

    debian = _read_text(base / "etc/debian_version")
    if debian:
        return {"id": "debian", "version": debian, "name": f"Debian {debian}"}
    redhat = _read_text(base / "etc/redhat-release")
    if redhat:
        return {"id": "rhel", "version": "unknown", "name": redhat}

    logger.warning("Could not reliably detect distribution")
    return {"id": "unknown", "version": "unknown", "name": "Unknown Linux Distribution"}


def detect_package_manager() -> Optional[str]:
    for pm in PACKAGE_MANAGERS:
        if shutil.which(pm):
            return "apt" if pm == "apt-get" else pm
    return None


def detect_service_manager() -> str:
    if shutil.which("systemctl"):
        return "systemd"
    if shutil.which("service"):
        return "sysvinit"
    return "unknown"


def detect_host(root: str = "/") -> Dict[str, Any]:
    host: Dict[str, Any] = {
        "arch": platform.machine(),
        "kernel": platform.release(),
        "distro": detect_distro(root),
        "package_manager": detect_package_manager(),
        "service_manager": detect_service_manager(),
    }
    logger.info(
        "Host: %s (%s), kernel=%s, packages=%s, services=%s",
        host["distro"]["name"],
        host["arch"],
        host["kernel"],
        host["package_manager"] or "-",
        host["service_manager"],
    )
    return host
