from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .lib.env import DOMAIN_SUFFIX, PATHS, SMB_VERSIONS, Paths
from .lib.executor import MAX_RETRIES


@dataclass(frozen=True)
class MountConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    def _section(self, name: str) -> Dict[str, Any]:
        return dict(self.raw.get(name) or {})

    @property
    def paths(self) -> Paths:
        p = self._section("paths")
        return Paths(
            credentials_file=str(p.get("credentials_file") or PATHS.credentials_file),
            mount_base=str(p.get("mount_base") or PATHS.mount_base),
            fstab=str(p.get("fstab") or PATHS.fstab),
            unit_dir=str(p.get("unit_dir") or PATHS.unit_dir),
            log_dir=str(p.get("log_dir") or PATHS.log_dir),
        )

    @property
    def domain_suffix(self) -> str:
        return str(self.raw.get("domain_suffix") or DOMAIN_SUFFIX)

    @property
    def smb_versions(self) -> List[str]:
        versions = self._section("negotiation").get("versions") or list(SMB_VERSIONS)
        return [str(v) for v in versions]

    @property
    def probe_timeout(self) -> float:
        return float(self._section("negotiation").get("timeout") or 10)

    @property
    def max_retries(self) -> int:
        """Configured attempts, capped at MAX_RETRIES; values below 1 are rejected."""
        retries = self._section("mount").get("retries")
        if retries is None:
            return MAX_RETRIES
        retries = int(retries)
        if retries < 1:
            raise ValueError(f"mount.retries must be at least 1, got {retries}")
        return min(retries, MAX_RETRIES)

    @property
    def retry_delay(self) -> float:
        delay = self._section("mount").get("retry_delay")
        return float(5 if delay is None else delay)

    @property
    def mount_timeout(self) -> float:
        return float(self._section("mount").get("timeout") or 30)

    @property
    def idle_timeout(self) -> int:
        return int(self._section("persistence").get("idle_timeout") or 60)


def load_mount_config(path: Optional[str]) -> MountConfig:
    """Load the optional YAML config; no path means built-in defaults."""

    if not path:
        return MountConfig()

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("mount config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the mount config") from e

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError("mount config must contain a mapping/object")

    return MountConfig(raw=raw)
