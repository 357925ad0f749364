from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    credentials_file: str = "/etc/cifs-credentials.txt"
    mount_base: str = "/mnt/hetzner-storage"
    fstab: str = "/etc/fstab"
    unit_dir: str = "/etc/systemd/system"
    log_dir: str = "/var/log/hetzner-mount"


PATHS = Paths()

DOMAIN_SUFFIX = "your-storagebox.de"
CIFS_DOMAIN = "WORKGROUP"
MAIN_ACCOUNT_SHARE = "backup"
SMB_VERSIONS = ("3.1.1", "3.0", "2.1", "2.0", "1.0")
