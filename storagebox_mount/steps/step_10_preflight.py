from __future__ import annotations

import logging
import os

from ..context import MountContext
from ..errors import StorageBoxError
from ..lib.hostinfo import detect_host
from ..lib.pkg import ensure_mount_helper

logger = logging.getLogger(__name__)


class PreflightStep:
    step_id = "10_preflight"

    def run(self, ctx: MountContext) -> MountContext:
        if os.geteuid() != 0:
            if not ctx.dry_run:
                raise StorageBoxError("This tool must be run as root (try: sudo storagebox-mount)")
            logger.info("[DRY RUN] Not running as root; continuing because nothing is changed")

        host = detect_host()
        if host["service_manager"] != "systemd":
            logger.warning("systemd not detected; unit-based persistence will not work")

        ensure_mount_helper(host["package_manager"], dry_run=ctx.dry_run)
        return ctx
