from __future__ import annotations

import logging
import shutil

from ..context import MountContext

logger = logging.getLogger(__name__)


def _human(n: float) -> str:
    for unit in ("B", "K", "M", "G", "T"):
        if n < 1024 or unit == "T":
            return f"{n:.1f}{unit}"
        n /= 1024
    return f"{n:.1f}T"


class SummaryStep:
    step_id = "90_summary"

    def run(self, ctx: MountContext) -> MountContext:
        spec = ctx.require_spec()
        profile = ctx.require_profile()
        prefix = "[DRY RUN] " if ctx.dry_run else ""

        logger.info("%sStorage Box %s -> %s", prefix, spec.target.device, spec.mount_point)
        logger.info("  Credentials: %s", profile.credentials_path)
        logger.info("  SMB version: %s", spec.options.version or "-")
        logger.info("  Persistence: %s", ctx.method or "none")

        if ctx.mounted:
            try:
                usage = shutil.disk_usage(spec.mount_point)
                logger.info(
                    "  Space: total %s, used %s, free %s",
                    _human(usage.total),
                    _human(usage.used),
                    _human(usage.free),
                )
            except OSError as e:
                logger.debug("disk usage unavailable for %s: %s", spec.mount_point, e)

        for w in ctx.warnings:
            logger.warning("  %s: %s", type(w).__name__, w)
        return ctx
