from __future__ import annotations

import logging
from dataclasses import replace

from ..context import MountAttempt, MountContext
from ..errors import ReadOnlyWarning
from ..lib.command import fmt_argv
from ..lib.executor import execute_mount, probe_write

logger = logging.getLogger(__name__)


class MountStep:
    step_id = "60_mount"

    def run(self, ctx: MountContext) -> MountContext:
        spec = ctx.require_spec()
        argv = spec.mount_argv()
        logger.info("Mount command: %s", fmt_argv(argv))

        if ctx.dry_run:
            logger.info("[DRY RUN] Would mount %s at %s", spec.target.device, spec.mount_point)
            return ctx

        outcome = execute_mount(
            argv,
            device=spec.target.device,
            retries=ctx.config.max_retries,
            delay=ctx.config.retry_delay,
            timeout=ctx.config.mount_timeout,
            sleep=ctx.cancel.sleep,
            checkpoint=ctx.cancel.check,
            on_mounted=lambda: ctx.cleanup.track_mount(spec.mount_point),
        )
        attempts = tuple(
            MountAttempt(argv=tuple(a.argv), returncode=a.returncode, output=a.output, version=spec.options.version)
            for a in outcome.attempts
        )
        ctx = replace(ctx, mounted=True, attempts=ctx.attempts + attempts)

        outcome.writable = probe_write(spec.mount_point)
        if outcome.writable:
            logger.info("Write access: Read/Write")
        else:
            ctx = ctx.warn(ReadOnlyWarning(f"Mount is read-only: {spec.mount_point}. Check permissions."))
        return ctx
