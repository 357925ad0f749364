from __future__ import annotations

import logging
from dataclasses import replace

from ..context import MountAttempt, MountContext
from ..errors import NegotiationError
from ..lib.negotiate import negotiate_version

logger = logging.getLogger(__name__)


class NegotiateStep:
    step_id = "55_negotiate"

    def run(self, ctx: MountContext) -> MountContext:
        spec = ctx.require_spec()
        mp = spec.mount_point

        neg = negotiate_version(
            ctx.config.smb_versions,
            lambda v: spec.with_version(v).mount_argv(),
            mp,
            timeout=ctx.config.probe_timeout,
            checkpoint=ctx.cancel.check,
            on_mounted=lambda: ctx.cleanup.track_mount(mp),
            on_unmounted=lambda: ctx.cleanup.release_mount(mp),
            dry_run=ctx.dry_run,
        )

        attempts = tuple(
            MountAttempt(argv=tuple(t.argv), returncode=t.returncode, output=t.output, version=t.version)
            for t in neg.trials
        )
        version = neg.committed
        if version is None:
            raise NegotiationError("Negotiation finished without a committed SMB version", last_output=neg.last_output)
        logger.info("Selected SMB version: %s", version)
        return replace(ctx, spec=spec.with_version(version), attempts=ctx.attempts + attempts)
