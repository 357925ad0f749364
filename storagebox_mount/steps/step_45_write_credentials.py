from __future__ import annotations

import logging

from ..context import MountContext
from ..lib.credentials import persist_credentials

logger = logging.getLogger(__name__)


class WriteCredentialsStep:
    step_id = "45_write_credentials"

    def run(self, ctx: MountContext) -> MountContext:
        persist_credentials(
            ctx.require_credentials().render(),
            ctx.require_profile().credentials_path,
            interactive=ctx.interactive,
            prompter=ctx.prompter,
            track=ctx.cleanup.track_file,
            release=ctx.cleanup.release_file,
            dry_run=ctx.dry_run,
            suffix=ctx.backup_suffix,
        )
        return ctx
