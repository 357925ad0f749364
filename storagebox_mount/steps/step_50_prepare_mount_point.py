from __future__ import annotations

import logging
from pathlib import Path

from ..context import MountContext
from ..errors import CommandError, ValidationError
from ..lib.mountpoint import is_mounted, list_entries, unmount

logger = logging.getLogger(__name__)


class PrepareMountPointStep:
    """Make sure the mount point exists and nothing would be hidden by the mount.

    Unattended runs treat an existing mount as stale and replace it, and
    proceed over a non-empty directory with a warning. Interactive runs ask,
    defaulting to No, and abort on No.
    """

    step_id = "50_prepare_mount_point"

    def run(self, ctx: MountContext) -> MountContext:
        mp = ctx.require_spec().mount_point
        path = Path(mp)

        if not path.is_dir():
            if ctx.dry_run:
                logger.info("[DRY RUN] Would create directory: %s", mp)
            else:
                path.mkdir(parents=True, exist_ok=True)
                logger.info("Created directory: %s", mp)
            return ctx

        would_unmount = False
        if is_mounted(mp):
            logger.warning("Already mounted at %s", mp)
            if ctx.interactive and not ctx.prompter.confirm("Unmount existing mount?", default=False):
                raise ValidationError(f"Aborted: {mp} is already mounted")
            if ctx.dry_run:
                logger.info("[DRY RUN] Would unmount existing mount at %s", mp)
                would_unmount = True
            else:
                r = unmount(mp)
                if not r.ok:
                    raise CommandError(f"Failed to unmount {mp}: {r.output}", returncode=r.returncode)
                logger.info("Unmounted stale mount at %s", mp)

        # Contents seen through a mount we are about to remove are not ours to judge.
        if would_unmount:
            return ctx

        entries = list_entries(mp)
        if entries:
            logger.warning("Directory not empty: %s (%s%s)", mp, ", ".join(entries), ", ..." if len(entries) >= 5 else "")
            if ctx.interactive:
                if not ctx.prompter.confirm("Continue anyway?", default=False):
                    raise ValidationError("Aborted: non-empty mount point")
            else:
                logger.warning("Existing files in %s will be hidden while the share is mounted", mp)
        return ctx
