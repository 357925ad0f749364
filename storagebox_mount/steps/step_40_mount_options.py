from __future__ import annotations

import logging
import os
from dataclasses import replace
from typing import Optional

from ..context import MountContext, MountSpec
from ..errors import ValidationError
from ..lib.accounts import default_mount_for
from ..lib.mountpoint import validate_mount_point
from ..lib.options import base_options

logger = logging.getLogger(__name__)


def _id_value(ctx: MountContext, given: Optional[int], label: str, default: int) -> int:
    if given is not None:
        logger.info("Using %s from command line: %s", label, given)
        return int(given)
    if not ctx.interactive:
        return default
    answer = ctx.prompter.ask(f"{label} for mounted files", str(default))
    try:
        return int(answer)
    except ValueError:
        raise ValidationError(f"{label} must be numeric: {answer!r}") from None


class MountOptionsStep:
    step_id = "40_mount_options"

    def run(self, ctx: MountContext) -> MountContext:
        profile = ctx.require_profile()
        target = ctx.require_target()
        default_mount = default_mount_for(profile, target)

        mount_point = ctx.options.mount_point
        if mount_point:
            logger.info("Using mount point from command line: %s", mount_point)
        elif ctx.interactive:
            mount_point = ctx.prompter.ask("Mount point path", default_mount)
        else:
            mount_point = default_mount
            logger.info("Using default mount point: %s", mount_point)
        mount_point = validate_mount_point(mount_point)

        uid = _id_value(ctx, ctx.options.uid, "User ID", os.getuid())
        gid = _id_value(ctx, ctx.options.gid, "Group ID", os.getgid())

        tuning = ctx.options.tuning
        if ctx.interactive and tuning:
            tuning = ctx.prompter.confirm("Enable performance tuning?", default=True)

        options = base_options(
            credentials_path=profile.credentials_path,
            uid=uid,
            gid=gid,
            tuning=tuning,
        )
        spec = MountSpec(target=target, mount_point=mount_point, uid=uid, gid=gid, options=options)
        logger.info("Mount point: %s (uid=%s gid=%s, tuning=%s)", mount_point, uid, gid, tuning)
        logger.debug("Base options: %s", options)
        return replace(ctx, spec=spec)
