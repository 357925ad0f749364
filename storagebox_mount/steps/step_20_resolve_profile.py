from __future__ import annotations

import logging
from dataclasses import replace

from ..context import MountContext
from ..lib.profiles import resolve_profile

logger = logging.getLogger(__name__)


class ResolveProfileStep:
    step_id = "20_resolve_profile"

    def run(self, ctx: MountContext) -> MountContext:
        profile = resolve_profile(ctx.options.profile, ctx.config.paths)
        logger.info(
            "Profile %s: credentials=%s default_mount=%s",
            profile.name or "(default)",
            profile.credentials_path,
            profile.default_mount_point,
        )
        return replace(ctx, profile=profile)
