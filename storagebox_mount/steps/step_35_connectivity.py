from __future__ import annotations

import logging

from ..context import MountContext
from ..errors import ValidationError
from ..lib.net import SMB_PORT, port_open, resolve_host

logger = logging.getLogger(__name__)


class ConnectivityStep:
    step_id = "35_connectivity"

    def run(self, ctx: MountContext) -> MountContext:
        host = ctx.require_target().host

        if ctx.dry_run:
            logger.info("[DRY RUN] Would resolve %s and test port %d", host, SMB_PORT)
            return ctx

        addresses = resolve_host(host)
        if not addresses:
            raise ValidationError(f"Cannot resolve {host}. Please check the hostname or your DNS settings.")
        logger.info("Resolved %s to %s", host, ", ".join(addresses))

        # Advisory: some networks filter the probe but still allow the mount.
        if port_open(host, SMB_PORT):
            logger.info("Port %d reachable on %s", SMB_PORT, host)
        else:
            logger.warning("Cannot connect to %s:%d. Check firewall/network.", host, SMB_PORT)
        return ctx
