"""SMB dialect negotiation.

Tries each candidate version, most capable first, with a throwaway mount
that is undone immediately. The first version the Storage Box accepts is
committed; there is no "best of" comparison beyond list order.

States: Idle -> Trying(v_i) -> Committed(v) | Exhausted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..errors import CommandError, NegotiationError
from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

IDLE = "idle"
TRYING = "trying"
COMMITTED = "committed"
EXHAUSTED = "exhausted"


@dataclass
class Trial:
    version: str
    argv: List[str]
    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class Negotiation:
    candidates: List[str]
    state: str = IDLE
    current: Optional[str] = None
    trials: List[Trial] = field(default_factory=list)

    @property
    def committed(self) -> Optional[str]:
        return self.current if self.state == COMMITTED else None

    @property
    def last_output(self) -> str:
        return self.trials[-1].output if self.trials else ""


def negotiate_version(
    candidates: Sequence[str],
    build_argv: Callable[[str], List[str]],
    mount_point: str,
    *,
    timeout: float = 10,
    checkpoint: Optional[Callable[[], None]] = None,
    on_mounted: Optional[Callable[[], None]] = None,
    on_unmounted: Optional[Callable[[], None]] = None,
    dry_run: bool = False,
) -> Negotiation:
    """Probe ``candidates`` in order and commit to the first that mounts.

    ``build_argv(version)`` must produce the exact invocation the real mount
    will use with that version; ``checkpoint`` is called before every trial
    (cancellation). Raises NegotiationError when every candidate fails.
    """

    neg = Negotiation(candidates=list(candidates))
    if not neg.candidates:
        neg.state = EXHAUSTED
        raise NegotiationError("No SMB versions to try")

    if dry_run:
        for v in neg.candidates:
            logger.info("[DRY RUN] Would probe SMB %s: %s", v, " ".join(build_argv(v)))
        neg.state = COMMITTED
        neg.current = neg.candidates[0]
        logger.info("[DRY RUN] Assuming SMB %s for the remaining steps", neg.current)
        return neg

    for version in neg.candidates:
        if checkpoint:
            checkpoint()
        neg.state = TRYING
        neg.current = version
        argv = build_argv(version)
        logger.info("Testing SMB %s...", version)

        r: CmdResult = run_cmd(argv, check=False, timeout=timeout)
        if r.ok and on_mounted:
            on_mounted()
        # Always undo the probe, whatever its outcome.
        u = run_cmd(["umount", mount_point], check=False)
        if r.ok and not u.ok:
            # The real mount must not stack on a leftover probe; cleanup still tracks it.
            raise CommandError(
                f"Failed to unmount SMB {version} probe at {mount_point}: {u.output}",
                returncode=u.returncode,
            )
        if r.ok and on_unmounted:
            on_unmounted()

        neg.trials.append(Trial(version=version, argv=argv, returncode=r.returncode, output=r.output))
        if r.ok:
            neg.state = COMMITTED
            logger.info("SMB %s works; selected", version)
            return neg

        logger.info("SMB %s not supported (rc=%s)", version, r.returncode)
        logger.debug("Mount error for SMB %s: %s", version, r.output)

    neg.state = EXHAUSTED
    neg.current = None
    raise NegotiationError(
        f"No compatible SMB version found. Last error: {neg.last_output}",
        last_output=neg.last_output,
    )
