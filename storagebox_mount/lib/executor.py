from __future__ import annotations

import logging
import os
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..errors import MountError
from .command import run_cmd

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_DELAY = 5

# (substring, diagnostic). Advisory only: retries never depend on this.
_KNOWN_FAILURES = [
    (
        "permission denied",
        "Permission denied. Likely causes: wrong username or password in the credentials "
        "file; sub-user disabled or wrong sub-user; share path not permitted for this sub-user",
    ),
    ("no such file", "Share path not found. Verify {device}"),
    ("invalid argument", "Invalid argument. Check SMB version and mount options"),
]


def classify_failure(output: str, *, device: str = "") -> Optional[str]:
    text = (output or "").lower()
    for needle, message in _KNOWN_FAILURES:
        if needle in text:
            return message.format(device=device)
    return None


@dataclass
class Attempt:
    number: int
    argv: List[str]
    returncode: int
    output: str
    diagnostic: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class MountOutcome:
    attempts: List[Attempt] = field(default_factory=list)
    writable: Optional[bool] = None

    @property
    def mounted(self) -> bool:
        return bool(self.attempts) and self.attempts[-1].ok


def probe_write(mount_point: str) -> bool:
    """Create and delete a uniquely named marker file."""

    marker = os.path.join(mount_point, f".storagebox-write-test-{uuid.uuid4().hex}.tmp")
    try:
        with open(marker, "w", encoding="utf-8") as handle:
            handle.write("test\n")
        os.unlink(marker)
        return True
    except OSError as e:
        logger.debug("Write probe failed in %s: %s", mount_point, e)
        return False


def execute_mount(
    argv: Sequence[str],
    *,
    device: str = "",
    retries: int = MAX_RETRIES,
    delay: float = RETRY_DELAY,
    timeout: float = 30,
    sleep: Callable[[float], None] = time.sleep,
    checkpoint: Optional[Callable[[], None]] = None,
    on_mounted: Optional[Callable[[], None]] = None,
) -> MountOutcome:
    """Run the real mount with bounded, sequential retries.

    Raises MountError carrying the last output and return code once
    ``retries`` attempts have failed.
    """

    if retries < 1:
        raise ValueError(f"retries must be at least 1, got {retries}")

    outcome = MountOutcome()
    argv_list = list(argv)

    for number in range(1, retries + 1):
        if checkpoint:
            checkpoint()
        logger.info("Attempt %d/%d...", number, retries)
        r = run_cmd(argv_list, check=False, timeout=timeout)
        attempt = Attempt(number=number, argv=argv_list, returncode=r.returncode, output=r.output)
        outcome.attempts.append(attempt)

        if r.ok:
            if on_mounted:
                on_mounted()
            logger.info("Storage Box mounted successfully")
            return outcome

        logger.error("mount.cifs error: %s", r.output or f"exit status {r.returncode}")
        attempt.diagnostic = classify_failure(r.output, device=device)
        if attempt.diagnostic:
            logger.warning("Mount failed: %s", attempt.diagnostic)

        if number < retries:
            sleep(delay)

    last = outcome.attempts[-1]
    raise MountError(
        f"Failed to mount after {retries} attempts. Last error: {last.output}",
        last_output=last.output,
        returncode=last.returncode,
        diagnostics=[a.diagnostic for a in outcome.attempts if a.diagnostic],
    )
