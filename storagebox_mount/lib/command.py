from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

from ..errors import CommandError

logger = logging.getLogger(__name__)

# Same status coreutils timeout(1) reports.
TIMEOUT_RETURNCODE = 124


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout+stderr, stripped."""
        parts = [p.strip() for p in (self.stdout, self.stderr) if p and p.strip()]
        return "\n".join(parts)


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    timeout: float | None = None,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - Captures stdout/stderr so callers can classify failures.
    - A timeout is reported as returncode 124, like a non-zero exit.
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    logger.info("%sCMD %s", "[DRY RUN] " if dry_run else "", fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    try:
        p = subprocess.run(
            argv_list,
            input=input_text,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            env=dict(os.environ, **(env or {})),
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        logger.warning("Timed out after %ss: %s", timeout, fmt_argv(argv_list))
        res = CmdResult(
            argv=argv_list,
            returncode=TIMEOUT_RETURNCODE,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr) or f"timed out after {timeout}s",
            timed_out=True,
        )
    except FileNotFoundError as e:
        # Missing helper binary behaves like the shell's "command not found".
        res = CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))
    else:
        res = CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)

    if res.stdout:
        logger.debug("STDOUT %s", res.stdout.strip())
    if res.stderr:
        logger.debug("STDERR %s", res.stderr.strip())

    if check and res.returncode != 0:
        raise CommandError(
            f"Command failed ({res.returncode}): {fmt_argv(argv_list)}\n{res.stderr}",
            returncode=res.returncode,
        )

    return res


def _as_text(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data
