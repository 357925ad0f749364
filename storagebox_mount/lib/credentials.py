from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Tuple

from ..errors import CredentialError
from .prompt import Prompter

logger = logging.getLogger(__name__)

CREDENTIALS_MODE = 0o600
ROOT_OWNER = (0, 0)


@dataclass(frozen=True)
class PasswordSource:
    kind: str  # prompt|literal|file
    value: Optional[str] = None

    @classmethod
    def prompt(cls) -> "PasswordSource":
        return cls(kind="prompt")

    @classmethod
    def literal(cls, value: str) -> "PasswordSource":
        return cls(kind="literal", value=value)

    @classmethod
    def file(cls, path: str) -> "PasswordSource":
        return cls(kind="file", value=path)


def backup_suffix(now: Optional[datetime] = None) -> str:
    return ".backup-" + (now or datetime.now()).strftime("%Y%m%d-%H%M%S")


def read_password_file(path: str) -> str:
    """First line of the file, verbatim apart from the line ending."""

    try:
        with open(path, "r", encoding="utf-8") as handle:
            line = handle.readline()
    except OSError as e:
        raise CredentialError(f"Cannot read password file: {path} ({e.strerror})") from e
    password = line.rstrip("\r\n")
    if not password:
        raise CredentialError(f"Password file is empty: {path}")
    return password


def prompt_password(prompter: Prompter, *, confirm: bool = True) -> str:
    # Loops until the operator gives up (Ctrl-C); the engine sets no bound.
    while True:
        password = prompter.secret("Storage Box password")
        if not password:
            logger.warning("Password cannot be empty")
            continue
        if confirm and prompter.secret("Confirm password") != password:
            logger.warning("Passwords do not match. Please try again.")
            continue
        return password


def load_password(
    source: PasswordSource,
    *,
    prompter: Optional[Prompter] = None,
    confirm: bool = True,
) -> str:
    if source.kind == "file":
        password = read_password_file(str(source.value))
        logger.info("Password loaded from file")
        return password
    if source.kind == "literal":
        if not source.value:
            raise CredentialError("Password argument is empty")
        logger.info("Using password from command line")
        return source.value
    if source.kind == "prompt":
        if prompter is None:
            raise CredentialError("No password source available in non-interactive mode")
        return prompt_password(prompter, confirm=confirm)
    raise CredentialError(f"Unknown password source: {source.kind}")


def _write_private(path: Path, contents: str, owner: Optional[Tuple[int, int]]) -> None:
    # O_EXCL + mode 0600 at creation: the file is never visible with wider permissions.
    fd = os.open(str(path), os.O_WRONLY | os.O_CREAT | os.O_EXCL, CREDENTIALS_MODE)
    try:
        os.fchmod(fd, CREDENTIALS_MODE)
        if owner is not None:
            os.fchown(fd, *owner)
        os.write(fd, contents.encode("utf-8"))
        os.fsync(fd)
    finally:
        os.close(fd)


def persist_credentials(
    contents: str,
    path: str,
    *,
    interactive: bool,
    prompter: Optional[Prompter] = None,
    track: Optional[Callable[[str], None]] = None,
    release: Optional[Callable[[str], None]] = None,
    owner: Optional[Tuple[int, int]] = ROOT_OWNER,
    dry_run: bool = False,
    suffix: Optional[str] = None,
) -> bool:
    """Write the credential file. Returns False when an existing file was kept.

    ``track``/``release`` register the temp file with the cleanup contract
    while it exists.
    """

    target = Path(path)

    if target.exists():
        if interactive:
            if prompter is None:
                raise CredentialError(f"Credentials file exists and no prompter is available: {target}")
            logger.warning("Credentials file exists: %s", target)
            if not prompter.confirm("Overwrite existing credentials?", default=False):
                logger.info("Using existing credentials")
                return False
        else:
            logger.info("Overwriting existing credentials file")

        backup = f"{target}{suffix or backup_suffix()}"
        if dry_run:
            logger.info("[DRY RUN] Would back up %s to %s", target, backup)
        else:
            shutil.copy2(target, backup)
            logger.info("Backed up to: %s", backup)

    if dry_run:
        logger.info("[DRY RUN] Would write credentials file %s (mode 0600)", target)
        return True

    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_name(target.name + ".tmp")
    if tmp.exists():
        tmp.unlink()

    if track:
        track(str(tmp))
    _write_private(tmp, contents, owner)
    os.replace(tmp, target)
    if release:
        release(str(tmp))

    logger.info("Credentials file created with secure permissions: %s", target)
    return True
