"""Values threaded through the mount pipeline.

Every stage receives a ``MountContext`` and returns a new one built with
``dataclasses.replace``; nothing is shared through module globals.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field, replace
from typing import List, Optional, Set, Tuple

from .config import MountConfig
from .errors import Cancelled, StorageBoxWarning
from .lib.accounts import StorageTarget
from .lib.command import run_cmd
from .lib.credentials import backup_suffix
from .lib.env import CIFS_DOMAIN
from .lib.options import MountOptions
from .lib.profiles import Profile
from .lib.prompt import Prompter

logger = logging.getLogger(__name__)

METHOD_ALIASES = {
    "fstab": "static-table",
    "static-table": "static-table",
    "systemd": "unit-based",
    "unit-based": "unit-based",
    "none": "none",
}


def normalize_method(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        return METHOD_ALIASES[value.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown mount method: {value}") from None


@dataclass(frozen=True)
class RunOptions:
    """What the operator asked for (CLI flags)."""

    interactive: bool = True
    username: Optional[str] = None
    password: Optional[str] = None
    password_file: Optional[str] = None
    mount_point: Optional[str] = None
    uid: Optional[int] = None
    gid: Optional[int] = None
    tuning: bool = True
    method: Optional[str] = None
    profile: Optional[str] = None
    skip_confirmation: bool = False
    dry_run: bool = False
    verbose: bool = False


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)
    domain: str = CIFS_DOMAIN

    def render(self) -> str:
        # mount.cifs reads values literally; no quoting or escaping.
        return f"username={self.username}\npassword={self.password}\ndomain={self.domain}\n"


@dataclass(frozen=True)
class MountSpec:
    target: StorageTarget
    mount_point: str
    uid: int
    gid: int
    options: MountOptions

    def with_version(self, version: str) -> "MountSpec":
        return replace(self, options=self.options.with_version(version))

    def mount_argv(self) -> List[str]:
        return ["mount.cifs", self.target.device, self.mount_point, "-o", self.options.serialize()]


@dataclass(frozen=True)
class MountAttempt:
    argv: Tuple[str, ...]
    returncode: int
    output: str
    version: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class PersistenceRecord:
    method: str
    paths: Tuple[str, ...] = ()
    verified: bool = False


class CancelToken:
    """Set from a signal handler; checked by the pipeline at checkpoints."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.signal_name: Optional[str] = None

    def cancel(self, signal_name: str = "cancel") -> None:
        self.signal_name = signal_name
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def check(self) -> None:
        if self._event.is_set():
            raise Cancelled(f"Cancelled ({self.signal_name})")

    def sleep(self, seconds: float) -> None:
        """Interruptible sleep; raises Cancelled when woken by cancel()."""
        if self._event.wait(timeout=seconds):
            self.check()


class Cleanup:
    """Undo transient side effects after a fatal error or cancellation.

    Tracks credential temp files and mounts established by this run that have
    not been committed yet. Mounts that pre-date the run are never tracked.
    """

    def __init__(self) -> None:
        self.files: Set[str] = set()
        self.mounts: Set[str] = set()

    def track_file(self, path: str) -> None:
        self.files.add(path)

    def release_file(self, path: str) -> None:
        self.files.discard(path)

    def track_mount(self, mount_point: str) -> None:
        self.mounts.add(mount_point)

    def release_mount(self, mount_point: str) -> None:
        self.mounts.discard(mount_point)

    def commit(self) -> None:
        self.mounts.clear()

    def run(self) -> None:
        for path in sorted(self.files):
            try:
                os.unlink(path)
                logger.info("Removed transient file %s", path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("Could not remove %s: %s", path, e)
        self.files.clear()

        for mp in sorted(self.mounts):
            if os.path.ismount(mp):
                r = run_cmd(["umount", mp], check=False)
                if r.ok:
                    logger.info("Unmounted %s", mp)
                else:
                    logger.warning("Failed to unmount %s: %s", mp, r.output)
        self.mounts.clear()


@dataclass(frozen=True)
class MountContext:
    options: RunOptions
    config: MountConfig
    prompter: Prompter
    cancel: CancelToken
    cleanup: Cleanup
    profile: Optional[Profile] = None
    credentials: Optional[Credentials] = None
    target: Optional[StorageTarget] = None
    spec: Optional[MountSpec] = None
    method: Optional[str] = None
    attempts: Tuple[MountAttempt, ...] = ()
    mounted: bool = False
    persistence: Optional[PersistenceRecord] = None
    warnings: Tuple[StorageBoxWarning, ...] = ()
    backup_suffix: str = field(default_factory=backup_suffix)

    @property
    def dry_run(self) -> bool:
        return self.options.dry_run

    @property
    def interactive(self) -> bool:
        return self.options.interactive and not self.options.dry_run

    def warn(self, warning: StorageBoxWarning) -> "MountContext":
        logger.warning("%s", warning)
        return replace(self, warnings=self.warnings + (warning,))

    def require_spec(self) -> MountSpec:
        if self.spec is None:
            raise RuntimeError("Mount spec missing; run the options step first")
        return self.spec

    def require_profile(self) -> Profile:
        if self.profile is None:
            raise RuntimeError("Profile missing; run the profile step first")
        return self.profile

    def require_target(self) -> StorageTarget:
        if self.target is None:
            raise RuntimeError("Storage target missing; run the credentials step first")
        return self.target

    def require_credentials(self) -> Credentials:
        if self.credentials is None:
            raise RuntimeError("Credentials missing; run the credentials step first")
        return self.credentials
