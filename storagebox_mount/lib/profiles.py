from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from ..errors import ValidationError
from .env import PATHS, Paths

_PROFILE_RE = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class Profile:
    name: str
    credentials_path: str
    default_mount_point: str

    @property
    def suffix(self) -> str:
        return f"-{self.name}" if self.name else ""

    @property
    def is_named(self) -> bool:
        return bool(self.name)


def validate_profile_name(name: str) -> str:
    if name and not _PROFILE_RE.match(name):
        raise ValidationError(
            f"Invalid profile name: {name!r} (allowed: letters, digits, '-', '_')"
        )
    return name


def resolve_profile(name: str | None = None, paths: Paths = PATHS) -> Profile:
    """Map a profile name to its credential file and default mount point.

    The unnamed profile keeps the historic single-profile paths; a named
    profile appends ``-{name}`` before the credential file extension and to
    the mount base.
    """

    name = validate_profile_name((name or "").strip())
    cred = PurePosixPath(paths.credentials_file)
    if not name:
        return Profile(name="", credentials_path=str(cred), default_mount_point=paths.mount_base)

    cred_named = cred.with_name(f"{cred.stem}-{name}{cred.suffix}")
    return Profile(
        name=name,
        credentials_path=str(cred_named),
        default_mount_point=f"{paths.mount_base}-{name}",
    )
