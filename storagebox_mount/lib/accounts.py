from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..errors import ValidationError
from .env import DOMAIN_SUFFIX, MAIN_ACCOUNT_SHARE
from .profiles import Profile

_MAIN_RE = re.compile(r"^u[0-9]+$")
_SUB_RE = re.compile(r"^u[0-9]+-sub[0-9]+$")


def account_type(username: str) -> Optional[str]:
    """Return "main", "sub" or None for an unrecognised username."""

    if _MAIN_RE.match(username):
        return "main"
    if _SUB_RE.match(username):
        return "sub"
    return None


def validate_username(username: str) -> str:
    kind = account_type(username)
    if kind is None:
        raise ValidationError(
            f"Invalid username format: {username!r}. Expected: u123456 or u123456-sub1"
        )
    return kind


@dataclass(frozen=True)
class StorageTarget:
    username: str
    kind: str  # main|sub
    host: str
    share: str

    @property
    def device(self) -> str:
        return f"//{self.host}/{self.share}" if self.share else f"//{self.host}"


def derive_target(username: str, *, domain_suffix: str = DOMAIN_SUFFIX) -> StorageTarget:
    kind = validate_username(username)
    # Sub-accounts only see their own folder; main accounts use the fixed share.
    share = username if kind == "sub" else MAIN_ACCOUNT_SHARE
    return StorageTarget(username=username, kind=kind, host=f"{username}.{domain_suffix}", share=share)


def default_mount_for(profile: Profile, target: StorageTarget) -> str:
    """Default mount point; an unnamed profile on a sub-account gets ``-subN``."""

    if profile.is_named or target.kind != "sub":
        return profile.default_mount_point
    return f"{profile.default_mount_point}-{target.username.rsplit('-', 1)[-1]}"
