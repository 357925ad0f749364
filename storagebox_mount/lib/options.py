from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .env import CIFS_DOMAIN

Option = Tuple[str, Optional[str]]

TUNED = (("rsize", "130048"), ("wsize", "130048"), ("cache", "loose"))
UNTUNED = (("cache", "strict"),)


@dataclass(frozen=True)
class MountOptions:
    """Ordered mount.cifs options; serialises as ``k=v,flag,...``."""

    items: Tuple[Option, ...] = ()

    def add(self, key: str, value: object = None) -> "MountOptions":
        if "," in key or (value is not None and "," in str(value)):
            raise ValueError(f"Mount option may not contain ',': {key}={value}")
        return MountOptions(items=self.items + ((key, None if value is None else str(value)),))

    def extend(self, options: Tuple[Option, ...]) -> "MountOptions":
        out = self
        for key, value in options:
            out = out.add(key, value)
        return out

    def get(self, key: str) -> Optional[str]:
        for k, v in self.items:
            if k == key:
                return v
        return None

    def has(self, key: str) -> bool:
        return any(k == key for k, _ in self.items)

    @property
    def version(self) -> Optional[str]:
        return self.get("vers")

    def with_version(self, version: str) -> "MountOptions":
        """Prefix ``vers=``; a version is only ever injected once."""

        if self.has("vers"):
            raise ValueError(f"Protocol version already set: vers={self.version}")
        return MountOptions(items=(("vers", version),) + self.items)

    def serialize(self, *extra: str) -> str:
        parts = [k if v is None else f"{k}={v}" for k, v in self.items]
        parts.extend(extra)
        return ",".join(parts)

    def __str__(self) -> str:
        return self.serialize()


def base_options(
    *,
    credentials_path: str,
    uid: int,
    gid: int,
    tuning: bool = True,
    domain: str = CIFS_DOMAIN,
) -> MountOptions:
    opts = (
        MountOptions()
        .add("iocharset", "utf8")
        .add("rw")
        # seal (SMB3 encryption) is required by the Storage Box
        .add("seal")
        .add("credentials", credentials_path)
        .add("uid", int(uid))
        .add("gid", int(gid))
        .add("file_mode", "0660")
        .add("dir_mode", "0770")
        .add("noperm")
        .add("domain", domain)
    )
    return opts.extend(TUNED if tuning else UNTUNED)
