from __future__ import annotations

import logging
from dataclasses import replace
from typing import List

from ..context import MountContext, MountSpec, PersistenceRecord, normalize_method
from ..errors import PersistenceWarning
from ..lib.command import run_cmd
from ..lib.env import PATHS
from ..lib.fstab import FstabEntry, boot_options, drop_entries, upsert_entry
from ..lib.mountpoint import is_mounted, unmount
from ..lib.systemd import (
    UnitPair,
    failure_hint,
    remove_units,
    render_automount_unit,
    render_mount_unit,
    systemctl,
    write_units,
)

logger = logging.getLogger(__name__)

DEFAULT_METHOD = "unit-based"
_MENU = {"1": "static-table", "2": "unit-based", "3": "none"}


def choose_method(ctx: MountContext) -> str:
    if ctx.options.method:
        return normalize_method(ctx.options.method) or "none"
    if not ctx.interactive:
        return DEFAULT_METHOD
    answer = ctx.prompter.choose(
        "Choose mount method",
        [
            "fstab (traditional, simple)",
            "systemd mount unit (modern, more control)",
            "Skip permanent mount",
        ],
    )
    if answer not in _MENU:
        logger.warning("Invalid choice. Skipping permanent mount.")
    return _MENU.get(answer, "none")


def _fstab_mount_argv(fstab: str, mount_point: str) -> List[str]:
    if fstab == PATHS.fstab:
        return ["mount", mount_point]
    return ["mount", "--fstab", fstab, mount_point]


def register_static_table(ctx: MountContext, spec: MountSpec) -> MountContext:
    paths = ctx.config.paths
    mp = spec.mount_point

    # Exactly one backend per mount point: retire units from an earlier run.
    stale = remove_units(UnitPair.for_mount_point(mp, paths.unit_dir), dry_run=ctx.dry_run)

    entry = FstabEntry(
        spec=spec.target.device,
        mountpoint=mp,
        fstype="cifs",
        options=boot_options(spec.options.serialize(), idle_timeout=ctx.config.idle_timeout),
        dump=0,
        passno=0,
    )
    upsert_entry(paths.fstab, entry, backup_suffix=ctx.backup_suffix, dry_run=ctx.dry_run)

    if ctx.dry_run:
        logger.info("[DRY RUN] Would remount %s from fstab to verify the entry", mp)
        return replace(ctx, persistence=PersistenceRecord(method="static-table", paths=(paths.fstab,)))

    if is_mounted(mp):
        unmount(mp)
    ctx.cleanup.release_mount(mp)

    r = run_cmd(_fstab_mount_argv(paths.fstab, mp), check=False, timeout=ctx.config.mount_timeout)
    if r.ok:
        logger.info("fstab configuration verified")
    else:
        # The line stays: fixing it by hand beats silently losing persistence.
        ctx = ctx.warn(
            PersistenceWarning(f"fstab test failed - manual intervention may be needed: {r.output}")
        )
    record = PersistenceRecord(method="static-table", paths=(paths.fstab, *stale), verified=r.ok)
    return replace(ctx, persistence=record, mounted=r.ok)


def register_unit_based(ctx: MountContext, spec: MountSpec) -> MountContext:
    paths = ctx.config.paths
    mp = spec.mount_point
    username = spec.target.username
    units = UnitPair.for_mount_point(mp, paths.unit_dir)

    drop_entries(paths.fstab, mp, backup_suffix=ctx.backup_suffix, dry_run=ctx.dry_run)

    written = write_units(
        units,
        mount_unit=render_mount_unit(
            what=spec.target.device,
            where=mp,
            options=spec.options.serialize(),
            description=f"Hetzner Storage Box mount for {username}",
        ),
        automount_unit=render_automount_unit(
            where=mp,
            description=f"Automount Hetzner Storage Box for {username}",
            idle_timeout=ctx.config.idle_timeout,
        ),
        dry_run=ctx.dry_run,
    )

    problems: List[str] = []
    for args in (("daemon-reload",), ("enable", units.mount_unit), ("enable", units.automount_unit)):
        r = systemctl(*args, dry_run=ctx.dry_run)
        if not r.ok:
            problems.append(f"systemctl {' '.join(args)} failed: {r.output}")

    # Hand the mount point over to the automount unit.
    mounted = ctx.mounted
    if ctx.dry_run:
        if mounted:
            logger.info("[DRY RUN] Would unmount %s to activate systemd automount", mp)
    elif is_mounted(mp):
        logger.info("Unmounting existing mount at %s to activate systemd automount", mp)
        u = unmount(mp)
        if u.ok:
            ctx.cleanup.release_mount(mp)
            mounted = False
        else:
            problems.append(
                f"Failed to unmount {mp}; unmount manually and run: systemctl start {units.automount_unit}"
            )

    started = systemctl("start", units.automount_unit, dry_run=ctx.dry_run)
    hint = failure_hint(started, units.automount_unit)
    if hint:
        problems.append(f"Failed to start automount: {hint}")
    else:
        logger.info("systemd mount units created and enabled")

    for p in problems:
        ctx = ctx.warn(PersistenceWarning(p))

    record = PersistenceRecord(method="unit-based", paths=tuple(written), verified=not problems)
    return replace(ctx, persistence=record, mounted=mounted)


class PersistStep:
    step_id = "70_persist"

    def run(self, ctx: MountContext) -> MountContext:
        spec = ctx.require_spec()
        method = choose_method(ctx)
        ctx = replace(ctx, method=method)
        logger.info("Persistence method: %s", method)

        if method == "static-table":
            return register_static_table(ctx, spec)
        if method == "unit-based":
            return register_unit_based(ctx, spec)

        logger.info("Skipping permanent mount configuration")
        return replace(ctx, persistence=PersistenceRecord(method="none"))
