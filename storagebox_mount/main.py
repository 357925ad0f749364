from __future__ import annotations

import argparse
import logging
import signal
from typing import Any, Dict, List, Optional, Sequence

from . import __version__
from .config import load_mount_config
from .context import METHOD_ALIASES, CancelToken, Cleanup, MountContext, RunOptions
from .errors import Cancelled, StorageBoxError
from .logging_utils import configure_logging
from .pipeline import Step, run_pipeline
from .lib.prompt import Prompter
from .steps import (
    ConnectivityStep,
    LoadCredentialsStep,
    MountOptionsStep,
    MountStep,
    NegotiateStep,
    PersistStep,
    PreflightStep,
    PrepareMountPointStep,
    ResolveProfileStep,
    SummaryStep,
    WriteCredentialsStep,
)

logger = logging.getLogger(__name__)

EXIT_CANCELLED = 130


def build_steps() -> List[Step]:
    return [
        PreflightStep(),
        ResolveProfileStep(),
        LoadCredentialsStep(),
        ConnectivityStep(),
        MountOptionsStep(),
        WriteCredentialsStep(),
        PrepareMountPointStep(),
        NegotiateStep(),
        MountStep(),
        PersistStep(),
        SummaryStep(),
    ]


def _install_signal_handlers(cancel: CancelToken, *, interactive: bool) -> Dict[int, Any]:
    """Route termination signals to the cancel token.

    Interactive runs keep the default SIGINT so Ctrl-C can leave a prompt;
    the resulting KeyboardInterrupt goes through the same cleanup.
    """

    def handler(signum: int, _frame: Any) -> None:
        name = signal.Signals(signum).name
        logger.warning("Received signal: %s; cleaning up and exiting...", name)
        cancel.cancel(name)

    previous: Dict[int, Any] = {}
    signums = [signal.SIGTERM] if interactive else [signal.SIGTERM, signal.SIGINT]
    for signum in signums:
        previous[signum] = signal.signal(signum, handler)
    return previous


def run(
    options: RunOptions,
    *,
    config_path: Optional[str] = None,
    prompter: Optional[Prompter] = None,
    cancel: Optional[CancelToken] = None,
    steps: Optional[Sequence[Step]] = None,
) -> MountContext:
    """Run the mount pipeline and return the final context."""

    ctx = MountContext(
        options=options,
        config=load_mount_config(config_path),
        prompter=prompter or Prompter(),
        cancel=cancel or CancelToken(),
        cleanup=Cleanup(),
    )
    if options.dry_run:
        logger.info("[DRY RUN] No files, mounts or units will be changed")

    result = run_pipeline(ctx=ctx, steps=list(steps) if steps is not None else build_steps())
    logger.info("Completed steps: %s", ", ".join(result.ran_steps))
    return result.ctx


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="storagebox-mount",
        description="Automatically mount a Hetzner Storage Box on Linux systems.",
    )
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-n", "--non-interactive", action="store_true", help="Run in non-interactive mode")
    p.add_argument("-u", "--username", help="Storage Box username (e.g., u123456 or u123456-sub1)")
    p.add_argument("-p", "--password", help="Storage Box password (NOT recommended)")
    p.add_argument("-f", "--password-file", help="Read password from the first line of FILE")
    p.add_argument("-m", "--mount-point", help="Custom mount point")
    p.add_argument("--uid", type=int, help="User ID for mounted files")
    p.add_argument("--gid", type=int, help="Group ID for mounted files")
    p.add_argument("--no-tuning", action="store_true", help="Disable performance tuning")
    p.add_argument(
        "--mount-method",
        choices=sorted(METHOD_ALIASES),
        help="Persistence: fstab (static-table), systemd (unit-based) or none",
    )
    p.add_argument("--profile", default="", help="Profile name for multiple Storage Boxes")
    p.add_argument("--skip-confirmation", action="store_true", help="Skip confirmation prompts")
    p.add_argument("--dry-run", action="store_true", help="Show what would be done without making changes")
    p.add_argument("--verbose", action="store_true", help="Enable verbose output")
    p.add_argument("--config", default=None, help="Optional YAML config file")
    p.add_argument("--log", default=None, help="Log file path (default: /var/log/hetzner-mount/mount-<ts>.log)")
    return p


def options_from_args(args: argparse.Namespace) -> RunOptions:
    return RunOptions(
        # dry-run never prompts
        interactive=not (args.non_interactive or args.dry_run),
        username=args.username,
        password=args.password,
        password_file=args.password_file,
        mount_point=args.mount_point,
        uid=args.uid,
        gid=args.gid,
        tuning=not args.no_tuning,
        method=args.mount_method,
        profile=args.profile,
        skip_confirmation=args.skip_confirmation,
        dry_run=args.dry_run,
        verbose=args.verbose,
    )


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    options = options_from_args(args)

    configure_logging(log_path=args.log, level=logging.DEBUG if options.verbose else logging.INFO)
    if options.password:
        logger.warning("Using password on command line is insecure!")

    cancel = CancelToken()
    previous = _install_signal_handlers(cancel, interactive=options.interactive)
    try:
        run(options, config_path=args.config, cancel=cancel)
    except Cancelled as e:
        logger.error("%s", e)
        return EXIT_CANCELLED
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return EXIT_CANCELLED
    except StorageBoxError as e:
        logger.error("ERROR: %s", e)
        return e.exit_code
    except Exception:
        logger.exception("storagebox-mount failed")
        return 1
    finally:
        for signum, h in previous.items():
            signal.signal(signum, h)

    logger.info("Installation completed successfully!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
