from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence

import pytest

from storagebox_mount.config import MountConfig
from storagebox_mount.context import CancelToken, Cleanup, MountContext, RunOptions
from storagebox_mount.lib.command import CmdResult

# Every module that imported run_cmd by name.
RUN_CMD_TARGETS = [
    "storagebox_mount.context.run_cmd",
    "storagebox_mount.lib.executor.run_cmd",
    "storagebox_mount.lib.mountpoint.run_cmd",
    "storagebox_mount.lib.negotiate.run_cmd",
    "storagebox_mount.lib.pkg.run_cmd",
    "storagebox_mount.lib.systemd.run_cmd",
    "storagebox_mount.steps.step_70_persist.run_cmd",
]


class FakeRunner:
    """Records commands; ``responder(argv)`` returns (returncode, output)."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.kwargs: List[Dict[str, object]] = []
        self.responder: Callable[[List[str]], tuple] = lambda argv: (0, "")

    def __call__(self, argv: Sequence[str], **kwargs: object) -> CmdResult:
        argv = list(argv)
        self.calls.append(argv)
        self.kwargs.append(kwargs)
        if kwargs.get("dry_run"):
            return CmdResult(argv=argv, returncode=0, stdout="", stderr="")
        rc, out = self.responder(argv)
        return CmdResult(argv=argv, returncode=rc, stdout="", stderr=out)

    def commands(self, program: str) -> List[List[str]]:
        return [c for c in self.calls if c and c[0] == program]


class ScriptedPrompter:
    """Answers questions from queues; fails loudly on unexpected prompts."""

    def __init__(
        self,
        *,
        answers: Optional[List[str]] = None,
        secrets: Optional[List[str]] = None,
        confirms: Optional[List[bool]] = None,
    ) -> None:
        self.answers = list(answers or [])
        self.secrets = list(secrets or [])
        self.confirms = list(confirms or [])
        self.asked: List[str] = []

    def ask(self, question: str, default: Optional[str] = None) -> str:
        self.asked.append(question)
        answer = self.answers.pop(0)
        return answer if answer or default is None else default

    def secret(self, question: str) -> str:
        self.asked.append(question)
        return self.secrets.pop(0)

    def confirm(self, question: str, *, default: bool) -> bool:
        self.asked.append(question)
        return self.confirms.pop(0)

    def choose(self, question: str, choices: List[str]) -> str:
        self.asked.append(question)
        return self.answers.pop(0)


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> FakeRunner:
    fake = FakeRunner()
    for target in RUN_CMD_TARGETS:
        monkeypatch.setattr(target, fake)
    return fake


@pytest.fixture
def mounted(monkeypatch: pytest.MonkeyPatch) -> set:
    """Set of paths os.path.ismount reports as mounted."""

    state: set = set()
    monkeypatch.setattr("os.path.ismount", lambda p: str(p) in state)
    return state


@pytest.fixture
def config(tmp_path) -> MountConfig:
    return MountConfig(
        raw={
            "paths": {
                "credentials_file": str(tmp_path / "etc" / "cifs-credentials.txt"),
                "mount_base": str(tmp_path / "mnt" / "hetzner-storage"),
                "fstab": str(tmp_path / "etc" / "fstab"),
                "unit_dir": str(tmp_path / "systemd"),
                "log_dir": str(tmp_path / "log"),
            },
            "mount": {"retry_delay": 0},
        }
    )


@pytest.fixture
def make_ctx(config: MountConfig):
    def _make(prompter=None, **options: object) -> MountContext:
        return MountContext(
            options=RunOptions(**options),
            config=config,
            prompter=prompter or ScriptedPrompter(),
            cancel=CancelToken(),
            cleanup=Cleanup(),
        )

    return _make
