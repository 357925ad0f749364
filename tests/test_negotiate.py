import pytest

from storagebox_mount.errors import CommandError, NegotiationError
from storagebox_mount.lib.negotiate import COMMITTED, negotiate_version

CANDIDATES = ["3.1.1", "3.0", "2.1", "2.0", "1.0"]


def build_argv(version):
    return ["mount.cifs", "//h/s", "/mnt/x", "-o", f"vers={version},rw"]


def test_first_success_is_committed(runner):
    runner.responder = lambda argv: (0, "") if argv[0] == "umount" or "vers=3.0," in argv[-1] else (95, "Operation not supported")

    neg = negotiate_version(CANDIDATES, build_argv, "/mnt/x")

    assert neg.state == COMMITTED
    assert neg.committed == "3.0"
    probes = runner.commands("mount.cifs")
    assert [p[-1].split(",")[0] for p in probes] == ["vers=3.1.1", "vers=3.0"]
    # Every probe is undone, successful or not.
    assert runner.commands("umount") == [["umount", "/mnt/x"], ["umount", "/mnt/x"]]


def test_probes_follow_candidate_order(runner):
    runner.responder = lambda argv: (0, "") if argv[0] == "umount" or "vers=1.0," in argv[-1] else (13, "err")

    neg = negotiate_version(CANDIDATES, build_argv, "/mnt/x")

    assert neg.committed == "1.0"
    assert [t.version for t in neg.trials] == CANDIDATES
    assert [t.ok for t in neg.trials] == [False] * 4 + [True]


def test_exhausted_raises_with_last_output(runner):
    runner.responder = lambda argv: (0, "") if argv[0] == "umount" else (13, f"denied {argv[-1][:9]}")
    mounted, unmounted = [], []

    with pytest.raises(NegotiationError) as exc:
        negotiate_version(
            CANDIDATES,
            build_argv,
            "/mnt/x",
            on_mounted=lambda: mounted.append(1),
            on_unmounted=lambda: unmounted.append(1),
        )

    assert "vers=1.0" in exc.value.last_output
    assert len(runner.commands("mount.cifs")) == 5
    assert len(runner.commands("umount")) == 5
    assert mounted == [] and unmounted == []


def test_failed_trial_umount_stops_negotiation(runner):
    runner.responder = lambda argv: (32, "target is busy") if argv[0] == "umount" else (0, "")
    events = []

    with pytest.raises(CommandError) as exc:
        negotiate_version(
            CANDIDATES,
            build_argv,
            "/mnt/x",
            on_mounted=lambda: events.append("mounted"),
            on_unmounted=lambda: events.append("unmounted"),
        )

    # Still tracked for cleanup; no further trial mounts on top.
    assert events == ["mounted"]
    assert exc.value.returncode == 32
    assert len(runner.commands("mount.cifs")) == 1


def test_checkpoint_runs_before_each_trial(runner):
    runner.responder = lambda argv: (0, "") if argv[0] == "umount" else (1, "")
    calls = []

    with pytest.raises(NegotiationError):
        negotiate_version(CANDIDATES[:2], build_argv, "/mnt/x", checkpoint=lambda: calls.append(1))

    assert calls == [1, 1]


def test_checkpoint_can_abort(runner):
    class Stop(Exception):
        pass

    def checkpoint():
        raise Stop()

    with pytest.raises(Stop):
        negotiate_version(CANDIDATES, build_argv, "/mnt/x", checkpoint=checkpoint)
    assert runner.calls == []


def test_empty_candidates_rejected(runner):
    with pytest.raises(NegotiationError):
        negotiate_version([], build_argv, "/mnt/x")


def test_dry_run_executes_nothing(runner):
    neg = negotiate_version(CANDIDATES, build_argv, "/mnt/x", dry_run=True)
    assert neg.committed == "3.1.1"
    assert runner.calls == []
