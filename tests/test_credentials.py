import os
import stat

import pytest

from storagebox_mount.context import Credentials
from storagebox_mount.errors import CredentialError
from storagebox_mount.lib import credentials as creds
from storagebox_mount.lib.credentials import (
    PasswordSource,
    load_password,
    persist_credentials,
    read_password_file,
)

from conftest import ScriptedPrompter


def test_password_file_first_line_verbatim(tmp_path):
    pw = tmp_path / "pass.txt"
    pw.write_text("  s3cr=t,with spaces  \nsecond line\n", encoding="utf-8")
    assert read_password_file(str(pw)) == "  s3cr=t,with spaces  "


def test_unreadable_password_file(tmp_path):
    with pytest.raises(CredentialError):
        load_password(PasswordSource.file(str(tmp_path / "missing.txt")))


def test_literal_password():
    assert load_password(PasswordSource.literal("hunter2")) == "hunter2"


def test_prompt_reprompts_until_confirmation_matches():
    prompter = ScriptedPrompter(secrets=["", "one", "two", "good", "good"])
    assert load_password(PasswordSource.prompt(), prompter=prompter) == "good"
    assert not prompter.secrets


def test_prompt_skips_confirmation():
    prompter = ScriptedPrompter(secrets=["only"])
    assert load_password(PasswordSource.prompt(), prompter=prompter, confirm=False) == "only"


def test_credentials_repr_hides_password():
    c = Credentials(username="u1", password="topsecret")
    assert "topsecret" not in repr(c)
    assert c.render() == "username=u1\npassword=topsecret\ndomain=WORKGROUP\n"


def test_persist_writes_private_file(tmp_path, monkeypatch):
    modes = []
    real_open = os.open

    def spy_open(path, flags, mode=0o777, *args, **kwargs):
        if flags & os.O_CREAT:
            modes.append(mode)
        return real_open(path, flags, mode, *args, **kwargs)

    monkeypatch.setattr(creds.os, "open", spy_open)

    path = tmp_path / "cifs-credentials.txt"
    tracked = []
    wrote = persist_credentials(
        "username=u1\npassword=p\ndomain=WORKGROUP\n",
        str(path),
        interactive=False,
        track=tracked.append,
        release=tracked.remove,
        owner=None,
    )

    assert wrote is True
    assert modes == [0o600]
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert path.read_text(encoding="utf-8").splitlines() == [
        "username=u1",
        "password=p",
        "domain=WORKGROUP",
    ]
    assert tracked == []
    assert not (tmp_path / "cifs-credentials.txt.tmp").exists()


def test_persist_unattended_backs_up_then_overwrites(tmp_path):
    path = tmp_path / "cifs-credentials.txt"
    path.write_text("old\n", encoding="utf-8")

    persist_credentials("new\n", str(path), interactive=False, owner=None, suffix=".backup-20260101-000000")

    assert path.read_text(encoding="utf-8") == "new\n"
    assert (tmp_path / "cifs-credentials.txt.backup-20260101-000000").read_text(encoding="utf-8") == "old\n"


def test_persist_interactive_keeps_existing_by_default(tmp_path):
    path = tmp_path / "cifs-credentials.txt"
    path.write_text("old\n", encoding="utf-8")
    prompter = ScriptedPrompter(confirms=[False])

    wrote = persist_credentials("new\n", str(path), interactive=True, prompter=prompter, owner=None)

    assert wrote is False
    assert path.read_text(encoding="utf-8") == "old\n"
    assert list(tmp_path.iterdir()) == [path]


def test_persist_dry_run_touches_nothing(tmp_path):
    path = tmp_path / "sub" / "cifs-credentials.txt"
    assert persist_credentials("x\n", str(path), interactive=False, owner=None, dry_run=True)
    assert not (tmp_path / "sub").exists()


def test_persist_interactive_without_prompter_fails(tmp_path):
    path = tmp_path / "cifs-credentials.txt"
    path.write_text("old\n", encoding="utf-8")

    with pytest.raises(CredentialError):
        persist_credentials("new\n", str(path), interactive=True, prompter=None, owner=None)
    assert path.read_text(encoding="utf-8") == "old\n"
