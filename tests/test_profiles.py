import pytest

from storagebox_mount.errors import ValidationError
from storagebox_mount.lib.accounts import account_type, default_mount_for, derive_target
from storagebox_mount.lib.profiles import resolve_profile


def test_unnamed_profile_uses_fixed_paths():
    profile = resolve_profile("")
    assert profile.credentials_path == "/etc/cifs-credentials.txt"
    assert profile.default_mount_point == "/mnt/hetzner-storage"
    assert profile.suffix == ""
    assert resolve_profile(None) == profile


def test_named_profile_suffixes_paths():
    profile = resolve_profile("backup_01")
    assert profile.credentials_path == "/etc/cifs-credentials-backup_01.txt"
    assert profile.default_mount_point == "/mnt/hetzner-storage-backup_01"
    assert profile.suffix == "-backup_01"


@pytest.mark.parametrize("names", [("a", "b"), ("media", "media-2"), ("x_1", "x-1"), ("A", "a")])
def test_distinct_names_never_share_paths(names):
    first, second = (resolve_profile(n) for n in names)
    assert first.credentials_path != second.credentials_path
    assert first.default_mount_point != second.default_mount_point


@pytest.mark.parametrize("name", ["bad name", "../etc", "a/b", "x.y", "semi;colon"])
def test_invalid_profile_names_rejected(name):
    with pytest.raises(ValidationError):
        resolve_profile(name)


def test_account_shapes():
    assert account_type("u123456") == "main"
    assert account_type("u123456-sub3") == "sub"
    assert account_type("user") is None
    assert account_type("u12-sub") is None


def test_sub_account_target_and_default_mount():
    target = derive_target("u493700-sub2")
    assert target.host == "u493700-sub2.your-storagebox.de"
    assert target.share == "u493700-sub2"
    assert target.device == "//u493700-sub2.your-storagebox.de/u493700-sub2"
    assert default_mount_for(resolve_profile(""), target) == "/mnt/hetzner-storage-sub2"


def test_main_account_uses_backup_share():
    target = derive_target("u493700")
    assert target.host == "u493700.your-storagebox.de"
    assert target.share == "backup"
    assert default_mount_for(resolve_profile(""), target) == "/mnt/hetzner-storage"


def test_named_profile_wins_over_sub_suffix():
    target = derive_target("u493700-sub2")
    assert default_mount_for(resolve_profile("photos"), target) == "/mnt/hetzner-storage-photos"


def test_invalid_username_rejected():
    with pytest.raises(ValidationError):
        derive_target("admin")
