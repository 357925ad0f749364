import pytest

from storagebox_mount.errors import ValidationError
from storagebox_mount.lib.mountpoint import validate_mount_point
from storagebox_mount.lib.options import MountOptions, base_options


def test_base_options_order_with_tuning():
    opts = base_options(credentials_path="/etc/cifs-credentials.txt", uid=1000, gid=1000)
    assert opts.serialize() == (
        "iocharset=utf8,rw,seal,credentials=/etc/cifs-credentials.txt,uid=1000,gid=1000,"
        "file_mode=0660,dir_mode=0770,noperm,domain=WORKGROUP,rsize=130048,wsize=130048,cache=loose"
    )


def test_base_options_without_tuning():
    opts = base_options(credentials_path="/c", uid=0, gid=0, tuning=False)
    assert opts.serialize().endswith("domain=WORKGROUP,cache=strict")
    assert not opts.has("rsize")


def test_version_is_prefixed_once():
    opts = base_options(credentials_path="/c", uid=0, gid=0)
    versioned = opts.with_version("3.0")
    assert versioned.serialize().startswith("vers=3.0,iocharset=utf8,")
    assert versioned.version == "3.0"
    assert opts.version is None
    with pytest.raises(ValueError):
        versioned.with_version("2.1")


def test_extra_flags_are_appended_on_serialize():
    opts = MountOptions().add("rw")
    assert opts.serialize("_netdev") == "rw,_netdev"
    assert str(opts) == "rw"


def test_commas_in_values_rejected():
    with pytest.raises(ValueError):
        MountOptions().add("credentials", "/a,b")


@pytest.mark.parametrize(
    "path", ["/etc", "/", "relative/path", "", "/usr", "/etc/", "//", "/mnt/a:b", "/mnt/a b", "/mnt/x|y"]
)
def test_validate_mount_point_rejects(path):
    with pytest.raises(ValidationError):
        validate_mount_point(path)


@pytest.mark.parametrize("path", ["/mnt/custom-01", "/data/storage", "/mnt/hetzner-storage-sub2"])
def test_validate_mount_point_accepts(path):
    assert validate_mount_point(path) == path
