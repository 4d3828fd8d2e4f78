import io
import shutil
import threading

import pytest

from casanas.fileops import (
    CancellableReader,
    CancellableWriter,
    CancelledError,
    is_mounted,
    mount_points,
)
from casanas.models import ConnectionRecord

MOUNTINFO = (
    "22 1 8:1 / / rw,relatime shared:1 - ext4 /dev/sda1 rw\n"
    "36 22 0:30 / /mnt/my\\040disk rw,relatime - cifs //srv/share rw\n"
    "37 22 0:31 / /media/usb rw - vfat /dev/sdb1 rw\n"
)


@pytest.fixture
def mountinfo(tmp_path):
    path = tmp_path / "mountinfo"
    path.write_text(MOUNTINFO)
    return str(path)


def test_copy_through_wrappers_before_cancel():
    event = threading.Event()
    source = io.BytesIO(b"demo data" * 100)
    target = io.BytesIO()
    shutil.copyfileobj(CancellableReader(event, source), CancellableWriter(event, target))
    assert target.getvalue() == b"demo data" * 100


def test_read_after_cancel_raises():
    event = threading.Event()
    reader = CancellableReader(event, io.BytesIO(b"abcdef"))
    assert reader.read(3) == b"abc"
    event.set()
    with pytest.raises(CancelledError):
        reader.read(3)


def test_write_after_cancel_raises():
    event = threading.Event()
    target = io.BytesIO()
    writer = CancellableWriter(event, target)
    assert writer.write(b"abc") == 3
    event.set()
    with pytest.raises(CancelledError):
        writer.write(b"def")
    assert target.getvalue() == b"abc"


def test_wrapping_twice_with_same_event_unwraps():
    event = threading.Event()
    inner = io.BytesIO(b"xyz")
    reader = CancellableReader(event, CancellableReader(event, inner))
    assert reader.stream is inner
    assert reader.read() == b"xyz"


def test_mount_points_parses_and_unescapes(mountinfo):
    assert mount_points(mountinfo) == {"/", "/mnt/my disk", "/media/usb"}


def test_mount_points_missing_file(tmp_path):
    assert mount_points(str(tmp_path / "absent")) == set()


def test_is_mounted_from_mountinfo(mountinfo):
    assert is_mounted("/media/usb", [], mountinfo)
    assert is_mounted("/media/usb/", [], mountinfo)
    assert not is_mounted("/media/other", [], mountinfo)


def test_is_mounted_from_connections(tmp_path):
    absent = str(tmp_path / "absent")
    connections = [ConnectionRecord(mount_point="/mnt/10.0.0.5")]
    assert is_mounted("/mnt/10.0.0.5", connections, absent)
    assert not is_mounted("/mnt/10.0.0.6", connections, absent)