import subprocess
from datetime import datetime
from unittest.mock import patch

import pytest

from casanas.database import Database
from casanas.models import (
    AppNotify,
    ConnectionRecord,
    NotifyClass,
    NotifyState,
    PeerRecord,
    RelyRecord,
)
from casanas.repositories import (
    ConnectionsService,
    NotifyService,
    PeerService,
    RelyService,
)

PASSWORD = "password"


@pytest.fixture
def db():
    with Database(":memory:") as database:
        yield database


def _connection(host="nas.example.com"):
    password = PASSWORD
    return ConnectionRecord(
        username="alice",
        password=password,
        host=host,
        port="445",
        directories="media,docs",
        mount_point="/mnt/" + host,
    )


# --- connections ---------------------------------------------------------


def test_connection_create_assigns_id_and_by_id_returns_credentials(db):
    service = ConnectionsService(db)
    created = service.create(_connection())
    assert created.id > 0
    assert created.created > 0
    found = service.by_id(created.id)
    assert found.username == "alice"
    assert found.password == PASSWORD
    assert found.directories == "media,docs"
    assert found.port == "445"


def test_connection_list_hides_password_and_directories(db):
    service = ConnectionsService(db)
    service.create(_connection("a.example.com"))
    service.create(_connection("b.example.com"))
    records = service.list()
    assert sorted(r.host for r in records) == ["a.example.com", "b.example.com"]
    assert all(r.password == "" and r.directories == "" for r in records)
    assert all(r.port == "445" for r in records)


def test_connection_by_host(db):
    service = ConnectionsService(db)
    service.create(_connection("a.example.com"))
    service.create(_connection("b.example.com"))
    found = service.by_host("b.example.com")
    assert [r.host for r in found] == ["b.example.com"]
    assert service.by_host("c.example.com") == []


def test_connection_update_and_delete(db):
    service = ConnectionsService(db)
    created = service.create(_connection())
    created.directories = "media"
    service.update(created)
    assert service.by_id(created.id).directories == "media"
    assert len(service.list()) == 1
    service.delete(str(created.id))
    assert service.by_id(created.id) is None
    assert service.list() == []


def test_connection_update_without_id_inserts(db):
    service = ConnectionsService(db)
    saved = service.update(_connection())
    assert saved.id > 0
    assert service.by_id(saved.id).host == "nas.example.com"


def test_mount_samba_runs_cifs_mount(db):
    service = ConnectionsService(db)
    password = PASSWORD
    failed = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="denied")
    with patch("casanas.repositories.subprocess.run", return_value=failed) as run:
        with pytest.raises(OSError):
            service.mount_samba("alice", "nas.example.com", "media", "445", "/mnt/x", password)
    args = run.call_args[0][0]
    assert args[:3] == ["mount", "-t", "cifs"]
    assert "//nas.example.com/media" in args
    assert "/mnt/x" in args
    options = args[args.index("-o") + 1]
    assert "username=alice" in options
    assert "password=" + PASSWORD in options


def test_mount_samba_failure_raises(db):
    service = ConnectionsService(db)
    password = PASSWORD
    failed = subprocess.CompletedProcess(args=[], returncode=32, stdout="", stderr="denied")
    with patch("casanas.repositories.subprocess.run", return_value=failed):
        with pytest.raises(OSError) as info:
            service.mount_samba("alice", "h", "d", "445", "/mnt/x", password)
    assert info.value.errno == 32


def test_unmount_samba(db):
    service = ConnectionsService(db)
    done = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")
    with patch("casanas.repositories.subprocess.run", return_value=done) as run:
        service.unmount_samba("/mnt/x")
    assert run.call_args[0][0] == ["umount", "/mnt/x"]
    failed = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="busy")
    with patch("casanas.repositories.subprocess.run", return_value=failed):
        with pytest.raises(OSError):
            service.unmount_samba("/mnt/x")


# --- peers ---------------------------------------------------------------


def test_peer_lookup_by_fields(db):
    service = PeerService(db)
    service.create(PeerRecord(id="p1", display_name="Linux Firefox", user_agent="ua-1"))
    assert service.by_name("Linux Firefox").id == "p1"
    assert service.by_user_agent("ua-1").display_name == "Linux Firefox"
    assert service.by_id("p1").user_agent == "ua-1"
    assert service.by_id("missing") is None
    assert service.by_name("other") is None


def test_peer_list_most_recent_first_and_delete(db):
    service = PeerService(db)
    service.create(PeerRecord(id="old", updated=100))
    service.create(PeerRecord(id="new", updated=200))
    assert [p.id for p in service.list()] == ["new", "old"]
    service.delete("new")
    assert [p.id for p in service.list()] == ["old"]
    assert service.list()[0].online is False


# --- relies --------------------------------------------------------------


def test_rely_create_get_delete(db):
    service = RelyService(db)
    stamp = datetime(2022, 6, 2, 18, 0, 0)
    rely = service.create(
        RelyRecord(custom_id="app", container_custom_id="db", created_at=stamp, updated_at=stamp)
    )
    assert rely.id > 0
    found = service.get("app")
    assert found.container_custom_id == "db"
    assert found.created_at == stamp
    service.delete("app")
    assert service.get("app") is None


# --- notifications -------------------------------------------------------


def test_notify_add_and_get(db):
    service = NotifyService(db)
    service.add_log(AppNotify(custom_id="c1", id="1", message="hello"))
    log = service.get_log("c1")
    assert log.message == "hello"
    assert service.get_log("c2") is None


def test_notify_get_list_filters_read_and_class(db):
    service = NotifyService(db)
    service.add_log(AppNotify(custom_id="a", id="1", state=NotifyState.DYNAMIC))
    service.add_log(AppNotify(custom_id="b", id="2", state=NotifyState.UNREAD))
    service.add_log(AppNotify(custom_id="c", id="3", state=NotifyState.READ))
    service.add_log(AppNotify(custom_id="d", id="4", state=NotifyState.UNREAD, notify_class=5))
    found = service.get_list(NotifyClass.APP)
    assert sorted(n.custom_id for n in found) == ["a", "b"]


def test_notify_mark_read_single_and_all(db):
    service = NotifyService(db)
    service.add_log(AppNotify(custom_id="a", id="1", state=NotifyState.UNREAD))
    service.add_log(AppNotify(custom_id="b", id="2", state=NotifyState.UNREAD))
    service.mark_read("1", NotifyState.READ)
    assert service.get_log("a").state == NotifyState.READ
    assert service.get_log("b").state == NotifyState.UNREAD
    service.mark_read("0", NotifyState.READ)
    assert service.get_list(NotifyClass.APP) == []


def test_notify_update_by_custom_id(db):
    service = NotifyService(db)
    service.add_log(AppNotify(custom_id="a", id="1", message="first"))
    service.update_log_by_custom_id(AppNotify(custom_id="a", id="1", message="second"))
    assert service.get_log("a").message == "second"
    service.update_log_by_custom_id(AppNotify(custom_id="", message="ignored"))
    assert service.get_log("a").message == "second"


def test_notify_update_log_upserts_and_delete(db):
    service = NotifyService(db)
    service.update_log(AppNotify(custom_id="a", message="new"))
    service.update_log(AppNotify(custom_id="a", message="changed"))
    assert service.get_log("a").message == "changed"
    service.delete_log("a")
    assert service.get_log("a") is None


def test_system_temp_map_merges_and_copies(db):
    service = NotifyService(db)
    service.set_system_temp_data({"sys_disk": 1})
    service.set_system_temp_data({"sys_usb": 2, "sys_disk": 3})
    snapshot = service.system_temp_map()
    assert snapshot == {"sys_disk": 3, "sys_usb": 2}
    snapshot["other"] = 1
    assert "other" not in service.system_temp_map()