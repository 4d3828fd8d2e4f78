import subprocess

import pytest

from casanas.database import Database
from casanas.models import ShareRecord
from casanas.shares import CONFIG_MARKER, SharesService, render_shares_config


@pytest.fixture
def commands(monkeypatch):
    calls = []

    def fake_run(args, **kwargs):
        calls.append(args)
        return subprocess.CompletedProcess(args, 0, "", "")

    monkeypatch.setattr(subprocess, "run", fake_run)
    return calls


@pytest.fixture
def service(tmp_path, commands):
    db = Database()
    yield SharesService(db, tmp_path / "samba", tmp_path / "shell")
    db.close()


def test_render_contains_section_per_share():
    text = render_shares_config([ShareRecord(path="/data/music"), ShareRecord(path="/data/films/")])
    assert "[music]" in text
    assert "path = /data/music\n" in text
    assert "[films]" in text
    assert text.count("force user = root") == 2


def test_render_empty_list():
    assert render_shares_config([]) == ""


def test_create_and_query(service):
    created = service.create(ShareRecord(anonymous=True, path="/data/music", name="music"))
    assert created.id > 0
    listed = service.list()
    assert [(s.path, s.anonymous, s.id) for s in listed] == [("/data/music", True, created.id)]
    assert [s.path for s in service.by_name("music")] == ["/data/music"]
    assert [s.path for s in service.by_path("/data/music")] == ["/data/music"]
    assert service.by_path("/data/other") == []


def test_update_config_writes_file_and_restarts(service, commands):
    service.create(ShareRecord(path="/data/music", name="music"))
    content = (service.samba_dir / "smb.casa.conf").read_text()
    assert content == render_shares_config(service.list())
    assert any("RestartSMBD" in args[-1] for args in commands)


def test_delete_removes_share(service):
    share = service.create(ShareRecord(path="/data/music", name="music"))
    service.delete(share.id)
    assert service.list() == []
    assert (service.samba_dir / "smb.casa.conf").read_text() == ""


def test_delete_by_path_prefix(service):
    service.create(ShareRecord(path="/data/a/one", name="one"))
    service.create(ShareRecord(path="/data/a/two", name="two"))
    service.create(ShareRecord(path="/data/b", name="b"))
    service.delete_by_path("/data/a")
    assert [s.path for s in service.list()] == ["/data/b"]


def test_init_samba_config_replaces_and_backs_up(service):
    service.samba_dir.mkdir(parents=True)
    main = service.samba_dir / "smb.conf"
    main.write_text("[global]\nworkgroup = HOME\n")
    service.init_samba_config()
    assert (service.samba_dir / "smb.conf.bak").read_text() == "[global]\nworkgroup = HOME\n"
    new_text = main.read_text()
    assert new_text.startswith(CONFIG_MARKER)
    assert "smb.casa.conf" in new_text
    service.init_samba_config()
    assert main.read_text() == new_text


def test_init_samba_config_without_file_does_nothing(service):
    service.init_samba_config()
    assert not (service.samba_dir / "smb.conf").exists()