"""Samba shares stored in the database and the configuration files generated from them."""

from __future__ import annotations

import os
import shutil
import subprocess
import time
from pathlib import Path

from casanas.database import Database
from casanas.models import ShareRecord

CONFIG_MARKER = "# Managed by casanas: changes made by hand may be overwritten."

_SHARES_FILE = "smb.casa.conf"
_MAIN_FILE = "smb.conf"


def _base(path: str) -> str:
    """The last element of a slash-separated path, ignoring trailing slashes."""
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


def render_shares_config(shares) -> str:
    """Samba configuration text with one guest-writable section per share."""
    sections = []
    for share in shares:
        dir_name = _base(share.path)
        sections.append(
            f"\n[{dir_name}]\n"
            f"comment = casanas share {dir_name}\n"
            "public = Yes\n"
            f"path = {share.path}\n"
            "browseable = Yes\n"
            "read only = No\n"
            "guest ok = Yes\n"
            "create mask = 0777\n"
            "directory mask = 0777\n"
            "force user = root\n"
            "\n"
        )
    return "".join(sections)


def _main_config(samba_dir: Path) -> str:
    return (
        f"{CONFIG_MARKER}\n"
        "#\n"
        "# IMPORTANT: no support is given for issues caused by unauthorized\n"
        "#            modification to the configuration.\n"
        "\n"
        "[global]\n"
        "## fruit settings\n"
        "   min protocol = SMB2\n"
        "   ea support = yes\n"
        "## vfs objects = fruit streams_xattr\n"
        "   fruit:metadata = stream\n"
        "   fruit:model = Macmini\n"
        "   fruit:veto_appledouble = no\n"
        "   fruit:posix_rename = yes\n"
        "   fruit:zero_file_id = yes\n"
        "   fruit:wipe_intentionally_left_blank_rfork = yes\n"
        "   fruit:delete_empty_adfiles = yes\n"
        "   map to guest = bad user\n"
        f"   include={samba_dir / _SHARES_FILE}"
    )


class SharesService:
    """Stores shared directories and keeps the Samba configuration in step with them."""

    def __init__(self, db: Database, samba_dir="/etc/samba", shell_path="/usr/share/casanas/shell") -> None:
        self._db = db
        self.samba_dir = Path(samba_dir)
        self.shell_path = str(shell_path)

    def list(self) -> list[ShareRecord]:
        rows = self._db.query("SELECT anonymous, path, id FROM o_shares")
        return [ShareRecord(**row) for row in rows]

    def by_path(self, path: str) -> list[ShareRecord]:
        rows = self._db.query(
            "SELECT anonymous, path, id FROM o_shares WHERE path = ?", (path,)
        )
        return [ShareRecord(**row) for row in rows]

    def by_name(self, name: str) -> list[ShareRecord]:
        rows = self._db.query(
            "SELECT anonymous, path, id FROM o_shares WHERE name = ?", (name,)
        )
        return [ShareRecord(**row) for row in rows]

    def create(self, share: ShareRecord) -> ShareRecord:
        """Store the share, then rewrite the Samba configuration and restart Samba."""
        now = int(time.time())
        share.created = share.created or now
        share.updated = share.updated or now
        cursor = self._db.execute(
            "INSERT INTO o_shares (anonymous, path, name, updated, created) VALUES (?, ?, ?, ?, ?)",
            (share.anonymous, share.path, share.name, share.updated, share.created),
        )
        share.id = cursor.lastrowid
        self.init_samba_config()
        self.update_config_file()
        return share

    def delete(self, share_id) -> None:
        self._db.execute("DELETE FROM o_shares WHERE id = ?", (share_id,))
        self.update_config_file()

    def delete_by_path(self, path: str) -> None:
        """Remove every share whose path starts with this one."""
        self._db.execute("DELETE FROM o_shares WHERE path LIKE ?", (path + "%",))
        self.update_config_file()

    def update_config_file(self) -> None:
        """Write the shares configuration file and ask the helper script to restart Samba."""
        rows = self._db.query("SELECT anonymous, path FROM o_shares")
        shares = [ShareRecord(**row) for row in rows]
        self.samba_dir.mkdir(parents=True, exist_ok=True)
        (self.samba_dir / _SHARES_FILE).write_text(render_shares_config(shares))
        self._restart_samba()

    def init_samba_config(self) -> None:
        """Replace an existing main configuration with the managed one, keeping a backup."""
        main = self.samba_dir / _MAIN_FILE
        if not main.exists():
            return
        with main.open() as handle:
            first_line = handle.readline()
        if CONFIG_MARKER in first_line:
            return
        shutil.move(str(main), str(self.samba_dir / (_MAIN_FILE + ".bak")))
        main.write_text(_main_config(self.samba_dir))

    def _restart_samba(self) -> None:
        script = os.path.join(self.shell_path, "helper.sh")
        try:
            subprocess.run(
                ["bash", "-c", f"source {script} ;RestartSMBD"],
                capture_output=True,
                text=True,
            )
        except OSError:
            pass