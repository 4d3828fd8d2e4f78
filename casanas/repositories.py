"""Record services backed by the SQLite database: connections, peers, relies and notifications."""

from __future__ import annotations

import subprocess
import threading
import time
from typing import Any

from casanas.database import Database
from casanas.models import (
    AppNotify,
    ConnectionRecord,
    NotifyState,
    PeerRecord,
    RelyRecord,
)

_CONNECTION_COLUMNS = (
    "updated",
    "created",
    "username",
    "password",
    "host",
    "port",
    "status",
    "directories",
    "mount_point",
)

_PEER_COLUMNS = (
    "id",
    "updated",
    "created",
    "user_agent",
    "display_name",
    "device_name",
    "model",
    "ip",
    "os",
    "browser",
)

_RELY_COLUMNS = (
    "custom_id",
    "container_custom_id",
    "container_id",
    "type",
    "created_at",
    "updated_at",
)

_NOTIFY_COLUMNS = (
    "custom_id",
    "state",
    "message",
    "created_at",
    "updated_at",
    "id",
    "type",
    "icon",
    "name",
    "notify_class",
)


def _now() -> int:
    return int(time.time())


def _values(record: Any, columns: tuple[str, ...]) -> list[Any]:
    return [getattr(record, column) for column in columns]


def _insert_sql(table: str, columns: tuple[str, ...], verb: str = "INSERT") -> str:
    names = ", ".join(columns)
    marks = ", ".join("?" for _ in columns)
    return f"{verb} INTO {table} ({names}) VALUES ({marks})"


class ConnectionsService:
    """Stores SMB connections and mounts their shares."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def list(self) -> list[ConnectionRecord]:
        """All connections, without their passwords or directory lists."""
        rows = self._db.query(
            "SELECT username, host, port, status, id, mount_point FROM o_connections"
        )
        return [ConnectionRecord(**row) for row in rows]

    def by_host(self, host: str) -> list[ConnectionRecord]:
        rows = self._db.query(
            "SELECT username, host, status, id FROM o_connections WHERE host = ?",
            (host,),
        )
        return [ConnectionRecord(**row) for row in rows]

    def by_id(self, connection_id: int | str) -> ConnectionRecord | None:
        """The connection with this id, credentials included, or None."""
        rows = self._db.query(
            "SELECT username, password, host, status, id, directories, mount_point, port "
            "FROM o_connections WHERE id = ? ORDER BY id LIMIT 1",
            (connection_id,),
        )
        return ConnectionRecord(**rows[0]) if rows else None

    def create(self, connection: ConnectionRecord) -> ConnectionRecord:
        now = _now()
        connection.created = connection.created or now
        connection.updated = connection.updated or now
        if connection.id:
            columns = ("id",) + _CONNECTION_COLUMNS
        else:
            columns = _CONNECTION_COLUMNS
        cursor = self._db.execute(
            _insert_sql(ConnectionRecord.TABLE, columns), _values(connection, columns)
        )
        if not connection.id:
            connection.id = cursor.lastrowid
        return connection

    def update(self, connection: ConnectionRecord) -> ConnectionRecord:
        """Save every field of the connection, inserting it if it has no id yet."""
        if not connection.id:
            return self.create(connection)
        connection.updated = _now()
        columns = ("id",) + _CONNECTION_COLUMNS
        self._db.execute(
            _insert_sql(ConnectionRecord.TABLE, columns, "INSERT OR REPLACE"),
            _values(connection, columns),
        )
        return connection

    def delete(self, connection_id: int | str) -> None:
        self._db.execute("DELETE FROM o_connections WHERE id = ?", (connection_id,))

    def mount_samba(
        self,
        username: str,
        host: str,
        directory: str,
        port: str,
        mount_point: str,
        password: str,
    ) -> None:
        """Mount //host/directory on mount_point as CIFS; the port is not passed on."""
        options = f"username={username},password={password},noatime,nodev,nosuid"
        result = subprocess.run(
            ["mount", "-t", "cifs", f"//{host}/{directory}", mount_point, "-o", options],
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            raise OSError(
                result.returncode, (result.stderr or "").strip() or "mount failed", mount_point
            )

    def unmount_samba(self, mount_point: str) -> None:
        result = subprocess.run(["umount", mount_point], capture_output=True, text=True)
        if result.returncode != 0:
            raise OSError(
                result.returncode, (result.stderr or "").strip() or "umount failed", mount_point
            )


class PeerService:
    """Stores the browser peers seen by the file-drop service."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def _first(self, column: str, value: str) -> PeerRecord | None:
        rows = self._db.query(
            f"SELECT * FROM peer_drive_db_models WHERE {column} = ? ORDER BY id LIMIT 1",
            (value,),
        )
        return PeerRecord(**rows[0]) if rows else None

    def by_name(self, name: str) -> PeerRecord | None:
        return self._first("display_name", name)

    def by_user_agent(self, user_agent: str) -> PeerRecord | None:
        return self._first("user_agent", user_agent)

    def by_id(self, peer_id: str) -> PeerRecord | None:
        return self._first("id", peer_id)

    def list(self) -> list[PeerRecord]:
        """All peers, most recently updated first."""
        rows = self._db.query("SELECT * FROM peer_drive_db_models ORDER BY updated DESC")
        return [PeerRecord(**row) for row in rows]

    def create(self, peer: PeerRecord) -> PeerRecord:
        now = _now()
        peer.created = peer.created or now
        peer.updated = peer.updated or now
        self._db.execute(
            _insert_sql(PeerRecord.TABLE, _PEER_COLUMNS), _values(peer, _PEER_COLUMNS)
        )
        return peer

    def delete(self, peer_id: str) -> None:
        self._db.execute("DELETE FROM peer_drive_db_models WHERE id = ?", (peer_id,))


class RelyService:
    """Stores application dependencies."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def create(self, rely: RelyRecord) -> RelyRecord:
        cursor = self._db.execute(
            _insert_sql(RelyRecord.TABLE, _RELY_COLUMNS), _values(rely, _RELY_COLUMNS)
        )
        rely.id = cursor.lastrowid
        return rely

    def get(self, custom_id: str) -> RelyRecord | None:
        rows = self._db.query(
            "SELECT * FROM o_rely WHERE custom_id = ? ORDER BY id LIMIT 1", (custom_id,)
        )
        return RelyRecord(**rows[0]) if rows else None

    def delete(self, custom_id: str) -> None:
        self._db.execute("DELETE FROM o_rely WHERE custom_id = ?", (custom_id,))


class NotifyService:
    """Stores notification logs and keeps the latest system status values."""

    def __init__(self, db: Database) -> None:
        self._db = db
        self._temp_lock = threading.Lock()
        self._temp: dict[str, Any] = {}

    def get_log(self, custom_id: str) -> AppNotify | None:
        rows = self._db.query(
            "SELECT * FROM o_notify WHERE custom_id = ? LIMIT 1", (custom_id,)
        )
        return AppNotify(**rows[0]) if rows else None

    def add_log(self, log: AppNotify) -> None:
        self._db.execute(
            _insert_sql(AppNotify.TABLE, _NOTIFY_COLUMNS), _values(log, _NOTIFY_COLUMNS)
        )

    def update_log(self, log: AppNotify) -> None:
        """Save every field of the log, inserting it when it is new."""
        self._db.execute(
            _insert_sql(AppNotify.TABLE, _NOTIFY_COLUMNS, "INSERT OR REPLACE"),
            _values(log, _NOTIFY_COLUMNS),
        )

    def update_log_by_custom_id(self, log: AppNotify) -> None:
        """Overwrite every field of the stored log with this custom id; ignore an empty id."""
        if not log.custom_id:
            return
        columns = _NOTIFY_COLUMNS[1:]
        assignments = ", ".join(f"{column} = ?" for column in columns)
        self._db.execute(
            f"UPDATE o_notify SET {assignments} WHERE custom_id = ?",
            _values(log, columns) + [log.custom_id],
        )

    def delete_log(self, custom_id: str) -> None:
        self._db.execute("DELETE FROM o_notify WHERE custom_id = ?", (custom_id,))

    def get_list(self, notify_class: int) -> list[AppNotify]:
        """Logs of a class that are still dynamic or unread."""
        rows = self._db.query(
            "SELECT * FROM o_notify WHERE notify_class = ? AND (state = ? OR state = ?)",
            (notify_class, NotifyState.DYNAMIC, NotifyState.UNREAD),
        )
        return [AppNotify(**row) for row in rows]

    def mark_read(self, notify_id: str, state: int) -> None:
        """Set the state of one log by id, or of every log when the id is "0"."""
        if notify_id == "0":
            self._db.execute("UPDATE o_notify SET state = ?", (state,))
            return
        self._db.execute("UPDATE o_notify SET state = ? WHERE id = ?", (state, notify_id))

    def set_system_temp_data(self, message: dict[str, Any]) -> None:
        with self._temp_lock:
            self._temp.update(message)

    def system_temp_map(self) -> dict[str, Any]:
        """A copy of the latest system status values."""
        with self._temp_lock:
            return dict(self._temp)