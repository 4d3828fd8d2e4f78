"""Record types stored in the database and the enumerations shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, ClassVar


class NotifyState(IntEnum):
    """Read state of a notification."""

    DYNAMIC = 0
    UNREAD = 1
    READ = 2


class NotifyType(IntEnum):
    """Kind of notification shown to the user."""

    UNIMPORTANT = 1
    NEED_CONFIRM = 2
    ERROR = 3
    INSTALL_LOG = 4
    PERSON_FRIEND_LEAVE = 5
    PERSON_FRIEND_LIVE = 6
    HEALTH_CHECK = 7


class NotifyClass(IntEnum):
    """Category a notification belongs to."""

    APP = 0


class FriendState(IntEnum):
    """State of a friend relation between peers."""

    DEFAULT = 0
    WAIT = 1
    REQUEST = 2


class DownloadState(IntEnum):
    """Progress state of a peer download."""

    AWAIT = 0
    DOWNLOADING = 1
    PAUSE = 2
    FINISH = 3
    ERROR = 4
    FINISHED = 5


class SearchType(IntEnum):
    """Category of a search result."""

    APPLICATION = 0
    MEDIA = 1
    PICTURE = 2
    MUSIC = 3
    SEARCH = 4
    UNKNOWN = 5


class TaskType(IntEnum):
    """Owner of a task."""

    USER = 0
    APP = 1


class TaskState(IntEnum):
    """Completion state of a task."""

    UNCOMPLETE = 0
    COMPLETED = 1


TASK_DATA_TYPE_LINK = 0
TASK_DATA_TYPE_TEXT = 1

RELY_TYPE_MYSQL = 0

PERSON_ADD_FRIEND = "add_user"
PERSON_AGREE_FRIEND = "agree_user"
PERSON_DOWNLOAD = "file_data"
PERSON_SUMMARY = "summary"
PERSON_GET_IP = "get_ip"
PERSON_CONNECTION = "connection"
PERSON_DIRECTORY = "directory"
PERSON_HELLO = "hello"
PERSON_SHARE_ID = "share_id"
PERSON_UPLOAD = "upload"
PERSON_UPLOAD_DATA = "upload_data"
PERSON_INTERNAL_INSPECTION = "internal_inspection"
PERSON_PING = "ping"
PERSON_IMAGE_THUMBNAIL = "image_thumbnail"
PERSON_CANCEL = "cancel"

PERSON_FILE_DOWNLOAD = 0
PERSON_FILE_UPLOAD = 1
PERSON_FILE_RECEIVE_UPLOAD = 2


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    raise TypeError(f"cannot interpret {value!r} as a datetime")


@dataclass
class ConnectionRecord:
    """A remote SMB server the host has connected to."""

    TABLE: ClassVar[str] = "o_connections"

    id: int = 0
    updated: int = 0
    created: int = 0
    username: str = ""
    password: str = ""
    host: str = ""
    port: str = ""
    status: str = ""
    directories: str = ""
    mount_point: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "Updated": self.updated,
            "Created": self.created,
            "username": self.username,
            "password": self.password,
            "host": self.host,
            "port": self.port,
            "status": self.status,
            "directories": self.directories,
            "mount_point": self.mount_point,
        }


@dataclass
class PeerRecord:
    """A browser peer known to the file-drop service."""

    TABLE: ClassVar[str] = "peer_drive_db_models"

    id: str = ""
    updated: int = 0
    created: int = 0
    user_agent: str = ""
    display_name: str = ""
    device_name: str = ""
    model: str = ""
    ip: str = ""
    os: str = ""
    browser: str = ""
    online: bool = False

    def __post_init__(self) -> None:
        self.online = bool(self.online)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "Updated": self.updated,
            "Created": self.created,
            "user_agent": self.user_agent,
            "display_name": self.display_name,
            "device_name": self.device_name,
            "model": self.model,
            "ip": self.ip,
            "os": self.os,
            "browser": self.browser,
            "online": self.online,
        }


@dataclass
class AppNotify:
    """A notification log entry."""

    TABLE: ClassVar[str] = "o_notify"

    state: int = NotifyState.DYNAMIC
    message: str = ""
    created_at: str = ""
    updated_at: str = ""
    id: str = ""
    type: int = 0
    icon: str = ""
    name: str = ""
    notify_class: int = NotifyClass.APP
    custom_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": int(self.state),
            "message": self.message,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "id": self.id,
            "type": int(self.type),
            "icon": self.icon,
            "name": self.name,
            "class": int(self.notify_class),
            "custom_id": self.custom_id,
        }


@dataclass
class RelyRecord:
    """A dependency between an application and a container."""

    TABLE: ClassVar[str] = "o_rely"

    id: int = 0
    custom_id: str = ""
    container_custom_id: str = ""
    container_id: str = ""
    type: int = RELY_TYPE_MYSQL
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        self.created_at = _as_datetime(self.created_at)
        self.updated_at = _as_datetime(self.updated_at)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "custom_id": self.custom_id,
            "container_custom_id": self.container_custom_id,
        }
        if self.container_id:
            data["container_id"] = self.container_id
        data["type"] = self.type
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat()
        return data


@dataclass
class ShareRecord:
    """A directory shared over Samba."""

    TABLE: ClassVar[str] = "o_shares"

    id: int = 0
    anonymous: bool = False
    path: str = ""
    name: str = ""
    updated: int = 0
    created: int = 0

    def __post_init__(self) -> None:
        self.anonymous = bool(self.anonymous)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "anonymous": self.anonymous,
            "path": self.path,
            "name": self.name,
            "Updated": self.updated,
            "Created": self.created,
        }