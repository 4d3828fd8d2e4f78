"""Cancellable stream wrappers and mount-point checks for file operations."""

from __future__ import annotations

import os
import re
import threading
from typing import BinaryIO, Iterable

DEFAULT_MOUNTINFO = "/proc/self/mountinfo"

_OCTAL_ESCAPE = re.compile(r"\\([0-7]{3})")


class CancelledError(Exception):
    """Raised when a stream is used after its operation was cancelled."""


class CancellableReader:
    """A reader that checks a cancel event before every read."""

    def __init__(self, cancel_event: threading.Event, stream: BinaryIO) -> None:
        if isinstance(stream, CancellableReader) and stream.cancel_event is cancel_event:
            stream = stream.stream
        self.cancel_event = cancel_event
        self.stream = stream

    def read(self, size: int = -1) -> bytes:
        if self.cancel_event.is_set():
            raise CancelledError("read cancelled")
        return self.stream.read(size)


class CancellableWriter:
    """A writer that checks a cancel event before every write."""

    def __init__(self, cancel_event: threading.Event, stream: BinaryIO) -> None:
        if isinstance(stream, CancellableWriter) and stream.cancel_event is cancel_event:
            stream = stream.stream
        self.cancel_event = cancel_event
        self.stream = stream

    def write(self, data: bytes) -> int:
        if self.cancel_event.is_set():
            raise CancelledError("write cancelled")
        written = self.stream.write(data)
        return len(data) if written is None else written


def _unescape(field: str) -> str:
    return _OCTAL_ESCAPE.sub(lambda m: chr(int(m.group(1), 8)), field)


def mount_points(mountinfo_path: str = DEFAULT_MOUNTINFO) -> set[str]:
    """Mount points listed in a mountinfo file; empty when it cannot be read."""
    try:
        with open(mountinfo_path, encoding="utf-8", errors="replace") as handle:
            lines = handle.readlines()
    except OSError:
        return set()
    points = set()
    for line in lines:
        fields = line.split()
        if len(fields) >= 5:
            points.add(_unescape(fields[4]))
    return points


def is_mounted(path: str, connections: Iterable = (), mountinfo_path: str = DEFAULT_MOUNTINFO) -> bool:
    """Whether the path is a mount point or the mount point of a stored connection."""
    if path and os.path.normpath(path) in mount_points(mountinfo_path):
        return True
    return any(connection.mount_point == path for connection in connections or ())