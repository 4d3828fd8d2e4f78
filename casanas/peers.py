"""Naming and addressing of browser peers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from casanas.models import PeerRecord

_LOOPBACK_ALIASES = ("::1", "::ffff:127.0.0.1")


@dataclass
class PeerName:
    """How a peer is described to other peers."""

    model: str = ""
    os: str = ""
    browser: str = ""
    device_name: str = ""
    display_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "model": self.model,
            "os": self.os,
            "browser": self.browser,
            "deviceName": self.device_name,
            "displayName": self.display_name,
        }


def get_peer_id(cookies: Mapping[str, str], default: str) -> str:
    """The peer id from the "peerid" cookie, or the default when it is absent or empty."""
    value = cookies.get("peerid")
    return value if value else default


def get_ip(headers: Mapping[str, str], remote_addr: str) -> str:
    """The client address: first forwarded address if any, loopback aliases folded."""
    forwarded = next(
        (value for key, value in headers.items() if key.lower() == "x-forwarded-for"),
        "",
    )
    ip = forwarded.split(",")[0] if forwarded else remote_addr
    if ip in _LOOPBACK_ALIASES:
        ip = "127.0.0.1"
    return ip


def name_from_record(record: PeerRecord) -> PeerName:
    """The name of a stored peer; the browser stands in for a missing device name."""
    return PeerName(
        model=record.model,
        os=record.os,
        browser=record.browser,
        device_name=record.device_name or record.browser,
        display_name=record.display_name,
    )