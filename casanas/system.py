"""Host information and file-system helpers used by the system routes."""

from __future__ import annotations

import errno
import ipaddress
import os
import socket
import subprocess
import sys
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import psutil

DEFAULT_SHELL_PATH = "/usr/share/casanas/shell"
DEFAULT_LOG_PATH = "/var/log/casaos"
DEFAULT_LOG_NAME = "casaos.log"
DEFAULT_THERMAL_ROOT = "/sys/devices/virtual/thermal"
DEFAULT_ENERGY_PATH = "/sys/class/powercap/intel-rapl/intel-rapl:0/energy_uj"

_CPU_ZONE_TYPES = ("x86_pkg_temp", "cpu", "CPU", "soc")
_MAX_THERMAL_ZONES = 100


@dataclass
class DirEntry:
    """One entry of a directory listing."""

    name: str = ""
    path: str = ""
    is_dir: bool = False
    date: datetime = field(default_factory=datetime.now)
    size: int = 0
    extensions: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "is_dir": self.is_dir,
            "date": self.date.isoformat(),
            "size": self.size,
            "extensions": self.extensions,
        }


def _read_text(path: str) -> str:
    """The file's content, or an empty string when it cannot be read."""
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            return handle.read()
    except OSError:
        return ""


def _one_decimal(value: float) -> float:
    return float(f"{value:.1f}")


def device_all_ips() -> list[str]:
    """Every non-loopback IP address configured on this host."""
    addresses = []
    try:
        interfaces = psutil.net_if_addrs()
    except OSError:
        return addresses
    for addrs in interfaces.values():
        for addr in addrs:
            if addr.family not in (socket.AF_INET, socket.AF_INET6):
                continue
            text = addr.address.split("%", 1)[0]
            try:
                ip = ipaddress.ip_address(text)
            except ValueError:
                continue
            if not ip.is_loopback:
                addresses.append(str(ip))
    return addresses


class SystemService:
    """Reads host state and performs file operations for the API."""

    def __init__(
        self,
        shell_path: str = DEFAULT_SHELL_PATH,
        log_path: str = DEFAULT_LOG_PATH,
        log_name: str = DEFAULT_LOG_NAME,
        thermal_root: str = DEFAULT_THERMAL_ROOT,
    ) -> None:
        self.shell_path = str(shell_path)
        self.log_path = str(log_path)
        self.log_name = log_name
        self.thermal_root = str(thermal_root)
        self._thermal_zone: str | None = None

    # file operations

    def mkdir_all(self, path: str) -> None:
        """Create a directory and its parents; raise if something already stands there."""
        try:
            os.stat(path)
        except FileNotFoundError:
            os.makedirs(path, exist_ok=True)
            return
        raise FileExistsError(errno.EEXIST, "directory already exists", path)

    def rename_file(self, old: str, new: str) -> None:
        """Rename old to new, refusing to overwrite an existing target."""
        try:
            os.stat(new)
        except FileNotFoundError:
            os.rename(old, new)
            return
        raise FileExistsError(errno.EEXIST, "target already exists", new)

    def create_file(self, path: str) -> None:
        """Create an empty file, refusing to touch an existing one."""
        try:
            os.stat(path)
        except FileNotFoundError:
            with open(path, "x"):
                pass
            return
        raise FileExistsError(errno.EEXIST, "file or directory already exists", path)

    def get_dir_path(self, path: str) -> list[DirEntry]:
        """The entries of a directory, sorted by name, with symlinks to directories marked."""
        if path == "/DATA":
            if sys.platform.startswith("win"):
                path = "C:\\CasaOS\\DATA"
            elif sys.platform == "darwin":
                path = "./CasaOS/DATA"
        with os.scandir(path) as iterator:
            entries = sorted(iterator, key=lambda entry: entry.name)
        listing = []
        for entry in entries:
            file_path = os.path.join(path, entry.name)
            try:
                link = os.path.realpath(file_path, strict=True)
            except OSError:
                link = file_path
            info = entry.stat(follow_symlinks=False)
            item = DirEntry(
                name=entry.name,
                path=file_path,
                is_dir=entry.is_dir(follow_symlinks=False),
                date=datetime.fromtimestamp(info.st_mtime),
                size=info.st_size,
            )
            if file_path != link:
                item.is_dir = os.path.isdir(link)
            listing.append(item)
        return listing

    def get_dir_path_one(self, path: str) -> DirEntry | None:
        """The entry for a single path, or None when it does not exist."""
        try:
            info = os.stat(path)
        except OSError:
            return None
        return DirEntry(
            name=os.path.basename(os.path.normpath(path)),
            path=path,
            is_dir=os.path.isdir(path),
            date=datetime.fromtimestamp(info.st_mtime),
            size=info.st_size,
        )

    # hardware

    def cpu_thermal_zone(self) -> str:
        """The thermal zone directory of the CPU, or an empty string when there is none."""
        if self._thermal_zone is not None:
            return self._thermal_zone
        stub = os.path.join(self.thermal_root, "thermal_zone")
        name = ""
        path = ""
        for index in range(_MAX_THERMAL_ZONES):
            path = f"{stub}{index}"
            if not os.path.exists(path):
                path = f"{stub}0" if name else ""
                break
            name = _read_text(os.path.join(path, "type")).removesuffix("\n")
            if name.startswith(_CPU_ZONE_TYPES):
                self._thermal_zone = path
                return path
        self._thermal_zone = path
        return path

    def cpu_temperature(self) -> int:
        """CPU temperature in degrees Celsius, 0 when unknown."""
        zone = self.cpu_thermal_zone()
        output = _read_text(os.path.join(zone, "temp")) if zone else "0"
        try:
            celsius = int(output.strip())
        except ValueError:
            celsius = 0
        if celsius > 1000:
            celsius //= 1000
        return celsius

    def cpu_power(self, energy_path: str = DEFAULT_ENERGY_PATH) -> dict[str, str]:
        """The RAPL energy counter with the time it was read."""
        data = {"timestamp": str(int(time.time()))}
        if os.path.exists(energy_path):
            data["value"] = _read_text(energy_path).strip()
        else:
            data["value"] = "0"
        return data

    def mem_info(self) -> dict[str, Any]:
        memory = psutil.virtual_memory()
        return {
            "total": memory.total,
            "available": memory.available,
            "used": memory.used,
            "free": memory.free,
            "usedPercent": _one_decimal(memory.percent),
        }

    def cpu_percent(self) -> float:
        """Total CPU use since the previous call, to one decimal."""
        return _one_decimal(psutil.cpu_percent(interval=None))

    def cpu_core_num(self) -> int:
        """Number of physical cores, 0 when unknown."""
        return psutil.cpu_count(logical=False) or 0

    def disk_info(self, path: str | None = None) -> dict[str, Any]:
        """Usage of the file system holding path (the root by default)."""
        if path is None:
            path = "C:" if sys.platform.startswith("win") else "/"
        usage = psutil.disk_usage(path)
        inodes_total = inodes_free = inodes_used = 0
        inodes_percent = 0.0
        if hasattr(os, "statvfs"):
            stat = os.statvfs(path)
            inodes_total = stat.f_files
            inodes_free = stat.f_ffree
            inodes_used = inodes_total - inodes_free
            if inodes_total:
                inodes_percent = inodes_used / inodes_total * 100
        return {
            "path": path,
            "total": usage.total,
            "free": usage.free,
            "used": usage.used,
            "usedPercent": _one_decimal(usage.percent),
            "inodesTotal": inodes_total,
            "inodesUsed": inodes_used,
            "inodesFree": inodes_free,
            "inodesUsedPercent": _one_decimal(inodes_percent),
        }

    # network

    def _helper(self, command: str) -> str:
        script = os.path.join(self.shell_path, "helper.sh")
        try:
            result = subprocess.run(
                ["bash", "-c", f"source {script} ;{command}"],
                capture_output=True,
                text=True,
            )
        except OSError:
            return ""
        return result.stdout

    def net_cards(self, physics: bool) -> list[str]:
        """Names of the network cards; only physical ones when physics is true."""
        kind = "2" if physics else "1"
        output = self._helper(f"GetNetCard {kind}")
        return [line for line in output.splitlines() if line]

    def net_state(self, name: str) -> str:
        """The raw state report of one network card."""
        return self._helper(f"CatNetCardState {name}")

    def net_counters(self) -> list[dict[str, Any]]:
        """Per-interface I/O counters."""
        counters = psutil.net_io_counters(pernic=True)
        return [
            {
                "name": name,
                "bytesSent": stats.bytes_sent,
                "bytesRecv": stats.bytes_recv,
                "packetsSent": stats.packets_sent,
                "packetsRecv": stats.packets_recv,
                "errin": stats.errin,
                "errout": stats.errout,
                "dropin": stats.dropin,
                "dropout": stats.dropout,
            }
            for name, stats in counters.items()
        ]

    # logs and power

    def casaos_logs(self) -> str:
        """The whole content of the service log file."""
        with open(
            os.path.join(self.log_path, self.log_name), encoding="utf-8", errors="replace"
        ) as handle:
            return handle.read()

    @staticmethod
    def _init(level: str) -> None:
        command = ["init", level]
        result = subprocess.run(command, capture_output=True)
        if result.returncode != 0:
            raise subprocess.CalledProcessError(
                result.returncode, command, result.stdout, result.stderr
            )

    def reboot(self) -> None:
        self._init("6")

    def shutdown(self) -> None:
        self._init("0")