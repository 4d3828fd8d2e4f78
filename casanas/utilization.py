"""Snapshot of CPU, memory and network use as reported to the dashboard."""

from __future__ import annotations

import platform
import time
from typing import Any, Mapping

CPUINFO_PATH = "/proc/cpuinfo"


def cpu_model(model_name: str) -> str:
    """The CPU vendor family: "intel", "amd", or "arm" for anything else."""
    name = (model_name or "").strip().lower()
    if "intel" in name:
        return "intel"
    if "amd" in name:
        return "amd"
    return "arm"


def _cpu_model_name(cpuinfo_path: str = CPUINFO_PATH) -> str:
    """The model name of the first CPU, or an empty string when unknown."""
    try:
        with open(cpuinfo_path, encoding="utf-8", errors="replace") as handle:
            for line in handle:
                key, sep, value = line.partition(":")
                if sep and key.strip().lower() == "model name":
                    return value.strip()
    except OSError:
        pass
    return platform.processor() or ""


def net_status(system) -> list[dict[str, Any]]:
    """I/O counters of the physical network cards, each with its state and read time."""
    cards = set(system.net_cards(True))
    result = []
    for counters in system.net_counters():
        name = counters.get("name")
        if name not in cards:
            continue
        item = dict(counters)
        item["state"] = system.net_state(name).strip()
        item["time"] = int(time.time())
        result.append(item)
    return result


def utilization(system, extra: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """CPU, memory and network use, followed by the extra status values."""
    cpu_data = {
        "percent": system.cpu_percent(),
        "num": system.cpu_core_num(),
        "temperature": system.cpu_temperature(),
        "power": system.cpu_power(),
        "model": cpu_model(_cpu_model_name()),
    }
    data: dict[str, Any] = {
        "cpu": cpu_data,
        "mem": system.mem_info(),
        "net": net_status(system),
    }
    if extra:
        data.update(extra)
    return data