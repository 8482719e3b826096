"""Facts about the machine and process serving requests.

Everything here is read on demand; nothing is cached except the CPU model,
which cannot change while the process runs.
"""

import contextlib
import os
import platform
import socket
import time
from datetime import UTC, datetime
from functools import lru_cache
from pathlib import Path
from typing import Any

import psutil

from tenantry.infrastructure.constants import (
    CPUINFO_PATH,
    PERCENT_PRECISION,
    UNKNOWN,
)

_ZONEINFO_MARKER = "zoneinfo/"


def local_timezone_name() -> str:
    """Name of the local timezone, IANA style when it can be determined.

    Checks ``TZ``, then the ``/etc/localtime`` symlink, then falls back to
    the abbreviation reported by the C library (for example ``UTC``).
    """
    tz = os.environ.get("TZ", "").lstrip(":")
    if tz:
        return tz
    try:
        target = str(Path("/etc/localtime").resolve())
    except OSError:
        target = ""
    if _ZONEINFO_MARKER in target:
        return target.split(_ZONEINFO_MARKER, 1)[1]
    return datetime.now().astimezone().tzname() or UNKNOWN


@lru_cache(maxsize=1)
def cpu_model() -> str:
    """Human-readable CPU model name."""
    with contextlib.suppress(OSError):
        for line in Path(CPUINFO_PATH).read_text(encoding="utf-8").splitlines():
            if line.lower().startswith("model name"):
                return line.split(":", 1)[1].strip()
    return platform.processor() or UNKNOWN


def local_ip() -> str:
    """First non-loopback IPv4 address of any interface."""
    for addresses in psutil.net_if_addrs().values():
        for address in addresses:
            if address.family != socket.AF_INET:
                continue
            if not address.address.startswith("127."):
                return address.address
    return UNKNOWN


def process_uptime_seconds() -> float:
    """Seconds since this process started."""
    return max(0.0, time.time() - psutil.Process().create_time())


def host_uptime_seconds() -> float:
    """Seconds since the machine booted."""
    return max(0.0, time.time() - psutil.boot_time())


def system_info() -> dict[str, Any]:
    """Collect host facts for the info endpoint.

    Returns:
        dict[str, Any]: Hostname, OS, memory, CPU, network, uptime and clock
            facts, keyed the way the endpoint reports them.
    """
    memory = psutil.virtual_memory()
    used = memory.total - memory.available
    return {
        "hostname": socket.gethostname(),
        "platform": platform.system().lower(),
        "release": platform.release(),
        "arch": platform.machine(),
        "totalMem": memory.total,
        "usedMem": used,
        "memUsedPercent": round(used / memory.total * 100, PERCENT_PRECISION),
        "cpuModel": cpu_model(),
        "cpuCores": psutil.cpu_count() or 0,
        "ip": local_ip(),
        "uptimeSeconds": host_uptime_seconds(),
        "timezone": local_timezone_name(),
        "currentTime": datetime.now(UTC),
    }
