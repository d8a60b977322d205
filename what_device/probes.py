"""Collect live facts about the device, its clock and its network."""

from __future__ import annotations

import asyncio
import getpass
import ipaddress
import logging
import platform
import socket
import subprocess
import sys
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Protocol, Sequence

import distro
import httpx
import ntplib
import psutil

from .config import WhatSettings, get_settings
from .errors import ProbeError
from .facts import (
    Cpu,
    Date,
    DateTime,
    DiskInfo,
    Named,
    NamedKind,
    NetworkInterface,
    Ram,
    Time,
    create_named,
)

logger = logging.getLogger(__name__)

RESOLV_CONF = Path("/etc/resolv.conf")
CPUINFO = Path("/proc/cpuinfo")
MACHINE_INFO = Path("/etc/machine-info")

_CPU_BRAND_KEYS = ("model name", "Model", "Hardware", "cpu model", "cpu")


class Probes(Protocol):
    """One coroutine per fact; each returns the fact or raises."""

    async def date(self) -> Date: ...

    async def time(self) -> Time: ...

    async def datetime(self) -> DateTime: ...

    async def dns_servers(self) -> List[str]: ...

    async def interfaces(self) -> List[NetworkInterface]: ...

    async def public_ip(self) -> Named: ...

    async def local_ip(self) -> Named: ...

    async def hostname(self) -> Named: ...

    async def username(self) -> Named: ...

    async def device_name(self) -> Named: ...

    async def os(self) -> Named: ...

    async def architecture(self) -> Named: ...

    async def cpu(self) -> Cpu: ...

    async def ram(self) -> Ram: ...

    async def disks(self) -> List[DiskInfo]: ...


class SystemProbes:
    """Probes backed by the running machine.

    Blocking sources (psutil, file reads, subprocesses, sockets, NTP) run in a
    worker thread so the event loop only ever waits on one call.
    """

    def __init__(
        self,
        settings: Optional[WhatSettings] = None,
        *,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._http_transport = http_transport

    async def date(self) -> Date:
        return Date.from_datetime(_now())

    async def time(self) -> Time:
        moment = _now()
        return Time.from_datetime(moment, await self._ntp_deviation())

    async def datetime(self) -> DateTime:
        moment = _now()
        deviation = await self._ntp_deviation()
        return DateTime(date=Date.from_datetime(moment), time=Time.from_datetime(moment, deviation))

    async def dns_servers(self) -> List[str]:
        try:
            text = await asyncio.to_thread(RESOLV_CONF.read_text, encoding="utf-8")
        except OSError as exc:
            raise ProbeError(f"could not read the resolver configuration {RESOLV_CONF}") from exc
        servers = parse_resolv_conf(text)
        logger.debug("found %d DNS servers in %s", len(servers), RESOLV_CONF)
        return servers

    async def interfaces(self) -> List[NetworkInterface]:
        return await asyncio.to_thread(_list_interfaces)

    async def public_ip(self) -> Named:
        return await create_named(self._fetch_public_ip, NamedKind.PUBLIC_IP)

    async def local_ip(self) -> Named:
        target = self.settings.local_ip_probe_address
        return await create_named(_in_thread(_outbound_address, target), NamedKind.LOCAL_IP)

    async def hostname(self) -> Named:
        return await create_named(_in_thread(socket.gethostname), NamedKind.HOSTNAME)

    async def username(self) -> Named:
        return await create_named(_in_thread(getpass.getuser), NamedKind.USERNAME)

    async def device_name(self) -> Named:
        return await create_named(_in_thread(_device_name), NamedKind.DEVICE_NAME)

    async def os(self) -> Named:
        return await create_named(_in_thread(_os_name), NamedKind.OS)

    async def architecture(self) -> Named:
        return await create_named(_in_thread(_architecture), NamedKind.ARCHITECTURE)

    async def cpu(self) -> Cpu:
        return await asyncio.to_thread(_cpu)

    async def ram(self) -> Ram:
        return await asyncio.to_thread(_ram)

    async def disks(self) -> List[DiskInfo]:
        return await asyncio.to_thread(_list_disks)

    async def _ntp_deviation(self) -> Optional[float]:
        """Seconds the network clock is ahead of the local clock, None when disabled."""
        if not self.settings.ntp_enabled:
            return None
        server = self.settings.ntp_server
        logger.debug("querying %s for the network time", server)
        client = ntplib.NTPClient()
        response = await asyncio.to_thread(client.request, server, version=3, timeout=self.settings.ntp_timeout)
        return response.offset

    async def _fetch_public_ip(self) -> str:
        url = self.settings.public_ip_url
        logger.debug("asking %s for the public address", url)
        async with httpx.AsyncClient(timeout=self.settings.http_timeout, transport=self._http_transport) as client:
            response = await client.get(url)
            response.raise_for_status()
        return parse_ip_address(response.text)


def dedupe(items: Iterable[str]) -> List[str]:
    """Drop repeated items, keeping the first occurrence of each."""
    seen = set()
    unique: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


def parse_resolv_conf(text: str) -> List[str]:
    """Nameserver addresses in resolution order, without duplicates."""
    servers = []
    for raw_line in text.splitlines():
        parts = raw_line.split()
        if len(parts) >= 2 and parts[0] == "nameserver":
            servers.append(parts[1])
    return dedupe(servers)


def parse_key_value_lines(text: str) -> Dict[str, str]:
    """Parse ``KEY=value`` files such as machine-info."""
    data: Dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            data[key] = value.strip().strip('"').strip("'")
    return data


def parse_cpu_brand(cpuinfo: str) -> Optional[str]:
    fields: Dict[str, str] = {}
    for line in cpuinfo.splitlines():
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        fields.setdefault(key.strip(), value.strip())
    for key in _CPU_BRAND_KEYS:
        if fields.get(key):
            return fields[key]
    return None


def parse_ip_address(text: str) -> str:
    candidate = text.strip()
    try:
        return str(ipaddress.ip_address(candidate))
    except ValueError as exc:
        raise ProbeError(f"unexpected public address reply {candidate[:64]!r}") from exc


def _now() -> datetime:
    return datetime.now().astimezone()


def _in_thread(func: Callable[..., str], *args: object) -> Callable[[], Awaitable[str]]:
    return lambda: asyncio.to_thread(func, *args)


def _run(args: Sequence[str]) -> Optional[str]:
    try:
        completed = subprocess.run(args, capture_output=True, text=True, check=True, timeout=5)
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("%s failed: %s", args[0], exc)
        return None
    return completed.stdout.strip() or None


def _read_key_values(path: Path) -> Dict[str, str]:
    try:
        return parse_key_value_lines(path.read_text(encoding="utf-8"))
    except OSError as exc:
        logger.debug("could not read %s: %s", path, exc)
        return {}


def _outbound_address(target: str) -> str:
    # connect() on a datagram socket only selects a route, no packet leaves
    family = socket.AF_INET6 if ":" in target else socket.AF_INET
    with socket.socket(family, socket.SOCK_DGRAM) as sock:
        sock.connect((target, 80))
        return sock.getsockname()[0]


def _device_name() -> str:
    if sys.platform == "darwin":
        name = _run(["scutil", "--get", "ComputerName"])
        if name:
            return name
    elif sys.platform.startswith("linux"):
        name = _read_key_values(MACHINE_INFO).get("PRETTY_HOSTNAME")
        if name:
            return name
    return socket.gethostname()


def _os_name() -> str:
    system = platform.system()
    if system == "Darwin":
        return f"macOS {platform.mac_ver()[0]}".strip()
    if system == "Linux":
        pretty = distro.name(pretty=True)
        if pretty:
            return pretty
    return f"{system} {platform.release()}".strip()


def _architecture() -> str:
    return platform.machine() or "unknown"


def _cpu_brand() -> str:
    brand: Optional[str] = None
    if sys.platform.startswith("linux"):
        try:
            brand = parse_cpu_brand(CPUINFO.read_text(encoding="utf-8"))
        except OSError as exc:
            logger.debug("could not read %s: %s", CPUINFO, exc)
    elif sys.platform == "darwin":
        brand = _run(["sysctl", "-n", "machdep.cpu.brand_string"])
    return brand or platform.processor() or platform.machine() or "unknown"


def _cpu() -> Cpu:
    core_count = psutil.cpu_count(logical=True)
    if not core_count:
        raise ProbeError("no CPU entries available")
    frequency = psutil.cpu_freq()
    return Cpu(
        brand=_cpu_brand(),
        core_count=core_count,
        frequency_mhz=int(round(frequency.current)) if frequency else 0,
    )


def _ram() -> Ram:
    memory = psutil.virtual_memory()
    return Ram(
        total=memory.total,
        used=min(memory.used, memory.total),
        free=memory.free,
        available=memory.available,
    )


def _list_interfaces() -> List[NetworkInterface]:
    stats = psutil.net_if_stats()
    interfaces: List[NetworkInterface] = []
    for name, addresses in psutil.net_if_addrs().items():
        mac_address = None
        ipv4: List[str] = []
        ipv6: List[str] = []
        for address in addresses:
            if address.family == socket.AF_INET:
                ipv4.append(address.address)
            elif address.family == socket.AF_INET6:
                ipv6.append(address.address)
            elif address.family == psutil.AF_LINK:
                mac_address = address.address
        stat = stats.get(name)
        interfaces.append(
            NetworkInterface(
                name=name,
                is_up=bool(stat and stat.isup),
                mac_address=mac_address,
                ipv4=ipv4,
                ipv6=ipv6,
            )
        )
    return interfaces


def _list_disks() -> List[DiskInfo]:
    disks: List[DiskInfo] = []
    seen = set()
    for partition in psutil.disk_partitions(all=False):
        if partition.device in seen:
            continue
        try:
            usage = psutil.disk_usage(partition.mountpoint)
        except OSError as exc:
            logger.debug("skipping %s: %s", partition.mountpoint, exc)
            continue
        seen.add(partition.device)
        disks.append(
            DiskInfo(
                name=partition.device,
                mount_point=partition.mountpoint,
                type=partition.fstype,
                total_space_bytes=usage.total,
                free_space_bytes=min(usage.free, usage.total),
            )
        )
    return disks
