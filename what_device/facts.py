"""Typed facts returned by probes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, List, Optional


class NamedKind(str, Enum):
    """Field name attached to a single-string fact."""

    HOSTNAME = "hostname"
    USERNAME = "username"
    DEVICE_NAME = "device_name"
    OS = "os"
    ARCHITECTURE = "architecture"
    PUBLIC_IP = "public_ip"
    LOCAL_IP = "local_ip"


@dataclass(frozen=True)
class Named:
    kind: NamedKind
    value: str


async def create_named(producer: Callable[[], Awaitable[str]], kind: NamedKind) -> Named:
    """Await ``producer`` once and pair its value with ``kind``."""
    value = await producer()
    return Named(kind=kind, value=value)


@dataclass(frozen=True)
class Date:
    day_name: str
    day_number: int
    month_name: str
    year: int
    week_number: int

    @classmethod
    def from_datetime(cls, moment: datetime) -> "Date":
        return cls(
            day_name=moment.strftime("%A"),
            day_number=moment.day,
            month_name=moment.strftime("%B"),
            year=moment.year,
            week_number=int(moment.strftime("%U")),
        )


@dataclass(frozen=True)
class Time:
    time: str
    utc_offset: str
    ntp_deviation_seconds: Optional[float] = None

    @classmethod
    def from_datetime(cls, moment: datetime, ntp_deviation_seconds: Optional[float] = None) -> "Time":
        return cls(
            time=moment.strftime("%H:%M:%S"),
            utc_offset=format_utc_offset(moment),
            ntp_deviation_seconds=ntp_deviation_seconds,
        )


@dataclass(frozen=True)
class DateTime:
    date: Date
    time: Time


@dataclass(frozen=True)
class Cpu:
    brand: str
    core_count: int
    frequency_mhz: int


@dataclass(frozen=True)
class Ram:
    total: int
    used: int
    free: int
    available: int


@dataclass(frozen=True)
class DiskInfo:
    name: str
    mount_point: str
    type: str
    total_space_bytes: int
    free_space_bytes: int


@dataclass(frozen=True)
class NetworkInterface:
    name: str
    is_up: bool
    mac_address: Optional[str] = None
    ipv4: List[str] = field(default_factory=list)
    ipv6: List[str] = field(default_factory=list)


def format_utc_offset(moment: datetime) -> str:
    """Return the UTC offset of an aware datetime as ``+HH:MM``."""
    offset = moment.utcoffset()
    if offset is None:
        return "+00:00"
    minutes = int(offset.total_seconds() // 60)
    sign = "-" if minutes < 0 else "+"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"
