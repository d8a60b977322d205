"""Commands and the tagged result carrying one command's outcome."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Mapping, Union

from .facts import Cpu, Date, DateTime, DiskInfo, Named, NetworkInterface, Ram, Time


class Command(str, Enum):
    """User-facing commands, named as typed on the command line."""

    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    DNS = "dns"
    INTERFACES = "interfaces"
    PUBLIC_IP = "public-ip"
    LOCAL_IP = "local-ip"
    HOSTNAME = "hostname"
    USERNAME = "username"
    DEVICE_NAME = "device-name"
    OS = "os"
    ARCHITECTURE = "architecture"
    CPU = "cpu"
    RAM = "ram"
    DISKS = "disks"


Fact = Union[Date, Time, DateTime, Named, Cpu, Ram, List[str], List[NetworkInterface], List[DiskInfo]]


@dataclass(frozen=True)
class CommandResult:
    """Outcome of exactly one command.

    ``command`` selects the variant and ``value`` is the probe output for it,
    stored as returned.
    """

    command: Command
    value: Fact


def ensure_exhaustive(table: Mapping[Command, object], consumer: str) -> None:
    """Fail loudly when ``table`` does not handle every command exactly."""
    missing = _names(set(Command) - set(table))
    unknown = _names(set(table) - set(Command))
    if missing or unknown:
        raise RuntimeError(f"{consumer} does not match the command set (missing: {missing}, unknown: {unknown})")


def _names(commands: Iterable[object]) -> List[str]:
    return sorted(str(getattr(command, "value", command)) for command in commands)
