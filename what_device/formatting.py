"""Text and structured renderings of command results."""

from __future__ import annotations

import json
import math
from dataclasses import asdict
from typing import Any, Callable, Dict, List, Sequence

from rich.text import Text

from .errors import RenderError
from .facts import Cpu, Date, DateTime, DiskInfo, Named, NetworkInterface, Ram, Time
from .results import Command, CommandResult, ensure_exhaustive


def format_bytes(num: float) -> str:
    suffixes = ["B", "KiB", "MiB", "GiB", "TiB"]
    value = float(num)
    for suffix in suffixes:
        if value < 1024 or suffix == suffixes[-1]:
            return f"{value:.1f} {suffix}"
        value /= 1024
    return f"{value:.1f} TiB"


def free_space_percentage(disk: DiskInfo) -> int:
    """Free share of the disk in whole percent, 0 for a disk reporting no size."""
    if disk.total_space_bytes <= 0:
        return 0
    # half away from zero, not banker's rounding
    return int(math.floor(disk.free_space_bytes / disk.total_space_bytes * 100 + 0.5))


def format_date(date: Date) -> str:
    return f"{date.day_name}, {date.day_number} {date.month_name}, {date.year}, week {date.week_number}"


def format_time(time: Time) -> str:
    text = f"{time.time} UTC{time.utc_offset}"
    if time.ntp_deviation_seconds is not None:
        text += f", {time.ntp_deviation_seconds:+.3f}s from network time"
    return text


def format_cpu(cpu: Cpu) -> str:
    return f"{cpu.brand}, {cpu.core_count} cores running at {cpu.frequency_mhz / 1000:.1f} GHz"


def format_ram(ram: Ram) -> str:
    return (
        f"{format_bytes(ram.used)} used of {format_bytes(ram.total)}, "
        f"{format_bytes(ram.available)} available ({format_bytes(ram.free)} free)"
    )


def free_space_style(percentage: int) -> str:
    if percentage < 10:
        return "red"
    if percentage < 20:
        return "yellow"
    return "green"


def styled_disk(disk: DiskInfo) -> Text:
    percentage = free_space_percentage(disk)
    style = free_space_style(percentage)
    return Text.assemble(
        (disk.name, "bold cyan"),
        f" on {disk.mount_point}, ",
        (disk.type, "bright_white"),
        ", ",
        (format_bytes(disk.free_space_bytes), style),
        f" free of {format_bytes(disk.total_space_bytes)} (",
        (str(percentage), style),
        "% free)",
    )


def format_disk(disk: DiskInfo) -> str:
    return styled_disk(disk).plain


def format_interface(interface: NetworkInterface) -> str:
    parts = [interface.name, "up" if interface.is_up else "down"]
    if interface.mac_address:
        parts.append(interface.mac_address)
    parts.extend(interface.ipv4)
    parts.extend(interface.ipv6)
    return ", ".join(parts)


def _lines(items: Sequence[Any], rule: Callable[[Any], str]) -> str:
    return "\n".join(rule(item) for item in items)


def _named_text(named: Named) -> str:
    return named.value


def _named_data(named: Named) -> Dict[str, str]:
    return {named.kind.value: named.value}


def _datetime_text(moment: DateTime) -> str:
    return f"{format_date(moment.date)}\n{format_time(moment.time)}"


def _records(items: Sequence[Any]) -> List[Dict[str, Any]]:
    return [asdict(item) for item in items]


_TEXT_RULES: Dict[Command, Callable[[Any], str]] = {
    Command.DATE: format_date,
    Command.TIME: format_time,
    Command.DATETIME: _datetime_text,
    Command.DNS: lambda servers: _lines(servers, str),
    Command.INTERFACES: lambda interfaces: _lines(interfaces, format_interface),
    Command.PUBLIC_IP: _named_text,
    Command.LOCAL_IP: _named_text,
    Command.HOSTNAME: _named_text,
    Command.USERNAME: _named_text,
    Command.DEVICE_NAME: _named_text,
    Command.OS: _named_text,
    Command.ARCHITECTURE: _named_text,
    Command.CPU: format_cpu,
    Command.RAM: format_ram,
    Command.DISKS: lambda disks: _lines(disks, format_disk),
}

_DATA_RULES: Dict[Command, Callable[[Any], Any]] = {
    Command.DATE: asdict,
    Command.TIME: asdict,
    Command.DATETIME: asdict,
    Command.DNS: list,
    Command.INTERFACES: _records,
    Command.PUBLIC_IP: _named_data,
    Command.LOCAL_IP: _named_data,
    Command.HOSTNAME: _named_data,
    Command.USERNAME: _named_data,
    Command.DEVICE_NAME: _named_data,
    Command.OS: _named_data,
    Command.ARCHITECTURE: _named_data,
    Command.CPU: asdict,
    Command.RAM: asdict,
    Command.DISKS: _records,
}

ensure_exhaustive(_TEXT_RULES, "text renderer")
ensure_exhaustive(_DATA_RULES, "structured renderer")


def render_text(result: CommandResult) -> str:
    """Human-readable rendering of a result."""
    return _TEXT_RULES[result.command](result.value)


def render_styled(result: CommandResult) -> Text:
    """Text rendering with terminal styles; its plain form is `render_text`."""
    if result.command is Command.DISKS:
        return Text("\n").join(styled_disk(disk) for disk in result.value)
    return Text(render_text(result))


def to_data(result: CommandResult) -> Any:
    """Structured rendering of a result: always a mapping or a list."""
    return _DATA_RULES[result.command](result.value)


def render_json(result: CommandResult) -> str:
    try:
        return json.dumps(to_data(result), ensure_ascii=False, indent=2)
    except (TypeError, ValueError) as exc:
        raise RenderError(f"encoding the {result.command.value} result as JSON failed") from exc
