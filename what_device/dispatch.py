"""Run one command: call its probe, wrap the outcome and render it."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

from rich.text import Text

from .errors import CommandFailed
from .formatting import render_json, render_styled
from .probes import Probes
from .results import Command, CommandResult, ensure_exhaustive

logger = logging.getLogger(__name__)


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"


ProbeCall = Callable[[Probes], Awaitable[Any]]

_PROBE_CALLS: Dict[Command, Tuple[str, ProbeCall]] = {
    Command.DATE: ("looking up the system's date failed", lambda probes: probes.date()),
    Command.TIME: ("looking up the system's time failed", lambda probes: probes.time()),
    Command.DATETIME: ("looking up the system's date and time failed", lambda probes: probes.datetime()),
    Command.DNS: ("listing DNS servers failed", lambda probes: probes.dns_servers()),
    Command.INTERFACES: ("listing network interfaces failed", lambda probes: probes.interfaces()),
    Command.PUBLIC_IP: ("looking up the public IP address failed", lambda probes: probes.public_ip()),
    Command.LOCAL_IP: ("looking up the local IP address failed", lambda probes: probes.local_ip()),
    Command.HOSTNAME: ("looking up the hostname failed", lambda probes: probes.hostname()),
    Command.USERNAME: ("looking up the username failed", lambda probes: probes.username()),
    Command.DEVICE_NAME: ("looking up the device name failed", lambda probes: probes.device_name()),
    Command.OS: ("looking up the operating system failed", lambda probes: probes.os()),
    Command.ARCHITECTURE: ("looking up the CPU architecture failed", lambda probes: probes.architecture()),
    Command.CPU: ("looking up CPU information failed", lambda probes: probes.cpu()),
    Command.RAM: ("looking up memory usage failed", lambda probes: probes.ram()),
    Command.DISKS: ("listing disks failed", lambda probes: probes.disks()),
}

ensure_exhaustive(_PROBE_CALLS, "dispatcher")

Rendered = Union[str, Text]

_RENDERERS: Dict[OutputFormat, Callable[[CommandResult], Rendered]] = {
    OutputFormat.TEXT: render_styled,
    OutputFormat.JSON: render_json,
}


def failure_context(command: Command) -> str:
    return _PROBE_CALLS[command][0]


async def collect(command: Command, probes: Probes) -> CommandResult:
    """Call the probe behind ``command`` once and wrap its output.

    A failing probe surfaces as :class:`CommandFailed` with the original
    exception as its cause.
    """
    context, call = _PROBE_CALLS[command]
    logger.debug("running %s", command.value)
    try:
        value = await call(probes)
    except Exception as exc:
        raise CommandFailed(context) from exc
    return CommandResult(command=command, value=value)


async def dispatch(
    command: Optional[Command],
    output_format: OutputFormat,
    probes: Probes,
    emit: Callable[[Rendered], Any] = print,
) -> Optional[CommandResult]:
    """Collect, render and emit ``command``; do nothing when no command is given."""
    if command is None:
        return None
    result = await collect(command, probes)
    emit(_RENDERERS[output_format](result))
    return result
