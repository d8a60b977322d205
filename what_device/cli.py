"""Entry point for the what command line tool."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List, Optional, Sequence, Union

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.text import Text

from . import __version__
from .config import get_settings
from .dispatch import OutputFormat, dispatch
from .errors import CommandFailed
from .probes import Probes, SystemProbes
from .results import Command

_HELP = {
    Command.DATE: "Display your system's date, e.g. Saturday, 8 April, 2023, week 14",
    Command.TIME: "Display your system's time and its deviation from network time",
    Command.DATETIME: "Display your system's date and time",
    Command.DNS: "List the configured DNS servers in resolution order",
    Command.INTERFACES: "List network interfaces with their addresses",
    Command.PUBLIC_IP: "Display the public IP address of this device",
    Command.LOCAL_IP: "Display the local IP address used for outbound traffic",
    Command.HOSTNAME: "Display the hostname",
    Command.USERNAME: "Display the current user's name",
    Command.DEVICE_NAME: "Display the device name",
    Command.OS: "Display the operating system name and version",
    Command.ARCHITECTURE: "Display the CPU architecture",
    Command.CPU: "Display the CPU brand, core count and frequency",
    Command.RAM: "Display memory usage",
    Command.DISKS: "List disks with their free space",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="what",
        description="Get essential information about your device: IP addresses, DNS servers, date, time and more.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=[fmt.value for fmt in OutputFormat],
        default=OutputFormat.TEXT.value,
        help="output format (default: text)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log probe activity to stderr")
    parser.add_argument("--no-ntp", action="store_true", help="skip the network time lookup")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subcommands = parser.add_subparsers(dest="command", metavar="COMMAND")
    for command in Command:
        subcommands.add_parser(command.value, help=_HELP[command], description=_HELP[command])
    return parser


def main(argv: Optional[Sequence[str]] = None, probes: Optional[Probes] = None) -> int:
    args = build_parser().parse_args(argv)
    command = Command(args.command) if args.command else None
    try:
        settings = get_settings()
        _configure_logging("DEBUG" if args.verbose else settings.log_level)
        if probes is None:
            if args.no_ntp:
                settings = settings.model_copy(update={"ntp_enabled": False})
            probes = SystemProbes(settings)
        asyncio.run(dispatch(command, OutputFormat(args.format), probes, emit=_emit))
    except Exception as exc:
        _print_error(exc)
        return 1
    return 0


def _emit(rendered: Union[str, Text]) -> None:
    if isinstance(rendered, Text):
        # styles are dropped when stdout is not a terminal
        Console(soft_wrap=True, highlight=False).print(rendered)
    else:
        print(rendered)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _print_error(exc: BaseException) -> None:
    console = Console(stderr=True, highlight=False)
    headline = exc.context if isinstance(exc, CommandFailed) else str(exc) or type(exc).__name__
    console.print(f"[bold red]Error:[/bold red] {escape(headline)}", markup=True, soft_wrap=True)

    causes: List[BaseException] = []
    cause = exc.__cause__
    while cause is not None and cause not in causes:
        causes.append(cause)
        cause = cause.__cause__
    for cause in causes:
        console.print(f"Caused by: {str(cause) or type(cause).__name__}", markup=False, soft_wrap=True)


def run() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    run()
