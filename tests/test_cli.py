import json

import pytest

from what_device.cli import build_parser, main
from what_device.config import reset_settings_cache
from what_device.errors import ProbeError
from what_device.results import Command


def test_no_command_prints_nothing_and_succeeds(probes, capsys):
    assert main([], probes=probes) == 0
    captured = capsys.readouterr()
    assert captured.out == ""
    assert probes.calls == []


def test_text_is_the_default_format(probes, capsys):
    assert main(["date"], probes=probes) == 0
    assert capsys.readouterr().out == "Saturday, 8 April, 2023, week 14\n"


def test_json_format(probes, capsys):
    assert main(["--format", "json", "cpu"], probes=probes) == 0
    assert json.loads(capsys.readouterr().out) == {
        "brand": "Intel(R) Core(TM) i7-8550U",
        "core_count": 8,
        "frequency_mhz": 1992,
    }


def test_json_output_is_pretty_printed(probes, capsys):
    main(["-f", "json", "dns"], probes=probes)
    assert capsys.readouterr().out == '[\n  "1.1.1.1",\n  "8.8.8.8"\n]\n'


def test_failure_prints_cause_chain_and_exits_nonzero(make_probes, capsys):
    cause = ProbeError("no CPU entries available")
    probes = make_probes(failures={"cpu": cause})

    assert main(["cpu"], probes=probes) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "looking up CPU information failed" in captured.err
    assert "no CPU entries available" in captured.err


def test_every_command_is_a_subcommand():
    parser = build_parser()
    for command in Command:
        assert parser.parse_args([command.value]).command == command.value


def test_unknown_format_is_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--format", "yaml", "date"])


@pytest.fixture
def fresh_settings():
    reset_settings_cache()
    yield
    reset_settings_cache()


def test_each_cause_gets_its_own_line(make_probes, capsys):
    root = OSError("[Errno 2] No such file or directory: '/etc/resolv.conf'")
    failure = ProbeError("could not read the resolver configuration")
    failure.__cause__ = root
    probes = make_probes(failures={"dns_servers": failure})

    assert main(["dns"], probes=probes) == 1
    lines = capsys.readouterr().err.splitlines()
    assert lines == [
        "Error: listing DNS servers failed",
        "Caused by: could not read the resolver configuration",
        "Caused by: [Errno 2] No such file or directory: '/etc/resolv.conf'",
    ]


def test_invalid_setting_is_reported_as_error(probes, capsys, monkeypatch, fresh_settings):
    monkeypatch.setenv("WHAT_NTP_TIMEOUT", "abc")

    assert main(["date"], probes=probes) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("Error:")
    assert "ntp_timeout" in captured.err
    assert probes.calls == []


def test_invalid_log_level_is_reported_as_error(probes, capsys, monkeypatch, fresh_settings):
    monkeypatch.setenv("WHAT_LOG_LEVEL", "CHATTY")

    assert main(["date"], probes=probes) == 1
    assert capsys.readouterr().err.startswith("Error:")
    assert probes.calls == []


def test_disk_text_is_plain_when_piped(probes, capsys):
    assert main(["disks"], probes=probes) == 0
    out = capsys.readouterr().out
    assert "\x1b[" not in out
    assert out == "/dev/nvme0n1p2 on /, ext4, 125.0 GiB free of 500.0 GiB (25% free)\n"
