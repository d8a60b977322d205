from typing import Dict, List

import pytest

from what_device.facts import Cpu, Date, DateTime, DiskInfo, Named, NamedKind, NetworkInterface, Ram, Time


def make_date() -> Date:
    return Date(day_name="Saturday", day_number=8, month_name="April", year=2023, week_number=14)


def make_time(deviation=0.25) -> Time:
    return Time(time="14:03:22", utc_offset="+02:00", ntp_deviation_seconds=deviation)


class FakeProbes:
    """Deterministic probes; ``failures`` maps a probe name to the exception it raises."""

    def __init__(self, failures: Dict[str, Exception] = None) -> None:
        self.failures = failures or {}
        self.calls: List[str] = []
        self.values = {
            "date": make_date(),
            "time": make_time(),
            "datetime": DateTime(date=make_date(), time=make_time()),
            "dns_servers": ["1.1.1.1", "8.8.8.8"],
            "interfaces": [
                NetworkInterface(name="lo", is_up=True, ipv4=["127.0.0.1"], ipv6=["::1"]),
                NetworkInterface(
                    name="eth0", is_up=False, mac_address="00:11:22:33:44:55", ipv4=["192.168.1.20"]
                ),
            ],
            "public_ip": Named(NamedKind.PUBLIC_IP, "203.0.113.7"),
            "local_ip": Named(NamedKind.LOCAL_IP, "192.168.1.20"),
            "hostname": Named(NamedKind.HOSTNAME, "workstation"),
            "username": Named(NamedKind.USERNAME, "alice"),
            "device_name": Named(NamedKind.DEVICE_NAME, "Alice's Laptop"),
            "os": Named(NamedKind.OS, "Ubuntu 22.04.3 LTS"),
            "architecture": Named(NamedKind.ARCHITECTURE, "x86_64"),
            "cpu": Cpu(brand="Intel(R) Core(TM) i7-8550U", core_count=8, frequency_mhz=1992),
            "ram": Ram(total=16 * 1024**3, used=6 * 1024**3, free=2 * 1024**3, available=9 * 1024**3),
            "disks": [
                DiskInfo(
                    name="/dev/nvme0n1p2",
                    mount_point="/",
                    type="ext4",
                    total_space_bytes=500 * 1024**3,
                    free_space_bytes=125 * 1024**3,
                )
            ],
        }

    def __getattr__(self, name):
        if name not in self.__dict__.get("values", {}):
            raise AttributeError(name)

        async def probe():
            self.calls.append(name)
            if name in self.failures:
                raise self.failures[name]
            return self.values[name]

        return probe


@pytest.fixture
def probes() -> FakeProbes:
    return FakeProbes()


@pytest.fixture
def make_probes():
    return FakeProbes
