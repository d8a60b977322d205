"""Runtime settings read from ``WHAT_*`` environment variables or a ``.env`` file."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class WhatSettings(BaseSettings):
    # Network clock used to measure the local clock's deviation
    ntp_enabled: bool = True
    ntp_server: str = "pool.ntp.org"
    ntp_timeout: float = 5.0

    # Echo service returning the caller's address as plain text
    public_ip_url: str = "https://api.ipify.org"
    http_timeout: float = 5.0

    # Any routable address; only used to pick the outbound interface, nothing is sent
    local_ip_probe_address: str = "8.8.8.8"

    log_level: str = "WARNING"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="WHAT_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> WhatSettings:
    return WhatSettings()


def reset_settings_cache() -> None:
    get_settings.cache_clear()
