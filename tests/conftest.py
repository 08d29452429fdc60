"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Callable

import pytest

from vpn_ddns.config import AppConfig, TsigKey
from vpn_ddns.zones import ReverseZoneSet, ZoneSet


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the host environment out of configuration loading."""
    for name in ("LOG_LEVEL", "NSUPDATE_BIN", "VPN_DDNS_CONFIG", "trusted_ip", "trusted_ip6"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_config() -> Callable[..., AppConfig]:
    """Factory for AppConfig values with small overridable defaults."""

    def _make(
        zones=("corp.example",),
        reverse_zones=("2.0.192.in-addr.arpa",),
        search_domain=None,
        public_zones=(),
        public_search_domain=None,
        **overrides,
    ) -> AppConfig:
        return AppConfig(
            name_server=overrides.pop("name_server", "ns1.corp.example"),
            private_zones=ZoneSet.from_strings(zones, search_domain),
            public_zones=ZoneSet.from_strings(public_zones, public_search_domain),
            reverse_zones=ReverseZoneSet.from_strings(reverse_zones),
            **overrides,
        )

    return _make


@pytest.fixture
def config(make_config) -> AppConfig:
    """Single-zone configuration used by the end-to-end scenarios."""
    return make_config()


@pytest.fixture
def tsig_key() -> TsigKey:
    """Sample TSIG key."""
    return TsigKey(name="vpn-ddns", algorithm="hmac-sha256", secret="c2VjcmV0LXZhbHVl")


@pytest.fixture
def write_config(tmp_path) -> Callable[..., Path]:
    """Write a configuration document and return its path."""

    def _write(content: str, name: str = "vpn-ddns.yaml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def basic_config_text() -> str:
    """Minimal YAML configuration matching the default fixture."""
    return (
        "name_server: ns1.corp.example\n"
        "zones:\n"
        "  - corp.example\n"
        "reverse_zones:\n"
        "  - 2.0.192.in-addr.arpa\n"
        "updater_path: /usr/bin/nsupdate\n"
    )
