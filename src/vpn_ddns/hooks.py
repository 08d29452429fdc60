"""Translate OpenVPN hook arguments and environment into raw events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .models import InvalidRequest, Operation

PUBLIC_ADDRESS_VARS = ("trusted_ip", "trusted_ip6")
CLIENT_ADDRESS_VARS = ("ifconfig_pool_remote_ip", "ifconfig_pool_remote_ip6")
SERVER_ADDRESS_VARS = ("ifconfig_local", "ifconfig_ipv6_local")


@dataclass(frozen=True)
class HookEvent:
    """Unvalidated inputs for one reconciliation."""

    operation: Operation
    address: str
    common_name: str
    public_address: str | None = None


def _first_env(environ: Mapping[str, str], names: tuple[str, ...]) -> str | None:
    """Return the first non-empty variable among names."""
    for name in names:
        value = (environ.get(name) or "").strip()
        if value:
            return value
    return None


def _env_values(environ: Mapping[str, str], names: tuple[str, ...]) -> list[str]:
    """Return every non-empty variable among names, in order."""
    return [value for value in ((environ.get(name) or "").strip() for name in names) if value]


def learn_address_events(
    operation: str,
    address: str,
    common_name: str | None,
    environ: Mapping[str, str],
    public_address: str | None = None,
) -> list[HookEvent]:
    """Events for 'learn-address OP ADDR [CN]'; CN is omitted by OpenVPN on delete."""
    op = Operation.parse(operation)
    if op.adds_records and not (common_name or "").strip():
        raise InvalidRequest(f"learn-address {op.value} requires a common name.")
    return [
        HookEvent(
            operation=op,
            address=address,
            common_name=(common_name or "").strip(),
            public_address=public_address or _first_env(environ, PUBLIC_ADDRESS_VARS),
        )
    ]


def client_events(operation: str, environ: Mapping[str, str]) -> list[HookEvent]:
    """Events for client-connect/client-disconnect, one per assigned address."""
    op = Operation.parse(operation)
    common_name = (environ.get("common_name") or "").strip()
    if not common_name:
        raise InvalidRequest("Environment variable 'common_name' is not set.")
    addresses = _env_values(environ, CLIENT_ADDRESS_VARS)
    if not addresses:
        raise InvalidRequest(f"No pool address assigned to client '{common_name}'.")
    public = _first_env(environ, PUBLIC_ADDRESS_VARS)
    events = []
    for index, address in enumerate(addresses):
        events.append(
            HookEvent(
                operation=op,
                address=address,
                common_name=common_name,
                public_address=public if index == 0 else None,
            )
        )
    return events


def server_up_events(name: str | None, environ: Mapping[str, str]) -> list[HookEvent]:
    """Events for the server 'up' hook, publishing the tunnel's local addresses."""
    if not (name or "").strip():
        raise InvalidRequest("A server name is required (--name or 'server_name' in the configuration).")
    addresses = _env_values(environ, SERVER_ADDRESS_VARS)
    if not addresses:
        raise InvalidRequest("Neither 'ifconfig_local' nor 'ifconfig_ipv6_local' is set.")
    return [HookEvent(operation=Operation.ADD, address=address, common_name=name.strip()) for address in addresses]
