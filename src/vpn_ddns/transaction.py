"""Compose zone matches into an nsupdate transaction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from .config import AppConfig
from .models import Address, RecordChangeRequest, Transaction
from .zones import ZoneSet, match_reverse_zone, match_zone, normalize_name

LOG = logging.getLogger("vpn_ddns")


@dataclass(frozen=True)
class ZoneBlock:
    """Delete (and optional add) commands for a single zone."""

    zone: str
    commands: tuple[str, ...]


def _forward_block(
    address: Address,
    name: str,
    zones: ZoneSet,
    request: RecordChangeRequest,
    ttl: int,
) -> ZoneBlock | None:
    """Return the A/AAAA block for an address, or None without a zone match."""
    match = match_zone(name, zones)
    if match is None:
        return None
    rtype = address.record_type
    commands = [f"update delete {match.fqdn}. {rtype}"]
    if request.operation.adds_records:
        commands.append(f"update add {match.fqdn}. {ttl} {rtype} {address.text}")
    return ZoneBlock(zone=match.zone, commands=tuple(commands))


def _reverse_block(address: Address, request: RecordChangeRequest, config: AppConfig) -> ZoneBlock | None:
    """Return the PTR block for an address, or None without a reverse zone."""
    zone = match_reverse_zone(address, config.reverse_zones)
    if zone is None:
        return None
    commands = [f"update delete {address.reverse_name}. PTR"]
    if request.operation.adds_records:
        target = normalize_name(request.common_name)
        if not target:
            LOG.debug("No usable common name for PTR of %s; skipping reverse zone %s", address.text, zone)
            return None
        commands.append(f"update add {address.reverse_name}. {config.ttl} PTR {target}")
    return ZoneBlock(zone=zone, commands=tuple(commands))


def _realms(request: RecordChangeRequest, config: AppConfig) -> Iterator[tuple[Address, ZoneSet]]:
    """Yield (address, forward zones) per address realm present in the request."""
    yield request.address, config.private_zones
    if request.public_address is not None:
        yield request.public_address, config.public_zones


def build_blocks(request: RecordChangeRequest, config: AppConfig) -> list[ZoneBlock]:
    """Return the zone blocks for a request in dispatch order."""
    blocks: list[ZoneBlock] = []
    for address, zones in _realms(request, config):
        forward = _forward_block(address, request.common_name, zones, request, config.ttl)
        if forward is not None:
            blocks.append(forward)
        reverse = _reverse_block(address, request, config)
        if reverse is not None:
            blocks.append(reverse)
    return blocks


def _header(config: AppConfig) -> list[str]:
    """Return the server/key directives that open a transaction."""
    server = f"server {config.name_server}"
    if config.name_server_port:
        server = f"{server} {config.name_server_port}"
    lines = [server]
    if config.tsig is not None:
        lines.append(config.tsig.directive())
    return lines


def build_transaction(request: RecordChangeRequest, config: AppConfig) -> Transaction:
    """Build the delete-then-add transaction for a request.

    Returns an empty transaction when neither forward nor reverse zones
    match; callers must not dispatch it. With batch_all_zones every zone
    block is committed by one trailing 'send', otherwise each block gets
    its own.
    """
    blocks = build_blocks(request, config)
    if not blocks:
        return Transaction()

    lines = _header(config)
    for block in blocks:
        lines.append(f"zone {block.zone}")
        lines.extend(block.commands)
        if not config.batch_all_zones:
            lines.append("send")
    if config.batch_all_zones:
        lines.append("send")
    return Transaction(lines=tuple(lines), zones=tuple(block.zone for block in blocks))
