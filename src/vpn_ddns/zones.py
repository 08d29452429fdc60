"""Forward and reverse zone selection."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from .models import Address, ConfigurationError

DISALLOWED_CHARS = re.compile(r"[^A-Za-z0-9.-]")
V4_REVERSE_SUFFIX = "in-addr.arpa"
V6_REVERSE_SUFFIX = "ip6.arpa"


def normalize_name(name: str | None) -> str:
    """Strip disallowed characters and outer dots, then lower-case."""
    if not name:
        return ""
    return DISALLOWED_CHARS.sub("", name).strip(".").lower()


def _is_within(name: str, zone: str) -> bool:
    """Return True when name is zone itself or a name below it."""
    return name == zone or name.endswith(f".{zone}")


@dataclass(frozen=True)
class ZoneMatch:
    """Zone selected for a name and the fully qualified owner inside it."""

    zone: str
    fqdn: str


@dataclass(frozen=True)
class ZoneSet:
    """Ordered zone suffixes with an optional search domain fallback."""

    zones: tuple[str, ...] = ()
    search_domain: str | None = None

    @classmethod
    def from_strings(cls, zones: Iterable[str], search_domain: str | None = None) -> "ZoneSet":
        """Normalise configured zone strings."""
        normalised = []
        for raw in zones:
            zone = normalize_name(raw)
            if not zone:
                raise ConfigurationError(f"Zone '{raw}' is empty after normalisation.")
            normalised.append(zone)
        domain = normalize_name(search_domain) or None
        if search_domain and not domain:
            raise ConfigurationError(f"Search domain '{search_domain}' is empty after normalisation.")
        return cls(zones=tuple(normalised), search_domain=domain)


@dataclass(frozen=True)
class ReverseZoneSet:
    """Reverse zones split by address family."""

    v4: ZoneSet = ZoneSet()
    v6: ZoneSet = ZoneSet()

    @classmethod
    def from_strings(cls, zones: Iterable[str]) -> "ReverseZoneSet":
        """Partition raw reverse zone strings into IPv4 and IPv6 sets."""
        v4: list[str] = []
        v6: list[str] = []
        for raw in zones:
            zone = normalize_name(raw)
            if _is_within(zone, V4_REVERSE_SUFFIX):
                v4.append(zone)
            elif _is_within(zone, V6_REVERSE_SUFFIX):
                v6.append(zone)
            else:
                raise ConfigurationError(
                    f"Reverse zone '{raw}' must end in {V4_REVERSE_SUFFIX} or {V6_REVERSE_SUFFIX}."
                )
        return cls(v4=ZoneSet(zones=tuple(v4)), v6=ZoneSet(zones=tuple(v6)))

    def for_family(self, family: int) -> ZoneSet:
        """Return the zone set for an address family."""
        return self.v4 if family == 4 else self.v6


def match_zone(name: str, zones: ZoneSet) -> ZoneMatch | None:
    """Select the zone and owner name for a client name.

    Zones are tried in configured order and the first suffix match wins,
    even if a later zone is more specific. Without a match the search
    domain (if any) receives the first label of the name. A bare single
    label with no search domain is qualified with the first zone.
    """
    normalised = normalize_name(name)
    if not normalised:
        return None
    for zone in zones.zones:
        if _is_within(normalised, zone):
            return ZoneMatch(zone=zone, fqdn=normalised)
    host = normalised.split(".", 1)[0]
    if zones.search_domain:
        return ZoneMatch(zone=zones.search_domain, fqdn=f"{host}.{zones.search_domain}")
    if "." not in normalised and zones.zones:
        zone = zones.zones[0]
        return ZoneMatch(zone=zone, fqdn=f"{host}.{zone}")
    return None


def match_reverse_zone(address: Address, reverse_zones: ReverseZoneSet) -> str | None:
    """Return the first configured reverse zone containing the address."""
    for zone in reverse_zones.for_family(address.family).zones:
        if _is_within(address.reverse_name, zone):
            return zone
    return None
