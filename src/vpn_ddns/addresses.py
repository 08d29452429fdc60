"""Address classification built on ipaddress and dnspython."""

from __future__ import annotations

import ipaddress

import dns.name
import dns.reversename

from .models import Address, InvalidAddress


def classify(text: str) -> Address:
    """Parse an IPv4/IPv6 address and compute its reverse-lookup name."""
    candidate = (text or "").strip()
    try:
        parsed = ipaddress.ip_address(candidate)
    except ValueError as exc:
        raise InvalidAddress(f"'{text}' is not an IPv4 or IPv6 address.") from exc
    if getattr(parsed, "scope_id", None):
        raise InvalidAddress(f"'{text}' carries an interface scope and cannot be published.")

    canonical = str(parsed)
    if parsed.version == 6:
        # IPv4-mapped addresses keep the ip6.arpa nibble form
        nibbles = ".".join(reversed(parsed.exploded.replace(":", "")))
        reverse = dns.name.from_text(nibbles, origin=dns.reversename.ipv6_reverse_domain)
    else:
        reverse = dns.reversename.from_address(canonical)
    reverse_name = reverse.to_text(omit_final_dot=True)
    return Address(family=parsed.version, text=canonical, reverse_name=reverse_name.lower())
