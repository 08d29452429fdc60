"""Tests for transaction building."""

import pytest

from vpn_ddns.addresses import classify
from vpn_ddns.models import Operation, RecordChangeRequest, Transaction
from vpn_ddns.transaction import build_blocks, build_transaction


def _request(operation="add", address="192.0.2.5", common_name="client-a", public_address=None):
    return RecordChangeRequest(
        operation=Operation.parse(operation),
        address=classify(address),
        common_name=common_name,
        public_address=classify(public_address) if public_address else None,
    )


def _apply(lines, records=None):
    """Replay update lines against a set of (owner, type, value) records."""
    records = set(records or ())
    for line in lines:
        parts = line.split()
        if parts[:2] == ["update", "delete"]:
            owner, rtype = parts[2], parts[3]
            records = {r for r in records if (r[0], r[1]) != (owner, rtype)}
        elif parts[:2] == ["update", "add"]:
            records.add((parts[2], parts[4], parts[5]))
    return records


class TestScenarios:
    """End-to-end transaction contents."""

    def test_add_builds_forward_and_reverse_blocks(self, config):
        transaction = build_transaction(_request(), config)
        assert transaction.lines == (
            "server ns1.corp.example",
            "zone corp.example",
            "update delete client-a.corp.example. A",
            "update add client-a.corp.example. 3600 A 192.0.2.5",
            "send",
            "zone 2.0.192.in-addr.arpa",
            "update delete 5.2.0.192.in-addr.arpa. PTR",
            "update add 5.2.0.192.in-addr.arpa. 3600 PTR client-a",
            "send",
        )
        assert transaction.zones == ("corp.example", "2.0.192.in-addr.arpa")

    def test_delete_omits_add_lines(self, config):
        transaction = build_transaction(_request("delete"), config)
        assert transaction.count("update add") == 0
        assert "update delete client-a.corp.example. A" in transaction.lines
        assert "update delete 5.2.0.192.in-addr.arpa. PTR" in transaction.lines

    def test_unrelated_name_keeps_reverse_only(self, config):
        transaction = build_transaction(_request(common_name="client-b.unrelated.net"), config)
        assert transaction.zones == ("2.0.192.in-addr.arpa",)
        assert "zone corp.example" not in transaction.lines
        assert "update add 5.2.0.192.in-addr.arpa. 3600 PTR client-b.unrelated.net" in transaction.lines

    def test_nothing_matches_gives_empty_transaction(self, make_config):
        config = make_config(zones=("corp.example",), reverse_zones=())
        transaction = build_transaction(_request(common_name="client-b.unrelated.net"), config)
        assert transaction.is_empty()
        assert transaction == Transaction(lines=(), zones=())
        assert transaction.transcript() == ""


class TestOperations:
    """Add/update/delete semantics."""

    @pytest.mark.parametrize("operation", ["add", "update"])
    def test_one_add_per_matched_zone(self, config, operation):
        transaction = build_transaction(_request(operation), config)
        assert transaction.count("update add") == 2
        assert transaction.count("update delete") == 2

    def test_update_equals_add(self, config):
        assert build_transaction(_request("update"), config) == build_transaction(_request("add"), config)

    def test_delete_without_common_name_removes_ptr_only(self, config):
        transaction = build_transaction(_request("delete", common_name=""), config)
        assert transaction.zones == ("2.0.192.in-addr.arpa",)
        assert transaction.count("update delete") == 1

    def test_add_is_idempotent(self, config):
        lines = build_transaction(_request(), config).lines
        once = _apply(lines)
        twice = _apply(lines, once)
        assert once == twice
        assert ("client-a.corp.example.", "A", "192.0.2.5") in once

    def test_readd_replaces_stale_address(self, config):
        stale = {("client-a.corp.example.", "A", "192.0.2.9")}
        records = _apply(build_transaction(_request(), config).lines, stale)
        assert ("client-a.corp.example.", "A", "192.0.2.9") not in records


class TestRealmsAndFamilies:
    """Public realm and IPv6 handling."""

    def test_public_address_uses_public_zones(self, make_config):
        config = make_config(
            reverse_zones=("2.0.192.in-addr.arpa", "113.0.203.in-addr.arpa"),
            public_zones=("public.example",),
            public_search_domain="public.example",
        )
        transaction = build_transaction(_request(public_address="203.0.113.10"), config)
        assert transaction.zones == (
            "corp.example",
            "2.0.192.in-addr.arpa",
            "public.example",
            "113.0.203.in-addr.arpa",
        )
        assert "update add client-a.public.example. 3600 A 203.0.113.10" in transaction.lines
        assert "update add 10.113.0.203.in-addr.arpa. 3600 PTR client-a" in transaction.lines

    def test_ipv6_address_gets_aaaa(self, make_config):
        config = make_config(reverse_zones=("8.b.d.0.1.0.0.2.ip6.arpa",))
        transaction = build_transaction(_request(address="2001:db8::5"), config)
        assert "update add client-a.corp.example. 3600 AAAA 2001:db8::5" in transaction.lines
        assert transaction.zones[-1] == "8.b.d.0.1.0.0.2.ip6.arpa"
        assert transaction.count("update add") == 2

    def test_ipv4_mapped_address_gets_ip6_ptr(self, make_config):
        zone = "0.0.0.0.0.0.0.0.0.0.0.0.0.0.0.0.ip6.arpa"
        config = make_config(reverse_zones=(zone,))
        transaction = build_transaction(_request(address="::ffff:192.0.2.5"), config)
        assert transaction.zones == ("corp.example", zone)
        assert transaction.count("update add") == 2
        assert any(line.endswith(".ip6.arpa. 3600 PTR client-a") for line in transaction.lines)

    def test_blocks_follow_realm_order(self, config):
        blocks = build_blocks(_request(), config)
        assert [block.zone for block in blocks] == ["corp.example", "2.0.192.in-addr.arpa"]


class TestHeaderAndBatching:
    """Server/key directives and commit policy."""

    def test_key_and_port_directives(self, make_config, tsig_key):
        config = make_config(tsig=tsig_key, name_server_port=5353)
        lines = build_transaction(_request(), config).lines
        assert lines[0] == "server ns1.corp.example 5353"
        assert lines[1] == "key hmac-sha256:vpn-ddns c2VjcmV0LXZhbHVl"

    def test_batch_all_zones_sends_once(self, make_config):
        config = make_config(batch_all_zones=True)
        transaction = build_transaction(_request(), config)
        assert transaction.count("send") == 1
        assert transaction.lines[-1] == "send"

    def test_per_zone_batches_send_after_each_zone(self, config):
        transaction = build_transaction(_request(), config)
        assert transaction.count("send") == transaction.count("zone ")

    def test_zone_lines_are_followed_by_a_delete(self, make_config):
        config = make_config(batch_all_zones=True)
        lines = build_transaction(_request(), config).lines
        for index, line in enumerate(lines):
            if line.startswith("zone "):
                assert lines[index + 1].startswith("update delete")

    def test_custom_ttl(self, make_config):
        config = make_config(ttl=300)
        assert "update add client-a.corp.example. 300 A 192.0.2.5" in build_transaction(_request(), config).lines

    def test_redacted_transcript_masks_secret(self, make_config, tsig_key):
        transaction = build_transaction(_request(), make_config(tsig=tsig_key))
        assert tsig_key.secret in transaction.transcript()
        assert tsig_key.secret not in transaction.redacted_transcript()
        assert transaction.transcript().endswith("send\n")
