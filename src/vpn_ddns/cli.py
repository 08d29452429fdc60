"""Command-line entry point for vpn-ddns."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Mapping, Sequence

from .config import AppConfig, load_config
from .controller import ReconcileController, configure_logging
from .exporter import transaction_to_json, transaction_to_text, transaction_to_yaml
from .hooks import HookEvent, client_events, learn_address_events, server_up_events
from .models import ConfigurationError, InvalidRequest, Operation, Transaction, VpnDdnsError

LOG = logging.getLogger("vpn_ddns")
OPERATIONS = [op.value for op in Operation]


def _build_parser() -> argparse.ArgumentParser:
    """Create the CLI parser."""
    parser = argparse.ArgumentParser(description="Keep DNS records in sync with VPN address assignments.")
    parser.add_argument("--config", help="Configuration file (default $VPN_DDNS_CONFIG or /etc/openvpn/vpn-ddns.yaml).")
    parser.add_argument("--log-level", help="Override log level (default from config).")
    parser.add_argument("--dry-run", action="store_true", help="Print the update transcript instead of sending it.")

    subparsers = parser.add_subparsers(dest="command", required=True)
    learn_parser = subparsers.add_parser("learn-address", help="OpenVPN learn-address hook.")
    learn_parser.add_argument("operation", choices=OPERATIONS)
    learn_parser.add_argument("address")
    learn_parser.add_argument("common_name", nargs="?", default=None)
    learn_parser.add_argument("--public-address", help="Public address (default $trusted_ip / $trusted_ip6).")

    for name, help_text in (
        ("client-connect", "OpenVPN client-connect hook (adds records)."),
        ("client-disconnect", "OpenVPN client-disconnect hook (deletes records)."),
    ):
        client_parser = subparsers.add_parser(name, help=help_text)
        client_parser.add_argument("hook_args", nargs="*", help=argparse.SUPPRESS)

    up_parser = subparsers.add_parser("up", help="OpenVPN up hook for the server's own addresses.")
    up_parser.add_argument("--name", help="Host name to publish (default 'server_name' from config).")
    up_parser.add_argument("hook_args", nargs="*", help=argparse.SUPPRESS)

    plan_parser = subparsers.add_parser("plan", help="Show the transaction for an address without sending it.")
    plan_parser.add_argument("operation", choices=OPERATIONS)
    plan_parser.add_argument("address")
    plan_parser.add_argument("common_name")
    plan_parser.add_argument("--public-address", help="Optional public address.")
    plan_parser.add_argument(
        "--format",
        choices=["text", "json", "yaml"],
        default="text",
        help="Serialization format for the planned transaction.",
    )

    return parser


def _collect_events(args: argparse.Namespace, config: AppConfig, environ: Mapping[str, str]) -> list[HookEvent]:
    """Translate the invoked hook into events."""
    if args.command == "learn-address":
        return learn_address_events(
            args.operation,
            args.address,
            args.common_name,
            environ,
            public_address=args.public_address,
        )
    if args.command == "client-connect":
        return client_events(Operation.ADD.value, environ)
    if args.command == "client-disconnect":
        return client_events(Operation.DELETE.value, environ)
    if args.command == "up":
        return server_up_events(args.name or config.server_name, environ)
    raise InvalidRequest(f"Unsupported command {args.command}")


def _emit(transactions: Sequence[Transaction]) -> None:
    """Print dry-run transcripts."""
    for transaction in transactions:
        print(transaction_to_text(transaction))


def _run_plan(controller: ReconcileController, args: argparse.Namespace) -> None:
    """Execute the plan command."""
    event = HookEvent(
        operation=Operation.parse(args.operation),
        address=args.address,
        common_name=args.common_name,
        public_address=args.public_address,
    )
    transaction = controller.plan(event)
    if args.format == "json":
        print(transaction_to_json(transaction))
    elif args.format == "yaml":
        print(transaction_to_yaml(transaction), end="")
    else:
        print(transaction_to_text(transaction))


def _run_hook(controller: ReconcileController, args: argparse.Namespace, environ: Mapping[str, str]) -> None:
    """Execute a VPN hook; per-connection failures are logged, never raised."""
    try:
        events = _collect_events(args, controller.config, environ)
    except InvalidRequest as exc:
        LOG.error("Ignoring %s hook: %s", args.command, exc)
        return
    transactions = controller.run_events(events, dry_run=args.dry_run)
    if args.dry_run:
        _emit(transactions)


def main(argv: Sequence[str] | None = None, environ: Mapping[str, str] | None = None) -> int:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    environ = os.environ if environ is None else environ
    try:
        config = load_config(args.config)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    configure_logging(args.log_level or config.log_level)
    controller = ReconcileController(config)

    if args.command == "plan":
        try:
            _run_plan(controller, args)
        except VpnDdnsError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        return 0

    try:
        _run_hook(controller, args, environ)
    except Exception:  # noqa: BLE001
        LOG.exception("Unexpected error in %s hook", args.command)
    return 0


def run() -> None:
    """Console script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    run()
