"""High-level orchestration for vpn-ddns."""

from __future__ import annotations

import logging
from typing import Iterable

from .addresses import classify
from .config import AppConfig
from .dispatcher import NsupdateDispatcher
from .hooks import HookEvent
from .models import InvalidAddress, InvalidRequest, RecordChangeRequest, Transaction, UpdaterExecutionFailure
from .transaction import build_transaction

LOG = logging.getLogger("vpn_ddns")


class ReconcileController:
    """Coordinates request validation, transaction building and dispatch."""

    def __init__(self, config: AppConfig, dispatcher: NsupdateDispatcher | None = None):
        """Store configuration for subsequent runs."""
        self.config = config
        self.dispatcher = dispatcher or NsupdateDispatcher(config)

    def build_request(self, event: HookEvent) -> RecordChangeRequest:
        """Validate raw event inputs into a request."""
        address = classify(event.address)
        public_address = classify(event.public_address) if event.public_address else None
        return RecordChangeRequest(
            operation=event.operation,
            address=address,
            common_name=event.common_name,
            public_address=public_address,
        )

    def plan(self, event: HookEvent) -> Transaction:
        """Return the transaction for an event without dispatching it."""
        request = self.build_request(event)
        transaction = build_transaction(request, self.config)
        if transaction.is_empty():
            LOG.debug(
                "No forward or reverse zone matches %s (%s); nothing to update.",
                request.address.text,
                request.common_name or "no common name",
            )
        return transaction

    def reconcile(self, event: HookEvent, dry_run: bool = False) -> Transaction:
        """Build and (unless dry_run) dispatch the transaction for an event."""
        transaction = self.plan(event)
        if transaction.is_empty() or dry_run:
            return transaction
        self.dispatcher.dispatch(transaction)
        LOG.info(
            "Applied %s for %s %s",
            event.operation.value,
            event.common_name or "-",
            event.address,
        )
        return transaction

    def run_events(self, events: Iterable[HookEvent], dry_run: bool = False) -> list[Transaction]:
        """Reconcile each event, logging per-event failures instead of raising."""
        transactions: list[Transaction] = []
        for event in events:
            try:
                transactions.append(self.reconcile(event, dry_run=dry_run))
            except (InvalidAddress, InvalidRequest) as exc:
                LOG.error("Skipping %s for %s: %s", event.operation.value, event.common_name or "-", exc)
            except UpdaterExecutionFailure as exc:
                detail = f": {exc.stderr}" if exc.stderr else ""
                LOG.warning("DNS update for %s %s failed, %s%s", event.common_name or "-", event.address, exc, detail)
            except Exception:  # noqa: BLE001
                LOG.exception("Unexpected error while reconciling %s", event.address)
        return transactions


def configure_logging(level: str) -> None:
    """Configure logging output."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
