"""Utilities to serialise planned transactions."""

from __future__ import annotations

import json
from typing import Any

import yaml

from .models import Transaction


def transaction_to_dict(transaction: Transaction) -> dict[str, Any]:
    """Create a dictionary describing the transaction, secret masked."""
    return {
        "empty": transaction.is_empty(),
        "zones": list(transaction.zones),
        "lines": transaction.redacted_lines(),
    }


def transaction_to_yaml(transaction: Transaction) -> str:
    """Return YAML representation of a transaction."""
    return yaml.safe_dump(transaction_to_dict(transaction), sort_keys=False)


def transaction_to_json(transaction: Transaction) -> str:
    """Return JSON representation of a transaction."""
    return json.dumps(transaction_to_dict(transaction), indent=2)


def transaction_to_text(transaction: Transaction) -> str:
    """Return the masked transcript, or a note when there is nothing to send."""
    if transaction.is_empty():
        return "# no matching zones; nothing to send"
    return transaction.redacted_transcript()
