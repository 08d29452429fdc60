"""Core data models used by vpn-ddns."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Operation(str, Enum):
    """Hook operation reported by the VPN daemon."""

    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"

    @classmethod
    def parse(cls, value: str) -> "Operation":
        """Return the operation named by value (case-insensitive)."""
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            raise InvalidRequest(f"Unsupported operation '{value}', expected add, update or delete.") from exc

    @property
    def adds_records(self) -> bool:
        """Return True when the operation (re)creates records."""
        return self is not Operation.DELETE


@dataclass(frozen=True)
class Address:
    """A validated IP address with its reverse-lookup name."""

    family: int
    text: str
    reverse_name: str

    @property
    def record_type(self) -> str:
        """Return the forward RR type for this address family."""
        return "A" if self.family == 4 else "AAAA"


@dataclass(frozen=True)
class RecordChangeRequest:
    """One reconciliation unit: an address/name pair and what to do with it."""

    operation: Operation
    address: Address
    common_name: str
    public_address: Address | None = None


@dataclass(frozen=True)
class Transaction:
    """Ordered update-protocol command lines for a single dispatch."""

    lines: tuple[str, ...] = ()
    zones: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        """Return True when there is nothing to send."""
        return not self.lines

    def count(self, prefix: str) -> int:
        """Return the number of lines starting with prefix."""
        return sum(1 for line in self.lines if line.startswith(prefix))

    def transcript(self) -> str:
        """Return the text fed to the updater, one directive per line."""
        if self.is_empty():
            return ""
        return "\n".join(self.lines) + "\n"

    def redacted_lines(self) -> list[str]:
        """Return the lines with the TSIG secret masked."""
        lines = []
        for line in self.lines:
            if line.startswith("key "):
                line = " ".join([*line.split()[:2], "********"])
            lines.append(line)
        return lines

    def redacted_transcript(self) -> str:
        """Return the transcript with the TSIG secret masked for logging."""
        return "\n".join(self.redacted_lines())


class VpnDdnsError(Exception):
    """Base exception for vpn-ddns."""


class ConfigurationError(VpnDdnsError):
    """Raised when the configuration is missing or invalid."""


class InvalidAddress(VpnDdnsError):
    """Raised when an address string is neither IPv4 nor IPv6."""


class InvalidRequest(VpnDdnsError):
    """Raised when hook arguments do not describe a usable request."""


class UpdaterExecutionFailure(VpnDdnsError):
    """Raised when the external updater fails or cannot be started."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
