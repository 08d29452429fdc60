"""Feed finished transactions to the external nsupdate executable."""

from __future__ import annotations

import logging
import subprocess

from .config import AppConfig
from .models import Transaction, UpdaterExecutionFailure

LOG = logging.getLogger("vpn_ddns")


class NsupdateDispatcher:
    """Runs the configured updater with the transcript on stdin."""

    def __init__(self, config: AppConfig):
        self.config = config

    def command(self) -> list[str]:
        """Return the updater command line."""
        return [self.config.updater_path, *self.config.updater_args]

    def dispatch(self, transaction: Transaction) -> subprocess.CompletedProcess[str] | None:
        """Execute the transaction, raising UpdaterExecutionFailure on any failure."""
        if transaction.is_empty():
            LOG.debug("Empty transaction; nothing to dispatch.")
            return None
        cmd = self.command()
        LOG.info("Running %s for zones %s", " ".join(cmd), ", ".join(transaction.zones))
        LOG.debug("Transcript:\n%s", transaction.redacted_transcript())
        try:
            result = subprocess.run(
                cmd,
                input=transaction.transcript(),
                capture_output=True,
                text=True,
                check=False,
                timeout=self.config.updater_timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise UpdaterExecutionFailure(
                f"{cmd[0]} timed out after {self.config.updater_timeout}s",
            ) from exc
        except OSError as exc:
            raise UpdaterExecutionFailure(f"Cannot execute {cmd[0]}: {exc}") from exc

        if result.returncode != 0:
            raise UpdaterExecutionFailure(
                f"{cmd[0]} exited with status {result.returncode}",
                returncode=result.returncode,
                stderr=(result.stderr or "").strip(),
            )
        return result
