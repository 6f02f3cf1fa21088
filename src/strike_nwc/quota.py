"""Spend quota for outgoing payments.

Tracks how many sats this bridge has sent and refuses payments that would
take the total above the configured ceiling.

The admission check and the commit of a payment happen under one lock, so
two payments racing each other cannot both be admitted against the same
stale total.
"""

import asyncio
import json
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from strike_nwc.errors import QuotaExceededError

logger = logging.getLogger(__name__)


class QuotaGuard:
    """Owner of the process-wide sent total.

    Example:
        async with quota.admit(amount_sats):
            await provider.pay_invoice(invoice)
        # committed only if the block did not raise
    """

    def __init__(
        self,
        ceiling: int,
        total_sent: int = 0,
        state_path: Optional[Path] = None,
    ):
        """Initialize the guard.

        Args:
            ceiling: Maximum total sats that may ever be sent
            total_sent: Starting total (ignored when state_path holds a value)
            state_path: Optional JSON file the total is persisted to
        """
        if ceiling < 0:
            raise ValueError("ceiling must be non-negative")
        if total_sent < 0:
            raise ValueError("total_sent must be non-negative")

        self.ceiling = ceiling
        self.state_path = state_path
        self._total_sent = total_sent
        self._lock = asyncio.Lock()

        if state_path is not None:
            self._total_sent = self._load(state_path, total_sent)

    @property
    def total_sent(self) -> int:
        return self._total_sent

    @property
    def remaining(self) -> int:
        return max(self.ceiling - self._total_sent, 0)

    def try_reserve(self, amount: int) -> bool:
        """Check whether `amount` more sats fit under the ceiling.

        Does not change the total; callers commit after the payment
        succeeds.
        """
        if amount < 0:
            raise ValueError("amount must be non-negative")
        return self._total_sent + amount <= self.ceiling

    def commit(self, amount: int) -> None:
        """Add a confirmed payment to the sent total."""
        if amount < 0:
            raise ValueError("amount must be non-negative")

        self._total_sent += amount
        if self.state_path is not None:
            # The payment already went through; keep the in-memory total
            try:
                self._save(self.state_path, self._total_sent)
            except OSError as e:
                logger.error(f"Failed to persist quota state to {self.state_path}: {e}")

        logger.info(
            f"Total amount of sats sent since this wallet service has been running: "
            f"{self._total_sent}"
        )

    @asynccontextmanager
    async def admit(self, amount: int) -> AsyncIterator[None]:
        """Admission check and commit as one critical section.

        Raises:
            QuotaExceededError: If the payment does not fit under the ceiling
        """
        async with self._lock:
            if not self.try_reserve(amount):
                logger.warning(
                    f"Quota check failed: {amount} sats requested, "
                    f"{self._total_sent}/{self.ceiling} already sent"
                )
                raise QuotaExceededError(amount, self._total_sent, self.ceiling)

            yield

            self.commit(amount)

    @staticmethod
    def _load(path: Path, default: int) -> int:
        if not path.exists():
            return default

        data = json.loads(path.read_text(encoding="utf-8"))
        total = int(data.get("total_sent_sats", 0))
        if total < 0:
            raise ValueError(f"Corrupt quota state in {path}: negative total")

        logger.info(f"Loaded quota state from {path}: {total} sats sent")
        return total

    @staticmethod
    def _save(path: Path, total: int) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_text(json.dumps({"total_sent_sats": total}), encoding="utf-8")
        os.replace(tmp_path, path)
