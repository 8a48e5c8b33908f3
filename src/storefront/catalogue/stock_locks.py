"""Per-product locks that serialize every write touching stock.

Checkout, cancellation and admin stock edits hold the locks of every
product they touch for the whole unit of work, commit included. Locks are
always taken in sorted id order so two writers can never wait on each other.

A registry is owned by whoever builds the ``OrderWorkflow``; the API app
builds one per application. Entries exist only while a product's lock is
held or awaited.
"""

import threading
import time
from contextlib import contextmanager

from storefront.errors import TransactionFailure
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class StockLocks:
    def __init__(self):
        self._guard = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    def __len__(self):
        with self._guard:
            return len(self._entries)

    def _checkout(self, product_id: str) -> _Entry:
        with self._guard:
            entry = self._entries.get(product_id)
            if entry is None:
                entry = self._entries[product_id] = _Entry()
            entry.users += 1
            return entry

    def _checkin(self, product_id: str, entry: _Entry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0:
                del self._entries[product_id]

    @contextmanager
    def hold(self, product_ids, timeout: float):
        """Hold the locks of ``product_ids`` until the block exits.

        Raises ``TransactionFailure`` if all locks cannot be taken within
        ``timeout`` seconds. Locks already taken are released first.
        """
        ordered = sorted({str(pid) for pid in product_ids})
        deadline = time.monotonic() + timeout
        acquired: list[tuple[str, _Entry]] = []
        try:
            for product_id in ordered:
                entry = self._checkout(product_id)
                remaining = deadline - time.monotonic()
                if remaining <= 0 or not entry.lock.acquire(timeout=remaining):
                    self._checkin(product_id, entry)
                    logger.warning("stock_lock_timeout", product_id=product_id, timeout=timeout)
                    raise TransactionFailure(
                        {"transaction": [f"Timed out waiting for stock lock on product {product_id}"]}
                    )
                acquired.append((product_id, entry))
            yield ordered
        finally:
            for product_id, entry in reversed(acquired):
                entry.lock.release()
                self._checkin(product_id, entry)
