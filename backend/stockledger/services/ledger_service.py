# Overview: Append-only transaction ledger; newest-first, snapshot-persisted.

from __future__ import annotations

import math
import uuid
from typing import Callable, Optional

from ..models import Product, Transaction, TransactionType
from ..time_utils import now_iso
from .kv_store import KeyValueStore, TRANSACTIONS_KEY

"""
Ledger invariants (authoritative)

- Append-only: entries are prepended, never updated or removed.
- Order is insertion order, newest first; timestamps are informational.
- Each entry snapshots the product's id/sku/name at the time it was written.
- amount is always the absolute size of the change.
"""

DEFAULT_PAGE_SIZE = 10


class Ledger:
    def __init__(
        self,
        store: KeyValueStore,
        entries=None,
        *,
        clock: Callable[[], str] = now_iso,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self.store = store
        self._entries: list[Transaction] = list(entries or [])
        self._clock = clock
        self._id_factory = id_factory

    @classmethod
    def load(cls, store: KeyValueStore, **kwargs) -> "Ledger":
        return cls(store, store.load(TRANSACTIONS_KEY, [], decode=Transaction.from_dict), **kwargs)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[Transaction]:
        return list(self._entries)

    def build(
        self,
        product: Product,
        type: TransactionType,
        signed_amount: int,
        timestamp: Optional[str] = None,
    ) -> Transaction:
        return Transaction(
            id=self._id_factory(),
            product_id=product.id,
            sku=product.sku,
            product_name=product.name,
            type=TransactionType(type),
            amount=abs(signed_amount),
            timestamp=timestamp or self._clock(),
        )

    def record(
        self,
        product: Product,
        type: TransactionType,
        signed_amount: int,
        *,
        timestamp: Optional[str] = None,
        persist: bool = True,
    ) -> Transaction:
        """
        Append a transaction for product.

        persist=False leaves the write to the caller, which saves the ledger
        together with the product table in one store write.
        """
        tx = self.build(product, type, signed_amount, timestamp)
        self._entries.insert(0, tx)
        if persist:
            self.persist()
        return tx

    def persist(self) -> None:
        self.store.save(TRANSACTIONS_KEY, self._entries)

    def total_pages(self, page_size: int = DEFAULT_PAGE_SIZE) -> int:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        return max(1, math.ceil(len(self._entries) / page_size))

    def clamp_page(self, page_number: int, page_size: int = DEFAULT_PAGE_SIZE) -> int:
        return min(max(page_number, 1), self.total_pages(page_size))

    def page(self, page_number: int, page_size: int = DEFAULT_PAGE_SIZE) -> list[Transaction]:
        """1-indexed slice; out-of-range page numbers clamp to the nearest page."""
        page_number = self.clamp_page(page_number, page_size)
        start = (page_number - 1) * page_size
        return self._entries[start:start + page_size]

    def for_product(self, product_id: str) -> list[Transaction]:
        return [tx for tx in self._entries if tx.product_id == product_id]
