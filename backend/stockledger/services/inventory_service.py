# Overview: Stock adjustment engine; the single authority over product quantities and the ledger.

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from decimal import Decimal
from typing import Any, Callable, Optional

from flask import current_app

from ..models import Product, Transaction, TransactionType, User
from ..time_utils import now_iso
from ..validation import coerce_integer, validate_product_fields, validate_user_fields
from .kv_store import KeyValueStore, PRODUCTS_KEY, TRANSACTIONS_KEY
from .ledger_service import DEFAULT_PAGE_SIZE, Ledger
from .repository import EntityRepository

"""
Stockledger inventory invariants (authoritative)

Stock model:
- Product.quantity is stored on the product record and is never negative at rest.
- Only InventoryService changes quantity, and it changes quantity and
  last_updated together by replacing the record.

Ledger coupling:
- Registering a product writes exactly one INITIAL transaction with
  amount == initial quantity.
- Every accepted adjustment writes exactly one INCREASE (delta > 0) or
  DECREASE (delta <= 0) transaction with amount == abs(delta).
- A rejected adjustment (would go negative) writes nothing: no product
  change, no transaction, no save.
- Product table and ledger are saved together in one store transaction.

Not-found:
- Adjusting an unknown product id is a silent no-op returning None.
"""

logger = logging.getLogger(__name__)

EXTENSION_KEY = "stockledger.inventory"
DEFAULT_LOW_STOCK_THRESHOLD = 5


class InventoryService:
    """
    Explicit context for one process: the users/products tables, the ledger,
    and the store handle they persist through.
    """

    def __init__(
        self,
        store: KeyValueStore,
        repository: EntityRepository,
        ledger: Ledger,
        *,
        clock: Callable[[], str] = now_iso,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> None:
        self.store = store
        self.repository = repository
        self.ledger = ledger
        self._clock = clock
        self._id_factory = id_factory
        self.low_stock_threshold = low_stock_threshold

    @classmethod
    def load(
        cls,
        store: Optional[KeyValueStore] = None,
        *,
        clock: Callable[[], str] = now_iso,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> "InventoryService":
        """Rehydrate all three collections from the store."""
        store = store or KeyValueStore()
        repository = EntityRepository.load(store)
        ledger = Ledger.load(store, clock=clock, id_factory=id_factory)
        logger.info(
            "Loaded inventory: %d users, %d products, %d transactions",
            len(repository.users), len(repository.products), len(ledger),
        )
        return cls(
            store,
            repository,
            ledger,
            clock=clock,
            id_factory=id_factory,
            low_stock_threshold=low_stock_threshold,
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def register_user(self, full_name: Any, email: Any) -> User:
        """Raises ValidationError before any state changes."""
        fields = validate_user_fields(full_name, email)
        user = User(
            id=self._id_factory(),
            full_name=fields["full_name"],
            email=fields["email"],
            created_at=self._clock(),
        )
        self.repository.add_user(user)
        self.repository.persist_users()
        logger.info("Registered user %s <%s>", user.id, user.email)
        return user

    def register_product(self, sku: Any, name: Any, price: Any, quantity: Any) -> Product:
        """
        Register a product together with its INITIAL ledger entry.

        Validation runs first; after it passes nothing else can fail before
        both tables are updated and saved in one store write.
        """
        fields = validate_product_fields(sku, name, price, quantity)
        product = Product(
            id=self._id_factory(),
            sku=fields["sku"],
            name=fields["name"],
            price=fields["price"],
            quantity=fields["quantity"],
            last_updated=self._clock(),
        )
        self.repository.add_product(product)
        self.ledger.record(
            product, TransactionType.INITIAL, product.quantity,
            timestamp=product.last_updated, persist=False,
        )
        self._persist_stock()
        logger.info("Registered product %s (sku=%s, quantity=%d)", product.id, product.sku, product.quantity)
        return product

    def adjust_stock(self, product_id: str, signed_delta: Any) -> Optional[Product]:
        """
        Apply a signed delta to a product's quantity.

        Returns:
        - None if the product does not exist (nothing written)
        - the unchanged product if the result would be negative (nothing written)
        - the updated product otherwise

        Callers detect a rejection by comparing the returned quantity with
        the quantity they saw before the call.
        """
        delta = coerce_integer(signed_delta, "delta")

        product = self.repository.find_product(product_id)
        if product is None:
            logger.info("Ignoring adjustment for unknown product %s", product_id)
            return None

        new_quantity = product.quantity + delta
        if new_quantity < 0:
            logger.info(
                "Rejected adjustment of %d for product %s: quantity %d would go negative",
                delta, product.id, product.quantity,
            )
            return product

        updated = replace(product, quantity=new_quantity, last_updated=self._clock())
        tx_type = TransactionType.INCREASE if delta > 0 else TransactionType.DECREASE

        self.repository.replace_product(updated)
        self.ledger.record(updated, tx_type, delta, timestamp=updated.last_updated, persist=False)
        self._persist_stock()
        return updated

    def _persist_stock(self) -> None:
        self.store.save_many({
            PRODUCTS_KEY: self.repository.products,
            TRANSACTIONS_KEY: self.ledger.entries,
        })

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_product(self, product_id: str) -> Optional[Product]:
        return self.repository.find_product(product_id)

    def list_products(self) -> list[Product]:
        return self.repository.products

    def list_users(self) -> list[User]:
        return self.repository.users

    def list_transactions(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> list[Transaction]:
        return self.ledger.page(page, page_size)

    def low_stock(self, threshold: Optional[int] = None) -> list[Product]:
        """Products at or below threshold, lowest quantity first."""
        if threshold is None:
            threshold = self.low_stock_threshold
        items = [p for p in self.repository.products if p.quantity <= threshold]
        return sorted(items, key=lambda p: p.quantity)

    def summary(self) -> dict:
        products = self.repository.products
        inventory_value = sum((p.price * p.quantity for p in products), Decimal("0"))
        return {
            "totalProducts": len(products),
            "totalUnits": sum(p.quantity for p in products),
            "inventoryValue": inventory_value.quantize(Decimal("0.01")),
            "totalUsers": len(self.repository.users),
            "totalTransactions": len(self.ledger),
        }


def get_inventory() -> InventoryService:
    """
    The app's InventoryService, loaded from the store on first use.

    Requires an application context.
    """
    service = current_app.extensions.get(EXTENSION_KEY)
    if service is None:
        service = InventoryService.load(
            low_stock_threshold=current_app.config.get("LOW_STOCK_THRESHOLD", DEFAULT_LOW_STOCK_THRESHOLD),
        )
        current_app.extensions[EXTENSION_KEY] = service
    return service


def reset_inventory() -> None:
    """Drop the cached service so the next get_inventory() reloads from the store."""
    current_app.extensions.pop(EXTENSION_KEY, None)
