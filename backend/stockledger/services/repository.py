# Overview: In-memory Users and Products tables backed by the key-value store.

from __future__ import annotations

from typing import Optional

from ..models import Product, User
from .kv_store import KeyValueStore, PRODUCTS_KEY, USERS_KEY


class EntityRepository:
    """
    Users and Products held in memory, loaded once from the store.

    Every mutation is followed by a full re-save of the affected table,
    either directly (persist_users) or through the engine's combined
    products-and-ledger save.
    """

    def __init__(self, store: KeyValueStore, users=None, products=None) -> None:
        self.store = store
        self._users: list[User] = list(users or [])
        self._products: list[Product] = list(products or [])

    @classmethod
    def load(cls, store: KeyValueStore) -> "EntityRepository":
        return cls(
            store,
            users=store.load(USERS_KEY, [], decode=User.from_dict),
            products=store.load(PRODUCTS_KEY, [], decode=Product.from_dict),
        )

    @property
    def users(self) -> list[User]:
        return list(self._users)

    @property
    def products(self) -> list[Product]:
        return list(self._products)

    def add_user(self, user: User) -> User:
        self._users.append(user)
        return user

    def add_product(self, product: Product) -> Product:
        self._products.append(product)
        return product

    def find_product(self, product_id: str) -> Optional[Product]:
        for product in self._products:
            if product.id == product_id:
                return product
        return None

    def replace_product(self, product: Product) -> Product:
        """Update-in-place by id; keeps the product's position in the table."""
        for index, existing in enumerate(self._products):
            if existing.id == product.id:
                self._products[index] = product
                return product
        raise KeyError(product.id)

    def persist_users(self) -> None:
        self.store.save(USERS_KEY, self._users)
