from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

"""
Stockledger record shapes (authoritative)

- Records are immutable; a stock change replaces the Product record.
- to_dict() emits the persisted camelCase layout exactly.
- from_dict() raises KeyError / TypeError / ValueError on an incompatible
  stored shape; the key-value store treats that as "no data".
"""


class TransactionType(str, Enum):
    INITIAL = "initial"
    INCREASE = "increase"
    DECREASE = "decrease"


def _str_field(data: dict, key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string")
    return value


def _int_field(data: dict, key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{key} must be an integer")
    if value < 0:
        raise ValueError(f"{key} must be >= 0")
    return value


@dataclass(frozen=True)
class User:
    id: str
    full_name: str
    email: str
    created_at: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "User":
        if not isinstance(data, dict):
            raise TypeError("user record must be an object")
        return cls(
            id=_str_field(data, "id"),
            full_name=_str_field(data, "fullName"),
            email=_str_field(data, "email"),
            created_at=_str_field(data, "createdAt"),
        )


@dataclass(frozen=True)
class Product:
    id: str
    sku: str
    name: str
    price: Decimal
    quantity: int
    last_updated: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "price": float(self.price),
            "quantity": self.quantity,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Product":
        if not isinstance(data, dict):
            raise TypeError("product record must be an object")
        raw_price = data["price"]
        if isinstance(raw_price, bool) or not isinstance(raw_price, (int, float)):
            raise TypeError("price must be a number")
        price = Decimal(str(raw_price))
        if not price.is_finite() or price <= 0:
            raise ValueError("price must be a positive number")
        return cls(
            id=_str_field(data, "id"),
            sku=_str_field(data, "sku"),
            name=_str_field(data, "name"),
            price=price,
            quantity=_int_field(data, "quantity"),
            last_updated=_str_field(data, "lastUpdated"),
        )


@dataclass(frozen=True)
class Transaction:
    id: str
    product_id: str
    sku: str
    product_name: str
    type: TransactionType
    amount: int
    timestamp: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "productId": self.product_id,
            "sku": self.sku,
            "productName": self.product_name,
            "type": self.type.value,
            "amount": self.amount,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Transaction":
        if not isinstance(data, dict):
            raise TypeError("transaction record must be an object")
        return cls(
            id=_str_field(data, "id"),
            product_id=_str_field(data, "productId"),
            sku=_str_field(data, "sku"),
            product_name=_str_field(data, "productName"),
            type=TransactionType(_str_field(data, "type")),
            amount=_int_field(data, "amount"),
            timestamp=_str_field(data, "timestamp"),
        )
