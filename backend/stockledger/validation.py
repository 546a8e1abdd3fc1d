from __future__ import annotations

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any


# One non-whitespace run before "@", one after containing a "."
EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


class ValidationError(ValueError):
    """400-level input problem."""


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def require_text(value: Any, field: str) -> str:
    """Required free-text field; returns the stripped string."""
    if _is_blank(value):
        raise ValidationError(f"{field} is required")
    return str(value).strip()


def validate_email(value: Any) -> str:
    email = require_text(value, "email")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("email must be a valid email address")
    return email


def coerce_integer(value: Any, field: str) -> int:
    """
    Strict integer coercion.

    Accepts ints and plain digit strings (optional leading sign). Rejects
    booleans, floats, decimals and scientific notation.
    """
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    if isinstance(value, (float, Decimal)):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    raise ValidationError(f"{field} must be an integer")


def coerce_price(value: Any) -> Decimal:
    """
    Positive decimal price. Floats go through str() so 9.99 stays 9.99.

    The result is normalised to the nearest float so a saved product
    reloads with exactly the same price.
    """
    if isinstance(value, bool):
        raise ValidationError("price must be a number")
    try:
        if isinstance(value, Decimal):
            price = value
        elif isinstance(value, (int, float)):
            price = Decimal(str(value))
        elif isinstance(value, str):
            price = Decimal(value.strip())
        else:
            raise ValidationError("price must be a number")
    except InvalidOperation:
        raise ValidationError("price must be a number")

    if not price.is_finite():
        raise ValidationError("price must be a finite number")
    if price <= 0:
        raise ValidationError("price must be > 0")

    # Prices are stored as JSON floats; keep only what survives that trip.
    stored = float(price)
    if math.isinf(stored) or stored <= 0:
        raise ValidationError("price is out of range")
    return Decimal(str(stored))


def coerce_quantity(value: Any) -> int:
    quantity = coerce_integer(value, "quantity")
    if quantity < 0:
        raise ValidationError("quantity must be >= 0")
    return quantity


def validate_user_fields(full_name: Any, email: Any) -> dict:
    """Returns the cleaned {full_name, email} pair for a new user."""
    return {
        "full_name": require_text(full_name, "fullName"),
        "email": validate_email(email),
    }


def validate_product_fields(sku: Any, name: Any, price: Any, quantity: Any) -> dict:
    """
    Required-field and range checks for product registration.

    Every field is checked for presence first so the caller gets the
    "required" message before any numeric complaint.
    """
    for field, value in (("sku", sku), ("name", name), ("price", price), ("quantity", quantity)):
        if _is_blank(value):
            raise ValidationError(f"{field} is required")

    return {
        "sku": require_text(sku, "sku"),
        "name": require_text(name, "name"),
        "price": coerce_price(price),
        "quantity": coerce_quantity(quantity),
    }
