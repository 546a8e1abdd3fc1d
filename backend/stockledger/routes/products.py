# Overview: Flask API routes for product registration, listing and stock adjustment.

# backend/stockledger/routes/products.py
"""
Product routes.

SKU uniqueness is not enforced; two products may share a SKU.
"""
from flask import Blueprint, current_app, request

from ..services.inventory_service import get_inventory
from ..validation import ValidationError

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
def list_products_route():
    """List all products in registration order."""
    products = get_inventory().list_products()
    return {"items": [p.to_dict() for p in products], "count": len(products)}


@products_bp.get("/<product_id>")
def get_product_route(product_id: str):
    product = get_inventory().find_product(product_id)
    if product is None:
        return {"error": "product not found"}, 404
    return product.to_dict()


@products_bp.post("")
def create_product_route():
    """
    Register a product and its initial ledger entry.

    Body: {"sku": str, "name": str, "price": number > 0, "quantity": int >= 0}
    """
    payload = request.get_json(silent=True) or {}

    try:
        product = get_inventory().register_product(
            payload.get("sku"),
            payload.get("name"),
            payload.get("price"),
            payload.get("quantity"),
        )
    except ValidationError as e:
        return {"error": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to register product")
        return {"error": "Internal server error"}, 500

    return product.to_dict(), 201


@products_bp.post("/<product_id>/adjust")
def adjust_stock_route(product_id: str):
    """
    Apply a signed stock delta.

    Body: {"delta": int}

    A delta that would take quantity below zero is rejected without error:
    the response carries the unchanged product and "applied": false.
    """
    payload = request.get_json(silent=True) or {}
    inventory = get_inventory()

    before = inventory.find_product(product_id)
    if before is None:
        return {"error": "product not found"}, 404

    try:
        product = inventory.adjust_stock(product_id, payload.get("delta"))
    except ValidationError as e:
        return {"error": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to adjust stock")
        return {"error": "Internal server error"}, 500

    # A rejected adjustment hands back the very same record
    applied = product is not before
    return {"product": product.to_dict(), "applied": applied}
