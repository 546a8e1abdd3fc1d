# Overview: Flask API route for inventory totals and the low-stock report.

from flask import Blueprint, request

from ..services.inventory_service import get_inventory

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("")
def dashboard_route():
    """
    Inventory totals plus products at or below the low-stock threshold.

    Query params:
    - threshold: int (optional) - overrides LOW_STOCK_THRESHOLD
    """
    inventory = get_inventory()
    threshold = request.args.get("threshold", type=int)

    summary = inventory.summary()
    summary["inventoryValue"] = float(summary["inventoryValue"])

    return {
        "summary": summary,
        "low_stock": [p.to_dict() for p in inventory.low_stock(threshold)],
        "threshold": threshold if threshold is not None else inventory.low_stock_threshold,
    }
