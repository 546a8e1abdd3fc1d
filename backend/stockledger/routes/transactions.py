# Overview: Flask API route for the paginated transaction ledger.

from flask import Blueprint, current_app, request

from ..services.inventory_service import get_inventory

"""
Paging semantics:
- page is 1-indexed and clamped into [1, total_pages]; an empty ledger has one empty page.
- Entries are newest first, in insertion order.
"""

transactions_bp = Blueprint("transactions", __name__, url_prefix="/api/transactions")

MAX_PAGE_SIZE = 100


@transactions_bp.get("")
def list_transactions_route():
    ledger = get_inventory().ledger

    page = request.args.get("page", default=1, type=int)
    page_size = request.args.get(
        "page_size",
        default=current_app.config.get("LEDGER_PAGE_SIZE", 10),
        type=int,
    )
    page_size = max(1, min(page_size, MAX_PAGE_SIZE))

    page = ledger.clamp_page(page, page_size)
    items = ledger.page(page, page_size)

    return {
        "items": [tx.to_dict() for tx in items],
        "page": page,
        "page_size": page_size,
        "total_pages": ledger.total_pages(page_size),
        "count": len(ledger),
    }
