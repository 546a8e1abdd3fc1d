# backend/stockledger/routes/system.py
"""
System health endpoint.
"""

import time
from flask import Blueprint, current_app
from sqlalchemy.exc import SQLAlchemyError

from ..services.inventory_service import get_inventory
from ..services.kv_store import KeyValueStore
from ..time_utils import now_iso

system_bp = Blueprint("system", __name__)


def check_store_health() -> dict:
    """
    Check that the key-value table is reachable and report which keys exist.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        keys = KeyValueStore().keys()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"keys": keys},
        }
    except SQLAlchemyError:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Store health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: store reachable
    - 503: store unreachable
    """
    store_health = check_store_health()
    http_status = 200 if store_health["status"] == "healthy" else 503

    response = {
        "status": store_health["status"],
        "timestamp": now_iso(),
        "checks": {"store": store_health},
    }
    if http_status == 200:
        summary = get_inventory().summary()
        response["counts"] = {
            "users": summary["totalUsers"],
            "products": summary["totalProducts"],
            "transactions": summary["totalTransactions"],
        }

    return response, http_status

