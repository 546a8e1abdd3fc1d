# Overview: Flask API routes for user registration and listing.

from flask import Blueprint, current_app, request

from ..services.inventory_service import get_inventory
from ..validation import ValidationError

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
def list_users_route():
    users = get_inventory().list_users()
    return {"items": [u.to_dict() for u in users], "count": len(users)}


@users_bp.post("")
def register_user_route():
    """
    Register a user.

    Body: {"fullName": str, "email": str}
    Email uniqueness is not enforced.
    """
    payload = request.get_json(silent=True) or {}

    try:
        user = get_inventory().register_user(payload.get("fullName"), payload.get("email"))
    except ValidationError as e:
        return {"error": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to register user")
        return {"error": "Internal server error"}, 500

    return user.to_dict(), 201
