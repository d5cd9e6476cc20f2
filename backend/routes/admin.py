import os
import hmac
import json
import logging
from functools import wraps
from flask import Blueprint, request, jsonify
from sqlalchemy import desc
from db import get_db
from schema import Order, DiscountCode
from services.discounts import generate_code
from services.pricing import charged_amount

logger = logging.getLogger(__name__)

admin_bp = Blueprint("admin", __name__)


def require_admin_key(f):
    """
    Access control decorator for the admin dashboard endpoints.

    Reads adminKey from the query string on GET and from the JSON body
    otherwise. A wrong or missing key gets the same 401 either way.

    Args:
        f: The route handler function to be protected.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        if request.method == "GET":
            admin_key = request.args.get("adminKey", "")
        else:
            admin_key = (request.get_json(silent=True) or {}).get("adminKey") or ""
        expected = os.environ.get("ADMIN_KEY", "admin123")
        if not hmac.compare_digest(str(admin_key).encode(), expected.encode()):
            logger.warning("Rejected admin request with an invalid key")
            return jsonify({"error": "Unauthorized"}), 401
        return f(*args, **kwargs)
    return decorated


@admin_bp.route("/admin/stats", methods=["GET"])
@require_admin_key
def get_stats():
    """
    Returns store-wide purchase and discount aggregates.
    ---
    Input (Query Params):
        - adminKey (str)
    Output (200):
        - itemsPurchased (int): Units sold across all orders
        - totalPurchaseAmount (float): Amount charged across all orders
        - totalDiscountAmount (float): Discounts granted across all orders
        - totalOrders (int)
        - discountCodes (list): Every generated code, newest first
    """
    db = next(get_db())
    try:
        items_purchased = 0
        purchase_amount = 0.0
        discount_amount = 0.0
        orders = db.query(Order).all()
        for o in orders:
            record = o.to_dict()
            items_purchased += sum(item["quantity"] for item in json.loads(o.items))
            purchase_amount += charged_amount(record)
            discount_amount += o.discount_amount or 0.0

        codes = db.query(DiscountCode).order_by(desc(DiscountCode.generated_at)).all()

        return jsonify({
            "itemsPurchased": items_purchased,
            "totalPurchaseAmount": round(purchase_amount, 2),
            "totalDiscountAmount": round(discount_amount, 2),
            "totalOrders": len(orders),
            "discountCodes": [c.to_dict() for c in codes],
        }), 200
    finally:
        db.close()


@admin_bp.route("/admin/generate-discount", methods=["POST"])
@require_admin_key
def generate_discount():
    db = next(get_db())
    try:
        code = generate_code(db)
        db.commit()
        return jsonify({"discountCode": code.code}), 201
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
