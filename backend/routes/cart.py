import logging
from datetime import datetime, timezone
from functools import wraps
from flask import Blueprint, request, jsonify
from db import get_db
from schema import Cart, CartItem, DiscountCode, Product
from services.pricing import price_cart
from services.discounts import redeem_code, DiscountError

logger = logging.getLogger(__name__)

cart_bp = Blueprint("cart", __name__)


def get_or_create_cart(db, user_id):
    """
    Retrieves the cart for a user, staging an empty one on first access.

    Args:
        db: The active database session.
        user_id: Identity the cart is keyed by.

    Returns:
        The Cart model instance.
    """
    cart = db.query(Cart).filter_by(user_id=user_id).first()
    if not cart:
        now = datetime.now(timezone.utc)
        cart = Cart(user_id=user_id, created_at=now, updated_at=now)
        db.add(cart)
    return cart


def get_cart_items(db, user_id):
    return (
        db.query(CartItem)
        .filter_by(user_id=user_id)
        .order_by(CartItem.id.asc())
        .all()
    )


def snapshot_cart(db, cart):
    """
    Renders the cart with its totals and discount fields recomputed from
    the current lines.
    """
    items = [item.to_dict() for item in get_cart_items(db, cart.user_id)]
    percent = None
    if cart.discount_code:
        code = db.query(DiscountCode).filter_by(code=cart.discount_code).first()
        percent = code.discount if code else None
    return price_cart(items, cart.discount_code, percent)


def with_cart(f):
    """
    Decorator that resolves the <user_id> path segment to its cart.

    Opens a database session, passes initialized 'cart' and 'db' objects to
    the wrapped function, and rolls back if the handler raises.

    Args:
        f: The route handler function to be wrapped.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        user_id = kwargs.pop("user_id")
        db = next(get_db())
        try:
            cart = get_or_create_cart(db, user_id)
            return f(*args, cart=cart, db=db, **kwargs)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
    return decorated


def _parse_quantity(value):
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _touch(cart):
    cart.updated_at = datetime.now(timezone.utc)


@cart_bp.route("/cart/<user_id>", methods=["GET"])
@with_cart
def get_cart(cart, db):
    """
    Returns the user's cart snapshot, creating an empty cart on first fetch.
    """
    db.commit()
    return jsonify(snapshot_cart(db, cart)), 200


@cart_bp.route("/cart/<user_id>/add", methods=["POST"])
@with_cart
def add_item(cart, db):
    """
    Adds units of a product to the cart, merging into an existing line.
    ---
    Input (JSON):
        - productId (int): Catalog product to add
        - quantity (int, optional): Units to add, defaults to 1
    Output (200):
        - The updated Cart snapshot
    Errors:
        - 400: Missing productId or quantity below 1
        - 404: Unknown product
    """
    data = request.get_json(silent=True) or {}
    product_id = data.get("productId")
    quantity = _parse_quantity(data.get("quantity", 1))

    if product_id is None:
        return jsonify({"error": "productId is required"}), 400
    if quantity is None or quantity < 1:
        return jsonify({"error": "Quantity must be at least 1"}), 400

    product = db.query(Product).filter_by(id=product_id).first()
    if not product:
        return jsonify({"error": "Product not found"}), 404

    item = db.query(CartItem).filter_by(user_id=cart.user_id, product_id=product.id).first()
    if item:
        item.quantity += quantity
    else:
        db.add(CartItem(
            user_id=cart.user_id,
            product_id=product.id,
            name=product.name,
            price=product.price,
            quantity=quantity,
        ))
    _touch(cart)
    db.commit()
    return jsonify(snapshot_cart(db, cart)), 200


@cart_bp.route("/cart/<user_id>/update", methods=["POST"])
@with_cart
def update_item(cart, db):
    """
    Sets the quantity of a cart line. A quantity of zero or less removes the
    line, so no line is ever stored with quantity 0.
    ---
    Input (JSON):
        - productId (int)
        - quantity (int)
    Output (200):
        - The updated Cart snapshot
    Errors:
        - 400: Missing productId or non-integer quantity
        - 404: Product is not in the cart
    """
    data = request.get_json(silent=True) or {}
    product_id = data.get("productId")
    quantity = _parse_quantity(data.get("quantity"))

    if product_id is None:
        return jsonify({"error": "productId is required"}), 400
    if quantity is None:
        return jsonify({"error": "quantity must be an integer"}), 400

    item = db.query(CartItem).filter_by(user_id=cart.user_id, product_id=product_id).first()
    if not item:
        return jsonify({"error": "Item not in cart"}), 404

    if quantity <= 0:
        db.delete(item)
    else:
        item.quantity = quantity
    _touch(cart)
    db.commit()
    return jsonify(snapshot_cart(db, cart)), 200


@cart_bp.route("/cart/<user_id>/remove", methods=["POST"])
@with_cart
def remove_item(cart, db):
    data = request.get_json(silent=True) or {}
    product_id = data.get("productId")

    if product_id is None:
        return jsonify({"error": "productId is required"}), 400

    item = db.query(CartItem).filter_by(user_id=cart.user_id, product_id=product_id).first()
    if not item:
        return jsonify({"error": "Item not in cart"}), 404

    db.delete(item)
    _touch(cart)
    db.commit()
    return jsonify(snapshot_cart(db, cart)), 200


@cart_bp.route("/cart/<user_id>/apply-discount", methods=["POST"])
@with_cart
def apply_discount(cart, db):
    """
    Applies a single-use discount code to the cart and consumes it.
    ---
    Input (JSON):
        - discountCode (str)
    Output (200):
        - The updated Cart snapshot with discountCode, discountAmount
          and discountedTotal
    Errors:
        - 400: Empty code, empty cart, code already on the cart, or an
          unknown/used code
    """
    data = request.get_json(silent=True) or {}
    code = (data.get("discountCode") or "").strip()

    if not code:
        return jsonify({"error": "Discount code is required"}), 400
    if not get_cart_items(db, cart.user_id):
        return jsonify({"error": "Cart is empty"}), 400
    if cart.discount_code:
        return jsonify({"error": "A discount code is already applied"}), 400

    try:
        redeem_code(db, code)
    except DiscountError as e:
        logger.info(f"Rejected discount code {code!r} for {cart.user_id}: {e}")
        return jsonify({"error": str(e)}), 400

    cart.discount_code = code
    _touch(cart)
    db.commit()
    return jsonify(snapshot_cart(db, cart)), 200
