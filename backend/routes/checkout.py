import json
import uuid
import logging
from datetime import datetime, timezone
from flask import Blueprint, request, jsonify
from sqlalchemy.exc import IntegrityError
from schema import CartItem, Order
from utils import mask_card_number
from routes.cart import with_cart, snapshot_cart
from services.discounts import generate_code, should_award

logger = logging.getLogger(__name__)

checkout_bp = Blueprint("checkout", __name__)

SHIPPING_FIELDS = ("name", "email", "address", "city", "zipCode")
PAYMENT_FIELDS = ("cardNumber", "cardExpiry", "cardCvv")


def order_response(order):
    payload = {"order": order.to_dict()}
    if order.new_discount_code:
        payload["newDiscountCode"] = order.new_discount_code
    return payload


def _find_fulfilled(db, user_id, idempotency_key):
    if not idempotency_key:
        return None
    return db.query(Order).filter_by(user_id=user_id, idempotency_key=idempotency_key).first()


@checkout_bp.route("/checkout/<user_id>", methods=["POST"])
@with_cart
def checkout(cart, db):
    """
    Turns the user's cart into an order and clears the cart.

    A request carrying an idempotency key that was already fulfilled for this
    user replays the stored response instead of placing a second order.
    ---
    Input (JSON):
        - shippingAddress (dict): name, email, address, city, zipCode
        - paymentInfo (dict): cardNumber, cardExpiry, cardCvv
        - idempotencyKey (str, optional): also accepted as the
          Idempotency-Key header
    Output (201, or 200 on replay):
        - order (dict): The placed order with the card number masked
        - newDiscountCode (str, optional): Code awarded for this order
    Errors:
        - 400: Empty cart or missing shipping/payment fields
    """
    data = request.get_json(silent=True) or {}
    idempotency_key = request.headers.get("Idempotency-Key") or data.get("idempotencyKey")

    fulfilled = _find_fulfilled(db, cart.user_id, idempotency_key)
    if fulfilled:
        logger.info(f"Replaying order {fulfilled.id} for idempotency key {idempotency_key}")
        return jsonify(order_response(fulfilled)), 200

    snapshot = snapshot_cart(db, cart)
    if not snapshot["items"]:
        return jsonify({"error": "Cart is empty"}), 400

    shipping = data.get("shippingAddress") or {}
    payment = data.get("paymentInfo") or {}
    if any(not shipping.get(f) for f in SHIPPING_FIELDS) or any(not payment.get(f) for f in PAYMENT_FIELDS):
        return jsonify({"error": "Missing checkout information"}), 400

    order = Order(
        id=str(uuid.uuid4()),
        user_id=cart.user_id,
        items=json.dumps(snapshot["items"]),
        total=snapshot["total"],
        discount_code=snapshot.get("discountCode"),
        discount_amount=snapshot.get("discountAmount"),
        discounted_total=snapshot.get("discountedTotal"),
        shipping_address=json.dumps({f: shipping[f] for f in SHIPPING_FIELDS}),
        card_number=mask_card_number(payment["cardNumber"]),
        timestamp=datetime.now(timezone.utc),
        status="confirmed",
        idempotency_key=idempotency_key,
    )
    try:
        db.add(order)
        db.flush()

        if should_award(db.query(Order).count()):
            order.new_discount_code = generate_code(db).code

        db.query(CartItem).filter_by(user_id=cart.user_id).delete()
        cart.discount_code = None
        cart.updated_at = order.timestamp
        db.commit()
    except IntegrityError:
        # A concurrent request with the same key won the insert.
        db.rollback()
        fulfilled = _find_fulfilled(db, cart.user_id, idempotency_key)
        if not fulfilled:
            raise
        return jsonify(order_response(fulfilled)), 200

    logger.info(f"Order {order.id} placed for {cart.user_id} ({len(snapshot['items'])} lines)")
    return jsonify(order_response(order)), 201
