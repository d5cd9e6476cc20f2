import os
import uuid
import logging
from datetime import datetime, timezone
from schema import DiscountCode

logger = logging.getLogger(__name__)


class DiscountError(Exception):
    """Raised when a code cannot be applied; the message is shown to the shopper."""


def discount_percent() -> int:
    return int(os.environ.get("DISCOUNT_PERCENT", "10"))


def nth_order() -> int:
    return int(os.environ.get("DISCOUNT_NTH_ORDER", "3"))


def generate_code(db, percent=None):
    """
    Creates and stages a fresh single-use discount code.

    Args:
        db: SQLAlchemy database session.
        percent: Percentage off; defaults to DISCOUNT_PERCENT.

    Returns:
        The new DiscountCode instance (not yet committed).
    """
    code = DiscountCode(
        code=f"DISCOUNT-{uuid.uuid4().hex[:8].upper()}",
        used=False,
        discount=percent if percent is not None else discount_percent(),
        generated_at=datetime.now(timezone.utc),
    )
    db.add(code)
    logger.info(f"Generated discount code {code.code} ({code.discount}%)")
    return code


def redeem_code(db, code):
    """
    Marks a code as used so it can be applied at most once.

    Raises:
        DiscountError: If the code does not exist or was already used.
    """
    record = db.query(DiscountCode).filter_by(code=code).first()
    if not record:
        raise DiscountError("Invalid discount code")
    if record.used:
        raise DiscountError("Discount code has already been used")
    record.used = True
    return record


def should_award(order_count):
    """Every nth order placed on the store earns a new code."""
    n = nth_order()
    return n > 0 and order_count > 0 and order_count % n == 0
