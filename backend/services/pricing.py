from typing import List, Dict, Any, Optional


def cart_total(items: List[Dict[str, Any]]) -> float:
    """Sum of price × quantity over the cart lines, rounded to cents."""
    return round(sum(item["price"] * item["quantity"] for item in items), 2)


def apply_discount(total: float, percent: Optional[int]) -> Optional[Dict[str, float]]:
    """
    Computes the discount fields for a cart total.

    Args:
        total: The undiscounted cart total.
        percent: Percentage off (0-100), or None when no code is applied.

    Returns:
        A dict with discountAmount and discountedTotal, or None without a discount.
    """
    if percent is None:
        return None
    amount = round(total * percent / 100, 2)
    amount = min(max(amount, 0.0), total)
    return {
        "discountAmount": amount,
        "discountedTotal": round(total - amount, 2),
    }


def price_cart(items: List[Dict[str, Any]], discount_code: Optional[str] = None,
               percent: Optional[int] = None) -> Dict[str, Any]:
    """
    Builds the Cart snapshot returned by every cart endpoint.

    Args:
        items: Cart lines as productId/name/price/quantity dicts, in cart order.
        discount_code: The code applied to the cart, if any.
        percent: The percentage that code is worth.

    Returns:
        The wire representation of the cart with its computed totals.
    """
    total = cart_total(items)
    snapshot = {"items": items, "total": total}
    discount = apply_discount(total, percent) if discount_code else None
    if discount:
        snapshot["discountCode"] = discount_code
        snapshot.update(discount)
    return snapshot


def charged_amount(order: Dict[str, Any]) -> float:
    if order.get("discountCode"):
        return order["discountedTotal"]
    return order["total"]
