import logging
from typing import Optional, Union

from storefront.api import StorefrontAPI
from storefront.errors import StorefrontError
from storefront.models import Cart, CartItem, Notification, Order
from storefront.signals import CartCountSignal

logger = logging.getLogger(__name__)


def item_count(cart: Optional[Cart]) -> int:
    if cart is None:
        return 0
    return sum(item.quantity for item in cart.items)


def line_total(item: CartItem) -> float:
    return item.price * item.quantity


def display_total(cart: Union[Cart, Order]) -> float:
    """
    The amount the shopper pays.

    A discounted total of exactly 0 is falsy and falls back to the
    undiscounted total.
    """
    return cart.discounted_total or cart.total


def discount_line(cart: Union[Cart, Order]) -> Optional[float]:
    """The discount amount to show under the subtotal, or None when there is none."""
    if cart.discount_code and cart.discount_amount:
        return cart.discount_amount
    return None


class CartPage:
    """
    Cart view controller.

    Holds the latest cart snapshot and replaces it with whatever the backend
    returns after each action. A failed action keeps the previous snapshot and
    leaves a notification.
    """

    def __init__(self, api: StorefrontAPI, cart_count: CartCountSignal):
        self.api = api
        self.cart_count = cart_count
        self.cart: Optional[Cart] = None
        self.loading = False
        self.discount_code = ""
        self.notification: Optional[Notification] = None

    @property
    def item_count(self) -> int:
        return item_count(self.cart)

    @property
    def is_empty(self) -> bool:
        return self.cart is None or self.cart.is_empty

    def _replace(self, cart: Cart) -> None:
        self.cart = cart
        self.cart_count.set(item_count(cart))

    async def load(self) -> None:
        self.loading = True
        try:
            self._replace(await self.api.fetch_cart())
        except StorefrontError as e:
            logger.error(f"Error fetching cart: {e}")
            self.notification = Notification.error("Error loading cart")
        finally:
            self.loading = False

    async def increment(self, product_id: int) -> None:
        item = self.cart.find(product_id) if self.cart else None
        if item is None:
            return
        await self._set_quantity(product_id, item.quantity + 1)

    async def decrement(self, product_id: int) -> None:
        """Lowers the quantity by one. At one unit it does nothing; use `remove`."""
        item = self.cart.find(product_id) if self.cart else None
        if item is None or item.quantity <= 1:
            return
        await self._set_quantity(product_id, item.quantity - 1)

    async def _set_quantity(self, product_id: int, quantity: int) -> None:
        try:
            self._replace(await self.api.update_quantity(product_id, quantity))
        except StorefrontError as e:
            logger.error(f"Error updating quantity: {e}")
            self.notification = Notification.error("Error updating quantity")

    async def remove(self, product_id: int) -> None:
        try:
            self._replace(await self.api.remove_item(product_id))
            self.notification = Notification.success("Item removed from cart")
        except StorefrontError as e:
            logger.error(f"Error removing item: {e}")
            self.notification = Notification.error("Error removing item")

    async def apply_discount(self, code: Optional[str] = None) -> None:
        """
        Applies `code` (or the code typed into the page) to the cart.

        An empty code is rejected without contacting the backend. Otherwise
        the backend decides and its message is shown on rejection.
        """
        if code is None:
            code = self.discount_code
        code = code.strip()
        if not code:
            self.notification = Notification.error("Please enter a discount code")
            return

        try:
            self._replace(await self.api.apply_discount(code))
            self.discount_code = ""
            self.notification = Notification.success("Discount applied successfully!")
        except StorefrontError as e:
            logger.error(f"Error applying discount: {e}")
            self.notification = Notification.error(e.user_message("Error applying discount code"))
