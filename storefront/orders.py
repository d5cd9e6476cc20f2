import logging
import uuid
from typing import Any, Dict, Optional

from storefront.api import StorefrontAPI
from storefront.cart_view import discount_line, display_total, item_count, line_total
from storefront.checkout_flow import CheckoutMachine, CheckoutState, STEP_TITLES
from storefront.errors import StorefrontError
from storefront.models import Cart, Notification, OrderResponse
from storefront.signals import CartCountSignal

logger = logging.getLogger(__name__)


class CheckoutPage:
    """
    Checkout view controller: the three form steps, order placement and the
    confirmation.

    One idempotency key is drawn per page and sent with every submission from
    it, so a retry after a lost response cannot place a second order.
    """

    def __init__(self, api: StorefrontAPI, cart_count: CartCountSignal, machine: Optional[CheckoutMachine] = None):
        self.api = api
        self.cart_count = cart_count
        self.machine = machine or CheckoutMachine()
        self.cart: Optional[Cart] = None
        self.loading = False
        self.notification: Optional[Notification] = None
        self.confirmation: Optional[OrderResponse] = None
        self.idempotency_key = str(uuid.uuid4())

    @property
    def state(self) -> CheckoutState:
        return self.machine.state

    @property
    def step_title(self) -> Optional[str]:
        step = self.machine.active_step
        return STEP_TITLES[step] if step < len(STEP_TITLES) else None

    @property
    def in_flight(self) -> bool:
        return self.machine.in_flight

    @property
    def errors(self) -> Dict[str, str]:
        return self.machine.visible_errors

    @property
    def cart_is_empty(self) -> bool:
        return self.cart is None or self.cart.is_empty

    async def load(self) -> None:
        self.loading = True
        try:
            self.cart = await self.api.fetch_cart()
        except StorefrontError as e:
            logger.error(f"Error fetching cart: {e}")
            self.notification = Notification.error("Error loading cart")
        finally:
            self.loading = False

    def update_field(self, name: str, value: str) -> None:
        self.machine.update_field(name, value)

    def next(self) -> bool:
        return self.machine.next().advanced

    def back(self) -> bool:
        return self.machine.back().advanced

    async def submit(self) -> Optional[OrderResponse]:
        """
        Places the order from the review step.

        Returns:
            The OrderResponse on success. None when a submission is already in
            flight, the cart is empty, the draft fails validation, or the
            backend rejects the order (a notification explains which).
        """
        if self.machine.in_flight:
            logger.info("Checkout already in flight, ignoring submit")
            return None
        if self.machine.completed:
            return None
        if self.cart_is_empty:
            self.notification = Notification.error("Your cart is empty")
            return None

        # Entering SUBMITTING before the first await closes the double-submit window
        if not self.machine.submit().advanced:
            return None

        draft = self.machine.draft
        try:
            response = await self.api.checkout(draft.shipping_address(), draft.payment_info(), self.idempotency_key)
        except StorefrontError as e:
            logger.error(f"Error completing checkout: {e}")
            self.machine.fail()
            self.notification = Notification.error(e.user_message("Error completing checkout"))
            return None
        except Exception:
            # Leave SUBMITTING before propagating so the shopper can retry
            logger.exception("Unexpected error completing checkout")
            self.machine.fail()
            self.notification = Notification.error("Error completing checkout")
            raise

        self.machine.succeed()
        self.confirmation = response
        self.cart = Cart.empty()
        self.cart_count.set(0)
        logger.info(f"Order {response.order.id} placed")
        return response

    def summary(self) -> Dict[str, Any]:
        """Data for the review step, built from the loaded cart and the draft."""
        cart = self.cart or Cart.empty()
        draft = self.machine.draft
        return {
            "items": [
                {"name": item.name, "quantity": item.quantity, "lineTotal": line_total(item)}
                for item in cart.items
            ],
            "itemCount": item_count(cart),
            "subtotal": cart.total,
            "discountCode": cart.discount_code,
            "discount": discount_line(cart),
            "total": display_total(cart),
            "shipping": [
                draft.name,
                draft.address,
                f"{draft.city}, {draft.zip_code}",
                draft.email,
            ],
            "payment": f"Card ending in {draft.card_number[-4:]}",
        }

    def confirmation_details(self) -> Optional[Dict[str, Any]]:
        if self.confirmation is None:
            return None
        order = self.confirmation.order
        return {
            "orderId": order.id,
            "total": display_total(order),
            "discount": discount_line(order),
            "card": f"Card ending in {order.card_last4}",
            "newDiscountCode": self.confirmation.new_discount_code,
        }
