import logging
from typing import List, Optional

from storefront.api import StorefrontAPI
from storefront.cart_view import item_count
from storefront.errors import StorefrontError
from storefront.models import Notification, Product
from storefront.signals import CartCountSignal

logger = logging.getLogger(__name__)


class ProductsPage:
    """Product listing with one-click add to cart."""

    def __init__(self, api: StorefrontAPI, cart_count: CartCountSignal):
        self.api = api
        self.cart_count = cart_count
        self.products: List[Product] = []
        self.loading = False
        self.notification: Optional[Notification] = None

    async def load(self) -> None:
        self.loading = True
        try:
            self.products = await self.api.list_products()
        except StorefrontError as e:
            logger.error(f"Error fetching products: {e}")
            self.notification = Notification.error("Error loading products")
        finally:
            self.loading = False

    async def add_to_cart(self, product_id: int, quantity: int = 1) -> None:
        try:
            cart = await self.api.add_item(product_id, quantity)
        except StorefrontError as e:
            logger.error(f"Error adding to cart: {e}")
            self.notification = Notification.error("Error adding product to cart")
            return
        self.cart_count.set(item_count(cart))
        self.notification = Notification.success("Product added to cart")
