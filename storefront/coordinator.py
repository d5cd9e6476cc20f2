import logging
from typing import Callable, Optional

from storefront.admin import AdminPage
from storefront.api import StorefrontAPI
from storefront.cart_view import CartPage, item_count
from storefront.catalog import ProductsPage
from storefront.config import StorefrontConfig, load_config
from storefront.errors import StorefrontError
from storefront.orders import CheckoutPage
from storefront.signals import CartCountSignal, Subscription

logger = logging.getLogger(__name__)


class Storefront:
    """
    Root of the client. Owns the API client and the cart count signal and
    hands both to every page it builds.
    """

    def __init__(self, config: Optional[StorefrontConfig] = None, api: Optional[StorefrontAPI] = None):
        self.config = config or load_config()
        self.api = api or StorefrontAPI(self.config)
        self.cart_count = CartCountSignal()

    async def start(self) -> None:
        """Seeds the badge with the current cart's item count."""
        await self.refresh_cart_count()

    async def refresh_cart_count(self) -> None:
        try:
            cart = await self.api.fetch_cart()
        except StorefrontError as e:
            logger.error(f"Error fetching cart count: {e}")
            return
        self.cart_count.set(item_count(cart))

    def subscribe_badge(self, callback: Callable[[int], None]) -> Subscription:
        return self.cart_count.subscribe(callback)

    def products_page(self) -> ProductsPage:
        return ProductsPage(self.api, self.cart_count)

    def cart_page(self) -> CartPage:
        return CartPage(self.api, self.cart_count)

    def checkout_page(self) -> CheckoutPage:
        return CheckoutPage(self.api, self.cart_count)

    def admin_page(self) -> AdminPage:
        return AdminPage(self.api)

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> "Storefront":
        await self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
