"""
Async client for the storefront REST API.

Every method returns parsed model objects and raises a StorefrontError
subclass on failure; deciding what to show the shopper is left to the page
controllers.
"""

import logging
from typing import Any, Callable, List, Optional, TypeVar

import httpx

from storefront.config import StorefrontConfig, load_config
from storefront.errors import AuthenticationError, BackendError, InvalidResponseError, TransportError
from storefront.models import (
    AdminStats,
    Cart,
    OrderResponse,
    PaymentInfo,
    Product,
    ShippingAddress,
)

logger = logging.getLogger(__name__)

IDEMPOTENCY_HEADER = "Idempotency-Key"

T = TypeVar("T")


def _error_detail(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("error")
    return None


class StorefrontAPI:
    def __init__(self, config: Optional[StorefrontConfig] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            config: Client configuration; loaded from the environment when omitted.
            transport: Optional httpx transport, e.g. `httpx.MockTransport` in tests.
        """
        self.config = config or load_config()
        self.user_id = self.config.USER_ID
        self._client = httpx.AsyncClient(
            base_url=self.config.API_URL,
            timeout=self.config.REQUEST_TIMEOUT,
            transport=transport,
        )

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if response.status_code in (401, 403):
            raise AuthenticationError(response.status_code, _error_detail(response))
        if response.is_error:
            raise BackendError(response.status_code, _error_detail(response))
        try:
            return response.json()
        except ValueError as e:
            raise InvalidResponseError(f"{method} {path} returned a non-JSON body", response.status_code) from e

    async def _fetch(self, parse: Callable[[Any], T], method: str, path: str, **kwargs) -> T:
        """
        Sends a request and builds the result with `parse`.

        A payload that `parse` rejects (missing keys, wrong types, a cart line
        with quantity below one) raises InvalidResponseError like a non-JSON body.
        """
        data = await self._request(method, path, **kwargs)
        try:
            return parse(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise InvalidResponseError(f"{method} {path} returned an unexpected payload: {e!r}") from e

    # Cart

    async def fetch_cart(self) -> Cart:
        return await self._fetch(Cart.from_dict, "GET", f"/cart/{self.user_id}")

    async def add_item(self, product_id: int, quantity: int = 1) -> Cart:
        return await self._fetch(
            Cart.from_dict, "POST", f"/cart/{self.user_id}/add", json={"productId": product_id, "quantity": quantity}
        )

    async def update_quantity(self, product_id: int, quantity: int) -> Cart:
        return await self._fetch(
            Cart.from_dict, "POST", f"/cart/{self.user_id}/update", json={"productId": product_id, "quantity": quantity}
        )

    async def remove_item(self, product_id: int) -> Cart:
        return await self._fetch(Cart.from_dict, "POST", f"/cart/{self.user_id}/remove", json={"productId": product_id})

    async def apply_discount(self, code: str) -> Cart:
        return await self._fetch(
            Cart.from_dict, "POST", f"/cart/{self.user_id}/apply-discount", json={"discountCode": code}
        )

    # Checkout

    async def checkout(self, shipping: ShippingAddress, payment: PaymentInfo, idempotency_key: str) -> OrderResponse:
        """
        Places the order for the current cart.

        The same `idempotency_key` must be sent on every retry of one checkout
        so the backend can replay the order instead of placing it twice.
        """
        payload = {
            "shippingAddress": shipping.to_dict(),
            "paymentInfo": payment.to_dict(),
            "idempotencyKey": idempotency_key,
        }
        return await self._fetch(
            OrderResponse.from_dict,
            "POST",
            f"/checkout/{self.user_id}",
            json=payload,
            headers={IDEMPOTENCY_HEADER: idempotency_key},
        )

    # Catalog

    async def list_products(self) -> List[Product]:
        return await self._fetch(lambda data: [Product.from_dict(p) for p in data], "GET", "/products")

    # Admin

    async def admin_stats(self, admin_key: str) -> AdminStats:
        return await self._fetch(AdminStats.from_dict, "GET", "/admin/stats", params={"adminKey": admin_key})

    async def generate_discount(self, admin_key: str) -> str:
        return await self._fetch(
            lambda data: data["discountCode"], "POST", "/admin/generate-discount", json={"adminKey": admin_key}
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "StorefrontAPI":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()
