import logging
from typing import Optional

from storefront.api import StorefrontAPI
from storefront.errors import StorefrontError
from storefront.models import AdminStats, Notification

logger = logging.getLogger(__name__)


class AdminPage:
    """
    Admin dashboard controller.

    The admin key is passed through to the backend untouched; a successful
    stats fetch is what counts as being signed in.
    """

    def __init__(self, api: StorefrontAPI):
        self.api = api
        self.admin_key = ""
        self.authenticated = False
        self.stats: Optional[AdminStats] = None
        self.loading = False
        self.notification: Optional[Notification] = None

    async def authenticate(self, admin_key: str) -> bool:
        self.loading = True
        try:
            self.stats = await self.api.admin_stats(admin_key)
        except StorefrontError as e:
            logger.error(f"Authentication failed: {e}")
            self.notification = Notification.error("Authentication failed. Invalid admin key.")
            return False
        finally:
            self.loading = False
        self.admin_key = admin_key
        self.authenticated = True
        return True

    async def generate_discount(self) -> Optional[str]:
        """Creates a discount code and refreshes the stats so it shows in the table."""
        try:
            code = await self.api.generate_discount(self.admin_key)
            self.notification = Notification.success(f"New discount code generated: {code}")
            self.stats = await self.api.admin_stats(self.admin_key)
        except StorefrontError as e:
            logger.error(f"Error generating discount code: {e}")
            self.notification = Notification.error("Error generating discount code")
            return None
        return code
