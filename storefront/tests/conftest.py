import pytest
from unittest.mock import MagicMock
from storefront.api import StorefrontAPI
from storefront.config import StorefrontConfig
from storefront.signals import CartCountSignal


@pytest.fixture
def anyio_backend():
    return "asyncio"

@pytest.fixture
def config():
    return StorefrontConfig(API_URL="http://testserver/api", USER_ID="user-123", REQUEST_TIMEOUT=5.0)

@pytest.fixture
def api(config):
    """A StorefrontAPI double; every async method is an AsyncMock."""
    fake = MagicMock(spec=StorefrontAPI)
    fake.config = config
    fake.user_id = config.USER_ID
    return fake

@pytest.fixture
def cart_count():
    return CartCountSignal()
