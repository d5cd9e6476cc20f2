import os
import logging
from dataclasses import dataclass
from dotenv import load_dotenv

# Setup logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

PROJECT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Project-level .env wins over the checked-in example
dotenv_paths = [
    os.path.join(PROJECT_DIR, '.env'),
    os.path.join(PROJECT_DIR, '.env.example'),
]

@dataclass(frozen=True)
class StorefrontConfig:
    # Backend
    API_URL: str = "http://localhost:5000/api"
    USER_ID: str = "user-123"

    # Transport deadline in seconds; the client core imposes none of its own
    REQUEST_TIMEOUT: float = 10.0


def load_config() -> StorefrontConfig:
    """
    Builds the client configuration from the environment, loading the first
    .env file found at the project root.
    """
    for path in dotenv_paths:
        if os.path.exists(path):
            load_dotenv(path)
            break

    defaults = StorefrontConfig()
    return StorefrontConfig(
        API_URL=os.getenv("STOREFRONT_API_URL", defaults.API_URL).rstrip("/"),
        USER_ID=os.getenv("STOREFRONT_USER_ID", defaults.USER_ID),
        REQUEST_TIMEOUT=float(os.getenv("STOREFRONT_TIMEOUT", defaults.REQUEST_TIMEOUT)),
    )
