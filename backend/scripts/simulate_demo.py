#!/usr/bin/env python3
import requests
import json
import os
import sys
import uuid
import logging

# Setup logging
LOG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs")
os.makedirs(LOG_DIR, exist_ok=True)
LOG_FILE = os.path.join(LOG_DIR, "demo_output.log")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    handlers=[
        logging.FileHandler(LOG_FILE),
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)

BASE_URL = os.environ.get("STOREFRONT_API_URL", "http://localhost:5000/api").rstrip("/")
ADMIN_KEY = os.environ.get("ADMIN_KEY", "admin123")
USER_ID = f"demo-{uuid.uuid4().hex[:6]}"

SHIPPING = {
    "name": "Ada Lovelace",
    "email": "ada@example.com",
    "address": "12 Analytical Row",
    "city": "London",
    "zipCode": "12345",
}

PAYMENT = {
    "cardNumber": "4111111111111111",
    "cardExpiry": "01/26",
    "cardCvv": "123",
}

def print_step(step_name: str):
    """
    Renders a highlighted progression step to the console output.

    Args:
        step_name: Description of the current simulation stage.
    """
    logger.info(f"=== {step_name} ===")

def print_result(res: requests.Response):
    """
    Evaluates the response status and renders a success or failure summary.

    Args:
        res: The response object from a requests call.
    """
    if res.status_code // 100 == 2:
        logger.info(f"Success ({res.status_code}): {json.dumps(res.json(), indent=2)[:300]}...")
    else:
        logger.error(f"Failed ({res.status_code}): {res.text}")
        exit(1)

def place_order(key: str) -> requests.Response:
    return requests.post(
        f"{BASE_URL}/checkout/{USER_ID}",
        json={"shippingAddress": SHIPPING, "paymentInfo": PAYMENT, "idempotencyKey": key},
        headers={"Idempotency-Key": key},
    )

def run_demo():
    """
    Walks a running backend through a full shopper journey followed by the
    admin dashboard.

    The shopper browses, fills a cart, redeems an admin-issued code and checks
    out, retries the same checkout to show it is not placed twice, then keeps
    ordering until a discount code is awarded.
    """
    print_step("1. Shopper browses the catalog")
    res = requests.get(f"{BASE_URL}/products")
    print_result(res)
    products = res.json()

    print_step("2. Shopper adds two products")
    for product in products[:2]:
        res = requests.post(f"{BASE_URL}/cart/{USER_ID}/add", json={"productId": product["id"], "quantity": 1})
        print_result(res)

    print_step("3. Shopper bumps the first line to two units")
    res = requests.post(f"{BASE_URL}/cart/{USER_ID}/update", json={"productId": products[0]["id"], "quantity": 2})
    print_result(res)

    print_step("4. Admin issues a discount code")
    res = requests.post(f"{BASE_URL}/admin/generate-discount", json={"adminKey": ADMIN_KEY})
    print_result(res)
    code = res.json()["discountCode"]

    print_step("5. Shopper applies the code")
    res = requests.post(f"{BASE_URL}/cart/{USER_ID}/apply-discount", json={"discountCode": code})
    print_result(res)
    cart = res.json()
    logger.info(f"Total {cart['total']} -> {cart['discountedTotal']} after {cart['discountAmount']} off")

    print_step("6. Shopper checks out")
    key = str(uuid.uuid4())
    res = place_order(key)
    print_result(res)
    order_id = res.json()["order"]["id"]

    print_step("7. Shopper's retry with the same idempotency key is replayed")
    res = place_order(key)
    print_result(res)
    if res.json()["order"]["id"] != order_id:
        logger.error("Retry placed a second order")
        exit(1)

    print_step("8. Shopper keeps ordering until a discount code is awarded")
    for _ in range(10):
        requests.post(f"{BASE_URL}/cart/{USER_ID}/add", json={"productId": products[-1]["id"], "quantity": 1})
        res = place_order(str(uuid.uuid4()))
        print_result(res)
        awarded = res.json().get("newDiscountCode")
        if awarded:
            logger.info(f"Awarded {awarded}")
            break
    else:
        logger.error("No discount code awarded after 10 orders")
        exit(1)

    print_step("9. Admin views store stats")
    res = requests.get(f"{BASE_URL}/admin/stats", params={"adminKey": ADMIN_KEY})
    print_result(res)

    logger.info(json.dumps(res.json(), indent=2))
    logger.info("Demo simulation completed flawlessly.")

if __name__ == "__main__":
    try:
        run_demo()
    except requests.exceptions.ConnectionError:
        logger.error(f"Connection Error: Is the backend server running at {BASE_URL}?")
        exit(1)
