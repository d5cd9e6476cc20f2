ADMIN_KEY = "test-admin-key"

USER = "user-123"

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

def get_cart(client, user=USER):
    return client.get(f"/api/cart/{user}")

def add_item(client, product_id=1, quantity=1, user=USER):
    return client.post(f"/api/cart/{user}/add", json={"productId": product_id, "quantity": quantity})

def update_item(client, product_id, quantity, user=USER):
    return client.post(f"/api/cart/{user}/update", json={"productId": product_id, "quantity": quantity})

def remove_item(client, product_id, user=USER):
    return client.post(f"/api/cart/{user}/remove", json={"productId": product_id})

def apply_discount(client, code, user=USER):
    return client.post(f"/api/cart/{user}/apply-discount", json={"discountCode": code})

def checkout(client, user=USER, shipping=None, payment=None, idempotency_key=None):
    body = {
        "shippingAddress": shipping if shipping is not None else SHIPPING,
        "paymentInfo": payment if payment is not None else PAYMENT,
    }
    headers = {}
    if idempotency_key:
        headers["Idempotency-Key"] = idempotency_key
    return client.post(f"/api/checkout/{user}", json=body, headers=headers)

def get_stats(client, admin_key=ADMIN_KEY):
    return client.get("/api/admin/stats", query_string={"adminKey": admin_key})

def generate_discount(client, admin_key=ADMIN_KEY):
    return client.post("/api/admin/generate-discount", json={"adminKey": admin_key})

def make_discount_code(client):
    return generate_discount(client).get_json()["discountCode"]

def place_order(client, product_id=1, quantity=1, user=USER):
    add_item(client, product_id, quantity, user)
    return checkout(client, user)
