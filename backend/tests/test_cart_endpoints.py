import pytest
from schema import Product
from helpers import (
    get_cart, add_item, update_item, remove_item, apply_discount, make_discount_code,
)


@pytest.fixture
def priced(db_session):
    """Two products with round prices: returns (ten_id, five_id)."""
    ten = Product(name="Ten", price=10.0, image=None)
    five = Product(name="Five", price=5.0, image=None)
    db_session.add_all([ten, five])
    db_session.commit()
    return ten.id, five.id


def assert_total_matches_items(cart):
    expected = round(sum(i["price"] * i["quantity"] for i in cart["items"]), 2)
    assert cart["total"] == expected


# --- GET /cart/<user_id> ---

def test_first_fetch_creates_empty_cart(client):
    r = get_cart(client)
    assert r.status_code == 200
    data = r.get_json()
    assert data["items"] == []
    assert data["total"] == 0
    assert "discountCode" not in data


def test_carts_are_keyed_by_user(client, priced):
    ten, _ = priced
    add_item(client, ten, 1, user="alice")
    assert get_cart(client, user="bob").get_json()["items"] == []
    assert len(get_cart(client, user="alice").get_json()["items"]) == 1


# --- POST /cart/<user_id>/add ---

def test_add_item_returns_updated_cart(client, priced):
    ten, five = priced
    add_item(client, ten, 2)
    r = add_item(client, five, 1)
    assert r.status_code == 200
    data = r.get_json()
    assert [i["productId"] for i in data["items"]] == [ten, five]
    assert data["total"] == 25.0
    assert_total_matches_items(data)


def test_add_same_product_merges_quantity(client, priced):
    ten, _ = priced
    add_item(client, ten, 1)
    data = add_item(client, ten, 2).get_json()
    assert len(data["items"]) == 1
    assert data["items"][0]["quantity"] == 3


def test_add_defaults_quantity_to_one(client, priced):
    ten, _ = priced
    r = client.post("/api/cart/user-123/add", json={"productId": ten})
    assert r.get_json()["items"][0]["quantity"] == 1


def test_add_unknown_product_returns_404(client):
    r = add_item(client, 9999, 1)
    assert r.status_code == 404
    assert r.get_json()["error"] == "Product not found"


@pytest.mark.parametrize("quantity", [0, -1, "2", 1.5])
def test_add_rejects_invalid_quantity(client, priced, quantity):
    ten, _ = priced
    r = add_item(client, ten, quantity)
    assert r.status_code == 400


def test_add_missing_product_id(client):
    r = client.post("/api/cart/user-123/add", json={"quantity": 1})
    assert r.status_code == 400
    assert r.get_json()["error"] == "productId is required"


# --- POST /cart/<user_id>/update ---

def test_update_sets_quantity(client, priced):
    ten, five = priced
    add_item(client, ten, 1)
    add_item(client, five, 1)
    data = update_item(client, ten, 4).get_json()
    assert data["items"][0]["quantity"] == 4
    assert data["total"] == 45.0
    assert_total_matches_items(data)


@pytest.mark.parametrize("quantity", [0, -3])
def test_update_to_zero_removes_line(client, priced, quantity):
    ten, five = priced
    add_item(client, ten, 2)
    add_item(client, five, 1)
    data = update_item(client, ten, quantity).get_json()
    assert [i["productId"] for i in data["items"]] == [five]
    assert all(i["quantity"] >= 1 for i in data["items"])
    assert data["total"] == 5.0


def test_update_item_not_in_cart(client, priced):
    ten, _ = priced
    r = update_item(client, ten, 2)
    assert r.status_code == 404
    assert r.get_json()["error"] == "Item not in cart"


# --- POST /cart/<user_id>/remove ---

def test_remove_item(client, priced):
    ten, five = priced
    add_item(client, ten, 2)
    add_item(client, five, 1)
    r = remove_item(client, ten)
    assert r.status_code == 200
    data = r.get_json()
    assert [i["productId"] for i in data["items"]] == [five]
    assert_total_matches_items(data)


def test_remove_item_not_in_cart(client):
    r = remove_item(client, 1)
    assert r.status_code == 404


# --- POST /cart/<user_id>/apply-discount ---

def test_apply_discount_computes_discounted_total(client, priced):
    ten, five = priced
    add_item(client, ten, 2)
    add_item(client, five, 1)
    code = make_discount_code(client)

    r = apply_discount(client, code)
    assert r.status_code == 200
    data = r.get_json()
    assert data["total"] == 25.0
    assert data["discountCode"] == code
    assert data["discountAmount"] == 2.5
    assert data["discountedTotal"] == 22.5


def test_discount_is_recomputed_after_cart_changes(client, priced):
    ten, five = priced
    add_item(client, ten, 2)
    apply_discount(client, make_discount_code(client))

    data = add_item(client, five, 2).get_json()
    assert data["total"] == 30.0
    assert data["discountAmount"] == 3.0
    assert data["discountedTotal"] == 27.0


def test_apply_unknown_code(client, priced):
    ten, _ = priced
    add_item(client, ten, 1)
    r = apply_discount(client, "NOPE")
    assert r.status_code == 400
    assert r.get_json()["error"] == "Invalid discount code"


def test_discount_code_is_single_use(client, priced):
    ten, _ = priced
    code = make_discount_code(client)
    add_item(client, ten, 1, user="alice")
    add_item(client, ten, 1, user="bob")

    assert apply_discount(client, code, user="alice").status_code == 200
    r = apply_discount(client, code, user="bob")
    assert r.status_code == 400
    assert r.get_json()["error"] == "Discount code has already been used"


def test_second_code_on_same_cart_is_rejected(client, priced):
    ten, _ = priced
    add_item(client, ten, 1)
    apply_discount(client, make_discount_code(client))
    r = apply_discount(client, make_discount_code(client))
    assert r.status_code == 400
    assert r.get_json()["error"] == "A discount code is already applied"


def test_apply_discount_to_empty_cart(client):
    r = apply_discount(client, make_discount_code(client))
    assert r.status_code == 400
    assert r.get_json()["error"] == "Cart is empty"


def test_apply_blank_code(client, priced):
    ten, _ = priced
    add_item(client, ten, 1)
    r = apply_discount(client, "   ")
    assert r.status_code == 400
    assert r.get_json()["error"] == "Discount code is required"
