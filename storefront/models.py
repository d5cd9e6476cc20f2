"""
Wire types exchanged with the storefront backend.

Attributes are snake_case; `from_dict` / `to_dict` translate to and from the
camelCase JSON the backend speaks.
"""

from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, List, Optional, Tuple


SHIPPING_FIELDS: Tuple[str, ...] = ("name", "email", "address", "city", "zip_code")
PAYMENT_FIELDS: Tuple[str, ...] = ("card_number", "card_expiry", "card_cvv")
CHECKOUT_FIELDS: Tuple[str, ...] = SHIPPING_FIELDS + PAYMENT_FIELDS


@dataclass(frozen=True)
class Product:
    """Read-only catalog entry."""

    id: int
    name: str
    price: float
    image: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Product":
        return cls(id=data["id"], name=data["name"], price=data["price"], image=data.get("image"))


@dataclass(frozen=True)
class CartItem:
    product_id: int
    name: str
    price: float
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise ValueError(f"Cart lines must hold at least one unit, got {self.quantity}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartItem":
        return cls(
            product_id=data["productId"],
            name=data["name"],
            price=data["price"],
            quantity=data["quantity"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"productId": self.product_id, "name": self.name, "price": self.price, "quantity": self.quantity}


@dataclass(frozen=True)
class Cart:
    """
    A cart snapshot as held by the backend. Snapshots are replaced wholesale
    after every mutation, never patched in place.
    """

    items: Tuple[CartItem, ...] = ()
    total: float = 0.0
    discount_code: Optional[str] = None
    discount_amount: Optional[float] = None
    discounted_total: Optional[float] = None

    @classmethod
    def empty(cls) -> "Cart":
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Cart":
        return cls(
            items=tuple(CartItem.from_dict(i) for i in data.get("items") or []),
            total=data.get("total", 0.0),
            discount_code=data.get("discountCode"),
            discount_amount=data.get("discountAmount"),
            discounted_total=data.get("discountedTotal"),
        )

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, product_id: int) -> Optional[CartItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None


@dataclass(frozen=True)
class ShippingAddress:
    name: str
    email: str
    address: str
    city: str
    zip_code: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShippingAddress":
        return cls(
            name=data["name"],
            email=data["email"],
            address=data["address"],
            city=data["city"],
            zip_code=data["zipCode"],
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "email": self.email,
            "address": self.address,
            "city": self.city,
            "zipCode": self.zip_code,
        }


@dataclass(frozen=True)
class PaymentInfo:
    card_number: str
    card_expiry: str
    card_cvv: str

    @property
    def last4(self) -> str:
        return self.card_number[-4:]

    def to_dict(self) -> Dict[str, str]:
        return {"cardNumber": self.card_number, "cardExpiry": self.card_expiry, "cardCvv": self.card_cvv}

    def __repr__(self) -> str:
        return f"PaymentInfo(card_number='...{self.last4}')"


@dataclass
class CheckoutFormData:
    """The single mutable draft edited across every checkout step."""

    name: str = ""
    email: str = ""
    address: str = ""
    city: str = ""
    zip_code: str = ""
    card_number: str = ""
    card_expiry: str = ""
    card_cvv: str = ""

    def update(self, **values: str) -> None:
        known = {f.name for f in fields(self)}
        unknown = set(values) - known
        if unknown:
            raise KeyError(f"Unknown checkout field(s): {', '.join(sorted(unknown))}")
        for name, value in values.items():
            setattr(self, name, value)

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)

    def shipping_address(self) -> ShippingAddress:
        return ShippingAddress(**{f: getattr(self, f) for f in SHIPPING_FIELDS})

    def payment_info(self) -> PaymentInfo:
        return PaymentInfo(**{f: getattr(self, f) for f in PAYMENT_FIELDS})

    def __repr__(self) -> str:
        return f"CheckoutFormData(name={self.name!r}, email={self.email!r}, card=...{self.card_number[-4:]})"


@dataclass(frozen=True)
class Order:
    id: str
    user_id: str
    items: Tuple[CartItem, ...]
    total: float
    shipping_address: ShippingAddress
    card_number: str
    timestamp: str
    status: str
    discount_code: Optional[str] = None
    discount_amount: Optional[float] = None
    discounted_total: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        return cls(
            id=data["id"],
            user_id=data["userId"],
            items=tuple(CartItem.from_dict(i) for i in data.get("items") or []),
            total=data["total"],
            shipping_address=ShippingAddress.from_dict(data["shippingAddress"]),
            card_number=(data.get("paymentInfo") or {}).get("cardNumber", ""),
            timestamp=data.get("timestamp", ""),
            status=data.get("status", ""),
            discount_code=data.get("discountCode"),
            discount_amount=data.get("discountAmount"),
            discounted_total=data.get("discountedTotal"),
        )

    @property
    def card_last4(self) -> str:
        return self.card_number[-4:]


@dataclass(frozen=True)
class OrderResponse:
    order: Order
    new_discount_code: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderResponse":
        return cls(order=Order.from_dict(data["order"]), new_discount_code=data.get("newDiscountCode"))


@dataclass(frozen=True)
class DiscountCode:
    code: str
    used: bool
    discount: float
    generated_at: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiscountCode":
        return cls(
            code=data["code"],
            used=bool(data.get("used")),
            discount=data.get("discount", 0),
            generated_at=data.get("generatedAt", ""),
        )


@dataclass(frozen=True)
class AdminStats:
    items_purchased: int = 0
    total_purchase_amount: float = 0.0
    total_discount_amount: float = 0.0
    total_orders: int = 0
    discount_codes: List[DiscountCode] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdminStats":
        return cls(
            items_purchased=data.get("itemsPurchased", 0),
            total_purchase_amount=data.get("totalPurchaseAmount", 0.0),
            total_discount_amount=data.get("totalDiscountAmount", 0.0),
            total_orders=data.get("totalOrders", 0),
            discount_codes=[DiscountCode.from_dict(c) for c in data.get("discountCodes") or []],
        )


@dataclass(frozen=True)
class Notification:
    """A transient message surfaced after a user action."""

    message: str
    severity: str = "success"

    @classmethod
    def success(cls, message: str) -> "Notification":
        return cls(message, "success")

    @classmethod
    def error(cls, message: str) -> "Notification":
        return cls(message, "error")
