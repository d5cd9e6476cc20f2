import json
from sqlalchemy import Column, Integer, String, Float, Boolean, Text, ForeignKey, DateTime, UniqueConstraint
from base import Base

class Product(Base):
    __tablename__ = 'products'
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    image = Column(String)


class Cart(Base):
    __tablename__ = 'carts'
    user_id = Column(String, primary_key=True)
    discount_code = Column(String, ForeignKey('discount_codes.code'))
    created_at = Column(DateTime)
    updated_at = Column(DateTime)


class CartItem(Base):
    __tablename__ = 'cart_items'
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey('carts.user_id'), nullable=False)
    product_id = Column(Integer, ForeignKey('products.id'), nullable=False)
    name = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False)

    def to_dict(self):
        return {
            'productId': self.product_id,
            'name': self.name,
            'price': self.price,
            'quantity': self.quantity,
        }


class DiscountCode(Base):
    __tablename__ = 'discount_codes'
    code = Column(String, primary_key=True)
    used = Column(Boolean, nullable=False, default=False)
    discount = Column(Integer, nullable=False)
    generated_at = Column(DateTime)


class Order(Base):
    __tablename__ = 'orders'
    __table_args__ = (UniqueConstraint('user_id', 'idempotency_key'),)
    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False)
    items = Column(Text, nullable=False)
    total = Column(Float, nullable=False)
    discount_code = Column(String)
    discount_amount = Column(Float)
    discounted_total = Column(Float)
    shipping_address = Column(Text, nullable=False)
    card_number = Column(String, nullable=False)
    timestamp = Column(DateTime, nullable=False)
    status = Column(String, nullable=False)
    idempotency_key = Column(String)
    new_discount_code = Column(String)

    def to_dict(self):
        order = {
            'id': self.id,
            'userId': self.user_id,
            'items': json.loads(self.items),
            'total': self.total,
            'shippingAddress': json.loads(self.shipping_address),
            'paymentInfo': {'cardNumber': self.card_number},
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'status': self.status,
        }
        if self.discount_code:
            order['discountCode'] = self.discount_code
            order['discountAmount'] = self.discount_amount
            order['discountedTotal'] = self.discounted_total
        return order
