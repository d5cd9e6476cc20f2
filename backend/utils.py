from base import Base
from db import engine
from schema import Product

CATALOG = [
    {"name": "Wireless Headphones", "price": 99.99, "image": "https://picsum.photos/seed/headphones/400/300"},
    {"name": "Smart Watch", "price": 149.99, "image": "https://picsum.photos/seed/watch/400/300"},
    {"name": "Bluetooth Speaker", "price": 59.99, "image": "https://picsum.photos/seed/speaker/400/300"},
    {"name": "Laptop Stand", "price": 29.99, "image": "https://picsum.photos/seed/stand/400/300"},
    {"name": "USB-C Hub", "price": 39.99, "image": "https://picsum.photos/seed/hub/400/300"},
    {"name": "Mechanical Keyboard", "price": 89.99, "image": "https://picsum.photos/seed/keyboard/400/300"},
]


def seed_products(db):
    """
    Populates the catalog with the demo products if it is empty.

    Args:
        db: SQLAlchemy database session.

    Returns:
        The number of products inserted.
    """
    if db.query(Product).count() > 0:
        return 0
    for entry in CATALOG:
        db.add(Product(**entry))
    db.commit()
    return len(CATALOG)


def mask_card_number(card_number):
    """Keeps only the last four digits of a card number."""
    digits = str(card_number or "")
    return "*" * max(len(digits) - 4, 0) + digits[-4:]


def clear_database():
    """
    Wipes all carts, orders and discount codes and recreates the schema
    with a freshly seeded catalog.
    """
    import schema  # Ensure all models are registered with Base
    from db import SessionLocal
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_products(db)
    finally:
        db.close()
