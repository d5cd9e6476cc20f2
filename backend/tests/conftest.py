import pytest
from unittest.mock import patch
from flask import Flask
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from base import Base
from routes.products import products_bp
from routes.cart import cart_bp
from routes.checkout import checkout_bp
from routes.admin import admin_bp
from utils import seed_products
import schema

from helpers import ADMIN_KEY

@pytest.fixture(autouse=True)
def _admin_env(monkeypatch):
    """Pin the admin key and discount settings so tests don't depend on a local .env."""
    monkeypatch.setenv("ADMIN_KEY", ADMIN_KEY)
    monkeypatch.setenv("DISCOUNT_PERCENT", "10")
    monkeypatch.setenv("DISCOUNT_NTH_ORDER", "3")

@pytest.fixture
def engine():
    """In-memory SQLite DB for fast testing."""
    _engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(_engine)
    yield _engine
    Base.metadata.drop_all(_engine)

@pytest.fixture
def db_session(engine):
    """Provides a database session with the demo catalog seeded."""
    TestSession = sessionmaker(bind=engine)
    s = TestSession()
    seed_products(s)
    try:
        yield s
    finally:
        s.close()

@pytest.fixture
def app(engine, db_session):
    """Provides a pre-configured Flask app with all blueprints and mocked db."""
    TestSession = sessionmaker(bind=engine)

    def mock_get_db():
        s = TestSession()
        try:
            yield s
        finally:
            s.close()

    flask_app = Flask(__name__)
    flask_app.register_blueprint(products_bp, url_prefix="/api")
    flask_app.register_blueprint(cart_bp, url_prefix="/api")
    flask_app.register_blueprint(checkout_bp, url_prefix="/api")
    flask_app.register_blueprint(admin_bp, url_prefix="/api")
    flask_app.config["TESTING"] = True

    with patch("routes.products.get_db", mock_get_db), \
         patch("routes.cart.get_db", mock_get_db), \
         patch("routes.admin.get_db", mock_get_db):
        yield flask_app

@pytest.fixture
def client(app):
    """Provides a Flask test client."""
    return app.test_client()
