import os
import logging
from typing import Any
from dotenv import load_dotenv

# Initialize environment configuration from local or project-level .env files
dotenv_paths = [
    os.path.join(os.path.dirname(__file__), '.env'),
    os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env'),
    os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env.example')
]

for path in dotenv_paths:
    if os.path.exists(path):
        load_dotenv(path)
        break

from flask import Flask, jsonify
from flask_cors import CORS
from db import init_db
from routes.products import products_bp
from routes.cart import cart_bp
from routes.checkout import checkout_bp
from routes.admin import admin_bp

# Configure high-level logging defaults for the backend application
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

app.register_blueprint(products_bp, url_prefix="/api")
app.register_blueprint(cart_bp, url_prefix="/api")
app.register_blueprint(checkout_bp, url_prefix="/api")
app.register_blueprint(admin_bp, url_prefix="/api")

@app.route("/api/health")
def health() -> Any:
    """
    Verifies the operational status of the Flask application.

    Returns:
        A JSON response indicating the service is healthy.
    """
    return jsonify({"status": "ok"})

if __name__ == "__main__":
    # Ensure the schema exists and the catalog is seeded before accepting requests
    init_db()
    app.run(port=int(os.environ.get("PORT", "5000")), debug=True)
