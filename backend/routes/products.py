from flask import Blueprint, jsonify
from db import get_db
from schema import Product

products_bp = Blueprint("products", __name__)


@products_bp.route("/products", methods=["GET"])
def list_products():
    """
    Retrieves the product catalog in display order.

    Returns:
        A list of {id, name, price, image} objects.
    """
    db = next(get_db())
    try:
        products = db.query(Product).order_by(Product.id.asc()).all()
        return jsonify([p.to_dict() for p in products]), 200
    finally:
        db.close()


@products_bp.route("/products/<int:product_id>", methods=["GET"])
def get_product(product_id):
    db = next(get_db())
    try:
        product = db.query(Product).filter_by(id=product_id).first()
        if not product:
            return jsonify({"error": "Product not found"}), 404
        return jsonify(product.to_dict()), 200
    finally:
        db.close()
