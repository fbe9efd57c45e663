# productstore/api/routes/products.py
# Routes for products and their orders.

from flask import Blueprint, request, jsonify, current_app
from productstore.services.product_service import ProductService
from productstore.api.errors import ServiceError, ValidationError
from productstore.api.pagination import parse_pagination
from productstore.utils.logger import logger

# --- Get Service Instances ---
def _get_product_service() -> ProductService:
    service = current_app.config.get('product_service')
    if not service:
        logger.critical("ProductService not found in application config!")
        raise ServiceError("Product service is unavailable.", 503)
    return service

def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data

# --- Blueprint Definition ---
products_bp = Blueprint('products', __name__)

# --- Routes ---

@products_bp.route('', methods=['GET'])
def list_products():
    """Lists one page of products (`?page=1&size=10`), each with its orders."""
    page_number, page_size = parse_pagination(
        request.args, current_app.config['DEFAULT_PAGE_SIZE'], current_app.config['MAX_PAGE_SIZE']
    )
    logger.info(f"Product page request: page={page_number}, size={page_size}")
    products = _get_product_service().get_products_page(page_number, page_size)
    return jsonify([product.to_dict() for product in products]), 200

@products_bp.route('/<int:product_id>', methods=['GET'])
def get_product(product_id: int):
    product = _get_product_service().get_product(product_id)
    return jsonify(product.to_dict()), 200

@products_bp.route('/<int:product_id>/orders', methods=['GET'])
def get_product_orders(product_id: int):
    orders = _get_product_service().get_orders_for_product(product_id)
    return jsonify([order.to_dict() for order in orders]), 200

@products_bp.route('', methods=['POST'])
def create_product():
    """Creates a product from `{"name": ..., "price": ...}`."""
    data = _json_body()
    product = _get_product_service().create_product(data.get('name'), data.get('price'))
    logger.info(f"Product {product.id} created via API.")
    return jsonify(product.to_dict()), 201

@products_bp.route('/<int:product_id>', methods=['PUT'])
def update_product(product_id: int):
    """
    Updates name/price. An `order_ids` list in the body also replaces the
    product's orders.
    """
    data = _json_body()
    _get_product_service().update_product(
        product_id, data.get('name'), data.get('price'), data.get('order_ids')
    )
    return '', 204

@products_bp.route('/<int:product_id>/orders', methods=['PUT'])
def replace_product_orders(product_id: int):
    """Replaces the product's complete order set with `{"order_ids": [...]}`."""
    data = _json_body()
    if 'order_ids' not in data:
        raise ValidationError("Field 'order_ids' is required.")
    _get_product_service().replace_product_orders(product_id, data['order_ids'])
    return '', 204

@products_bp.route('/<int:product_id>', methods=['DELETE'])
def delete_product(product_id: int):
    _get_product_service().delete_product(product_id)
    return '', 204
