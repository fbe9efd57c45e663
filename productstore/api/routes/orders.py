# productstore/api/routes/orders.py
# Routes for orders and their products.

from flask import Blueprint, request, jsonify, current_app
from productstore.services.order_service import OrderService
from productstore.api.errors import ServiceError, ValidationError
from productstore.api.pagination import parse_pagination
from productstore.utils.logger import logger

def _get_order_service() -> OrderService:
    service = current_app.config.get('order_service')
    if not service:
        logger.critical("OrderService not found in application config!")
        raise ServiceError("Order service is unavailable.", 503)
    return service

def _json_body(allow_empty: bool = False) -> dict:
    data = request.get_json(silent=True)
    if data is None and allow_empty:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return data

orders_bp = Blueprint('orders', __name__)

@orders_bp.route('', methods=['GET'])
def list_orders():
    """Lists one page of orders (`?page=1&size=10`), each with its products."""
    page_number, page_size = parse_pagination(
        request.args, current_app.config['DEFAULT_PAGE_SIZE'], current_app.config['MAX_PAGE_SIZE']
    )
    logger.info(f"Order page request: page={page_number}, size={page_size}")
    orders = _get_order_service().get_orders_page(page_number, page_size)
    return jsonify([order.to_dict() for order in orders]), 200

@orders_bp.route('/<int:order_id>', methods=['GET'])
def get_order(order_id: int):
    order = _get_order_service().get_order(order_id)
    return jsonify(order.to_dict()), 200

@orders_bp.route('/<int:order_id>/products', methods=['GET'])
def get_order_products(order_id: int):
    products = _get_order_service().get_products_for_order(order_id)
    return jsonify([product.to_dict() for product in products]), 200

@orders_bp.route('', methods=['POST'])
def create_order():
    """Creates an order from `{"user_id": ..., "product_ids": [...]}` (both optional)."""
    data = _json_body(allow_empty=True)
    order = _get_order_service().create_order(data.get('user_id'), data.get('product_ids'))
    logger.info(f"Order {order.id} created via API.")
    return jsonify(order.to_dict()), 201

@orders_bp.route('/<int:order_id>', methods=['PUT'])
def update_order(order_id: int):
    data = _json_body()
    _get_order_service().update_order(order_id, data.get('user_id'), data.get('product_ids'))
    return '', 204

@orders_bp.route('/<int:order_id>/products', methods=['PUT'])
def replace_order_products(order_id: int):
    """Replaces the order's complete product set with `{"product_ids": [...]}`."""
    data = _json_body()
    if 'product_ids' not in data:
        raise ValidationError("Field 'product_ids' is required.")
    _get_order_service().replace_order_products(order_id, data['product_ids'])
    return '', 204

@orders_bp.route('/<int:order_id>', methods=['DELETE'])
def delete_order(order_id: int):
    _get_order_service().delete_order(order_id)
    return '', 204
