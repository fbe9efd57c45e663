# productstore/api/__init__.py
# Initializes the API layer and registers blueprints.

from flask import Flask

from productstore.utils.logger import logger

def register_blueprints(app: Flask):
    """
    Registers all defined blueprints with the Flask application.

    Routes are imported here rather than at module level: the data layer
    imports productstore.api.errors, and routes import the data layer.
    """
    from .routes.products import products_bp
    from .routes.orders import orders_bp

    blueprints = [
        (products_bp, '/api/products'),
        (orders_bp, '/api/orders'),
    ]

    logger.info("Registering API blueprints...")
    for bp, prefix in blueprints:
        app.register_blueprint(bp, url_prefix=prefix)
        logger.debug(f"Blueprint '{bp.name}' registered with prefix '{prefix}'.")
    logger.info("All API blueprints registered.")

__all__ = ["register_blueprints"]
