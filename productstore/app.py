# productstore/app.py
from flask import Flask, jsonify
from flask_cors import CORS
import atexit
import sys

from productstore.config import Config
from productstore.api import register_blueprints
from productstore.api.errors import register_error_handlers, ConfigurationError, DatabaseError, PersistenceError
from productstore.database import (
    get_db_session,
    init_sqlalchemy,
    dispose_sqlalchemy_engine,
)
from productstore.database.executor import execute_query
from productstore.database.product_repository import ProductRepository
from productstore.database.order_repository import OrderRepository
from productstore.database.join_table_synchronizer import JoinTableSynchronizer
from productstore.services import ProductService, OrderService
from productstore.utils.logger import logger, configure_logger

def create_app(config_object: Config) -> Flask:
    """
    Factory function to create and configure the Flask application.

    Args:
        config_object: The configuration object for the application.

    Returns:
        The configured Flask application instance.
    """
    app = Flask("ProductStore")
    app.config.from_object(config_object)

    # --- Logging ---
    configure_logger(config_object.LOG_LEVEL)
    logger.info("Starting the ProductStore Flask application.")
    logger.info(f"Debug mode: {app.config.get('APP_DEBUG')}")

    # --- Secret Key Check ---
    if not app.config.get('SECRET_KEY') or app.config.get('SECRET_KEY') == 'default_secret_key_change_me_in_env':
        logger.critical("SECURITY ALERT: SECRET_KEY is unset or still the default value!")
        if not app.config.get('APP_DEBUG', False):
            raise ConfigurationError("SECRET_KEY must be set to a unique secure value in production.")
        logger.warning("Using the default/insecure SECRET_KEY in debug mode.")

    # --- CORS Configuration ---
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    # --- Database Initialization (SQLAlchemy) ---
    try:
        db_uri = app.config.get('SQLALCHEMY_DATABASE_URI')
        if not db_uri:
            raise ConfigurationError("SQLALCHEMY_DATABASE_URI is not configured.")

        db_engine = init_sqlalchemy(
            db_uri,
            pool_size=config_object.DB_POOL_SIZE,
            max_overflow=config_object.DB_MAX_OVERFLOW,
        )
        atexit.register(dispose_sqlalchemy_engine)
        logger.info("SQLAlchemy engine and session factory ready.")
    except (DatabaseError, ConfigurationError) as db_init_err:
        logger.critical(f"Database initialization failed: {db_init_err}", exc_info=True)
        sys.exit(1)

    # --- Dependency Injection (Service Instantiation) ---
    logger.info("Instantiating repositories and services...")
    synchronizer = JoinTableSynchronizer()
    strategy = config_object.ASSOCIATION_LOAD_STRATEGY
    product_repo = ProductRepository(db_engine, association_strategy=strategy, synchronizer=synchronizer)
    order_repo = OrderRepository(db_engine, association_strategy=strategy, synchronizer=synchronizer)

    app.config['product_repository'] = product_repo
    app.config['order_repository'] = order_repo
    app.config['product_service'] = ProductService(product_repo, order_repo)
    app.config['order_service'] = OrderService(order_repo, product_repo)

    # --- Register Blueprints (API Routes) ---
    register_blueprints(app)

    # --- Register Error Handlers ---
    register_error_handlers(app)

    # --- Health Check ---
    @app.route('/health', methods=['GET'])
    def health_check():
        """Runs a trivial query; 503 when storage is unreachable."""
        body = {"status": "ok", "database": "ok", "association_load_strategy": strategy}
        try:
            with get_db_session() as db:
                execute_query(db, "SELECT 1", None, lambda rs: rs.scalar())
        except PersistenceError as e:
            logger.error(f"Health check query failed: {e}")
            body.update(status="degraded", database="error", database_error=str(e))
            return jsonify(body), 503
        return jsonify(body), 200

    logger.info("ProductStore application configured.")
    return app
