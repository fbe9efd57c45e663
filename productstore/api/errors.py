# productstore/api/errors.py
# Exception hierarchy of the store and its Flask error handlers.
#
# Every error the data and service layers raise is an ApiError carrying the
# HTTP status it maps to, so routes never translate exceptions themselves.

from flask import jsonify, request
from werkzeug.exceptions import HTTPException
from productstore.utils.logger import logger

# --- Application Exceptions ---

class ApiError(Exception):
    """Base error: a message, an HTTP status and optional extra JSON fields."""
    status_code = 500
    message = "An internal server error occurred."

    def __init__(self, message=None, status_code=None, payload=None):
        self.message = message if message is not None else type(self).message
        super().__init__(self.message)
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload  # merged into the JSON body, e.g. {"missing_ids": [...]}

    def __str__(self):
        return self.message

    def to_dict(self):
        return {**(self.payload or {}), 'error': self.message}

class ValidationError(ApiError):
    """Bad client input: page bounds, malformed ids, empty names, negative prices."""
    status_code = 400
    message = "Validation failed."

class NotFoundError(ApiError):
    """A referenced entity does not exist."""
    status_code = 404
    message = "The requested resource was not found."

class ProductNotFoundError(NotFoundError):
    message = "Product not found."

class OrderNotFoundError(NotFoundError):
    message = "Order not found."

class ServiceError(ApiError):
    """Unexpected failure inside a service operation."""
    message = "A service error occurred."

class DatabaseError(ApiError):
    """Engine, connection or schema setup failed."""
    message = "A database error occurred."

class PersistenceError(DatabaseError):
    """An underlying storage statement (read or write) failed."""
    message = "A storage operation failed."

class AssociationLookupError(PersistenceError):
    """The secondary lookup for an entity's associations failed."""
    message = "Failed to load associated entities."

class MappingError(ApiError):
    """A result row could not be converted into an entity."""
    message = "A database row could not be mapped."

class InconsistentGraphError(MappingError):
    """Loaded entities do not reference each other symmetrically."""
    message = "The loaded Product/Order graph is inconsistent."

class ConfigurationError(ApiError):
    message = "Application configuration error."


# --- Flask Error Handlers ---

def _json_error(body: dict, status_code: int):
    response = jsonify(body)
    response.status_code = status_code
    return response

def register_error_handlers(app):
    """Maps ApiError subclasses, werkzeug HTTP errors and anything else to JSON responses."""

    @app.errorhandler(ApiError)
    def handle_api_error(error: ApiError):
        # 4xx are the client's problem; 5xx are ours
        log = logger.error if error.status_code >= 500 else logger.warning
        log(f"{request.method} {request.path} -> {error.status_code} {type(error).__name__}: {error.message}")
        return _json_error(error.to_dict(), error.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        logger.warning(f"{request.method} {request.path} -> {error.code} {error.name}: {error.description}")
        return _json_error({"error": f"{error.name}: {error.description}"}, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected_exception(error: Exception):
        logger.error(f"{request.method} {request.path} -> unhandled {type(error).__name__}: {error}", exc_info=True)
        return _json_error({"error": "An unexpected internal server error occurred."}, 500)

    logger.info("Error handlers registered.")
