# productstore/services/decorators.py
# Error policy shared by every public service operation.

from functools import wraps

from productstore.api.errors import ApiError, ServiceError
from productstore.utils.logger import logger

def service_operation(action: str):
    """
    ApiError subclasses (validation, not-found, persistence, mapping) pass
    through unchanged; anything else is logged and re-raised as ServiceError.
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except ApiError:
                raise
            except Exception as e:
                logger.error(f"Unexpected error while {action}: {e}", exc_info=True)
                raise ServiceError(f"An unexpected error occurred while {action}: {e}") from e
        return wrapper
    return decorator
