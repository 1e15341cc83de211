"""Error hierarchy and Flask error handlers.

Every domain failure is a MarketplaceError carrying the HTTP status it maps
to. Storage failures never reach the client in detail: pool exhaustion and
lost connections become a retryable 503, anything else a generic 500.
"""

import logging

from flask import jsonify, request
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 5


class MarketplaceError(Exception):
    """Base class for errors surfaced to API clients."""

    http_status = 500

    def __init__(self, message, http_status=None):
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status

    def to_response(self):
        return {'error': self.message}


class ValidationError(MarketplaceError):
    """Missing or malformed input."""
    http_status = 400


class ConflictError(MarketplaceError):
    """Request conflicts with stored state (duplicate email, sold listing, self-purchase)."""
    http_status = 400


class NotFoundError(MarketplaceError):
    http_status = 404


class AuthenticationError(MarketplaceError):
    http_status = 401


class ServiceUnavailableError(MarketplaceError):
    """Storage temporarily unreachable; the client may retry."""
    http_status = 503


def register_error_handlers(app):
    """Install JSON error handlers for domain, storage and HTTP errors."""

    @app.errorhandler(MarketplaceError)
    def handle_marketplace_error(exc):
        logger.warning(
            "Request rejected: %s %s -> %s %s",
            request.method, request.path, exc.http_status, exc.message,
        )
        response = jsonify(exc.to_response())
        response.status_code = exc.http_status
        if exc.http_status == 503:
            response.headers['Retry-After'] = str(RETRY_AFTER_SECONDS)
        return response

    @app.errorhandler(PoolTimeoutError)
    def handle_storage_unavailable(exc):
        logger.error("Storage unavailable on %s %s", request.method, request.path, exc_info=exc)
        return handle_marketplace_error(
            ServiceUnavailableError('Service temporarily unavailable, please retry')
        )

    @app.errorhandler(OperationalError)
    def handle_operational_error(exc):
        # Only a dropped connection is transient; bad SQL or a missing table is not
        if exc.connection_invalidated:
            return handle_storage_unavailable(exc)
        return handle_storage_error(exc)

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(exc):
        logger.error("Storage error on %s %s", request.method, request.path, exc_info=exc)
        return jsonify({'error': 'Internal server error'}), 500

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc):
        return jsonify({'error': exc.description}), exc.code
