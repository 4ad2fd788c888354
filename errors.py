# Error types and JSON error handlers
from flask import jsonify
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    """Base class for errors that are reported to the client as {"error": message}."""
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(ApiError):
    status_code = 400
    message = "Invalid input"


class ConflictError(ApiError):
    status_code = 400
    message = "Already exists"


class Unauthenticated(ApiError):
    status_code = 401
    message = "Authorization required"


class Unauthorized(ApiError):
    status_code = 403
    message = "Not authorized"


class InvalidTokenError(Unauthorized):
    message = "Invalid token"


class Forbidden(ApiError):
    status_code = 403
    message = "You can only modify your own content"


class NotFoundError(ApiError):
    status_code = 404
    message = "Not found"


class StoreError(ApiError):
    status_code = 500
    message = "Database error"


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e):
        if e.status_code >= 500:
            app.logger.error(f"{type(e).__name__}: {e.message}", exc_info=e.__cause__ or e)
        return jsonify({"error": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        app.logger.error(f"Unhandled error: {e}", exc_info=True)
        return jsonify({"error": "Internal server error"}), 500
