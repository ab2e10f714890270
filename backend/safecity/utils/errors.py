from flask import jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError


class ApiError(Exception):
    """
    Application error carried up to the HTTP boundary.

    `code` is one of the closed set below; `details` is optional structured
    context (ids, offending values) and `errors` holds per-field messages.
    """
    def __init__(self, message, status_code=400, code=None, details=None, errors=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code or _CODES_BY_STATUS.get(status_code, "ERROR")
        self.details = details or {}
        self.errors = errors or {}


_CODES_BY_STATUS = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
}


def bad_request(message="Bad request", details=None) -> ApiError:
    return ApiError(message, 400, "BAD_REQUEST", details)


def unauthorized(message="Unauthorized", details=None) -> ApiError:
    return ApiError(message, 401, "UNAUTHORIZED", details)


def forbidden(message="Forbidden", details=None) -> ApiError:
    return ApiError(message, 403, "FORBIDDEN", details)


def not_found(message="Not found", details=None) -> ApiError:
    return ApiError(message, 404, "NOT_FOUND", details)


def conflict(message="Conflict", details=None) -> ApiError:
    return ApiError(message, 409, "CONFLICT", details)


def validation_error(message="Validation error", details=None, errors=None) -> ApiError:
    return ApiError(message, 422, "VALIDATION_ERROR", details, errors)


def internal_error(message="Internal error", details=None) -> ApiError:
    return ApiError(message, 500, "INTERNAL_ERROR", details)


def _error_body(message, code, details=None, errors=None) -> dict:
    response = {
        "success": False,
        "message": message,
        "code": code,
    }
    if details:
        response["details"] = details
    if errors:
        response["errors"] = errors
    return response


def register_error_handlers(app):

    def _respond(err: ApiError):
        return jsonify(_error_body(err.message, err.code, err.details, err.errors)), err.status_code

    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        return _respond(err)

    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err: ValidationError):
        errors = err.messages if hasattr(err, "messages") else str(err)
        return _respond(validation_error("Invalid input", errors=errors))

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        code = _CODES_BY_STATUS.get(err.code, "HTTP_ERROR")
        return jsonify(_error_body(err.description or "HTTP error", code)), err.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        app.logger.exception(err)
        return _respond(internal_error("Internal server error"))


def register_jwt_handlers(jwt):
    """Answer token problems with the same envelope as every other error."""

    @jwt.unauthorized_loader
    def missing_token(reason: str):
        return jsonify(_error_body("Authentication required", "UNAUTHORIZED", {"reason": reason})), 401

    @jwt.invalid_token_loader
    def invalid_token(reason: str):
        return jsonify(_error_body("Invalid token", "UNAUTHORIZED", {"reason": reason})), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify(_error_body("Token expired", "UNAUTHORIZED")), 401
