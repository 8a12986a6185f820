"""
Application error taxonomy

Handlers raise these; the exception handler in main.py maps each kind to a
fixed status code.
"""


class AppError(Exception):
    """Base class for errors that carry their own HTTP status"""

    status_code = 500
    error = "internal_server_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(AppError):
    status_code = 400
    error = "bad_request"


class UnauthorizedError(AppError):
    status_code = 401
    error = "unauthorized"


class ForbiddenError(AppError):
    status_code = 403
    error = "forbidden"


class NotFoundError(AppError):
    status_code = 404
    error = "not_found"


class PaymentGatewayError(AppError):
    status_code = 502
    error = "payment_gateway_error"


class GeminiConfigurationError(RuntimeError):
    """Raised when the generator is called without an API key"""
