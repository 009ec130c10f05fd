"""
Error taxonomy for the API.

Each error carries the HTTP status it maps to; the handlers in
``portfolio_api.app`` turn them into ``{success: false, message}`` envelopes.
"""

from __future__ import annotations


class PortfolioError(Exception):
    status_code = 500
    default_message = "Something went wrong. Please try again later."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(PortfolioError):
    status_code = 404
    default_message = "Not found"


class AuthError(PortfolioError):
    status_code = 401
    default_message = "Not authenticated"


class ConflictError(PortfolioError):
    status_code = 409
    default_message = "Resource already exists"


class TooManyAttemptsError(PortfolioError):
    status_code = 429
    default_message = "Too many attempts, please try again later."


class BackendError(PortfolioError):
    """Persistence failure. The message is logged, never sent to clients."""

    status_code = 500
