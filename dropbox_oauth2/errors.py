"""
Exceptions raised by the Dropbox OAuth2 strategy.

Configuration problems are raised at construction time, transport failures
are wrapped in InternalOAuthError, and JSON parse errors are left as the
plain json.JSONDecodeError so callers can tell them apart.
"""

from typing import Optional

import httpx


class ConfigurationError(ValueError):
    """Raised when the strategy is constructed with invalid options."""


class InternalOAuthError(Exception):
    """
    Wraps a failure coming from the OAuth2 engine or its HTTP transport.

    The underlying exception is kept on ``oauth_error`` and is also chained
    as ``__cause__`` when raised with ``raise ... from``.
    """

    def __init__(self, message: str, oauth_error: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.oauth_error = oauth_error

    def __str__(self) -> str:
        if isinstance(self.oauth_error, httpx.HTTPStatusError):
            status = self.oauth_error.response.status_code
            return f"{self.message} (status: {status})"
        return self.message


class AuthorizationError(Exception):
    """The provider redirected back with an ``error`` parameter."""

    def __init__(self, code: str, description: Optional[str] = None, uri: Optional[str] = None):
        super().__init__(description or code)
        self.code = code
        self.description = description
        self.uri = uri
