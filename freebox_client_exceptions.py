from __future__ import annotations

from typing import Optional


class FreeboxException(Exception):
    pass


class FreeboxApiException(FreeboxException):
    """Non-success envelope returned by the Freebox API."""

    def __init__(self, method: str, url: str, error_code: Optional[str] = None, message: Optional[str] = None):
        self.method = method
        self.url = url
        self.error_code = error_code
        self.message = message
        super().__init__(f"{method} {url} error_code={error_code} msg={message}")


class AuthenticationException(FreeboxApiException):
    pass


class AuthRequiredException(AuthenticationException):
    ERROR_CODE = "auth_required"


class InvalidTokenException(AuthenticationException):
    ERROR_CODE = "invalid_token"


class DiscoveryException(FreeboxException):
    pass


class ApiVersionException(FreeboxException):
    pass


class AuthorizationException(FreeboxException):
    """The pairing request was denied or ended in an unexpected state."""

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"access is {status}")


class ConfigException(FreeboxException):
    pass
