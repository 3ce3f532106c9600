"""
radiko API Layer.

This package handles all communication with the radiko web endpoints.
"""

from .auth import AuthResult, RadikoAuthenticator
from .http import HttpRequest, HttpResponse, RadikoHttpClient, check_body
from .partial_key import DEFAULT_AUTHKEY, derive_partial_key

__all__ = [
    "DEFAULT_AUTHKEY",
    "AuthResult",
    "HttpRequest",
    "HttpResponse",
    "RadikoAuthenticator",
    "RadikoHttpClient",
    "check_body",
    "derive_partial_key",
]
