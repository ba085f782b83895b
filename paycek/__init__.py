"""
Paycek Client Library

A Python client for the Paycek processing API. Outbound calls are signed
with the ApiKeyAuth SHA3-512 MAC and inbound callbacks can be verified
against the same scheme.

Example usage:
    from paycek import Paycek

    client = Paycek("your-api-key", "your-api-secret")
    url = client.generate_payment_url("profile-code", "10.00")

    if not client.check_headers(request.headers, "/paycek/callback", body,
                                http_method="POST", content_type="application/json"):
        return 401
"""

from .client import Paycek, merge_optional_fields
from .auth import (
    SignedHeaders,
    VERIFICATION_FAULTS,
    check_headers,
    generate_mac,
    generate_nonce,
    sign_request,
    timing_safe_equal,
    verify_headers
)
from .responses import ApiError, ApiResponse, ApiSuccess, decode_response
from .exceptions import (
    PaycekError,
    ConfigurationError,
    FieldConflictError,
    HTTPError,
    ResponseDecodingError,
    PaycekAPIError,
    VerificationError,
    MissingHeaderError,
    InvalidSignatureError
)
from .constants import (
    HEADER_API_KEY,
    HEADER_NONCE,
    HEADER_MAC,
    DEFAULT_CONFIG
)

__version__ = "1.0.0"
__all__ = [
    "Paycek",
    "merge_optional_fields",
    "SignedHeaders",
    "VERIFICATION_FAULTS",
    "check_headers",
    "generate_mac",
    "generate_nonce",
    "sign_request",
    "timing_safe_equal",
    "verify_headers",
    "ApiError",
    "ApiResponse",
    "ApiSuccess",
    "decode_response",
    "PaycekError",
    "ConfigurationError",
    "FieldConflictError",
    "HTTPError",
    "ResponseDecodingError",
    "PaycekAPIError",
    "VerificationError",
    "MissingHeaderError",
    "InvalidSignatureError",
    "HEADER_API_KEY",
    "HEADER_NONCE",
    "HEADER_MAC",
    "DEFAULT_CONFIG"
]
