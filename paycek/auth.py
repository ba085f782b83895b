"""
ApiKeyAuth signing and verification for the Paycek processing API.

Every request and callback is authenticated with a SHA3-512 digest over the
ordered fields::

    api_key, api_secret, nonce, http_method, endpoint, content_type, body

Each field is preceded by a single NUL byte and the stream is terminated by
one more NUL byte. Fields are not length-prefixed, so a field containing a
literal NUL byte makes the encoding ambiguous.

The nonce is only a digest input. Nothing here remembers nonces or enforces
a freshness window; replay protection, if any, is the remote side's job.
"""

import hashlib
import logging
import time
from typing import Any, Iterable, Mapping, NamedTuple, Tuple, Union

from requests.structures import CaseInsensitiveDict

from .constants import (
    HEADER_API_KEY,
    HEADER_NONCE,
    HEADER_MAC,
    SIGN_HTTP_METHOD,
    SIGN_CONTENT_TYPE,
    VERIFY_HTTP_METHOD,
    VERIFY_CONTENT_TYPE
)
from .exceptions import (
    VerificationError,
    MissingHeaderError,
    InvalidSignatureError
)

logger = logging.getLogger(__name__)

Field = Union[str, bytes]
Headers = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]

_SEPARATOR = b"\x00"

# Everything check_headers() turns into False.
VERIFICATION_FAULTS = (
    VerificationError,   # missing header, MAC mismatch
    UnicodeError,        # undecodable header value or body
    TypeError,           # non-string inputs
    ValueError,          # malformed header pairs
    AttributeError,      # header names that are not strings
)


class SignedHeaders(NamedTuple):
    """Nonce and MAC produced for one outbound request."""
    nonce: str
    mac: str

    def as_headers(self, api_key: str) -> dict:
        """Render the ApiKeyAuth request headers."""
        return {
            HEADER_API_KEY: api_key,
            HEADER_NONCE: self.nonce,
            HEADER_MAC: self.mac,
        }


def _to_bytes(value: Field) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode('utf-8')


def generate_mac(api_key: Field, api_secret: Field, nonce: Field,
                 http_method: Field, endpoint: Field, content_type: Field,
                 body: Field) -> str:
    """
    Build the canonical SHA3-512 MAC for one exchange.

    Args:
        api_key: API key identifier
        api_secret: Shared API secret
        nonce: Decimal millisecond nonce
        http_method: HTTP method, e.g. "POST"
        endpoint: Prefixed endpoint path, e.g. "/processing/api/payment/get"
        content_type: Content type of the body
        body: Exact body string that is (or was) transmitted

    Returns:
        Lowercase hex digest (128 characters)
    """
    digest = hashlib.sha3_512()

    for field in (api_key, api_secret, nonce, http_method, endpoint, content_type, body):
        digest.update(_SEPARATOR)
        digest.update(_to_bytes(field))
    digest.update(_SEPARATOR)

    return digest.hexdigest()


def generate_nonce() -> str:
    """Current Unix time in whole milliseconds, as a decimal string."""
    return str(time.time_ns() // 1_000_000)


def timing_safe_equal(expected: str, received: str) -> bool:
    """
    Compare two MACs without exiting on the first mismatch.

    Every index of ``expected`` is visited, so the running time depends on
    ``len(expected)`` only.
    """
    equal = len(expected) == len(received)

    for i in range(len(expected)):
        equal &= len(received) >= i + 1 and expected[i] == received[i]

    return equal


def sign_request(api_key: str, api_secret: str, endpoint: str, body: Field,
                 http_method: str = SIGN_HTTP_METHOD,
                 content_type: str = SIGN_CONTENT_TYPE) -> SignedHeaders:
    """
    Sign an outbound request.

    The body must be sent exactly as signed; re-serializing it afterwards
    invalidates the MAC.

    Returns:
        SignedHeaders(nonce, mac)
    """
    nonce = generate_nonce()
    mac = generate_mac(api_key, api_secret, nonce, http_method, endpoint, content_type, body)
    return SignedHeaders(nonce, mac)


def normalize_headers(headers: Headers) -> CaseInsensitiveDict:
    """Case-insensitive copy of ``headers``; bytes values are UTF-8 decoded."""
    # HTTPMessage and similar containers iterate over names only
    items = headers.items() if callable(getattr(headers, 'items', None)) else headers
    normalized = CaseInsensitiveDict()
    for name, value in items:
        if isinstance(name, bytes):
            name = name.decode('utf-8')
        if isinstance(value, bytes):
            value = value.decode('utf-8')
        normalized[name] = value
    return normalized


def _require_header(headers: CaseInsensitiveDict, name: str) -> str:
    value = headers.get(name)
    if value is None:
        raise MissingHeaderError(name)
    if not isinstance(value, str):
        raise TypeError(f"Header {name} must be a string, got {type(value).__name__}")
    return value


def verify_headers(api_key: str, api_secret: str, headers: Headers, endpoint: str,
                   body: Field, http_method: str = VERIFY_HTTP_METHOD,
                   content_type: str = VERIFY_CONTENT_TYPE) -> None:
    """
    Strict callback verification.

    Raises one of VERIFICATION_FAULTS instead of returning a result; use
    check_headers() at request-handling boundaries.

    Raises:
        MissingHeaderError: If the nonce or MAC header is absent
        InvalidSignatureError: If the MAC does not match
    """
    normalized = normalize_headers(headers)
    nonce = _require_header(normalized, HEADER_NONCE)
    received_mac = _require_header(normalized, HEADER_MAC)

    expected_mac = generate_mac(
        api_key, api_secret, nonce, http_method, endpoint, content_type, body
    )

    if not timing_safe_equal(expected_mac, received_mac):
        raise InvalidSignatureError(f"MAC mismatch for {http_method} {endpoint}")


def check_headers(api_key: str, api_secret: str, headers: Headers, endpoint: str,
                  body: Field, http_method: str = VERIFY_HTTP_METHOD,
                  content_type: str = VERIFY_CONTENT_TYPE) -> bool:
    """
    Verify that a callback was signed with our credentials.

    Note the defaults: verification assumes ``GET`` with an empty content
    type, while signing assumes ``POST`` and ``application/json``. Pass the
    callback's real method and content type or valid callbacks are rejected.

    Args:
        api_key: API key identifier
        api_secret: Shared API secret
        headers: Callback headers (any case)
        endpoint: Callback endpoint path
        body: Exact callback body
        http_method: Callback HTTP method
        content_type: Callback content type

    Returns:
        True if the callback MAC is valid, False otherwise (never raises)
    """
    try:
        verify_headers(api_key, api_secret, headers, endpoint, body, http_method, content_type)
        return True
    except VERIFICATION_FAULTS as e:
        logger.debug("Callback verification failed for %s: %s", endpoint, e)
        return False
