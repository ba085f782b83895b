"""
Custom exceptions for the Paycek client library.
"""


class PaycekError(Exception):
    """Base exception for Paycek client errors."""
    pass


class ConfigurationError(PaycekError):
    """Raised when client configuration is invalid."""
    pass


class FieldConflictError(PaycekError, ValueError):
    """Raised when an optional field would overwrite a required field."""

    def __init__(self, fields):
        self.fields = tuple(sorted(fields))
        super().__init__(
            f"Optional fields collide with required fields: {', '.join(self.fields)}"
        )


class HTTPError(PaycekError):
    """Raised when HTTP request fails."""
    pass


class ResponseDecodingError(PaycekError):
    """Raised when a response body is empty, not JSON, or lacks a field."""
    pass


class PaycekAPIError(PaycekError):
    """Raised when the API answered with an error payload."""

    def __init__(self, endpoint: str, message: str, payload=None):
        self.endpoint = endpoint
        self.message = message
        self.payload = payload
        super().__init__(f"{endpoint}: {message}")


class VerificationError(PaycekError):
    """Base class for callback verification faults."""
    pass


class MissingHeaderError(VerificationError, KeyError):
    """Raised when a required authentication header is absent."""

    def __init__(self, header: str):
        self.header = header
        super().__init__(header)

    def __str__(self):
        return f"Missing authentication header: {self.header}"


class InvalidSignatureError(VerificationError):
    """Raised when the received MAC does not match the expected one."""
    pass
