"""Response types for the Paycek client."""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Union

from .exceptions import PaycekAPIError, ResponseDecodingError


@dataclass(frozen=True)
class ApiSuccess:
    """Successful API response."""
    endpoint: str
    data: Any
    raw: Dict[str, Any] = field(repr=False, default_factory=dict)

    ok = True

    def require(self, key: str) -> Any:
        """Return ``data[key]`` or raise ResponseDecodingError."""
        try:
            return self.data[key]
        except (KeyError, IndexError, TypeError):
            raise ResponseDecodingError(
                f"Response from {self.endpoint} has no field '{key}'"
            ) from None

    def raise_for_error(self) -> "ApiSuccess":
        return self


@dataclass(frozen=True)
class ApiError:
    """Error payload returned by the API."""
    endpoint: str
    error: str
    raw: Dict[str, Any] = field(repr=False, default_factory=dict)

    ok = False

    def raise_for_error(self):
        raise PaycekAPIError(self.endpoint, self.error, self.raw)


ApiResponse = Union[ApiSuccess, ApiError]


def _error_message(error: Any) -> str:
    if isinstance(error, str):
        return error
    if isinstance(error, dict) and isinstance(error.get('message'), str):
        return error['message']
    return json.dumps(error, separators=(',', ':'))


def decode_response(endpoint: str, payload: Any) -> ApiResponse:
    """
    Turn a decoded JSON body into ApiSuccess or ApiError.

    Args:
        endpoint: Endpoint the payload came from
        payload: Result of ``json.loads`` on the response body

    Raises:
        ResponseDecodingError: If the payload is not a JSON object
    """
    if not isinstance(payload, dict):
        raise ResponseDecodingError(
            f"Expected a JSON object from {endpoint}, got {type(payload).__name__}"
        )

    if payload.get('type') == 'error' or payload.get('error') is not None:
        return ApiError(endpoint, _error_message(payload.get('error') or 'unknown error'), payload)

    data = payload['data'] if 'data' in payload else payload
    return ApiSuccess(endpoint, data, payload)
