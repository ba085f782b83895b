"""
Paycek processing API client.

This module provides the request dispatcher, which signs every call with the
ApiKeyAuth envelope, and one thin wrapper per API endpoint.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

import requests

from . import auth
from .constants import (
    DEFAULT_CONFIG,
    ENV_API_KEY,
    ENV_API_SECRET,
    ENV_CONFIG,
    SIGN_CONTENT_TYPE,
    SIGN_HTTP_METHOD,
    VERIFY_CONTENT_TYPE,
    VERIFY_HTTP_METHOD,
    ENDPOINT_PAYMENT_OPEN,
    ENDPOINT_PAYMENT_GET,
    ENDPOINT_PAYMENT_UPDATE,
    ENDPOINT_PAYMENT_CANCEL,
    ENDPOINT_PROFILE_INFO_GET,
    ENDPOINT_PROFILE_WITHDRAW,
    ENDPOINT_ACCOUNT_CREATE,
    ENDPOINT_ACCOUNT_CREATE_WITH_PASSWORD,
    ENDPOINT_REPORTS_GET
)
from .exceptions import (
    ConfigurationError,
    FieldConflictError,
    HTTPError,
    ResponseDecodingError
)
from .responses import ApiResponse, decode_response

Payload = Dict[str, Any]


def merge_optional_fields(required: Payload, optional: Optional[Payload] = None) -> Payload:
    """
    Overlay optional fields on the required ones.

    Raises:
        FieldConflictError: If an optional key is also a required key
    """
    body = dict(required)
    if not optional:
        return body

    conflicts = set(body) & set(optional)
    if conflicts:
        raise FieldConflictError(conflicts)

    body.update(optional)
    return body


class Paycek:
    """
    Client for the Paycek processing API.

    Outbound calls are POSTed as JSON with ApiKeyAuth-Key, ApiKeyAuth-Nonce
    and ApiKeyAuth-MAC headers. Inbound callbacks are checked with
    check_headers().
    """

    def __init__(self, api_key: str, api_secret: str, logger: Optional[logging.Logger] = None,
                 **config):
        """
        Initialize Paycek client.

        Args:
            api_key: API key identifier (sent with every request)
            api_secret: API secret (never sent)
            logger: Custom logger instance
            **config: Configuration options (api_host, api_prefix, timeout)
        """
        self._api_key = api_key
        self._api_secret = api_secret
        self.logger = logger or logging.getLogger(__name__)

        # Merge default config with user overrides
        self.config = {**DEFAULT_CONFIG, **config}

        self._validate_config()

        self.api_host = self.config['api_host'].rstrip('/')
        self.api_prefix = self.config['api_prefix'].rstrip('/')

        self.session = requests.Session()

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **config) -> "Paycek":
        """
        Build a client from PAYCEK_* environment variables.

        Explicit ``config`` keyword arguments win over the environment.
        """
        environ = os.environ if environ is None else environ

        env_config = {}
        for key, variable in ENV_CONFIG.items():
            if environ.get(variable):
                env_config[key] = environ[variable]
        if 'timeout' in env_config:
            try:
                env_config['timeout'] = float(env_config['timeout'])
            except ValueError:
                raise ConfigurationError(
                    f"{ENV_CONFIG['timeout']} must be a number"
                ) from None

        return cls(
            environ.get(ENV_API_KEY, ''),
            environ.get(ENV_API_SECRET, ''),
            **{**env_config, **config}
        )

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def api_secret(self) -> str:
        return self._api_secret

    def __repr__(self):
        return f"Paycek(api_key={self._api_key!r}, api_host={self.api_host!r})"

    def _validate_config(self):
        """Validate client configuration."""
        if not self._api_key:
            raise ConfigurationError("api_key cannot be empty")

        if not self._api_secret:
            raise ConfigurationError("api_secret cannot be empty")

        if not str(self.config['api_host']).startswith(('http://', 'https://')):
            raise ConfigurationError("api_host must start with http:// or https://")

        if not str(self.config['api_prefix']).startswith('/'):
            raise ConfigurationError("api_prefix must start with '/'")

        timeout = self.config['timeout']
        if timeout is not None:
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
                raise ConfigurationError("timeout must be a number")
            # NaN fails every comparison
            if not timeout > 0:
                raise ConfigurationError("timeout must be positive")

    def _prefixed_endpoint(self, endpoint: str) -> str:
        return f"{self.api_prefix}/{endpoint}"

    def _serialize_body(self, body: Payload) -> str:
        """Serialize the request body exactly as it is signed and sent."""
        return json.dumps(body, separators=(',', ':'))

    def _api_call(self, endpoint: str, body: Payload) -> ApiResponse:
        """
        Make a signed API call.

        Args:
            endpoint: Endpoint name relative to api_prefix (e.g. "payment/get")
            body: Request payload

        Returns:
            ApiSuccess or ApiError

        Raises:
            HTTPError: If the request fails
            ResponseDecodingError: If the response is empty or not a JSON object
        """
        prefixed_endpoint = self._prefixed_endpoint(endpoint)
        body_string = self._serialize_body(body)

        signed = auth.sign_request(self._api_key, self._api_secret, prefixed_endpoint, body_string)

        headers = signed.as_headers(self._api_key)
        headers['Content-Type'] = SIGN_CONTENT_TYPE

        self.logger.debug("Calling %s (nonce %s)", prefixed_endpoint, signed.nonce)

        try:
            response = self.session.request(
                SIGN_HTTP_METHOD,
                self.api_host + prefixed_endpoint,
                data=body_string.encode('utf-8'),
                headers=headers,
                timeout=self.config['timeout']
            )
        except requests.RequestException as e:
            raise HTTPError(f"HTTP request to {endpoint} failed: {e}") from e

        if not response.ok:
            self.logger.warning("%s responded with status %s", prefixed_endpoint, response.status_code)

        if not response.content:
            raise ResponseDecodingError(
                f"Empty response received from endpoint {endpoint} (status {response.status_code})"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ResponseDecodingError(
                f"There was an error deserializing response received from endpoint {endpoint} "
                f"(status {response.status_code})"
            ) from e

        return decode_response(endpoint, payload)

    def check_headers(self, headers, endpoint: str, body, http_method: str = VERIFY_HTTP_METHOD,
                      content_type: str = VERIFY_CONTENT_TYPE) -> bool:
        """
        Verify that a callback was encoded by Paycek.

        A MAC is built from the nonce in ``headers``, the endpoint, the body,
        the credentials, the HTTP method and the content type, and compared
        with the MAC in ``headers``.

        The defaults are ``GET`` and ``""``, unlike the ``POST`` /
        ``application/json`` used for outbound calls. Always pass the
        callback's actual method and content type.

        Returns:
            True if the MAC matches, False otherwise
        """
        return auth.check_headers(
            self._api_key, self._api_secret, headers, endpoint, body, http_method, content_type
        )

    def generate_payment_url(self, profile_code: str, dst_amount: str,
                             optional_fields: Optional[Payload] = None) -> str:
        """
        Open a payment and return its payment URL.

        Optional fields: payment_id, location_id, items, email, success_url,
        fail_url, back_url, success_url_callback, fail_url_callback,
        status_url_callback, description, language, generate_pdf,
        client_fields.

        Raises:
            PaycekAPIError: If the API rejected the payment
            ResponseDecodingError: If the response has no payment_url
        """
        payment = self.open_payment(profile_code, dst_amount, optional_fields)
        return payment.raise_for_error().require('payment_url')

    def get_payment(self, payment_code: str) -> ApiResponse:
        return self._api_call(ENDPOINT_PAYMENT_GET, {'payment_code': payment_code})

    def open_payment(self, profile_code: str, dst_amount: str,
                     optional_fields: Optional[Payload] = None) -> ApiResponse:
        """
        Open a payment.

        Optional fields: payment_id, location_id, items, email, success_url,
        fail_url, back_url, success_url_callback, fail_url_callback,
        status_url_callback, description, language, generate_pdf,
        client_fields.
        """
        body = merge_optional_fields({
            'profile_code': profile_code,
            'dst_amount': dst_amount,
        }, optional_fields)
        return self._api_call(ENDPOINT_PAYMENT_OPEN, body)

    def update_payment(self, payment_code: str, src_currency: str,
                       optional_fields: Optional[Payload] = None) -> ApiResponse:
        """Update a payment. Optional fields: src_protocol."""
        body = merge_optional_fields({
            'payment_code': payment_code,
            'src_currency': src_currency,
        }, optional_fields)
        return self._api_call(ENDPOINT_PAYMENT_UPDATE, body)

    def cancel_payment(self, payment_code: str) -> ApiResponse:
        return self._api_call(ENDPOINT_PAYMENT_CANCEL, {'payment_code': payment_code})

    def get_profile_info(self, profile_code: str) -> ApiResponse:
        return self._api_call(ENDPOINT_PROFILE_INFO_GET, {'profile_code': profile_code})

    def profile_withdraw(self, profile_code: str, method: str, amount: str, details: Payload,
                         optional_fields: Optional[Payload] = None) -> ApiResponse:
        """
        Withdraw funds from a profile.

        Args:
            details: iban (required), purpose, model, pnb
            optional_fields: id
        """
        body = merge_optional_fields({
            'profile_code': profile_code,
            'method': method,
            'amount': amount,
            'details': details,
        }, optional_fields)
        return self._api_call(ENDPOINT_PROFILE_WITHDRAW, body)

    def create_account(self, email: str, name: str, street: str, city: str, country: str,
                       profile_currency: str, profile_automatic_withdraw_method: str,
                       profile_automatic_withdraw_details: Payload,
                       optional_fields: Optional[Payload] = None) -> ApiResponse:
        """
        Create an account.

        Args:
            profile_automatic_withdraw_details: iban (required), purpose, model, pnb
            optional_fields: type, oib, vat, profile_name, profile_email, profile_type
        """
        body = merge_optional_fields({
            'email': email,
            'name': name,
            'street': street,
            'city': city,
            'country': country,
            'profile_currency': profile_currency,
            'profile_automatic_withdraw_method': profile_automatic_withdraw_method,
            'profile_automatic_withdraw_details': profile_automatic_withdraw_details,
        }, optional_fields)
        return self._api_call(ENDPOINT_ACCOUNT_CREATE, body)

    def create_account_with_password(self, email: str, password: str, name: str, street: str,
                                     city: str, country: str, profile_currency: str,
                                     profile_automatic_withdraw_method: str,
                                     profile_automatic_withdraw_details: Payload,
                                     optional_fields: Optional[Payload] = None) -> ApiResponse:
        """
        Create an account with a password.

        Args:
            profile_automatic_withdraw_details: iban (required), purpose, model, pnb
            optional_fields: type, oib, vat, profile_name, profile_email
        """
        body = merge_optional_fields({
            'email': email,
            'password': password,
            'name': name,
            'street': street,
            'city': city,
            'country': country,
            'profile_currency': profile_currency,
            'profile_automatic_withdraw_method': profile_automatic_withdraw_method,
            'profile_automatic_withdraw_details': profile_automatic_withdraw_details,
        }, optional_fields)
        return self._api_call(ENDPOINT_ACCOUNT_CREATE_WITH_PASSWORD, body)

    def get_reports(self, profile_code: str, datetime_from: str, datetime_to: str,
                    optional_fields: Optional[Payload] = None) -> ApiResponse:
        """Get reports for a time range. Optional fields: location_id."""
        body = merge_optional_fields({
            'profile_code': profile_code,
            'datetime_from': datetime_from,
            'datetime_to': datetime_to,
        }, optional_fields)
        return self._api_call(ENDPOINT_REPORTS_GET, body)

    def close(self):
        """Close HTTP session."""
        if self.session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
