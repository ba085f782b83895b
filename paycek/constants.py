"""
Constants for the Paycek client library.
Compatible with the Paycek processing API authentication scheme.
"""

# HTTP Headers (ApiKeyAuth envelope)
HEADER_API_KEY = "ApiKeyAuth-Key"
HEADER_NONCE = "ApiKeyAuth-Nonce"
HEADER_MAC = "ApiKeyAuth-MAC"

# Signing / verification defaults (intentionally asymmetric)
SIGN_HTTP_METHOD = "POST"
SIGN_CONTENT_TYPE = "application/json"
VERIFY_HTTP_METHOD = "GET"
VERIFY_CONTENT_TYPE = ""

# Default configuration values
DEFAULT_CONFIG = {
    'api_host': 'https://paycek.io',
    'api_prefix': '/processing/api',
    'timeout': 30,              # HTTP timeout in seconds
}

# Environment variables read by Paycek.from_env()
ENV_API_KEY = "PAYCEK_API_KEY"
ENV_API_SECRET = "PAYCEK_API_SECRET"
ENV_CONFIG = {
    'api_host': "PAYCEK_API_HOST",
    'api_prefix': "PAYCEK_API_PREFIX",
    'timeout': "PAYCEK_TIMEOUT",
}

# Endpoints (relative to api_prefix)
ENDPOINT_PAYMENT_OPEN = "payment/open"
ENDPOINT_PAYMENT_GET = "payment/get"
ENDPOINT_PAYMENT_UPDATE = "payment/update"
ENDPOINT_PAYMENT_CANCEL = "payment/cancel"
ENDPOINT_PROFILE_INFO_GET = "profile_info/get"
ENDPOINT_PROFILE_WITHDRAW = "profile/withdraw"
ENDPOINT_ACCOUNT_CREATE = "account/create"
ENDPOINT_ACCOUNT_CREATE_WITH_PASSWORD = "account/create_with_password"
ENDPOINT_REPORTS_GET = "reports/get"
