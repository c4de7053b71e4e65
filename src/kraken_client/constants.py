"""Shared API constants for the Kraken REST API."""

REST_URL = "https://api.kraken.com"
API_VERSION = "0"
USER_AGENT = "kraken-client/0.1.0"
DEFAULT_TIMEOUT = 10.0
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def default_rest_base_url() -> str:
    """Return the default REST base URL (the version lives in the path)."""
    return REST_URL
