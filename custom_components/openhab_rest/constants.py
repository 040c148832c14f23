"""Constants and Enums for the openHAB REST integration."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

# Integration Domain
DOMAIN = "openhab_rest"

# Config entry keys (credential fields)
CONF_AUTH_TYPE = "auth_type"
CONF_TOKEN = "token"
CONF_BASE_URL_LOCAL = "base_url_local"
CONF_ALLOW_SELF_SIGNED = "allow_unauthorized_certs"
CONF_USERNAME = "username"
CONF_PASSWORD = "password"
CONF_CLOUD_TOKEN = "cloud_token"

# Legacy key still accepted as fallback for the local base URL
CONF_BASE_URL_LEGACY = "base_url"

# Options
CONF_DEBUG_LOGGING = "debug_logging"

# Endpoints
CLOUD_BASE_URL = "https://home.myopenhab.org"
DEFAULT_LOCAL_BASE_URL = "http://localhost:8080"
REST_ROOT = "/rest"

# Headers
TOKEN_HEADER = "X-OPENHAB-TOKEN"
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_TEXT = "text/plain"

READ_ONLY_METHODS = frozenset({"GET", "HEAD"})

# Header names (lower case) never written to the debug log
SENSITIVE_DEBUG_HEADERS = frozenset(
    {
        "authorization",
        "x-openhab-token",
        "cookie",
        "set-cookie",
        "proxy-authorization",
    }
)
REDACTED = "[REDACTED]"
DEBUG_LOG_PREFIX = "[openHAB debug]"

# Body previews in debug logs and error messages
BODY_PREVIEW_LIMIT = 300

CLOUD_AUTH_HINT = ' - For admin-level endpoints, set "openHAB API Token (optional)" in cloud credentials.'
MISSING_STATUS_MESSAGE = "openHAB request failed: missing HTTP status code in response."


class AuthMode(str, Enum):
    """Authentication modes accepted by the dispatcher.

    BASIC is the retired local username/password mode. It is only kept so it
    can be recognised and rejected with a helpful message.
    """

    TOKEN = "token"
    CLOUD = "cloud"
    BASIC = "basic"

    @property
    def is_supported(self) -> bool:
        return self is not AuthMode.BASIC


class APIDefaults(BaseModel):
    """Default values for API configuration."""

    model_config = {"frozen": True}

    REQUEST_TIMEOUT: int = Field(default=30, description="Total timeout for one REST call in seconds")
    TEST_TIMEOUT: int = Field(default=10, description="Timeout for the credential test call in seconds")


API_DEFAULTS = APIDefaults()

# Resources and their operations as exposed by the execute service
RESOURCE_OPERATIONS: dict[str, tuple[str, ...]] = {
    "item": ("list", "get", "state", "command", "updateState", "metadata"),
    "thing": ("list", "get", "status"),
    "rule": ("list", "run", "toggle"),
    "system": ("info",),
}

# Default operation per resource, used when the caller omits it
DEFAULT_OPERATIONS: dict[str, str] = {
    "item": "list",
    "thing": "list",
    "rule": "list",
    "system": "info",
}
