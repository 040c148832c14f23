"""Data models for the openHAB REST integration.

This module provides Pydantic models for the request-scoped values that flow
through the dispatcher: credentials parsed from the config entry, per-call
request options, the response envelope and the validated operation request
handed to the router. None of them is persisted.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, model_validator

from .constants import (
    CONF_ALLOW_SELF_SIGNED,
    CONF_AUTH_TYPE,
    CONF_BASE_URL_LEGACY,
    CONF_BASE_URL_LOCAL,
    CONF_CLOUD_TOKEN,
    CONF_PASSWORD,
    CONF_TOKEN,
    CONF_USERNAME,
    RESOURCE_OPERATIONS,
    AuthMode,
)
from .infrastructure.errors import OpenHABConfigurationError


# Base model for all openHAB data models
class OpenHABModel(BaseModel):
    """Base model for all openHAB REST data structures."""

    model_config = {"validate_assignment": True, "populate_by_name": True}


class OpenHABCredentials(OpenHABModel):
    """Authentication settings supplied by the config entry.

    Attributes:
        auth_mode: Either local API token or myopenHAB cloud relay.
        base_url_local: Root URL of the local openHAB server (without /rest).
        token: Local API token.
        username: myopenHAB account email.
        password: myopenHAB account password.
        cloud_token: Optional API token forwarded through the cloud relay.
        allow_self_signed: Skip TLS verification (local mode only).

    Example:
        >>> creds = OpenHABCredentials.from_config({"auth_type": "token", "token": "abc"})
        >>> creds.auth_mode
        <AuthMode.TOKEN: 'token'>
    """

    model_config = {"frozen": True}

    auth_mode: AuthMode = Field(default=AuthMode.TOKEN)
    base_url_local: str = Field(default="", description="Local openHAB root URL")
    token: str = Field(default="", description="Local API token")
    username: str = Field(default="", description="myopenHAB account email")
    password: str = Field(default="", description="myopenHAB account password")
    cloud_token: str = Field(default="", description="Optional token sent through the cloud relay")
    allow_self_signed: bool = Field(default=False, description="Accept self-signed certificates")

    @property
    def use_cloud(self) -> bool:
        return self.auth_mode is AuthMode.CLOUD

    @classmethod
    def from_config(cls, data: Mapping[str, Any]) -> OpenHABCredentials:
        """Parse credentials from a raw config entry mapping.

        Raises:
            OpenHABConfigurationError: If the retired basic mode is selected.
        """
        raw_mode = str(data.get(CONF_AUTH_TYPE) or "").strip().lower()
        # Anything other than cloud or the retired basic mode is token auth
        try:
            auth_mode = AuthMode(raw_mode)
        except ValueError:
            auth_mode = AuthMode.TOKEN

        if not auth_mode.is_supported:
            raise OpenHABConfigurationError(
                "Local Basic Auth is no longer supported. "
                'Use "API Token (local openHAB)" or "myopenHAB Account".'
            )

        base_url = data.get(CONF_BASE_URL_LOCAL)
        if base_url is None:
            base_url = data.get(CONF_BASE_URL_LEGACY)

        return cls(
            auth_mode=auth_mode,
            base_url_local=str(base_url or "").strip(),
            token=str(data.get(CONF_TOKEN) or ""),
            username=str(data.get(CONF_USERNAME) or ""),
            password=str(data.get(CONF_PASSWORD) or ""),
            cloud_token=str(data.get(CONF_CLOUD_TOKEN) or "").strip(),
            allow_self_signed=bool(data.get(CONF_ALLOW_SELF_SIGNED, False)),
        )


class RequestOptions(OpenHABModel):
    """Behavioural switches for a single dispatcher call."""

    model_config = {"frozen": True}

    plain_text: bool = Field(default=False, description="Negotiate text/plain instead of JSON")
    full_response: bool = Field(default=False, description="Return the whole envelope, not only the body")
    extra_headers: dict[str, str] = Field(default_factory=dict, description="Headers merged last")
    debug: bool = Field(default=False, description="Emit diagnostic log entries for this call")
    timeout: int | None = Field(default=None, description="Total timeout in seconds, overriding the client default")


class ResponseEnvelope(OpenHABModel):
    """Status, reason, headers and decoded body of a successful call."""

    model_config = {"frozen": True}

    status_code: int
    status_message: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None


class OperationRequest(OpenHABModel):
    """A resource/operation pair and the parameters of one input row."""

    model_config = {"frozen": True}

    resource: str = Field(..., min_length=1)
    operation: str = Field(..., min_length=1)
    params: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_known_operation(self):
        operations = RESOURCE_OPERATIONS.get(self.resource)
        if operations is None:
            raise ValueError(f"Unknown resource: {self.resource}")
        if self.operation not in operations:
            raise ValueError(f"Unknown operation '{self.operation}' for resource '{self.resource}'")
        return self

    @property
    def key(self) -> str:
        return f"{self.resource}.{self.operation}"
