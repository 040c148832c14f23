"""Common fixtures for openHAB REST tests."""
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from custom_components.openhab_rest.openhab_api import OpenHABAPI


@pytest.fixture
def mock_hass():
    """Create a mock Home Assistant instance."""
    hass = MagicMock(spec=HomeAssistant)
    hass.data = {}
    hass.services = MagicMock()
    hass.services.has_service = MagicMock(return_value=False)
    hass.services.async_register = MagicMock()
    hass.services.async_remove = MagicMock()
    return hass


@pytest.fixture
def local_credentials():
    """Config entry data for local token authentication."""
    return {
        "auth_type": "token",
        "token": "local-secret-token",
        "base_url_local": "http://openhab.local:8080",
        "allow_unauthorized_certs": False,
    }


@pytest.fixture
def cloud_credentials():
    """Config entry data for myopenHAB authentication."""
    return {
        "auth_type": "cloud",
        "username": "user@example.com",
        "password": "cloud-password",
        "cloud_token": "",
    }


@pytest.fixture
def mock_config_entry(local_credentials):
    """Create a mock config entry."""
    entry = MagicMock(spec=ConfigEntry)
    entry.entry_id = "test_entry_id"
    entry.data = local_credentials
    entry.options = {}
    entry.async_on_unload = MagicMock()
    entry.add_update_listener = MagicMock(return_value=lambda: None)
    return entry


@pytest.fixture
def make_response():
    """Build a fake aiohttp response."""

    def _make(status=200, body=b"", reason="OK", headers=None, charset=None):
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")
        response = MagicMock()
        response.status = status
        response.reason = reason
        response.headers = headers or {}
        response.charset = charset
        response.read = AsyncMock(return_value=body)
        return response

    return _make


@pytest.fixture
def make_session():
    """Build a fake aiohttp session whose request() yields the given response."""

    def _make(response=None, error=None):
        context = MagicMock()
        if error is not None:
            context.__aenter__ = AsyncMock(side_effect=error)
        else:
            context.__aenter__ = AsyncMock(return_value=response)
        context.__aexit__ = AsyncMock(return_value=None)

        session = MagicMock()
        session.closed = False
        session.close = AsyncMock()
        session.request = MagicMock(return_value=context)
        return session

    return _make


@pytest.fixture
def make_api(make_response, make_session):
    """Create an OpenHABAPI wired to a fake session.

    Returns (api, session) so tests can inspect the outgoing request.
    """

    def _make(credentials, status=200, body=b"", reason="OK", error=None, headers=None):
        response = make_response(status=status, body=body, reason=reason, headers=headers)
        session = make_session(response=response, error=error)
        return OpenHABAPI(credentials, session=session), session

    return _make
