"""Input validation for the openHAB REST integration.

This module provides validation functions used by the config flow and the
operation router:
- Local base URLs (scheme, host, no /rest suffix)
- Identifiers such as item names, thing UIDs and rule UIDs
- Tag filters for the item list

Like the rest of the integration they return (is_valid, error_message)
tuples instead of raising, so callers decide how to surface the problem.
"""

from __future__ import annotations

from urllib.parse import urlsplit


def validate_base_url(url: str) -> tuple[bool, str | None]:
    """Validate the local openHAB root URL.

    Args:
        url: URL entered in the config flow, e.g. "http://openhab.local:8080".

    Returns:
        Tuple of (is_valid, error_message).
        error_message is None if valid, otherwise contains description of the error.

    Example:
        >>> validate_base_url("http://192.168.1.20:8080")
        (True, None)
        >>> validate_base_url("openhab.local")
        (False, "URL must start with http:// or https://")
        >>> validate_base_url("http://openhab.local/rest")
        (False, "URL must not include the /rest path")
    """
    url = url.strip()

    if not url:
        return False, "URL cannot be empty"

    parts = urlsplit(url)
    if parts.scheme not in ("http", "https"):
        return False, "URL must start with http:// or https://"

    if not parts.hostname:
        return False, "URL must include a host"

    if any(char.isspace() for char in url):
        return False, "URL must not contain whitespace"

    if parts.path.rstrip("/").endswith("/rest"):
        return False, "URL must not include the /rest path"

    return True, None


def validate_identifier(value, label: str = "Identifier") -> tuple[bool, str | None]:
    """Validate an item name, thing UID or rule UID.

    Example:
        >>> validate_identifier("Kitchen_Light", "Item name")
        (True, None)
        >>> validate_identifier("  ", "Item name")
        (False, "Item name cannot be empty")
    """
    if value is None or not isinstance(value, str):
        return False, f"{label} must be a string"

    if not value.strip():
        return False, f"{label} cannot be empty"

    return True, None


def normalize_tag_filter(tag_filter: str | None) -> str:
    """Strip whitespace around the comma-separated tags and drop empty entries.

    Example:
        >>> normalize_tag_filter(" Lighting , Kitchen,, ")
        'Lighting,Kitchen'
        >>> normalize_tag_filter("")
        ''
    """
    if not tag_filter:
        return ""
    return ",".join(tag.strip() for tag in tag_filter.split(",") if tag.strip())
