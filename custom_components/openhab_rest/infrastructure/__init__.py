"""Infrastructure layer for the openHAB REST integration.

This package contains the pieces shared by the dispatcher, the router and
the service layer:
- Error definitions
"""

from .errors import (
    OpenHABConfigurationError,
    OpenHABError,
    OpenHABRequestError,
    OpenHABResponseError,
    OpenHABValidationError,
)

__all__ = [
    "OpenHABError",
    "OpenHABConfigurationError",
    "OpenHABResponseError",
    "OpenHABRequestError",
    "OpenHABValidationError",
]
