"""Custom exceptions for the openHAB REST integration."""


class OpenHABError(Exception):
    """Base exception for openHAB REST."""


class OpenHABConfigurationError(OpenHABError):
    """Raised when credentials are missing, unsupported or contradictory."""


class OpenHABResponseError(OpenHABError):
    """Raised when the server response cannot be interpreted."""


class OpenHABRequestError(OpenHABError):
    """Raised when openHAB answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class OpenHABValidationError(OpenHABError):
    """Raised when operation parameters fail validation."""
