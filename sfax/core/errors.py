from __future__ import annotations

from typing import Optional


class SfaxError(Exception):
    """
    Base exception for all Sfax client failures.
    """

    pass


class InvalidResponseError(SfaxError):
    """
    Raised when the API returned a response that cannot be used.

    `status` holds the HTTP status code when one was received.
    """

    default_message = "The response returned was unusable."

    def __init__(self, message: Optional[str] = None, *, status: Optional[int] = None):
        super().__init__(message or self.default_message)
        self.status = status


class ConfigurationError(SfaxError):
    """
    Raised when credentials or client settings are missing or invalid.
    """

    pass
