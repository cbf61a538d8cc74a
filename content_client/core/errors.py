"""Exception hierarchy for the content client.

Request-path failures never surface as exceptions; these are raised only
for misuse detected at construction or registration time.
"""

from __future__ import annotations


class ContentClientError(Exception):
    """Base exception for content client errors."""


class InvalidInputError(ContentClientError, ValueError):
    """Raised when an argument is blank, missing or malformed."""


class ConfigurationError(ContentClientError):
    """Raised when a required endpoint or setting is not configured.

    Attributes:
        setting: The configuration field that caused the failure.
    """

    def __init__(self, message: str, setting: str = "") -> None:
        self.setting = setting
        full_msg = message
        if setting:
            full_msg += f" (setting: {setting})"
        super().__init__(full_msg)


class ConnectionAlreadyRegisteredError(ContentClientError):
    """Raised when a second connection is registered with the holder."""


class ConnectionNotRegisteredError(ContentClientError):
    """Raised when the holder is read before a connection was registered."""
