"""Configuration, errors, notification hooks and Redis wiring."""

from content_client.core.config import RequestSettings, Settings, get_settings
from content_client.core.errors import (
    ConfigurationError,
    ConnectionAlreadyRegisteredError,
    ConnectionNotRegisteredError,
    ContentClientError,
    InvalidInputError,
)
from content_client.core.hooks import EventHook

__all__ = [
    "ConfigurationError",
    "ConnectionAlreadyRegisteredError",
    "ConnectionNotRegisteredError",
    "ContentClientError",
    "EventHook",
    "InvalidInputError",
    "RequestSettings",
    "Settings",
    "get_settings",
]
