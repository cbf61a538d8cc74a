"""Resilient async client for a remote content service.

Typical use::

    connection = ContentConnection("https://content.example.com/api/", cache=MemoryCacheProvider())
    connection.initialize()
    html = await connection.new_request().get_published_content(1234)
"""

from content_client.cache import MemoryCacheProvider, RedisCacheProvider
from content_client.connections import ConnectionHolder, ContentConnection, Target, TargetMonitor
from content_client.content import ContentRequest, DescendantIdsResponse, RawContentResponse
from content_client.core import (
    ConfigurationError,
    ContentClientError,
    InvalidInputError,
    RequestSettings,
    Settings,
)
from content_client.policies import RetryPolicy

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ConnectionHolder",
    "ContentClientError",
    "ContentConnection",
    "ContentRequest",
    "DescendantIdsResponse",
    "InvalidInputError",
    "MemoryCacheProvider",
    "RawContentResponse",
    "RedisCacheProvider",
    "RequestSettings",
    "RetryPolicy",
    "Settings",
    "Target",
    "TargetMonitor",
]
