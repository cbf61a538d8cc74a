"""Process-wide registration point for a single content connection."""

from __future__ import annotations

import logging
from typing import ClassVar

from content_client.connections.connection import ContentConnection
from content_client.core.errors import (
    ConnectionAlreadyRegisteredError,
    ConnectionNotRegisteredError,
    InvalidInputError,
)

logger = logging.getLogger(__name__)


class ConnectionHolder:
    """Holds the one connection an application registers at startup.

    Passing the connection explicitly is preferred; the holder exists for
    code paths that cannot receive it by injection.
    """

    _connection: ClassVar[ContentConnection | None] = None

    @classmethod
    def register(cls, connection: ContentConnection) -> None:
        if connection is None:
            raise InvalidInputError("Cannot register an empty connection")
        if cls._connection is not None:
            raise ConnectionAlreadyRegisteredError("A content connection is already registered")
        cls._connection = connection
        logger.info("Registered content connection for %s", connection.primary.url)

    @classmethod
    def instance(cls) -> ContentConnection:
        if cls._connection is None:
            raise ConnectionNotRegisteredError("No content connection has been registered")
        return cls._connection

    @classmethod
    def is_registered(cls) -> bool:
        return cls._connection is not None

    @classmethod
    def clear(cls) -> None:
        """Forget the registered connection. Intended for tests and shutdown."""
        cls._connection = None
