"""Endpoints, failover monitoring and connection lifecycle."""

from content_client.connections.connection import (
    ConnectionStatus,
    ContentConnection,
    InitializationResult,
    LogEvent,
    LogLevel,
)
from content_client.connections.holder import ConnectionHolder
from content_client.connections.monitor import PingEvent, TargetMonitor
from content_client.connections.target import Target

__all__ = [
    "ConnectionHolder",
    "ConnectionStatus",
    "ContentConnection",
    "InitializationResult",
    "LogEvent",
    "LogLevel",
    "PingEvent",
    "Target",
    "TargetMonitor",
]
