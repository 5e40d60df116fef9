"""Shared infrastructure services (event bus, logging, error capture, registry)."""

from __future__ import annotations

from .event_bus import Event, EventBus, GUIEvent, Subscription  # noqa: F401
from .service_locator import (  # noqa: F401
    ServiceAlreadyRegisteredError,
    ServiceLocator,
    ServiceNotFoundError,
    services,
)
from .logging_service import LogEntry, LoggingService, get_logging_service  # noqa: F401
from .error_handling_service import ErrorHandlingService, ErrorRecord  # noqa: F401

__all__ = [
    "Event",
    "EventBus",
    "GUIEvent",
    "Subscription",
    "ServiceAlreadyRegisteredError",
    "ServiceLocator",
    "ServiceNotFoundError",
    "services",
    "LogEntry",
    "LoggingService",
    "get_logging_service",
    "ErrorHandlingService",
    "ErrorRecord",
]
