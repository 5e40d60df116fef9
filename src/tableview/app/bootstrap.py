"""Application bootstrap for table view hosts.

Responsibilities:
 - Optional headless bootstrap (tests / environments without PyQt6)
 - Loading persisted ``TableConfig``
 - Registering shared services (event bus, logging, error capture)
 - Returning a single context object with references and startup timing

PyQt6 is imported lazily so test collection and headless use never need a
display.
"""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from ..services.error_handling_service import ErrorHandlingService
from ..services.event_bus import EventBus, GUIEvent
from ..services.logging_service import LoggingService
from ..services.service_locator import ServiceLocator, services
from .config_store import TableConfig, load_config
from .timing import TimingLogger

try:  # Lazy / optional Qt import
    from PyQt6.QtWidgets import QApplication  # type: ignore

    _QT_AVAILABLE = True
except ImportError:  # pragma: no cover - depends on environment
    QApplication = None  # type: ignore
    _QT_AVAILABLE = False

__all__ = ["AppContext", "create_app", "qt_available"]

log = logging.getLogger(__name__)


@dataclass
class AppContext:
    """References created during bootstrap.

    Attributes
    ----------
    qt_app: The QApplication instance (None when headless).
    headless: Whether headless bootstrap was used.
    config: Loaded table preferences.
    services: Global service locator after registration.
    event_bus, logging_service, error_service: Shared infrastructure.
    timing: Phase timings of this bootstrap.
    metadata: Free-form diagnostics.
    """

    qt_app: Optional[Any]
    headless: bool
    config: TableConfig
    services: ServiceLocator
    event_bus: EventBus
    logging_service: LoggingService
    error_service: ErrorHandlingService
    timing: TimingLogger
    started_at: float
    metadata: dict[str, Any]


def qt_available() -> bool:
    return _QT_AVAILABLE


def create_app(
    *,
    headless: bool | None = None,
    config_dir: str | Path | None = None,
    install_hooks: bool = False,
    capture_logs: bool = True,
) -> AppContext:
    """Create and initialize the application context.

    Parameters
    ----------
    headless: Force headless (no QApplication). None -> headless iff Qt is missing.
    config_dir: Directory holding ``tableview_config.json``.
    install_hooks: Install the global ``sys.excepthook`` capture.
    capture_logs: Attach the ring-buffer log handler to the root logger.
    """
    started = time.perf_counter()
    if headless is None:
        headless = not _QT_AVAILABLE
    timing = TimingLogger()

    qt_app = None
    if not headless and _QT_AVAILABLE:
        with timing.measure("create_qapplication"):
            qt_app = QApplication.instance() or QApplication(sys.argv[:1])

    with timing.measure("load_config"):
        config = load_config(config_dir)

    with timing.measure("register_services"):
        # Fresh bus & services per bootstrap keeps tests isolated.
        bus = EventBus()
        previous_logging = services.try_get("logging_service")
        if isinstance(previous_logging, LoggingService):
            previous_logging.detach_root()
        logging_service = LoggingService(event_bus=bus)
        if capture_logs:
            logging_service.attach_root()
        error_service = ErrorHandlingService(event_bus=bus)
        if install_hooks:
            error_service.install()
        for name, value in [
            ("event_bus", bus),
            ("logging_service", logging_service),
            ("error_service", error_service),
            ("table_config", config),
        ]:
            services.register(name, value, allow_override=True)

    timing.stop()
    bus.publish(GUIEvent.STARTUP_COMPLETE, {"headless": headless})
    log.info("Bootstrap complete in %.3fs (headless=%s)", timing.total_duration, headless)
    return AppContext(
        qt_app=qt_app,
        headless=headless,
        config=config,
        services=services,
        event_bus=bus,
        logging_service=logging_service,
        error_service=error_service,
        timing=timing,
        started_at=started,
        metadata={
            "qt_available": _QT_AVAILABLE,
            "startup_timing": timing.as_dict(),
            "config": config.to_dict(),
        },
    )
