import logging

from tableview.app.bootstrap import create_app
from tableview.app.config_store import TableConfig, save_config
from tableview.services.error_handling_service import ErrorHandlingService
from tableview.services.logging_service import LoggingService, get_logging_service


def test_headless_bootstrap(tmp_path):
    ctx = create_app(headless=True, config_dir=tmp_path)
    assert ctx.headless is True
    assert ctx.qt_app is None
    assert ctx.config == TableConfig()
    for key in ("event_bus", "logging_service", "error_service", "table_config"):
        assert key in ctx.services.list_keys()
    assert isinstance(ctx.error_service, ErrorHandlingService)
    names = [e.name for e in ctx.timing.events]
    assert names == ["load_config", "register_services"]
    assert ctx.metadata["config"]["row_height"] == ctx.config.row_height


def test_bootstrap_loads_saved_config(tmp_path):
    save_config(TableConfig(row_height=32, variant="striped"), tmp_path)
    ctx = create_app(headless=True, config_dir=tmp_path)
    assert ctx.config.row_height == 32
    assert ctx.services.get("table_config").variant == "striped"


def test_logging_service_captures_after_bootstrap(tmp_path):
    ctx = create_app(headless=True, config_dir=tmp_path)
    assert get_logging_service() is ctx.logging_service
    logging.getLogger("tableview.test.boot").warning("after boot")
    assert any(e.message == "after boot" for e in ctx.logging_service.recent())


def test_second_bootstrap_replaces_log_capture(tmp_path):
    first = create_app(headless=True, config_dir=tmp_path)
    second = create_app(headless=True, config_dir=tmp_path)
    assert not first.logging_service.attached
    assert second.logging_service.attached
    assert isinstance(second.services.get("logging_service"), LoggingService)


def test_capture_logs_disabled(tmp_path):
    ctx = create_app(headless=True, config_dir=tmp_path, capture_logs=False)
    assert not ctx.logging_service.attached
