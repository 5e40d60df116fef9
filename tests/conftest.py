# Shared fixtures. Qt runs headless; when pytest-qt is not installed a minimal
# fallback 'qtbot' fixture is provided so widget tests still exercise the
# widget lifecycle. If pytest-qt is installed, its fixture wins.

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from tableview.services.service_locator import services  # noqa: E402

try:  # If pytest-qt present, do nothing (its fixture will be used)
    import pytestqt  # type: ignore  # noqa: F401
except ImportError:  # pragma: no cover
    try:
        from PyQt6.QtWidgets import QApplication
    except ImportError:  # pragma: no cover
        QApplication = None  # type: ignore

    @pytest.fixture
    def qtbot():  # type: ignore
        if QApplication is None:
            pytest.skip("PyQt6 not available")
        app = QApplication.instance() or QApplication(sys.argv[:1])
        widgets = []

        class Bot:
            def addWidget(self, w):  # mimic pytest-qt API subset
                widgets.append(w)

            def wait(self, ms):
                app.processEvents()

        yield Bot()
        for w in widgets:
            w.close()
            w.deleteLater()
        app.processEvents()


@pytest.fixture(autouse=True)
def _isolate_services():
    yield
    logging_svc = services.try_get("logging_service")
    if logging_svc is not None:
        logging_svc.detach_root()
    services.clear()
