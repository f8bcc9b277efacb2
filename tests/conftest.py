# Test configuration: headless Qt platform, registry isolation and a fallback
# 'qtbot' fixture if pytest-qt is not installed. If pytest-qt is installed,
# its fixture wins.

import sys
import os
import time
import contextlib
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from tourguide.config.settings import TourSettings  # noqa: E402
from tourguide.design.tour_registry import clear_tours  # noqa: E402
from tourguide.design.tour_step_groups import clear_step_groups  # noqa: E402
from tourguide.i18n import set_locale  # noqa: E402
from tourguide.services.service_locator import services  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_tour_globals():
    """Every test starts with empty registries and default settings."""
    saved = TourSettings.instance
    TourSettings.instance = TourSettings()
    clear_tours()
    clear_step_groups()
    services.clear()
    set_locale("en")
    yield
    TourSettings.instance = saved
    clear_tours()
    clear_step_groups()
    services.clear()
    set_locale("en")


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
        app = QApplication.instance() or QApplication(sys.argv[:1])  # type: ignore
        widgets = []

        class Bot:
            def addWidget(self, w):  # mimic pytest-qt API subset
                widgets.append(w)

            def waitUntil(self, predicate, timeout=5000):
                deadline = time.monotonic() + timeout / 1000
                while time.monotonic() < deadline:
                    app.processEvents()
                    result = predicate()
                    if result is None or result:
                        return
                    time.sleep(0.01)
                raise TimeoutError("waitUntil timed out")

            def wait(self, ms):
                deadline = time.monotonic() + ms / 1000
                while time.monotonic() < deadline:
                    app.processEvents()
                    time.sleep(0.005)

            @contextlib.contextmanager
            def waitSignal(self, *args, **kwargs):  # no-op stub
                yield

        yield Bot()
        for w in widgets:
            w.close()
