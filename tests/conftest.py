import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from types import SimpleNamespace

import pytest
from PySide6.QtWidgets import QApplication

from playmaker.core.session_controller import SessionController


@pytest.fixture
def qapp():
    """
    Creates a new QApplication for each test function, ensuring a clean environment.
    """
    # Use sys.argv to avoid issues on some platforms.
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app
    app.quit()


def make_settings(**overrides):
    values = dict(
        fps=30,
        duration_seconds=30,
        min_segment_ticks=3,
        frame_interval_ms=16,
        tick_px=4,
        history_limit=100,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def controller(qapp):
    controller = SessionController(make_settings())
    yield controller
    controller.set_playing(False)
    controller.stop_recording()


@pytest.fixture
def settings_factory():
    return make_settings
