"""
Pytest configuration and fixtures for webview-logger tests
"""

import os
import threading

import pytest


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "requires_browser: mark test as requiring a launchable Playwright Chromium"
    )


@pytest.fixture
def headless():
    """Fixture that returns headless mode based on CI environment"""
    # Browser tests never need a visible window unless asked for
    return os.getenv("HEADED", "").lower() not in ("true", "1", "yes")


@pytest.fixture(scope="session")
def browser_available():
    """Check if Playwright can launch Chromium in this environment"""
    try:
        from playwright.sync_api import sync_playwright

        with sync_playwright() as p:
            browser = p.chromium.launch(headless=True)
            browser.close()
    except Exception:
        return False
    return True


@pytest.fixture(autouse=True)
def skip_if_no_browser(request):
    """Automatically skip tests that require a browser if none can be launched"""
    marker = request.node.get_closest_marker("requires_browser")
    if marker and not request.getfixturevalue("browser_available"):
        pytest.skip("Chromium not available. Install it first: playwright install chromium")


class RecordingDelegate:
    """Delegate that remembers every status value and the thread it arrived on"""

    def __init__(self) -> None:
        self.values: list[str] = []
        self.threads: list[int] = []

    def did_capture_status_value(self, value: str) -> None:
        self.values.append(value)
        self.threads.append(threading.get_ident())


class RecordingLogger:
    """CaptureLogger that keeps (level, message) pairs"""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def warning(self, message: str) -> None:
        self.records.append(("warning", message))

    def error(self, message: str) -> None:
        self.records.append(("error", message))

    def messages(self, level: str | None = None) -> list[str]:
        return [m for lvl, m in self.records if level is None or lvl == level]


@pytest.fixture
def delegate() -> RecordingDelegate:
    return RecordingDelegate()


@pytest.fixture
def capture_logger() -> RecordingLogger:
    return RecordingLogger()
