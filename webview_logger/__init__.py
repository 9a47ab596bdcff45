"""
webview-logger - capture page HTML and script status messages from a webview
"""

from .adapter import CaptureLogger, WebViewLogger, WebViewLoggerDelegate
from .async_api import AsyncCaptureBrowser
from .browser import CaptureBrowser
from .dispatch import AsyncioDispatcher, PumpedDispatcher, SerialQueue, UIDispatcher
from .events import CaptureEvent, CaptureSink, JsonlCaptureSink
from .models import LoggerConfig, StatusExtraction
from .playwright_webview import AsyncPlaywrightWebView, PlaywrightWebView
from .status import extract_status
from .webview import AsyncWebView, WebView

__version__ = "0.1.0"

__all__ = [
    # Capture adapter
    "WebViewLogger",
    "WebViewLoggerDelegate",
    "CaptureLogger",
    "extract_status",
    # Execution contexts
    "SerialQueue",
    "UIDispatcher",
    "PumpedDispatcher",
    "AsyncioDispatcher",
    # Webviews
    "WebView",
    "AsyncWebView",
    "PlaywrightWebView",
    "AsyncPlaywrightWebView",
    # Harnesses
    "CaptureBrowser",
    "AsyncCaptureBrowser",
    # Models
    "LoggerConfig",
    "StatusExtraction",
    # Capture events
    "CaptureEvent",
    "CaptureSink",
    "JsonlCaptureSink",
]
