"""
Playwright browser harness with a capture adapter attached to every page
"""

import os
from typing import Literal

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright

from .adapter import CaptureLogger, WebViewLogger, WebViewLoggerDelegate
from .dispatch import PumpedDispatcher
from .events import CaptureSink
from .models import LoggerConfig
from .playwright_webview import PlaywrightWebView

BrowserName = Literal["chromium", "firefox", "webkit"]


class CaptureBrowser:
    """Browser session whose pages report captured status values to a delegate"""

    def __init__(
        self,
        delegate: WebViewLoggerDelegate | None = None,
        headless: bool | None = None,
        browser_name: BrowserName = "chromium",
        config: LoggerConfig | None = None,
        logger: CaptureLogger | None = None,
        sink: CaptureSink | None = None,
    ):
        """
        Initialize capture browser

        Args:
            delegate: Observer for captured status values (held weakly)
            headless: Whether to run in headless mode. If None, defaults to True in CI, False otherwise
            browser_name: Playwright browser engine to launch
            config: LoggerConfig for the capture adapter
            logger: Optional logger for capture diagnostics
            sink: Optional CaptureSink (not closed by the browser)
        """
        self.delegate = delegate
        if headless is None:
            self.headless = os.environ.get("CI", "").lower() == "true"
        else:
            self.headless = headless
        self.browser_name = browser_name
        self.config = config or LoggerConfig()
        self.logger = logger
        self.sink = sink

        self.playwright: Playwright | None = None
        self.browser: Browser | None = None
        self.context: BrowserContext | None = None
        self.dispatcher: PumpedDispatcher | None = None
        self.capture: WebViewLogger | None = None
        self.webviews: list[PlaywrightWebView] = []
        self._owns_playwright = True

    @property
    def webview(self) -> PlaywrightWebView:
        """The first page's webview"""
        if not self.webviews:
            raise RuntimeError("Browser not started. Call start() first.")
        return self.webviews[0]

    @property
    def page(self) -> Page:
        return self.webview.page

    def start(self) -> None:
        """Launch the browser and open the first captured page"""
        self.playwright = sync_playwright().start()
        self.browser = getattr(self.playwright, self.browser_name).launch(headless=self.headless)
        self.context = self.browser.new_context()
        self._attach_capture()
        self.new_page()

    def _attach_capture(self) -> None:
        # Deliveries go to whichever thread started the session
        self.dispatcher = PumpedDispatcher()
        self.capture = WebViewLogger(
            delegate=self.delegate,
            dispatcher=self.dispatcher,
            config=self.config,
            logger=self.logger,
            sink=self.sink,
        )

    def new_page(self) -> PlaywrightWebView:
        """Open another page in the context and bind it to the capture adapter"""
        if not self.context or not self.capture:
            raise RuntimeError("Browser not started. Call start() first.")
        return self.bind_page(self.context.new_page())

    def bind_page(self, page: Page) -> PlaywrightWebView:
        webview = PlaywrightWebView(page, install_webkit_shim=self.config.install_webkit_shim)
        self.capture.configure_webview(webview)
        self.webviews.append(webview)
        return webview

    def load_html(self, html: str, webview: PlaywrightWebView | None = None) -> None:
        """Load an HTML string into a page (waits for the load event)"""
        (webview or self.webview).page.set_content(html)

    def goto(self, url: str, webview: PlaywrightWebView | None = None) -> None:
        (webview or self.webview).page.goto(url)

    def pump(self, timeout_ms: float = 50) -> int:
        """
        Let Playwright process events for timeout_ms, then run pending deliveries.

        Returns:
            Number of deliveries run
        """
        if not self.dispatcher:
            raise RuntimeError("Browser not started. Call start() first.")
        self.page.wait_for_timeout(timeout_ms)
        return self.dispatcher.drain()

    def wait_for(self, predicate, timeout: float = 5.0) -> bool:
        """Pump until predicate() is true. Returns False on timeout."""
        if not self.dispatcher:
            raise RuntimeError("Browser not started. Call start() first.")
        return self.dispatcher.run_until(
            predicate,
            timeout=timeout,
            idle=lambda seconds: self.page.wait_for_timeout(seconds * 1000),
        )

    def close(self) -> None:
        """Flush captures, deliver what is pending, and shut the browser down"""
        if self.capture:
            self.capture.close()
            self.capture = None
        if self.dispatcher:
            self.dispatcher.drain()

        if self._owns_playwright:
            if self.context:
                self.context.close()
            if self.browser:
                self.browser.close()
            if self.playwright:
                self.playwright.stop()

        self.context = None
        self.browser = None
        self.playwright = None
        self.webviews = []

    def __enter__(self):
        """Context manager entry"""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()

    @classmethod
    def from_page(
        cls,
        page: Page,
        delegate: WebViewLoggerDelegate | None = None,
        config: LoggerConfig | None = None,
        logger: CaptureLogger | None = None,
        sink: CaptureSink | None = None,
    ) -> "CaptureBrowser":
        """
        Attach capture to an existing Playwright Page.

        The caller keeps ownership of the page's browser; close() only stops capturing.
        """
        instance = cls(delegate=delegate, config=config, logger=logger, sink=sink)
        instance._owns_playwright = False
        instance.context = page.context
        instance._attach_capture()
        instance.bind_page(page)
        return instance
