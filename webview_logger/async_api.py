"""
Async API for webview-logger - Use this in asyncio contexts

Pages are bound with AsyncPlaywrightWebView and deliveries are posted onto the
running event loop, so the delegate is always called from the loop's thread.
"""

import asyncio
import os
import time
from collections.abc import Callable

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from .adapter import CaptureLogger, WebViewLogger, WebViewLoggerDelegate
from .browser import BrowserName
from .dispatch import AsyncioDispatcher
from .events import CaptureSink
from .models import LoggerConfig
from .playwright_webview import AsyncPlaywrightWebView


class AsyncCaptureBrowser:
    """Async version of CaptureBrowser for use in asyncio contexts."""

    def __init__(
        self,
        delegate: WebViewLoggerDelegate | None = None,
        headless: bool | None = None,
        browser_name: BrowserName = "chromium",
        config: LoggerConfig | None = None,
        logger: CaptureLogger | None = None,
        sink: CaptureSink | None = None,
    ):
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
        self.capture: WebViewLogger | None = None
        self.webviews: list[AsyncPlaywrightWebView] = []
        self._owns_playwright = True

    @property
    def webview(self) -> AsyncPlaywrightWebView:
        if not self.webviews:
            raise RuntimeError("Browser not started. Call start() first.")
        return self.webviews[0]

    @property
    def page(self) -> Page:
        return self.webview.page

    async def start(self) -> None:
        """Launch the browser and open the first captured page (async)"""
        self.playwright = await async_playwright().start()
        launcher = getattr(self.playwright, self.browser_name)
        self.browser = await launcher.launch(headless=self.headless)
        self.context = await self.browser.new_context()
        self._attach_capture()
        await self.new_page()

    def _attach_capture(self) -> None:
        self.capture = WebViewLogger(
            delegate=self.delegate,
            dispatcher=AsyncioDispatcher(asyncio.get_running_loop()),
            config=self.config,
            logger=self.logger,
            sink=self.sink,
        )

    async def new_page(self) -> AsyncPlaywrightWebView:
        if not self.context or not self.capture:
            raise RuntimeError("Browser not started. Call start() first.")
        return await self.bind_page(await self.context.new_page())

    async def bind_page(self, page: Page) -> AsyncPlaywrightWebView:
        webview = AsyncPlaywrightWebView(page, install_webkit_shim=self.config.install_webkit_shim)
        await self.capture.configure_webview_async(webview)
        self.webviews.append(webview)
        return webview

    async def load_html(self, html: str, webview: AsyncPlaywrightWebView | None = None) -> None:
        await (webview or self.webview).page.set_content(html)

    async def goto(self, url: str, webview: AsyncPlaywrightWebView | None = None) -> None:
        await (webview or self.webview).page.goto(url)

    async def flush(self) -> None:
        """Wait for pending evaluations and queued processing without blocking the loop"""
        for webview in self.webviews:
            await webview.wait_idle()
        if self.capture:
            await asyncio.to_thread(self.capture.flush)
        # Let posted deliveries run
        await asyncio.sleep(0)

    async def wait_for(
        self,
        predicate: Callable[[], bool],
        timeout: float = 5.0,
        interval: float = 0.05,
    ) -> bool:
        """Sleep on the loop until predicate() is true. Returns False on timeout."""
        deadline = time.monotonic() + timeout
        while not predicate():
            if time.monotonic() >= deadline:
                return False
            await asyncio.sleep(interval)
        return True

    async def close(self) -> None:
        """Flush captures and close browser (async)"""
        if self.capture:
            await self.flush()
            self.capture.close()
            self.capture = None
            await asyncio.sleep(0)

        if self._owns_playwright:
            if self.context:
                await self.context.close()
            if self.browser:
                await self.browser.close()
            if self.playwright:
                await self.playwright.stop()

        self.context = None
        self.browser = None
        self.playwright = None
        self.webviews = []

    async def __aenter__(self):
        """Async context manager entry"""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()

    @classmethod
    async def from_page(
        cls,
        page: Page,
        delegate: WebViewLoggerDelegate | None = None,
        config: LoggerConfig | None = None,
        logger: CaptureLogger | None = None,
        sink: CaptureSink | None = None,
    ) -> "AsyncCaptureBrowser":
        """
        Attach capture to an existing Playwright Page.

        The caller keeps ownership of the page's browser; close() only stops capturing.
        """
        instance = cls(delegate=delegate, config=config, logger=logger, sink=sink)
        instance._owns_playwright = False
        instance.context = page.context
        instance._attach_capture()
        await instance.bind_page(page)
        return instance
