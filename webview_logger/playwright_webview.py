"""
Playwright page bindings for the WebView protocols.

Navigation completion maps to the page "load" event, the message channel to
an exposed binding, and script evaluation to page.evaluate().
"""

import asyncio
import json
from collections.abc import Callable
from typing import Any

from playwright.async_api import Error as AsyncError
from playwright.async_api import Page as AsyncPage
from playwright.sync_api import Error, Page

from .webview import MessageHandler, ScriptCompletion

# Lets page script use window.webkit.messageHandlers.<name>.postMessage(body)
# on top of the exposed binding window.<name>(body).
WEBKIT_SHIM = """
(name) => {
    window.webkit = window.webkit || {};
    window.webkit.messageHandlers = window.webkit.messageHandlers || {};
    window.webkit.messageHandlers[name] = {
        postMessage: (body) => window[name](body),
    };
}
"""


def webkit_shim_script(name: str) -> str:
    """Init-script form of WEBKIT_SHIM bound to one channel name."""
    return f"({WEBKIT_SHIM.strip()})({json.dumps(name)});"


def _binding_for(name: str, handler: MessageHandler) -> Callable[..., None]:
    def binding(source: dict, *args: Any) -> None:
        handler(name, args[0] if args else None)

    return binding


class PlaywrightWebView:
    """WebView backed by a Playwright sync-API page"""

    def __init__(self, page: Page, install_webkit_shim: bool = True):
        self.page = page
        self.install_webkit_shim = install_webkit_shim
        self._observer: Callable[["PlaywrightWebView"], None] | None = None
        self._listening = False

    @property
    def url(self) -> str:
        return self.page.url

    def set_navigation_observer(self, observer: Callable[["PlaywrightWebView"], None]) -> None:
        self._observer = observer
        if not self._listening:
            self.page.on("load", self._on_load)
            self._listening = True

    def _on_load(self, page: Page) -> None:
        if self._observer is not None:
            self._observer(self)

    def add_message_handler(self, name: str, handler: MessageHandler) -> None:
        self.page.expose_binding(name, _binding_for(name, handler))
        if self.install_webkit_shim:
            self.page.add_init_script(script=webkit_shim_script(name))
            # Init scripts only reach future documents
            self.page.evaluate(WEBKIT_SHIM, name)

    def evaluate_script(self, script: str, completion: ScriptCompletion) -> None:
        try:
            result = self.page.evaluate(script)
        except Error as e:
            completion(None, e)
            return
        completion(result, None)


class AsyncPlaywrightWebView:
    """WebView backed by a Playwright async-API page"""

    def __init__(self, page: AsyncPage, install_webkit_shim: bool = True):
        self.page = page
        self.install_webkit_shim = install_webkit_shim
        self._observer: Callable[["AsyncPlaywrightWebView"], None] | None = None
        self._listening = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def url(self) -> str:
        return self.page.url

    def set_navigation_observer(
        self, observer: Callable[["AsyncPlaywrightWebView"], None]
    ) -> None:
        self._observer = observer
        if not self._listening:
            self.page.on("load", self._on_load)
            self._listening = True

    def _on_load(self, page: AsyncPage) -> None:
        if self._observer is not None:
            self._observer(self)

    async def add_message_handler(self, name: str, handler: MessageHandler) -> None:
        await self.page.expose_binding(name, _binding_for(name, handler))
        if self.install_webkit_shim:
            await self.page.add_init_script(script=webkit_shim_script(name))
            await self.page.evaluate(WEBKIT_SHIM, name)

    def evaluate_script(self, script: str, completion: ScriptCompletion) -> None:
        """Schedule evaluation on the running loop; completion runs when it settles."""
        task = asyncio.get_running_loop().create_task(self._evaluate(script, completion))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _evaluate(self, script: str, completion: ScriptCompletion) -> None:
        try:
            result = await self.page.evaluate(script)
        except AsyncError as e:
            completion(None, e)
            return
        completion(result, None)

    async def wait_idle(self) -> None:
        """Wait for outstanding script evaluations to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
