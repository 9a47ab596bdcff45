"""
Webview protocols - the host surface the capture adapter binds to
"""

from collections.abc import Callable
from typing import Any, Optional, Protocol

# completion(result, error): exactly one of the two is meaningful
ScriptCompletion = Callable[[Any, Optional[BaseException]], None]
MessageHandler = Callable[[str, Any], None]


class WebView(Protocol):
    """A host-provided browser control with a script message channel."""

    def set_navigation_observer(self, observer: Callable[["WebView"], None]) -> None:
        """Call observer(webview) every time a page load completes."""
        ...

    def add_message_handler(self, name: str, handler: MessageHandler) -> None:
        """Route messages posted by page script on channel `name` to handler(name, body)."""
        ...

    def evaluate_script(self, script: str, completion: ScriptCompletion) -> None:
        """Evaluate script in the current page and report through completion."""
        ...


class AsyncWebView(Protocol):
    """Webview whose message channel is installed asynchronously."""

    def set_navigation_observer(self, observer: Callable[["AsyncWebView"], None]) -> None: ...

    async def add_message_handler(self, name: str, handler: MessageHandler) -> None: ...

    def evaluate_script(self, script: str, completion: ScriptCompletion) -> None: ...
