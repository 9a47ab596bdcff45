"""
WebViewLogger - captures page HTML and script messages from a webview and
forwards status values to a delegate.
"""

import inspect
import threading
import weakref
from typing import Any, Protocol

from .dispatch import PumpedDispatcher, SerialQueue, UIDispatcher
from .events import CaptureEvent, CaptureSink, EventSource, EventType
from .models import LoggerConfig, StatusExtraction
from .status import extract_status
from .webview import AsyncWebView, WebView


class WebViewLoggerDelegate(Protocol):
    """Observer notified when a status value is captured."""

    def did_capture_status_value(self, value: str) -> None: ...


class CaptureLogger(Protocol):
    """Protocol for optional logger interface (logging.Logger satisfies it)."""

    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class WebViewLogger:
    """
    Capture adapter bound to one or more webviews.

    Page loads trigger an outerHTML capture; messages posted on the "logger"
    channel are captured as-is. Every payload is parsed on a serial background
    queue, and a decoded {"status": "..."} value is posted back to the UI
    thread for the delegate.

    Example:
        >>> dispatcher = PumpedDispatcher()
        >>> capture = WebViewLogger(delegate=observer, dispatcher=dispatcher)
        >>> capture.configure_webview(PlaywrightWebView(page))
        >>> page.set_content(html)
        >>> dispatcher.drain()  # on the page's thread
    """

    def __init__(
        self,
        delegate: WebViewLoggerDelegate | None = None,
        dispatcher: UIDispatcher | None = None,
        config: LoggerConfig | None = None,
        logger: CaptureLogger | None = None,
        sink: CaptureSink | None = None,
    ):
        """
        Args:
            delegate: Observer for captured status values (held weakly)
            dispatcher: Posts deliveries onto the UI-owning thread. Defaults to a
                        PumpedDispatcher owned by the constructing thread.
            config: LoggerConfig (defaults apply when None)
            logger: Optional logger; diagnostics are printed when absent
            sink: Optional CaptureSink recording html/status/diagnostic events.
                  The caller owns it and closes it.
        """
        self.config = config or LoggerConfig()
        self.dispatcher: UIDispatcher = dispatcher or PumpedDispatcher()
        self.logger = logger
        self.sink = sink
        self._delegate_ref: weakref.ref | None = None
        self._queue = SerialQueue(self.config.queue_label, on_error=self._on_queue_error)
        self._seq = 0
        self._closed = False
        if delegate is not None:
            self.set_delegate(delegate)

    # ========== Delegate ==========

    @property
    def delegate(self) -> WebViewLoggerDelegate | None:
        if self._delegate_ref is None:
            return None
        return self._delegate_ref()

    def set_delegate(self, delegate: WebViewLoggerDelegate) -> None:
        """
        Register the observer; replaces any previous one.

        The delegate must be an object with a did_capture_status_value method,
        not the bound method itself. The adapter keeps only a weak reference,
        so the caller must keep the delegate alive for as long as it wants
        deliveries.

        Raises:
            TypeError: If delegate is a bound method or cannot be weakly referenced
        """
        if inspect.ismethod(delegate):
            raise TypeError(
                "delegate must be an object with did_capture_status_value, not a bound method"
            )
        self._delegate_ref = weakref.ref(delegate)

    def remove_delegate(self) -> None:
        self._delegate_ref = None

    # ========== Binding ==========

    def configure_webview(self, webview: WebView) -> None:
        """Become the navigation observer and the channel handler of webview."""
        self._ensure_open()
        webview.set_navigation_observer(self.on_navigation_finished)
        webview.add_message_handler(self.config.channel_name, self.on_message_received)

    async def configure_webview_async(self, webview: AsyncWebView) -> None:
        """Async version of configure_webview()."""
        self._ensure_open()
        webview.set_navigation_observer(self.on_navigation_finished)
        await webview.add_message_handler(self.config.channel_name, self.on_message_received)

    # ========== Host callbacks ==========

    def on_navigation_finished(self, webview: WebView | AsyncWebView) -> None:
        if self._closed:
            return
        webview.evaluate_script(self.config.capture_script, self._on_script_result)

    def on_message_received(self, name: str, body: Any) -> None:
        if self._closed or name != self.config.channel_name:
            return
        if not isinstance(body, str):
            if self.config.log_ignored_messages:
                self._submit(self._ignore_body, name, type(body).__name__)
            return
        self._submit(self._process, body, "message")

    def _on_script_result(self, result: Any, error: BaseException | None) -> None:
        if self._closed:
            return
        self._submit(self._handle_script_result, result, error)

    def _submit(self, fn, *args: Any) -> None:
        try:
            self._queue.submit(fn, *args)
        except RuntimeError:
            # close() landed after the _closed check; drop the payload
            return

    # ========== Serial queue ==========

    def _handle_script_result(self, result: Any, error: BaseException | None) -> None:
        if isinstance(result, str):
            self._log_html(result)
            self._process(result, "navigation")
        elif error is not None:
            self._warn(f"Error logging webview response: {error}")
            self._emit("diagnostic", "navigation", {"error": str(error)})
        else:
            self._warn(f"Capture script returned {type(result).__name__}, expected a string")
            self._emit("diagnostic", "navigation", {"result_type": type(result).__name__})

    def _log_html(self, html: str) -> None:
        if self.config.log_html:
            limit = self.config.html_log_limit
            shown = html
            if limit is not None and len(html) > limit:
                shown = f"{html[:limit]}... ({len(html)} chars)"
            self._info(f"WebView HTML Response: {shown}")
        self._emit("html", "navigation", {"length": len(html), "html": html})

    def _process(self, text: str, source: EventSource) -> StatusExtraction:
        result = extract_status(text, self.config.status_key)
        if result.captured:
            self._info(result.message)
            self._emit("status", source, {"status": result.status})
            self.dispatcher.post(self._deliver, result.status)
        else:
            self._warn(result.message)
            self._emit("diagnostic", source, {"outcome": result.outcome, "message": result.message})
        return result

    def _ignore_body(self, name: str, type_name: str) -> None:
        self._info(f"Ignoring non-string message body ({type_name}) on channel '{name}'")
        self._emit("ignored", "message", {"channel": name, "body_type": type_name})

    # ========== UI thread ==========

    def _deliver(self, status: str) -> None:
        delegate = self.delegate
        if delegate is None:
            return
        delegate.did_capture_status_value(status)

    # ========== Lifecycle ==========

    @property
    def closed(self) -> bool:
        return self._closed

    def flush(self, timeout: float | None = None) -> bool:
        """Block until every payload captured so far has been processed."""
        return self._queue.flush(timeout)

    def close(self) -> None:
        """Stop capturing. Queued payloads still finish processing."""
        if self._closed:
            return
        self._closed = True
        self._queue.close(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("WebViewLogger is closed")

    # ========== Diagnostics ==========

    def _emit(self, event_type: EventType, source: EventSource, data: dict[str, Any]) -> None:
        if self.sink is None:
            return
        self._seq += 1
        event = CaptureEvent(type=event_type, seq=self._seq, source=source, data=data)
        try:
            self.sink.emit(event.to_dict())
        except Exception as e:
            self._error(f"Capture sink failed: {e}")

    def _info(self, message: str) -> None:
        if self.logger:
            self.logger.info(message)
        else:
            print(f"[WebViewLogger] {message}")

    def _warn(self, message: str) -> None:
        if self.logger:
            self.logger.warning(message)
        else:
            print(f"⚠️  [WebViewLogger] {message}")

    def _error(self, message: str) -> None:
        if self.logger:
            self.logger.error(message)
        else:
            print(f"❌ [WebViewLogger] {message}")

    def _on_queue_error(self, exc: BaseException) -> None:
        self._error(f"Unhandled error on {threading.current_thread().name}: {exc!r}")
