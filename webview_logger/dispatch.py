"""
Execution contexts used by the capture adapter.

- SerialQueue: strictly ordered (FIFO) background processing on one worker thread
- UIDispatcher: "post to UI context" primitive supplied by the host binding
- PumpedDispatcher: mailbox drained by the thread that owns the webview
- AsyncioDispatcher: posts onto an asyncio event loop
"""

import asyncio
import queue
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Protocol


class SerialQueue:
    """
    FIFO execution context backed by a single worker thread.

    Tasks run one at a time in submission order, regardless of which thread
    submitted them. The queue is unbounded and tasks cannot be cancelled.
    """

    def __init__(
        self,
        label: str = "webview-logger.serial",
        on_error: Callable[[BaseException], None] | None = None,
    ):
        """
        Args:
            label: Worker thread name prefix
            on_error: Called with any exception a task lets escape
                      (defaults to printing it)
        """
        self.label = label
        self.on_error = on_error
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=label)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Queue fn(*args) behind everything already submitted."""
        if self._closed:
            raise RuntimeError(f"SerialQueue '{self.label}' is closed")
        future = self._executor.submit(fn, *args)
        future.add_done_callback(self._report)
        return future

    def _report(self, future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is None:
            return
        if self.on_error is not None:
            self.on_error(exc)
        else:
            print(f"❌ [WebViewLogger] Unhandled error on {self.label}: {exc!r}")

    def flush(self, timeout: float | None = None) -> bool:
        """
        Wait until every task submitted so far has finished.

        Returns:
            True if the queue drained within timeout, False otherwise
        """
        if self._closed:
            return True
        marker = self._executor.submit(lambda: None)
        try:
            marker.result(timeout=timeout)
        except FutureTimeoutError:
            return False
        return True

    def close(self, wait: bool = True) -> None:
        """Stop accepting tasks; optionally wait for queued ones to finish."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=wait)


class UIDispatcher(Protocol):
    """Posts a callback onto the thread that owns the webview."""

    def post(self, callback: Callable[..., None], *args: Any) -> None:
        """Schedule callback(*args) on the UI-owning thread. Must be thread-safe."""
        ...


class PumpedDispatcher:
    """
    Mailbox for a UI thread that pumps its own events.

    Playwright's sync API objects belong to the thread that started Playwright,
    so deliveries are queued here and run only when that thread calls drain().
    """

    def __init__(self, owner_thread: threading.Thread | None = None):
        self.owner_thread = owner_thread or threading.current_thread()
        self._mailbox: queue.SimpleQueue = queue.SimpleQueue()

    def post(self, callback: Callable[..., None], *args: Any) -> None:
        self._mailbox.put((callback, args))

    def pending(self) -> int:
        return self._mailbox.qsize()

    def drain(self) -> int:
        """
        Run every queued callback on the calling (owner) thread.

        Returns:
            Number of callbacks run

        Raises:
            RuntimeError: If called from any thread other than the owner
        """
        if threading.current_thread() is not self.owner_thread:
            raise RuntimeError(
                f"drain() must be called from {self.owner_thread.name}, "
                f"not {threading.current_thread().name}"
            )
        count = 0
        while True:
            try:
                callback, args = self._mailbox.get_nowait()
            except queue.Empty:
                return count
            callback(*args)
            count += 1

    def run_until(
        self,
        predicate: Callable[[], bool],
        timeout: float = 5.0,
        idle: Callable[[float], None] | None = None,
        interval: float = 0.05,
    ) -> bool:
        """
        Drain repeatedly until predicate() holds or timeout expires.

        Args:
            predicate: Condition checked after each drain
            timeout: Seconds to wait
            idle: Called with interval between drains to let the host process
                  events (defaults to time.sleep)
            interval: Seconds per idle step

        Returns:
            True if predicate became true, False on timeout
        """
        wait = idle or time.sleep
        deadline = time.monotonic() + timeout
        while True:
            self.drain()
            if predicate():
                return True
            if time.monotonic() >= deadline:
                return False
            wait(interval)


class AsyncioDispatcher:
    """Posts callbacks onto an asyncio event loop (the async API's UI thread)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self.loop = loop or asyncio.get_running_loop()

    def post(self, callback: Callable[..., None], *args: Any) -> None:
        self.loop.call_soon_threadsafe(callback, *args)
