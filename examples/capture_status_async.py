"""
Example: Capture status values from several pages loading at once (async)
"""

import asyncio

from webview_logger import AsyncCaptureBrowser, JsonlCaptureSink


def page_for(i: int) -> str:
    return f"""
    <html><body><script>
    window.webkit.messageHandlers.logger.postMessage('{{"status": "success {i}"}}');
    </script></body></html>
    """


class PrintingDelegate:
    def __init__(self):
        self.values = []

    def did_capture_status_value(self, value: str) -> None:
        self.values.append(value)
        print(f"✅ {value}")


async def main():
    delegate = PrintingDelegate()
    with JsonlCaptureSink("traces/capture.jsonl") as sink:
        async with AsyncCaptureBrowser(delegate=delegate, headless=True, sink=sink) as browser:
            webviews = [browser.webview] + [await browser.new_page() for _ in range(4)]
            await asyncio.gather(
                *(browser.load_html(page_for(i), w) for i, w in enumerate(webviews, start=1))
            )
            await browser.wait_for(lambda: len(delegate.values) >= 5, timeout=10)
    print("💾 Capture events written to traces/capture.jsonl")


if __name__ == "__main__":
    asyncio.run(main())
