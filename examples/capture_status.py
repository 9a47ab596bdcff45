"""
Example: Capture a status value posted from page script

The page posts a JSON string on the "logger" channel; the delegate receives
the decoded status on this (the Playwright) thread.
"""

from webview_logger import CaptureBrowser

PAGE = """
<html>
<head><title>Checkout</title></head>
<body>
<script>
window.webkit.messageHandlers.logger.postMessage('{"status": "success"}');
</script>
</body>
</html>
"""


class PrintingDelegate:
    def __init__(self):
        self.values = []

    def did_capture_status_value(self, value: str) -> None:
        self.values.append(value)
        print(f"✅ Delegate received status: {value}")


def main():
    delegate = PrintingDelegate()
    with CaptureBrowser(delegate=delegate, headless=True) as browser:
        browser.load_html(PAGE)
        if not browser.wait_for(lambda: delegate.values, timeout=5):
            print("❌ No status captured")


if __name__ == "__main__":
    main()
