"""
Pydantic models for webview-logger configuration and capture results
"""

import os
from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field

Outcome = Literal["captured", "missing_status", "not_object", "invalid_json", "encoding_error"]


class LoggerConfig(BaseModel):
    """Settings for a WebViewLogger instance"""

    channel_name: str = "logger"
    capture_script: str = "document.documentElement.outerHTML.toString()"
    status_key: str = "status"
    log_html: bool = True
    html_log_limit: int | None = Field(default=None, ge=0)
    queue_label: str = "webview-logger.serial"
    install_webkit_shim: bool = True
    log_ignored_messages: bool = True

    @classmethod
    def from_env(
        cls,
        prefix: str = "WEBVIEW_LOGGER_",
        environ: Mapping[str, str] | None = None,
    ) -> "LoggerConfig":
        """
        Build config from environment variables.

        Reads {prefix}CHANNEL_NAME, {prefix}STATUS_KEY, {prefix}LOG_HTML and
        {prefix}HTML_LOG_LIMIT. Unset variables keep their defaults.

        Args:
            prefix: Variable name prefix
            environ: Mapping to read from (defaults to os.environ)

        Raises:
            pydantic.ValidationError: If a value cannot be coerced
        """
        env = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for field_name in ("channel_name", "status_key", "log_html", "html_log_limit"):
            raw = env.get(f"{prefix}{field_name.upper()}")
            if raw is not None and raw != "":
                values[field_name] = raw
        return cls(**values)


class StatusExtraction(BaseModel):
    """Result of trying to pull a status value out of a captured payload"""

    outcome: Outcome
    message: str
    status: str | None = None

    @property
    def captured(self) -> bool:
        return self.outcome == "captured"
