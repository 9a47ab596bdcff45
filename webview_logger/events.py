"""
Capture event records and sinks.

Provides abstract interface and JSONL implementation for recording what the
adapter captured (HTML snapshots, status values, diagnostics).
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

EventType = Literal["html", "status", "diagnostic", "ignored"]
EventSource = Literal["navigation", "message"]


@dataclass
class CaptureEvent:
    """A single record produced while processing a captured payload."""

    type: EventType
    seq: int  # Processing order within one adapter
    source: EventSource
    data: dict[str, Any]
    ts: str = ""  # ISO 8601 timestamp

    def __post_init__(self) -> None:
        if not self.ts:
            self.ts = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type,
            "ts": self.ts,
            "seq": self.seq,
            "source": self.source,
            "data": self.data,
        }


class CaptureSink(ABC):
    """
    Abstract interface for capture event sink.

    Implementations can write to files, databases, or remote services.
    emit() is called from the adapter's serial queue, one event at a time.
    """

    @abstractmethod
    def emit(self, event: dict[str, Any]) -> None:
        """
        Emit a capture event.

        Args:
            event: Event dictionary (from CaptureEvent.to_dict())
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the sink and flush any buffered data."""
        pass


class JsonlCaptureSink(CaptureSink):
    """
    JSONL file sink for capture events.

    Writes one JSON object per line to a file.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Append mode, line buffered
        self._file = open(self.path, "a", encoding="utf-8", buffering=1)

    def emit(self, event: dict[str, Any]) -> None:
        if self._file.closed:
            raise RuntimeError("JsonlCaptureSink is closed")
        self._file.write(json.dumps(event, ensure_ascii=False) + "\n")

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
