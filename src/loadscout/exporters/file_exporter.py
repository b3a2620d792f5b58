"""
JSON Lines span exporter for inspecting discovery runs without a collector.

Each finished span becomes one line. Records keep the span tree (ids and
parent id), the outcome, the duration in milliseconds and the span's
attributes, which for loadscout spans are the ``loadscout.*`` keys
(module path, provider, scenario counts).
"""

import json
import logging
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import IO, Any

from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

logger = logging.getLogger(__name__)


def span_record(span: ReadableSpan) -> dict[str, Any]:
    """Flatten a finished span into a JSON-serializable dict."""
    duration_ms = None
    if span.start_time is not None and span.end_time is not None:
        duration_ms = round((span.end_time - span.start_time) / 1e6, 3)
    record: dict[str, Any] = {
        "name": span.name,
        "trace_id": format(span.context.trace_id, "032x"),
        "span_id": format(span.context.span_id, "016x"),
        "parent_span_id": format(span.parent.span_id, "016x") if span.parent else None,
        "start_time": span.start_time,
        "duration_ms": duration_ms,
        "status": {
            "status_code": span.status.status_code.name,
            "description": span.status.description,
        },
        "attributes": dict(span.attributes or {}),
        "resource": dict(span.resource.attributes) if span.resource else {},
    }
    exceptions = [
        event.attributes.get("exception.type")
        for event in span.events
        if event.name == "exception" and event.attributes
    ]
    if exceptions:
        record["exceptions"] = exceptions
    return record


class FileSpanExporter(SpanExporter):
    """Append span records to a JSON Lines file.

    The file is opened on first export and kept open until ``shutdown``, so
    several runs can share one trace file.
    """

    def __init__(self, output_path: str | Path):
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._stream: IO[str] | None = None
        self._lock = threading.Lock()
        self._closed = False

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        lines = [json.dumps(span_record(span), default=str) for span in spans]
        with self._lock:
            if self._closed:
                return SpanExportResult.FAILURE
            try:
                if self._stream is None:
                    self._stream = self.output_path.open("a", encoding="utf-8")
                for line in lines:
                    self._stream.write(line + "\n")
                self._stream.flush()
            except OSError as exc:
                logger.warning("Cannot write spans to %s: %s", self.output_path, exc)
                return SpanExportResult.FAILURE
        return SpanExportResult.SUCCESS

    def shutdown(self) -> None:
        with self._lock:
            self._closed = True
            if self._stream is not None:
                self._stream.close()
                self._stream = None

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        with self._lock:
            if self._stream is not None:
                self._stream.flush()
        return True
