"""
Console span exporter for debugging discovery runs.

Spans go to stderr so stdout stays reserved for command output.
"""

import sys

from opentelemetry.sdk.trace.export import ConsoleSpanExporter


def create_console_exporter() -> ConsoleSpanExporter:
    """Create a console exporter that prints finished spans to stderr."""
    return ConsoleSpanExporter(out=sys.stderr)
