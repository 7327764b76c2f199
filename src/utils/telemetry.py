"""Telemetry helpers: JSON log lines carrying a trace_id, plus OpenTelemetry spans."""

from __future__ import annotations

import contextvars
import json
import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional
from uuid import uuid4

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

_trace_id: contextvars.ContextVar[str | None] = contextvars.ContextVar("trace_id", default=None)


def get_trace_id() -> Optional[str]:
    return _trace_id.get()


def set_trace_id(trace_id: str) -> None:
    _trace_id.set(trace_id)


def new_trace_id() -> str:
    tid = uuid4().hex
    set_trace_id(tid)
    return tid


def ensure_trace_id() -> str:
    """Return the current trace id, starting a new one if this context has none."""
    return get_trace_id() or new_trace_id()


# Ledger context a call site may attach with ``extra=``; copied into the JSON line when set.
CONTEXT_FIELDS = ("operation", "caller", "tool", "error")


class JsonFormatter(logging.Formatter):
    def __init__(self, service_name: str = "token-ledger"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "service": self.service_name,
            "name": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
        }
        trace_id = getattr(record, "trace_id", None) or get_trace_id()
        if trace_id:
            payload["trace_id"] = trace_id
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str = "WARNING", service_name: str = "token-ledger") -> None:
    """Send JSON log lines to stderr; the stdio transport owns stdout."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter(service_name))
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING), handlers=[handler], force=True)


def configure_otel(service_name: str = "token-ledger") -> None:
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    trace.set_tracer_provider(provider)


@contextmanager
def span(name: str, attrs: Optional[Dict[str, Any]] = None) -> Iterator[None]:
    """
    Wrap a block in an OpenTelemetry span and log its duration at DEBUG.
    Without a configured provider the tracer is a no-op and only the log line remains.
    """
    logger = logging.getLogger(__name__)
    attributes = {k: v for k, v in (attrs or {}).items() if v is not None}
    start = time.perf_counter()
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(name, attributes=attributes):
        try:
            yield
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 3)
            logger.debug(
                json.dumps({"event": "span", "name": name, "duration_ms": duration_ms, "attrs": attributes}, ensure_ascii=False, default=str)
            )
