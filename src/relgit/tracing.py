"""OpenTelemetry tracing for git invocations.

The executor wraps every ``git`` process in a ``relgit.git.<subcommand>``
span and the Temporal activities add one parent span per release step. Until
``init_tracing`` runs, OpenTelemetry's global no-op provider is in place, so
library callers that never configure tracing get no spans and no overhead.

Design follows Function Core / Imperative Shell:
- Pure functions: build_resource, resolve_exporter_type, git_span_name,
  git_command_attributes. Plain values only, no OTel SDK imports.
- Imperative shell: _span_processor and _create_tracer_provider build SDK
  objects without touching global state; init_tracing, get_tracer and
  shutdown_tracing manage the global provider.
"""

from __future__ import annotations

import os
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
    from opentelemetry.trace import Tracer

SERVICE_NAME = "relgit"
SERVICE_VERSION = "0.1.0"

RELGIT_OTEL_EXPORTER_ENV = "RELGIT_OTEL_EXPORTER"
RELGIT_OTEL_ENDPOINT_ENV = "RELGIT_OTEL_ENDPOINT"

GIT_SPAN_PREFIX = "relgit.git"


class ExporterType(Enum):
    """Where finished spans go."""

    CONSOLE = "console"
    OTLP_GRPC = "otlp_grpc"
    OTLP_HTTP = "otlp_http"
    NONE = "none"


# ---------------------------------------------------------------------------
# Pure functions
# ---------------------------------------------------------------------------


def build_resource(
    service_name: str = SERVICE_NAME,
    service_version: str = SERVICE_VERSION,
    extra_attributes: dict[str, str] | None = None,
) -> dict[str, str]:
    """Resource attributes for the relgit service.

    The service name and version always win over same-named *extra_attributes*.
    """
    return {
        **(extra_attributes or {}),
        "service.name": service_name,
        "service.version": service_version,
    }


def resolve_exporter_type(exporter: ExporterType | None = None) -> ExporterType:
    """Explicit *exporter*, then ``RELGIT_OTEL_EXPORTER``, then console.

    Raises:
        ValueError: If ``RELGIT_OTEL_EXPORTER`` names no known exporter.
    """
    if exporter is not None:
        return exporter

    configured = os.environ.get(RELGIT_OTEL_EXPORTER_ENV)
    if configured is None:
        return ExporterType.CONSOLE
    try:
        return ExporterType(configured)
    except ValueError:
        valid = ", ".join(e.value for e in ExporterType)
        msg = f"Invalid {RELGIT_OTEL_EXPORTER_ENV} value {configured!r}. Valid options: {valid}"
        raise ValueError(msg) from None


def git_span_name(args: Sequence[str]) -> str:
    """``relgit.git.<subcommand>``, or ``relgit.git`` for an empty argv."""
    return f"{GIT_SPAN_PREFIX}.{args[0]}" if args else GIT_SPAN_PREFIX


def git_command_attributes(
    args: Sequence[str],
    cwd: str,
    returncode: int | None = None,
) -> dict[str, str | int]:
    """Build ``relgit.git.*`` span attributes for one git invocation.

    The exit code is omitted until the process has finished.
    """
    attrs: dict[str, str | int] = {
        f"{GIT_SPAN_PREFIX}.subcommand": args[0] if args else "",
        f"{GIT_SPAN_PREFIX}.argv": " ".join(args),
        f"{GIT_SPAN_PREFIX}.cwd": cwd,
    }
    if returncode is not None:
        attrs[f"{GIT_SPAN_PREFIX}.exit_code"] = returncode
    return attrs


# ---------------------------------------------------------------------------
# Imperative shell
# ---------------------------------------------------------------------------


def _span_processor(exporter_type: ExporterType, endpoint: str | None) -> SpanProcessor | None:
    """Processor for *exporter_type*; ``None`` means spans are dropped."""
    from opentelemetry.sdk.trace.export import (
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    if exporter_type is ExporterType.CONSOLE:
        return SimpleSpanProcessor(ConsoleSpanExporter())
    if exporter_type is ExporterType.OTLP_GRPC:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    elif exporter_type is ExporterType.OTLP_HTTP:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    else:
        return None
    exporter = OTLPSpanExporter(endpoint=endpoint) if endpoint else OTLPSpanExporter()
    return BatchSpanProcessor(exporter)


def _create_tracer_provider(
    resource_attrs: dict[str, str],
    exporter_type: ExporterType,
    endpoint: str | None = None,
) -> TracerProvider:
    """Build a ``TracerProvider`` without registering it globally."""
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider

    provider = TracerProvider(resource=Resource.create(resource_attrs))
    processor = _span_processor(exporter_type, endpoint)
    if processor is not None:
        provider.add_span_processor(processor)
    return provider


def init_tracing(
    exporter: ExporterType | None = None,
    endpoint: str | None = None,
    service_name: str = SERVICE_NAME,
    service_version: str = SERVICE_VERSION,
) -> None:
    """Register a fresh global ``TracerProvider``, shutting down the previous one.

    *endpoint* defaults to ``RELGIT_OTEL_ENDPOINT`` and only matters for the
    OTLP exporters.
    """
    from opentelemetry import trace

    provider = _create_tracer_provider(
        build_resource(service_name, service_version),
        resolve_exporter_type(exporter),
        endpoint or os.environ.get(RELGIT_OTEL_ENDPOINT_ENV) or None,
    )

    shutdown_tracing()

    # set_tracer_provider is set-once; the worker re-initializes on restart.
    once = trace._TRACER_PROVIDER_SET_ONCE
    with once._lock:
        once._done = False

    trace.set_tracer_provider(provider)


def get_tracer(name: str = SERVICE_NAME) -> Tracer:
    """Tracer from the global provider (no-op until ``init_tracing``)."""
    from opentelemetry import trace

    return trace.get_tracer(name)


def shutdown_tracing() -> None:
    """Flush and shut down the global provider, if it is an SDK provider."""
    from opentelemetry import trace

    provider = trace.get_tracer_provider()
    if hasattr(provider, "shutdown"):
        provider.shutdown()
