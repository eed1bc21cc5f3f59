"""Tests for relgit.tracing — OpenTelemetry setup."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from relgit.executor import check_git, run_git, run_git_async
from relgit.tracing import (
    RELGIT_OTEL_ENDPOINT_ENV,
    RELGIT_OTEL_EXPORTER_ENV,
    SERVICE_NAME,
    SERVICE_VERSION,
    ExporterType,
    _create_tracer_provider,
    build_resource,
    get_tracer,
    git_command_attributes,
    git_span_name,
    init_tracing,
    resolve_exporter_type,
    shutdown_tracing,
)

if TYPE_CHECKING:
    from relgit.models import InvocationContext

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_global_tracer_provider():
    """Reset the global tracer provider before and after each test.

    The OTel SDK uses a set-once guard that prevents subsequent calls to
    ``set_tracer_provider``. We reset the internal ``_done`` flag so each
    test can register its own provider cleanly.
    """
    _force_reset_otel_provider()
    yield
    provider = trace.get_tracer_provider()
    if isinstance(provider, TracerProvider):
        provider.shutdown()
    _force_reset_otel_provider()


def _force_reset_otel_provider() -> None:
    """Reset OTel global tracer provider to the default no-op state."""
    once = trace._TRACER_PROVIDER_SET_ONCE
    with once._lock:
        once._done = False

    trace._TRACER_PROVIDER = None


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    """Register a global provider that records finished spans in memory."""
    init_tracing(exporter=ExporterType.NONE)
    exporter = InMemorySpanExporter()
    provider = trace.get_tracer_provider()
    assert isinstance(provider, TracerProvider)
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    return exporter


# ---------------------------------------------------------------------------
# build_resource
# ---------------------------------------------------------------------------


class TestBuildResource:
    def test_default_attributes(self) -> None:
        attrs = build_resource()
        assert attrs["service.name"] == SERVICE_NAME
        assert attrs["service.version"] == SERVICE_VERSION

    def test_custom_service_name(self) -> None:
        attrs = build_resource(service_name="release-bot")
        assert attrs["service.name"] == "release-bot"

    def test_extra_attributes(self) -> None:
        attrs = build_resource(extra_attributes={"environment": "ci"})
        assert attrs["environment"] == "ci"
        assert attrs["service.name"] == SERVICE_NAME

    def test_service_name_not_overwritten_by_extras(self) -> None:
        attrs = build_resource(extra_attributes={"service.name": "should-be-ignored"})
        assert attrs["service.name"] == SERVICE_NAME


# ---------------------------------------------------------------------------
# resolve_exporter_type
# ---------------------------------------------------------------------------


class TestResolveExporterType:
    def test_explicit_param_wins(self) -> None:
        assert resolve_exporter_type(ExporterType.OTLP_GRPC) is ExporterType.OTLP_GRPC

    def test_explicit_param_wins_over_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(RELGIT_OTEL_EXPORTER_ENV, "none")
        assert resolve_exporter_type(ExporterType.CONSOLE) is ExporterType.CONSOLE

    def test_env_var_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(RELGIT_OTEL_EXPORTER_ENV, "otlp_http")
        assert resolve_exporter_type() is ExporterType.OTLP_HTTP

    def test_default_is_console(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(RELGIT_OTEL_EXPORTER_ENV, raising=False)
        assert resolve_exporter_type() is ExporterType.CONSOLE

    def test_invalid_env_var_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(RELGIT_OTEL_EXPORTER_ENV, "banana")
        with pytest.raises(ValueError, match="Invalid RELGIT_OTEL_EXPORTER"):
            resolve_exporter_type()


# ---------------------------------------------------------------------------
# git_command_attributes
# ---------------------------------------------------------------------------


class TestGitCommandAttributes:
    def test_expected_keys(self) -> None:
        attrs = git_command_attributes(["rev-parse", "HEAD"], "/work/repo")
        assert attrs == {
            "relgit.git.subcommand": "rev-parse",
            "relgit.git.argv": "rev-parse HEAD",
            "relgit.git.cwd": "/work/repo",
        }

    def test_exit_code_included_when_known(self) -> None:
        attrs = git_command_attributes(["push", "origin"], "/r", returncode=1)
        assert attrs["relgit.git.exit_code"] == 1

    def test_zero_exit_code_kept(self) -> None:
        attrs = git_command_attributes(["tag"], "/r", returncode=0)
        assert attrs["relgit.git.exit_code"] == 0

    def test_empty_args(self) -> None:
        assert git_command_attributes([], "/r")["relgit.git.subcommand"] == ""


class TestGitSpanName:
    def test_named_after_subcommand(self) -> None:
        assert git_span_name(["remote", "update"]) == "relgit.git.remote"

    def test_empty_args(self) -> None:
        assert git_span_name([]) == "relgit.git"


# ---------------------------------------------------------------------------
# _create_tracer_provider
# ---------------------------------------------------------------------------


class TestCreateTracerProvider:
    def test_console_creates_valid_provider(self) -> None:
        provider = _create_tracer_provider(build_resource(), ExporterType.CONSOLE)
        assert isinstance(provider, TracerProvider)
        assert len(provider._active_span_processor._span_processors) == 1
        provider.shutdown()

    def test_none_creates_provider_with_no_processors(self) -> None:
        provider = _create_tracer_provider(build_resource(), ExporterType.NONE)
        assert len(provider._active_span_processor._span_processors) == 0
        provider.shutdown()

    def test_resource_attributes_set(self) -> None:
        attrs = build_resource(service_name="test-svc", service_version="9.9.9")
        provider = _create_tracer_provider(attrs, ExporterType.NONE)
        resource_attrs = dict(provider.resource.attributes)
        assert resource_attrs["service.name"] == "test-svc"
        assert resource_attrs["service.version"] == "9.9.9"
        provider.shutdown()


# ---------------------------------------------------------------------------
# init_tracing / get_tracer / shutdown_tracing
# ---------------------------------------------------------------------------


class TestInitTracing:
    def test_sets_global_provider(self) -> None:
        init_tracing(exporter=ExporterType.NONE)
        assert isinstance(trace.get_tracer_provider(), TracerProvider)

    def test_endpoint_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(RELGIT_OTEL_ENDPOINT_ENV, "http://collector:4318/v1/traces")
        init_tracing(exporter=ExporterType.OTLP_HTTP)
        provider = trace.get_tracer_provider()
        assert isinstance(provider, TracerProvider)
        assert len(provider._active_span_processor._span_processors) == 1


class TestGetTracer:
    def test_returns_noop_tracer_without_init(self) -> None:
        tracer = get_tracer()
        with tracer.start_as_current_span("noop-span"):
            pass


class TestShutdownTracing:
    def test_no_crash_after_init(self) -> None:
        init_tracing(exporter=ExporterType.NONE)
        shutdown_tracing()

    def test_no_crash_without_init(self) -> None:
        shutdown_tracing()


# ---------------------------------------------------------------------------
# Integration: executor spans
# ---------------------------------------------------------------------------


class TestExecutorSpans:
    def test_successful_command_span(
        self, span_exporter: InMemorySpanExporter, context: InvocationContext
    ) -> None:
        check_git(["rev-parse", "HEAD"], context)

        spans = span_exporter.get_finished_spans()
        assert [s.name for s in spans] == ["relgit.git.rev-parse"]
        attrs = spans[0].attributes
        assert attrs["relgit.git.argv"] == "rev-parse HEAD"
        assert attrs["relgit.git.cwd"] == str(context.cwd)
        assert attrs["relgit.git.exit_code"] == 0

    def test_failed_command_records_exit_code(
        self, span_exporter: InMemorySpanExporter, context: InvocationContext
    ) -> None:
        result = run_git(["rev-parse", "--verify", "missing"], context)

        spans = span_exporter.get_finished_spans()
        assert spans[0].attributes["relgit.git.exit_code"] == result.returncode
        assert result.returncode != 0

    @pytest.mark.asyncio
    async def test_async_command_records_exit_code(
        self, span_exporter: InMemorySpanExporter, context: InvocationContext
    ) -> None:
        result = await run_git_async(["rev-parse", "--verify", "missing"], context)

        (span,) = span_exporter.get_finished_spans()
        assert span.name == "relgit.git.rev-parse"
        assert span.attributes["relgit.git.exit_code"] == result.returncode
        assert span.attributes["relgit.git.argv"] == "rev-parse --verify missing"
