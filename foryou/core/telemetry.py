"""
Telemetry configuration (Metrics & Tracing).
Prometheus request metrics plus optional OpenTelemetry tracing.
"""
from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_fastapi_instrumentator import Instrumentator

from foryou.config import Settings, get_settings

UNTRACKED_HANDLERS = ["/metrics", "/health", "/health/ready"]


def _setup_metrics(app: FastAPI) -> None:
    instrumentator = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=UNTRACKED_HANDLERS,
        env_var_name="ENABLE_METRICS",
        inprogress_name="foryou_inprogress",
        inprogress_labels=True,
    )
    instrumentator.instrument(app).expose(app, include_in_schema=False)


def _setup_tracing(app: FastAPI, settings: Settings) -> None:
    resource = Resource.create(attributes={
        "service.name": settings.APP_NAME,
        "service.version": settings.APP_VERSION,
        "deployment.environment": "development" if settings.DEBUG else "production",
    })
    provider = TracerProvider(resource=resource)
    # OTLP endpoint defaults to localhost:4317
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter()))
    trace.set_tracer_provider(provider)
    FastAPIInstrumentor.instrument_app(app, tracer_provider=provider)


def setup_telemetry(app: FastAPI) -> None:
    """Expose /metrics and, when enabled, export traces over OTLP."""
    settings = get_settings()

    if settings.ENABLE_PROMETHEUS:
        _setup_metrics(app)

    if settings.ENABLE_OTEL:
        _setup_tracing(app, settings)
