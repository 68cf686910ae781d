"""Observability setup for OpenTelemetry, Prometheus metrics, and structured logging."""

import logging

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest
import structlog

from .config import settings

SERVICE_NAME = "boat-tour-booking-api"
SERVICE_VERSION = "1.0.0"

# Prometheus metrics
REGISTRY = CollectorRegistry()

# Request metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=REGISTRY
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=REGISTRY
)

# Business metrics
BOOKINGS_CREATED = Counter(
    'bookings_created_total',
    'Total bookings created',
    ['payment_method'],
    registry=REGISTRY
)

BOOKINGS_CANCELLED = Counter(
    'bookings_cancelled_total',
    'Total bookings cancelled',
    ['initiator'],
    registry=REGISTRY
)

BOOKINGS_COMPLETED = Counter(
    'bookings_completed_total',
    'Total bookings completed',
    registry=REGISTRY
)

PAYMENTS_PROCESSED = Counter(
    'payments_processed_total',
    'Total payment attempts by outcome',
    ['outcome'],
    registry=REGISTRY
)

SEAT_RESERVATIONS_REJECTED = Counter(
    'seat_reservations_rejected_total',
    'Seat reservations rejected for lack of capacity',
    registry=REGISTRY
)

SEATS_RELEASE_CLAMPED = Counter(
    'seat_releases_clamped_total',
    'Seat releases clamped at schedule capacity',
    registry=REGISTRY
)

NOTIFICATION_FAILURES = Counter(
    'notification_emission_failures_total',
    'Notifications that could not be stored',
    ['title'],
    registry=REGISTRY
)


def setup_structured_logging():
    """
    Configure structlog and route standard-library logging through it.

    Modules log with ``logging.getLogger(__name__)`` and ``extra={...}``; the
    extra fields, the bound request ID and the active trace context all end
    up as keys of one JSON event (console output in development).
    """

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict["trace_id"] = format(ctx.trace_id, "032x")
            event_dict["span_id"] = format(ctx.span_id, "016x")
        return event_dict

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_trace_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if settings.debug:
        final_processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(),
        ]
    else:
        final_processors = [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.stdlib.ExtraAdder(), *shared_processors],
        processors=final_processors,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(settings.log_level)


def _resource() -> Resource:
    return Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": SERVICE_VERSION,
        "environment": settings.environment,
    })


def setup_tracing():
    """Setup OpenTelemetry tracing. Spans are only exported when an OTLP endpoint is set."""
    provider = TracerProvider(resource=_resource())
    trace.set_tracer_provider(provider)

    if settings.otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint)
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    return trace.get_tracer(__name__)


def setup_metrics():
    """Setup OpenTelemetry metrics export alongside the Prometheus registry."""
    if settings.otlp_endpoint:
        otlp_exporter = OTLPMetricExporter(endpoint=settings.otlp_endpoint)
        reader = PeriodicExportingMetricReader(exporter=otlp_exporter, export_interval_millis=60000)
        metrics.set_meter_provider(MeterProvider(resource=_resource(), metric_readers=[reader]))

    return metrics.get_meter(__name__)


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine):
    """Instrument the async engine's underlying sync engine with OpenTelemetry."""
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)


class MetricsCollector:
    """Collector for business metrics."""

    @staticmethod
    def record_request(method: str, endpoint: str, status_code: int, duration: float):
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration)

    @staticmethod
    def record_booking_created(payment_method: str):
        """Record a booking creation."""
        BOOKINGS_CREATED.labels(payment_method=payment_method).inc()

    @staticmethod
    def record_booking_cancelled(by_staff: bool):
        """Record a booking cancellation."""
        BOOKINGS_CANCELLED.labels(initiator="staff" if by_staff else "customer").inc()

    @staticmethod
    def record_booking_completed(count: int = 1):
        BOOKINGS_COMPLETED.inc(count)

    @staticmethod
    def record_payment(success: bool):
        """Record a payment attempt."""
        PAYMENTS_PROCESSED.labels(outcome="succeeded" if success else "declined").inc()

    @staticmethod
    def record_seat_rejection():
        SEAT_RESERVATIONS_REJECTED.inc()

    @staticmethod
    def record_release_clamped():
        SEATS_RELEASE_CLAMPED.inc()

    @staticmethod
    def record_notification_failure(title: str):
        NOTIFICATION_FAILURES.labels(title=title).inc()


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()
