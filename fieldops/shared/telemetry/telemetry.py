"""OpenTelemetry tracing for fieldops.

One TelemetryConfig per process, built from Settings in the lifespan. It owns
the tracer provider and instruments the inbound API (health probes excluded),
outbound httpx traffic (Firestore REST and webhook actions), and log records.
"""

import logging
import threading

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

from fieldops.core.config import Settings

logger = logging.getLogger(__name__)

EXCLUDED_URLS = "/api/v1/health"


class TelemetryConfig:
    """Tracer provider plus the instrumentations fieldops relies on."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.tracer_provider: TracerProvider | None = None

    def _span_processor(self) -> SpanProcessor | None:
        exporter_type = self.settings.telemetry_exporter
        if exporter_type == "none":
            return None
        endpoint = self.settings.telemetry_otlp_endpoint
        if exporter_type == "otlp":
            if not endpoint:
                logger.warning("TELEMETRY_OTLP_ENDPOINT not set; falling back to console spans")
            else:
                logger.info("Exporting spans over OTLP to %s", endpoint)
                return BatchSpanProcessor(
                    OTLPSpanExporter(endpoint=endpoint, insecure=endpoint.startswith("http://"))
                )
        return BatchSpanProcessor(ConsoleSpanExporter())

    def start(self, app: FastAPI) -> TracerProvider | None:
        """Install the global tracer provider and instrument the app.

        Returns None (and leaves tracing off) if setup fails; the service
        still runs untraced.
        """
        settings = self.settings
        try:
            provider = TracerProvider(
                resource=Resource(
                    attributes={
                        SERVICE_NAME: settings.app_name,
                        SERVICE_VERSION: settings.app_version,
                        "deployment.environment": settings.telemetry_environment,
                    }
                ),
                sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_rate)),
            )
            processor = self._span_processor()
            if processor is not None:
                provider.add_span_processor(processor)
            trace.set_tracer_provider(provider)
        except Exception:
            logger.exception("Tracing setup failed; continuing without traces")
            return None
        self.tracer_provider = provider

        FastAPIInstrumentor.instrument_app(
            app, tracer_provider=provider, excluded_urls=EXCLUDED_URLS
        )
        HTTPXClientInstrumentor().instrument(tracer_provider=provider)
        LoggingInstrumentor().instrument(tracer_provider=provider, set_logging_format=True)
        logger.info(
            "Tracing enabled: service=%s exporter=%s sample_rate=%s",
            settings.app_name,
            settings.telemetry_exporter,
            settings.telemetry_sample_rate,
        )
        return provider

    def shutdown(self) -> None:
        """Undo instrumentation and flush pending spans."""
        if self.tracer_provider is None:
            return
        HTTPXClientInstrumentor().uninstrument()
        LoggingInstrumentor().uninstrument()
        try:
            self.tracer_provider.shutdown()
        except Exception:
            logger.exception("Error flushing spans on shutdown")
        self.tracer_provider = None
        logger.info("Tracing shut down")


_telemetry: TelemetryConfig | None = None
_telemetry_lock = threading.RLock()


def get_telemetry() -> TelemetryConfig | None:
    """Return the process-wide telemetry (set in the lifespan)."""
    with _telemetry_lock:
        return _telemetry


def set_telemetry(telemetry: TelemetryConfig | None) -> None:
    global _telemetry
    with _telemetry_lock:
        _telemetry = telemetry
