import logging
import os

from opentelemetry import metrics, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import format_span_id, format_trace_id


def _collector(signal: str) -> str:
    base = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://otel-collector:4318")
    return f"{base.rstrip('/')}/v1/{signal}"


def span_exporter():
    return OTLPSpanExporter(endpoint=_collector("traces"))


def metric_reader():
    return PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=_collector("metrics")), export_interval_millis=15000
    )


def log_exporter():
    return OTLPLogExporter(endpoint=_collector("logs"))


def _stamp_trace(span, record: logging.LogRecord) -> None:
    context = span.get_span_context() if span else None
    if context is not None and context.is_valid:
        record.trace_id = format_trace_id(context.trace_id)
        record.span_id = format_span_id(context.span_id)


class Telemetry:
    """Providers built for one app, plus the root-logger handler feeding them."""

    def __init__(self, tracer_provider, meter_provider, logger_provider, handler):
        self.tracer_provider = tracer_provider
        self.meter_provider = meter_provider
        self.logger_provider = logger_provider
        self.handler = handler

    def instrument_engine(self, engine) -> None:
        SQLAlchemyInstrumentor().instrument(engine=engine, tracer_provider=self.tracer_provider)

    def shutdown(self) -> None:
        logging.getLogger().removeHandler(self.handler)
        self.tracer_provider.shutdown()
        self.meter_provider.shutdown()
        self.logger_provider.shutdown()


def configure_otel(app) -> Telemetry:
    resource = Resource.create({"service.name": os.getenv("OTEL_SERVICE_NAME", "bookstore-api")})

    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter()))
    trace.set_tracer_provider(tracer_provider)

    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader()])
    metrics.set_meter_provider(meter_provider)

    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(log_exporter()))
    set_logger_provider(logger_provider)

    # Repository and request logs carry the ids of the span they were emitted in.
    LoggingInstrumentor().instrument(set_logging_format=True, log_hook=_stamp_trace)
    handler = LoggingHandler(level=logging.INFO, logger_provider=logger_provider)
    logging.getLogger().addHandler(handler)

    FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider, meter_provider=meter_provider)
    return Telemetry(tracer_provider, meter_provider, logger_provider, handler)
