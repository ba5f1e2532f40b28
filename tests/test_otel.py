import logging

import httpx
import pytest
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk._logs.export import InMemoryLogExporter
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import SpanKind, format_trace_id

from bookstore import otel
from bookstore.app import create_app
from bookstore.config import Settings


@pytest.fixture()
def spans(monkeypatch):
    exporter = InMemorySpanExporter()
    monkeypatch.setattr(otel, "span_exporter", lambda: exporter)
    monkeypatch.setattr(otel, "metric_reader", InMemoryMetricReader)
    monkeypatch.setattr(otel, "log_exporter", InMemoryLogExporter)
    yield exporter
    LoggingInstrumentor().uninstrument()
    SQLAlchemyInstrumentor().uninstrument()


@pytest.fixture()
async def traced(database, spans):
    app = create_app(
        database=database,
        settings=Settings(database_url=database.url, create_schema=False, otel_enabled=True),
    )
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client, app.state.telemetry
    app.state.telemetry.shutdown()


def test_telemetry_is_off_by_default(app):
    assert app.state.telemetry is None


@pytest.mark.anyio
async def test_requests_and_queries_are_traced(traced, spans, caplog):
    client, telemetry = traced
    caplog.set_level(logging.INFO, logger="bookstore")

    resp = await client.post(
        "/api/books", json={"title": "Dune", "categoryId": 1, "authorId": 1, "price": 1500}
    )
    assert resp.status_code == 201
    telemetry.tracer_provider.force_flush()
    finished = spans.get_finished_spans()

    (server,) = [span for span in finished if span.kind is SpanKind.SERVER]
    assert "/api/books" in server.name
    assert 201 in (server.attributes.get("http.status_code"), server.attributes.get("http.response.status_code"))

    queries = [
        span
        for span in finished
        if "sqlite" in (span.attributes.get("db.system"), span.attributes.get("db.system.name"))
    ]
    assert queries
    assert all(span.context.trace_id == server.context.trace_id for span in queries)

    (created,) = [record for record in caplog.records if record.getMessage() == "book.created"]
    assert created.trace_id == format_trace_id(server.context.trace_id)
    assert created.span_id

