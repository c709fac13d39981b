import os

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.flask import FlaskInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.instrumentation.requests import RequestsInstrumentor
from opentelemetry.propagate import set_global_textmap
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from models import db

# probes and long-lived event streams would only produce noise spans
EXCLUDED_URLS = "health,metrics,/stream$"


def init_tracing(app):
    """Trace requests and SQL for ``app`` on a provider of its own.

    Under testing spans are kept in memory (``app.extensions["span_exporter"]``)
    instead of being shipped to the OTLP collector.
    """
    resource = Resource.create({
        "service.name": app.config.get("OTEL_SERVICE_NAME", "pratodigital-backend"),
        "deployment.environment": os.getenv("APP_ENV", "development"),
    })
    provider = TracerProvider(resource=resource)
    if app.config.get("TESTING"):
        exporter = InMemorySpanExporter()
        provider.add_span_processor(SimpleSpanProcessor(exporter))
        app.extensions["span_exporter"] = exporter
    else:
        endpoint = app.config.get("OTEL_EXPORTER_OTLP_ENDPOINT")
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
        trace.set_tracer_provider(provider)

    set_global_textmap(TraceContextTextMapPropagator())

    FlaskInstrumentor().instrument_app(app, tracer_provider=provider, excluded_urls=EXCLUDED_URLS)
    if not RequestsInstrumentor().is_instrumented_by_opentelemetry:
        RequestsInstrumentor().instrument(tracer_provider=provider)
    if not SQLAlchemyInstrumentor().is_instrumented_by_opentelemetry:
        with app.app_context():
            SQLAlchemyInstrumentor().instrument(engine=db.engine, tracer_provider=provider)
