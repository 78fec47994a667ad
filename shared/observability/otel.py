from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

SERVICE_NAMESPACE = "storefront"
_DEFAULT_MODE = "console"
_DISABLED_MODE = "none"

# Selected by the standard OTEL_TRACES_EXPORTER / OTEL_METRICS_EXPORTER variables.
SPAN_EXPORTERS: dict[str, Callable[[], Any]] = {
    "otlp": OTLPSpanExporter,
    "console": ConsoleSpanExporter,
}
METRIC_EXPORTERS: dict[str, Callable[[], Any]] = {
    "otlp": OTLPMetricExporter,
    "console": ConsoleMetricExporter,
}

_initialized_services: set[str] = set()


def _build_resource(service_name: str, environment: str) -> Resource:
    return Resource.create(
        {
            "service.name": service_name,
            "service.namespace": SERVICE_NAMESPACE,
            "deployment.environment": environment,
        }
    )


def _exporter_for(variable: str, factories: dict[str, Callable[[], Any]]) -> Any | None:
    mode = os.getenv(variable, _DEFAULT_MODE).strip().lower()
    if mode == _DISABLED_MODE:
        return None
    return factories.get(mode, factories[_DEFAULT_MODE])()


def configure_otel(service_name: str, environment: str = "local") -> None:
    """Install global tracer and meter providers once per service name.

    The webhook API and the retention worker run as separate processes and each call this
    at startup; repeated calls in one process are ignored.
    """
    if service_name in _initialized_services:
        return

    resource = _build_resource(service_name, environment)
    tracer_provider = TracerProvider(resource=resource)
    span_exporter = _exporter_for("OTEL_TRACES_EXPORTER", SPAN_EXPORTERS)
    if span_exporter is not None:
        tracer_provider.add_span_processor(BatchSpanProcessor(span_exporter))

    readers: list[MetricReader] = []
    metric_exporter = _exporter_for("OTEL_METRICS_EXPORTER", METRIC_EXPORTERS)
    if metric_exporter is not None:
        readers.append(PeriodicExportingMetricReader(metric_exporter))

    trace.set_tracer_provider(tracer_provider)
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=readers))
    _initialized_services.add(service_name)
