"""Prometheus metrics for the search engine, bridged to OpenTelemetry instruments."""

from __future__ import annotations

from typing import Any

from opentelemetry import metrics as otel_metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader
from opentelemetry.sdk.resources import Resource
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


_meter_holder: dict[str, Any] = {"meter": None, "provider": None}


def init_metrics(
    service_name: str = "contract-search",
    resource_attributes: dict[str, str] | None = None,
    metric_readers: list[MetricReader] | None = None,
) -> MeterProvider:
    """Initialize OpenTelemetry metrics once per process."""
    provider = _meter_holder.get("provider")
    if isinstance(provider, MeterProvider):
        return provider

    attributes = {"service.name": service_name}
    if resource_attributes:
        attributes.update(resource_attributes)
    resource = Resource.create(attributes)
    provider = MeterProvider(resource=resource, metric_readers=metric_readers or [])
    otel_metrics.set_meter_provider(provider)
    _meter_holder["provider"] = provider
    _meter_holder["meter"] = provider.get_meter(__name__)
    return provider


def _get_meter():
    meter = _meter_holder.get("meter")
    if meter is None:
        init_metrics()
        meter = _meter_holder.get("meter")
    return meter


def _label_key(labels: dict[str, str]) -> tuple[tuple[str, str], ...]:
    return tuple(sorted(labels.items()))


class _BoundMetric:
    def __init__(self, wrapper: MetricBridge, labels: dict[str, str]) -> None:
        self._wrapper = wrapper
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._wrapper.inc(self._labels, amount)

    def observe(self, value: float) -> None:
        self._wrapper.observe(self._labels, value)

    def set(self, value: float) -> None:
        self._wrapper.set(self._labels, value)


class MetricBridge:
    """Bridge Prometheus metrics to OTel instruments."""

    def __init__(
        self,
        prom_metric: Counter | Histogram | Gauge,
        *,
        otel_name: str,
        otel_description: str,
        otel_kind: str,
    ) -> None:
        self._prom_metric = prom_metric
        self._otel_name = otel_name
        self._otel_description = otel_description
        self._otel_kind = otel_kind
        self._otel_instrument = None
        self._last_values: dict[tuple[tuple[str, str], ...], float] = {}

    def labels(self, **labels: str) -> _BoundMetric:
        return _BoundMetric(self, labels)

    def _ensure_otel_instrument(self):
        if self._otel_instrument is not None:
            return self._otel_instrument
        meter = _get_meter()
        if self._otel_kind == "counter":
            self._otel_instrument = meter.create_counter(self._otel_name, description=self._otel_description)
        elif self._otel_kind == "histogram":
            self._otel_instrument = meter.create_histogram(self._otel_name, description=self._otel_description)
        elif self._otel_kind == "gauge":
            self._otel_instrument = meter.create_up_down_counter(self._otel_name, description=self._otel_description)
        else:
            raise ValueError(f"Unknown metric kind: {self._otel_kind}")
        return self._otel_instrument

    def inc(self, labels: dict[str, str], amount: float) -> None:
        self._prom_metric.labels(**labels).inc(amount)
        self._ensure_otel_instrument().add(amount, labels)

    def observe(self, labels: dict[str, str], value: float) -> None:
        self._prom_metric.labels(**labels).observe(value)
        self._ensure_otel_instrument().record(value, labels)

    def set(self, labels: dict[str, str], value: float) -> None:
        self._prom_metric.labels(**labels).set(value)
        otel = self._ensure_otel_instrument()
        key = _label_key(labels)
        delta = value - self._last_values.get(key, 0.0)
        if delta:
            otel.add(delta, labels)
        self._last_values[key] = value


_SEARCH_LATENCY_PROM = Histogram(
    "contract_search_latency_seconds",
    "Query engine latency",
    ["outcome"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5),
)

_SEARCH_COUNT_PROM = Counter(
    "contract_search_queries_total",
    "Queries executed by the engine",
    ["outcome"],
)

_INDEX_SIZE_PROM = Gauge(
    "contract_search_index_size",
    "Entries in the current inverted index",
    ["view"],
)

_SNAPSHOT_FETCHES_PROM = Counter(
    "contract_search_snapshot_fetches_total",
    "Record snapshot fetches",
    ["status"],
)

_PERSISTENCE_ERRORS_PROM = Counter(
    "contract_search_persistence_errors_total",
    "History store failures",
    ["operation"],
)

SEARCH_LATENCY = MetricBridge(
    _SEARCH_LATENCY_PROM,
    otel_name="contract_search_latency_seconds",
    otel_description="Query engine latency",
    otel_kind="histogram",
)

SEARCH_COUNT = MetricBridge(
    _SEARCH_COUNT_PROM,
    otel_name="contract_search_queries_total",
    otel_description="Queries executed by the engine",
    otel_kind="counter",
)

INDEX_SIZE = MetricBridge(
    _INDEX_SIZE_PROM,
    otel_name="contract_search_index_size",
    otel_description="Entries in the current inverted index",
    otel_kind="gauge",
)

SNAPSHOT_FETCHES = MetricBridge(
    _SNAPSHOT_FETCHES_PROM,
    otel_name="contract_search_snapshot_fetches_total",
    otel_description="Record snapshot fetches",
    otel_kind="counter",
)

PERSISTENCE_ERRORS = MetricBridge(
    _PERSISTENCE_ERRORS_PROM,
    otel_name="contract_search_persistence_errors_total",
    otel_description="History store failures",
    otel_kind="counter",
)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get content type for metrics endpoint."""
    return CONTENT_TYPE_LATEST
