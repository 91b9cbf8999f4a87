"""Prometheus metrics for the document store."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    REGISTRY,
    CollectorRegistry,
    generate_latest,
)


class MetricsRegistry:
    """Registry of all document store metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Record metrics
        self.records_written_total = Counter(
            "docstore_records_written_total",
            "Total number of records serialized into a table",
            ["table"],
            registry=self._registry,
        )

        self.records_created_total = Counter(
            "docstore_records_created_total",
            "Total number of identifiers issued",
            ["table"],
            registry=self._registry,
        )

        self.records_removed_total = Counter(
            "docstore_records_removed_total",
            "Total number of documents removed",
            ["table"],
            registry=self._registry,
        )

        self.field_diagnostics_total = Counter(
            "docstore_field_diagnostics_total",
            "Fields skipped while deserializing records",
            ["table", "reason"],
            registry=self._registry,
        )

        # Table file metrics
        self.table_loads_total = Counter(
            "docstore_table_loads_total",
            "Total table file loads",
            ["table", "status"],  # status: loaded, initialized
            registry=self._registry,
        )

        self.table_saves_total = Counter(
            "docstore_table_saves_total",
            "Total table file writes",
            ["table"],
            registry=self._registry,
        )

        self.table_save_latency_seconds = Histogram(
            "docstore_table_save_latency_seconds",
            "Table file write latency in seconds",
            ["table"],
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
            registry=self._registry,
        )

        self.table_documents = Gauge(
            "docstore_table_documents",
            "Number of documents held in memory per table",
            ["table"],
            registry=self._registry,
        )

        # Query metrics
        self.scan_batches_total = Counter(
            "docstore_scan_batches_total",
            "Total batches produced by incremental scans",
            ["table"],
            registry=self._registry,
        )

        # Schema metrics
        self.schema_versions_created_total = Counter(
            "docstore_schema_versions_created_total",
            "Total schema versions created",
            registry=self._registry,
        )

        self.schema_loads_total = Counter(
            "docstore_schema_loads_total",
            "Total schema version files loaded",
            registry=self._registry,
        )

        self.schema_saves_total = Counter(
            "docstore_schema_saves_total",
            "Total schema version files written",
            registry=self._registry,
        )

        # Store info
        self.info = Info(
            "document_store",
            "Document store information",
            registry=self._registry,
        )

    def render(self) -> bytes:
        """Render every metric of this registry in the Prometheus text format."""
        return generate_latest(self._registry)


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the metrics registry.

    Exposition is left to the host application (see ``render_metrics``).

    Args:
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from document_store import __version__
    _metrics.info.info({
        "version": __version__,
    })

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics


def render_metrics() -> bytes:
    """Render the global metrics registry in the Prometheus text format."""
    return get_metrics().render()
