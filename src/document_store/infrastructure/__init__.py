"""Infrastructure layer - cross-cutting concerns."""

from document_store.infrastructure.config import Config, get_config
from document_store.infrastructure.container import Container, get_container, reset_container
from document_store.infrastructure.logging import get_logger, setup_logging
from document_store.infrastructure.metrics import MetricsRegistry, get_metrics, setup_metrics
from document_store.infrastructure.tracing import get_tracer, setup_tracing, trace_span

__all__ = [
    "Config",
    "get_config",
    "Container",
    "get_container",
    "reset_container",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
    "trace_span",
]
