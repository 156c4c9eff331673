"""Metrics module for hello-bigtable."""

from .client_metrics import ClientMetrics
from .registry import MetricRegistry, enable_observability

__all__ = ["ClientMetrics", "MetricRegistry", "enable_observability"]
