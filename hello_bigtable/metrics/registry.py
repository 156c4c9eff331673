"""
Metric Registry Module

Wires the metrics pipeline used by the program:

    registry (MeterProvider) -> reporter (periodic reader) -> exporter

Two readers are attached by default:
- a console reporter that prints every instrument every REPORTER_INTERVAL seconds
- a Cloud Monitoring exporter that ships the same data to Google Cloud

The registry hands out Dropwizard style instruments: timers (latency
histograms in milliseconds) and meters (monotonic counters).
"""

import logging
from typing import Dict, Iterable, Optional, Sequence

from opentelemetry import metrics
from opentelemetry.metrics import Counter, Histogram
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import (
    ConsoleMetricExporter,
    MetricReader,
    PeriodicExportingMetricReader,
)
from opentelemetry.sdk.resources import Resource

from ..config.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

METER_NAME = "hello_bigtable"


class MetricRegistry:
    """
    Named collection of timers and meters backed by an OpenTelemetry
    MeterProvider.

    Instruments are created on first use and cached by name, so asking
    for the same timer twice returns the same histogram.

    Usage:
        registry = MetricRegistry(readers=[reader])
        registry.timer("bigtable.put.latency").record(12.5)
        registry.meter("bigtable.put.count").add(1)
        registry.shutdown()
    """

    def __init__(self, readers: Sequence[MetricReader] = (), service_name: str = METER_NAME):
        self.readers = list(readers)
        self.provider = MeterProvider(
            metric_readers=self.readers,
            resource=Resource.create({"service.name": service_name}),
        )
        self._meter = self.provider.get_meter(METER_NAME)
        self._timers: Dict[str, Histogram] = {}
        self._meters: Dict[str, Counter] = {}
        self._closed = False

    def timer(self, name: str) -> Histogram:
        """Get or create a latency histogram reported in milliseconds."""
        if name not in self._timers:
            self._timers[name] = self._meter.create_histogram(
                name, unit="ms", description=f"Latency of {name}"
            )
        return self._timers[name]

    def meter(self, name: str) -> Counter:
        """Get or create a monotonic counter."""
        if name not in self._meters:
            self._meters[name] = self._meter.create_counter(
                name, unit="1", description=f"Count of {name}"
            )
        return self._meters[name]

    def names(self) -> Iterable[str]:
        return sorted([*self._timers, *self._meters])

    def shutdown(self) -> None:
        """Flush pending exports and stop all readers."""
        if self._closed:
            return
        self._closed = True
        logger.debug(f"Shutting down metric registry: {', '.join(self.names())}")
        self.provider.force_flush()
        self.provider.shutdown()


def _console_reporter(interval_seconds: int) -> MetricReader:
    return PeriodicExportingMetricReader(
        ConsoleMetricExporter(),
        export_interval_millis=interval_seconds * 1000,
    )


def _cloud_monitoring_exporter(project_id: str, interval_seconds: int) -> MetricReader:
    from opentelemetry.exporter.cloud_monitoring import CloudMonitoringMetricsExporter

    return PeriodicExportingMetricReader(
        CloudMonitoringMetricsExporter(project_id=project_id),
        export_interval_millis=interval_seconds * 1000,
    )


def enable_observability(
        config: Optional[Settings] = None,
        extra_readers: Sequence[MetricReader] = (),
        console: bool = True,
        set_global: bool = True,
) -> MetricRegistry:
    """
    Build the metric registry and start its reporters.

    Args:
        config: Settings to read project and interval from (default: global settings)
        extra_readers: Additional readers, e.g. an InMemoryMetricReader in tests
        console: Attach the periodic console reporter
        set_global: Register the provider as the global OpenTelemetry provider

    Returns:
        The started MetricRegistry. Call shutdown() before exiting.
    """
    config = config if config is not None else default_settings
    readers = list(extra_readers)

    if console:
        readers.append(_console_reporter(config.REPORTER_INTERVAL))

    if config.CLOUD_EXPORT:
        readers.append(_cloud_monitoring_exporter(config.PROJECT_ID, config.REPORTER_INTERVAL))
        logger.info(f"Exporting metrics to Cloud Monitoring for project {config.PROJECT_ID}")

    registry = MetricRegistry(readers=readers)

    if set_global:
        metrics.set_meter_provider(registry.provider)

    logger.debug(f"Metric registry started with {len(readers)} reader(s)")
    return registry
