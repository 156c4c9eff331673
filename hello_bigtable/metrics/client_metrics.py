"""
Client Metrics Module

Records a timer and a meter around every Bigtable call made by the program,
plus a shared failure meter tagged with the operation name.
"""

import time
from contextlib import contextmanager
from typing import Iterator, Optional

from .registry import MetricRegistry


class ClientMetrics:
    """
    Per-operation instrumentation for Bigtable client calls.

    Instrument names:
        bigtable.<operation>.latency  - timer (ms)
        bigtable.<operation>.count    - meter
        bigtable.failures             - meter, attribute "operation"
    """

    PREFIX = "bigtable"

    def __init__(self, registry: Optional[MetricRegistry] = None):
        # A provider without readers records nothing
        self.registry = registry if registry is not None else MetricRegistry()

    @contextmanager
    def time(self, operation: str) -> Iterator[None]:
        attributes = {"operation": operation}
        start = time.perf_counter()
        try:
            yield
        except Exception:
            self.registry.meter(f"{self.PREFIX}.failures").add(1, attributes)
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.registry.timer(f"{self.PREFIX}.{operation}.latency").record(elapsed_ms, attributes)
            self.registry.meter(f"{self.PREFIX}.{operation}.count").add(1, attributes)
