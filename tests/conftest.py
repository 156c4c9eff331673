"""
Pytest Configuration and Fixtures

This module provides in-memory stand-ins for the Bigtable data and admin
clients, plus shared fixtures for all tests.
"""

import dataclasses
from collections import defaultdict
from typing import AsyncGenerator, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from google.api_core.exceptions import AlreadyExists, NotFound
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from hello_bigtable.bigtable.connection import BigtableConnection
from hello_bigtable.config.settings import Settings
from hello_bigtable.metrics.client_metrics import ClientMetrics
from hello_bigtable.metrics.registry import MetricRegistry


# ============================================================================
# Fake Bigtable data API
# ============================================================================

@dataclasses.dataclass
class FakeCell:
    value: bytes


class FakeRow:
    """Row with the same get_cells() lookup as the real client's Row."""

    def __init__(self, row_key: bytes, cells: Dict[Tuple[str, bytes], List[FakeCell]]):
        self.row_key = row_key
        self._cells = cells

    def get_cells(self, family: str = None, qualifier: bytes = None) -> List[FakeCell]:
        return list(self._cells.get((family, qualifier), []))


class FakeDataTable:
    """
    Sorted in-memory table recording every call it receives.

    Storage format: row_key -> {(family, qualifier): [cells, newest first]}
    """

    def __init__(self, table_id: str):
        self.table_id = table_id
        self.rows: Dict[bytes, Dict[Tuple[str, bytes], List[FakeCell]]] = {}
        self.calls: List[tuple] = []
        self.closed = False
        self.fail_with: Optional[Exception] = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def mutate_row(self, row_key: bytes, mutation) -> None:
        self.calls.append(("mutate_row", row_key, mutation))
        self._check()
        cells = self.rows.setdefault(row_key, defaultdict(list))
        cells[(mutation.family, mutation.qualifier)].insert(0, FakeCell(mutation.new_value))

    async def read_row(self, row_key: bytes, row_filter=None) -> Optional[FakeRow]:
        self.calls.append(("read_row", row_key, row_filter))
        self._check()
        if row_key not in self.rows:
            return None
        return FakeRow(row_key, self.rows[row_key])

    async def read_rows_stream(self, query):
        self.calls.append(("read_rows_stream", query))
        self._check()
        snapshot = [FakeRow(key, self.rows[key]) for key in sorted(self.rows)]

        async def stream():
            for row in snapshot:
                yield row

        return stream()

    async def close(self) -> None:
        self.closed = True


class FakeDataClient:
    """Hands out one FakeDataTable per (instance, table) pair."""

    def __init__(self):
        self.tables: Dict[Tuple[str, str], FakeDataTable] = {}
        self.closed = False

    def get_table(self, instance_id: str, table_id: str) -> FakeDataTable:
        key = (instance_id, table_id)
        if key not in self.tables:
            self.tables[key] = FakeDataTable(table_id)
        return self.tables[key]

    async def close(self) -> None:
        self.closed = True


# ============================================================================
# Fake Bigtable admin API
# ============================================================================

class FakeTransport:
    def __init__(self):
        self.closed = False

    async def close(self) -> None:
        self.closed = True


class FakeAdminClient:
    """Tracks table names and the raw requests sent to the admin API."""

    def __init__(self, existing: Tuple[str, ...] = ()):
        self.tables: Dict[str, dict] = {name: {} for name in existing}
        self.requests: List[Tuple[str, dict]] = []
        self.transport = FakeTransport()
        self.fail_with: Optional[Exception] = None

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    async def get_table(self, request: dict) -> dict:
        self.requests.append(("get_table", request))
        self._check()
        if request["name"] not in self.tables:
            raise NotFound(f"Table not found: {request['name']}")
        return self.tables[request["name"]]

    async def create_table(self, request: dict) -> dict:
        self.requests.append(("create_table", request))
        self._check()
        name = f"{request['parent']}/tables/{request['table_id']}"
        if name in self.tables:
            raise AlreadyExists(f"Table already exists: {name}")
        self.tables[name] = request["table"]
        return self.tables[name]

    async def delete_table(self, request: dict) -> None:
        self.requests.append(("delete_table", request))
        self._check()
        if request["name"] not in self.tables:
            raise NotFound(f"Table not found: {request['name']}")
        del self.tables[request["name"]]


# ============================================================================
# Metrics Fixtures
# ============================================================================

def collect_points(reader: InMemoryMetricReader) -> Dict[str, list]:
    """Flatten an InMemoryMetricReader snapshot to name -> data points."""
    points: Dict[str, list] = {}
    data = reader.get_metrics_data()
    if data is None:
        return points
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                points.setdefault(metric.name, []).extend(metric.data.data_points)
    return points


@pytest.fixture
def metric_reader() -> InMemoryMetricReader:
    return InMemoryMetricReader()


@pytest.fixture
def registry(metric_reader: InMemoryMetricReader):
    """A MetricRegistry wired to an in-memory reader."""
    reg = MetricRegistry(readers=[metric_reader])
    yield reg
    reg.shutdown()


@pytest.fixture
def client_metrics(registry: MetricRegistry) -> ClientMetrics:
    return ClientMetrics(registry)


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def config() -> Settings:
    """Settings for a quick run: six rows, no pacing, no cloud export."""
    return dataclasses.replace(
        Settings(),
        PROJECT_ID="test-project",
        INSTANCE_ID="test-instance",
        TABLE_NAME="Hello-Bigtable",
        ROWS=6,
        PACING_MS=0,
        EXIT_DELAY=0,
        CLOUD_EXPORT=False,
        CREATE_TABLE=True,
        DELETE_TABLE=True,
    )


# ============================================================================
# Connection Fixtures
# ============================================================================

@pytest.fixture
def data_client() -> FakeDataClient:
    return FakeDataClient()


@pytest.fixture
def admin_client() -> FakeAdminClient:
    return FakeAdminClient()


@pytest_asyncio.fixture
async def connection(
    config: Settings,
    client_metrics: ClientMetrics,
    data_client: FakeDataClient,
    admin_client: FakeAdminClient,
) -> AsyncGenerator[BigtableConnection, None]:
    """An open BigtableConnection backed by the fake clients."""
    conn = BigtableConnection(
        config.PROJECT_ID,
        config.INSTANCE_ID,
        metrics=client_metrics,
        data_client=data_client,
        admin_client=admin_client,
    )
    async with conn:
        yield conn


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that need a real Bigtable instance"
    )
