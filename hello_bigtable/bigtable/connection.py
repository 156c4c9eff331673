"""
Bigtable Connection Module

Owns the two client handles the program needs:
- the data client, used for reads and writes
- the table admin client, used to create and delete tables

Usage:
    async with BigtableConnection("my-project", "my-instance") as connection:
        admin = connection.admin
        table = connection.table("Hello-Bigtable")
"""

import logging
from typing import Any, Optional

from google.cloud.bigtable.data import BigtableDataClientAsync
from google.cloud.bigtable_admin_v2 import BigtableTableAdminAsyncClient

from ..metrics.client_metrics import ClientMetrics
from .admin import TableAdmin
from .table import GreetingTable

logger = logging.getLogger(__name__)


class BigtableConnection:
    """
    Connection to one Cloud Bigtable instance.

    Clients are created when the connection is opened, which must happen
    inside a running event loop. Both clients are closed on exit even if
    the body raised.

    Attributes:
        project_id: Google Cloud project that owns the instance
        instance_id: Bigtable instance to talk to
        metrics: ClientMetrics recorded around every call
    """

    def __init__(
            self,
            project_id: str,
            instance_id: str,
            metrics: ClientMetrics = None,
            data_client: Any = None,
            admin_client: Any = None,
    ):
        """
        Initialize the connection.

        Args:
            project_id: Google Cloud project id
            instance_id: Bigtable instance id
            metrics: ClientMetrics instance (no-op metrics if not provided)
            data_client: Pre-built data client (created on open if not provided)
            admin_client: Pre-built admin client (created on open if not provided)
        """
        self.project_id = project_id
        self.instance_id = instance_id
        self.metrics = metrics if metrics is not None else ClientMetrics()

        self._data_client = data_client
        self._admin_client = admin_client
        self._admin: Optional[TableAdmin] = None
        self._tables = []
        self._open = False

    @property
    def instance_path(self) -> str:
        return f"projects/{self.project_id}/instances/{self.instance_id}"

    async def open(self) -> "BigtableConnection":
        if self._open:
            return self

        logger.info(f"Connecting to Bigtable instance {self.instance_path}")
        if self._data_client is None:
            self._data_client = BigtableDataClientAsync(project=self.project_id)
        if self._admin_client is None:
            self._admin_client = BigtableTableAdminAsyncClient()

        self._admin = TableAdmin(self._admin_client, self.instance_path, self.metrics)
        self._open = True
        return self

    async def close(self) -> None:
        if not self._open:
            return
        self._open = False

        try:
            for table in self._tables:
                await table.close()
            await self._data_client.close()
        finally:
            await self._admin_client.transport.close()
            logger.info("Bigtable connection closed")

    @property
    def admin(self) -> TableAdmin:
        """The admin API: create, inspect and delete tables."""
        if not self._open:
            raise RuntimeError("Connection is not open")
        return self._admin

    def table(self, table_id: str) -> GreetingTable:
        """Get a handle for reads and writes on one table."""
        if not self._open:
            raise RuntimeError("Connection is not open")
        table = GreetingTable(
            self._data_client.get_table(self.instance_id, table_id),
            table_id,
            self.metrics,
        )
        self._tables.append(table)
        return table

    async def __aenter__(self) -> "BigtableConnection":
        return await self.open()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
