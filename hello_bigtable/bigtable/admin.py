"""
Table Admin Module

Table lifecycle through the Bigtable table admin API.
"""

import logging
from typing import Any, Iterable

from google.api_core.exceptions import NotFound

from ..metrics.client_metrics import ClientMetrics

logger = logging.getLogger(__name__)


class TableAdmin:
    """
    Creates, inspects and deletes tables in one Bigtable instance.

    Attributes:
        instance_path: "projects/<project>/instances/<instance>"
    """

    def __init__(self, client: Any, instance_path: str, metrics: ClientMetrics):
        self._client = client
        self.instance_path = instance_path
        self.metrics = metrics

    def table_path(self, table_id: str) -> str:
        return f"{self.instance_path}/tables/{table_id}"

    async def table_exists(self, table_id: str) -> bool:
        """Return True if the table exists, False on NotFound."""
        with self.metrics.time("get_table"):
            try:
                await self._client.get_table(request={"name": self.table_path(table_id)})
            except NotFound:
                return False
        return True

    async def create_table(self, table_id: str, column_families: Iterable[str]) -> None:
        """
        Create a table with the given column families.

        Each family keeps only the most recent cell version.
        """
        families = {name: {"gc_rule": {"max_num_versions": 1}} for name in column_families}
        logger.debug(f"Creating {table_id} with families {sorted(families)}")

        with self.metrics.time("create_table"):
            await self._client.create_table(
                request={
                    "parent": self.instance_path,
                    "table_id": table_id,
                    "table": {"column_families": families},
                }
            )

    async def delete_table(self, table_id: str) -> None:
        # Bigtable has no disable step; deletion is immediate
        with self.metrics.time("delete_table"):
            await self._client.delete_table(request={"name": self.table_path(table_id)})
