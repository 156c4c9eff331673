"""
Greeting Table Module

Single-row writes, point reads and full scans on one Bigtable table.
Row keys, qualifiers and values are handled as str and UTF-8 encoded on
the way in and decoded on the way out.
"""

from typing import Any, AsyncIterator, Optional, Tuple

from google.cloud.bigtable.data import ReadRowsQuery, SetCell
from google.cloud.bigtable.data.row_filters import CellsColumnLimitFilter

from ..metrics.client_metrics import ClientMetrics

ENCODING = "utf-8"


def _latest_value(row: Any, family: str, qualifier: str) -> Optional[str]:
    if row is None:
        return None
    cells = row.get_cells(family, qualifier.encode(ENCODING))
    if not cells:
        return None
    # Cells come back newest first
    return cells[0].value.decode(ENCODING)


class GreetingTable:
    """
    Read/write handle for a single table.

    Usage:
        table = connection.table("Hello-Bigtable")
        await table.put("greeting0", "cf1", "greeting", "Hello!")
        value = await table.get("greeting0", "cf1", "greeting")
        async for row_key, value in table.scan("cf1", "greeting"):
            ...
    """

    def __init__(self, table: Any, table_id: str, metrics: ClientMetrics):
        self._table = table
        self.table_id = table_id
        self.metrics = metrics

    async def put(self, row_key: str, family: str, qualifier: str, value: str) -> None:
        """Write one cell in one row."""
        mutation = SetCell(family, qualifier.encode(ENCODING), value.encode(ENCODING))
        with self.metrics.time("put"):
            await self._table.mutate_row(row_key.encode(ENCODING), mutation)

    async def get(self, row_key: str, family: str, qualifier: str) -> Optional[str]:
        """
        Read the latest value of one cell.

        Returns:
            The decoded value, or None if the row or the cell does not exist
        """
        with self.metrics.time("get"):
            row = await self._table.read_row(
                row_key.encode(ENCODING),
                row_filter=CellsColumnLimitFilter(1),
            )
        return _latest_value(row, family, qualifier)

    async def scan(self, family: str, qualifier: str) -> AsyncIterator[Tuple[str, Optional[str]]]:
        """
        Scan every row of the table in row key order.

        The scan timer covers opening the stream only, not the time the
        caller spends consuming rows.

        Yields:
            (row_key, value) tuples; value is None for rows without the cell
        """
        query = ReadRowsQuery(row_filter=CellsColumnLimitFilter(1))
        with self.metrics.time("scan"):
            rows = await self._table.read_rows_stream(query)
        async for row in rows:
            yield row.row_key.decode(ENCODING), _latest_value(row, family, qualifier)

    async def close(self) -> None:
        await self._table.close()
