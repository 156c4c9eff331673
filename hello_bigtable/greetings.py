"""
Hello Bigtable Module

The operation sequence the program demonstrates:

    create table -> write greetings -> get one row -> scan all rows -> delete table

Note: this example uses sequential numeric row keys for simplicity. Rows are
stored sorted by key, so sequential keys concentrate writes on a single node
and perform poorly in production. See
https://cloud.google.com/bigtable/docs/schema-design
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional

from .bigtable.admin import TableAdmin
from .bigtable.connection import BigtableConnection
from .bigtable.table import GreetingTable
from .config.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


@dataclass
class RunSummary:
    """What one run of the sequence wrote and read back."""

    rows_written: int = 0
    first_greeting: Optional[str] = None
    scanned: List[str] = field(default_factory=list)
    table_created: bool = False
    table_deleted: bool = False


class HelloBigtable:
    """
    Runs the hello-world sequence against an open BigtableConnection.

    Each step is its own coroutine so it can be driven one at a time;
    run() calls them in order.

    Attributes:
        connection: Open BigtableConnection
        config: Settings providing table name, schema and pacing
        rng: Random source for write pacing
    """

    def __init__(
            self,
            connection: BigtableConnection,
            config: Settings = None,
            rng: random.Random = None,
    ):
        self.connection = connection
        self.config = config if config is not None else default_settings
        self.rng = rng if rng is not None else random.Random()

    @property
    def admin(self) -> TableAdmin:
        return self.connection.admin

    def row_key(self, index: int) -> str:
        return f"{self.config.ROW_KEY_PREFIX}{index}"

    def greeting(self, index: int) -> str:
        greetings = self.config.GREETINGS
        return greetings[index % len(greetings)]

    def pacing_delay(self) -> float:
        """Seconds to wait after a write: PACING_MS times a random step."""
        return self.config.PACING_MS * self.rng.randrange(self.config.PACING_STEPS) / 1000

    async def create_table(self) -> bool:
        """
        Create the table with a single column family.

        Returns:
            True if the table was created, False if it already existed
        """
        name = self.config.TABLE_NAME
        logger.info(f"Create table {name}")

        if await self.admin.table_exists(name):
            logger.info(f"Table {name} already exists, reusing it")
            return False

        await self.admin.create_table(name, [self.config.COLUMN_FAMILY])
        return True

    async def write_greetings(self, table: GreetingTable, rows: int = None) -> int:
        """Write one greeting per row, pausing between writes."""
        rows = rows if rows is not None else self.config.ROWS
        logger.info("Write some greetings to the table")

        for i in range(rows):
            # Put a single row; one mutation per call
            await table.put(
                self.row_key(i),
                self.config.COLUMN_FAMILY,
                self.config.COLUMN_NAME,
                self.greeting(i),
            )
            logger.debug(f"Wrote {self.row_key(i)}")

            delay = self.pacing_delay()
            if delay > 0:
                await asyncio.sleep(delay)

        return rows

    async def get_greeting(self, table: GreetingTable, row_key: str = None) -> Optional[str]:
        """Get the first greeting by row key and print it."""
        row_key = row_key if row_key is not None else self.row_key(0)
        greeting = await table.get(row_key, self.config.COLUMN_FAMILY, self.config.COLUMN_NAME)

        print("Get a single greeting by row key")
        print(f"\t{row_key} = {greeting}")
        return greeting

    async def scan_greetings(self, table: GreetingTable) -> List[str]:
        """Scan across all rows and print each greeting."""
        logger.info("Scan for all greetings:")

        values = []
        async for _, value in table.scan(self.config.COLUMN_FAMILY, self.config.COLUMN_NAME):
            print(f"\t{value}")
            values.append(value)
        return values

    async def delete_table(self) -> None:
        logger.info("Delete the table")
        await self.admin.delete_table(self.config.TABLE_NAME)

    async def run(self) -> RunSummary:
        """Run every step in order and return what happened."""
        summary = RunSummary()

        if self.config.CREATE_TABLE:
            summary.table_created = await self.create_table()

        table = self.connection.table(self.config.TABLE_NAME)

        summary.rows_written = await self.write_greetings(table)
        summary.first_greeting = await self.get_greeting(table)
        summary.scanned = await self.scan_greetings(table)

        if self.config.DELETE_TABLE:
            await self.delete_table()
            summary.table_deleted = True

        return summary
