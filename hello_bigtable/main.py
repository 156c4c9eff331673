#!/usr/bin/env python3
"""
hello-bigtable Entry Point

Connects to Cloud Bigtable, runs the hello-world sequence, and keeps the
process alive for a moment so the metrics reporters can export.

Usage:
    python -m hello_bigtable.main --project my-project --instance my-instance
    python -m hello_bigtable.main --rows 10 --pacing-ms 0   # Quick run
    python -m hello_bigtable.main --no-cloud-export         # Console metrics only
    python -m hello_bigtable.main --debug                   # Enable debug logging

Environment Variables:
    BIGTABLE_PROJECT      - Google Cloud project id
    BIGTABLE_INSTANCE     - Bigtable instance id
    BIGTABLE_TABLE        - Table to create, use and delete
    BIGTABLE_ROWS         - Number of greetings to write
    BIGTABLE_PACING_MS    - Pacing unit between writes
    BIGTABLE_EXIT_DELAY   - Seconds to wait for metrics export before exiting
    BIGTABLE_CLOUD_EXPORT - Export metrics to Cloud Monitoring (true/false)
    BIGTABLE_DEBUG        - Enable debug mode (true/false)
"""

import argparse
import asyncio
import dataclasses
import logging
import signal
import sys
from typing import List, Optional

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError

from .bigtable.connection import BigtableConnection
from .config.settings import Settings, settings
from .greetings import HelloBigtable
from .metrics.client_metrics import ClientMetrics
from .metrics.registry import MetricRegistry, enable_observability

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None, defaults: Settings = None) -> argparse.Namespace:
    """Parse command line arguments, defaulting to the given settings."""
    defaults = defaults if defaults is not None else settings
    parser = argparse.ArgumentParser(
        description="hello-bigtable: basic Cloud Bigtable operations with metrics",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--project",
        type=str,
        default=defaults.PROJECT_ID,
        help="Google Cloud project id",
    )

    parser.add_argument(
        "--instance",
        type=str,
        default=defaults.INSTANCE_ID,
        help="Bigtable instance id",
    )

    parser.add_argument(
        "--table",
        type=str,
        default=defaults.TABLE_NAME,
        help="Table to create, write, scan and delete",
    )

    parser.add_argument(
        "--rows",
        type=int,
        default=defaults.ROWS,
        help="Number of greetings to write",
    )

    parser.add_argument(
        "--pacing-ms",
        type=int,
        default=defaults.PACING_MS,
        help="Pacing unit in milliseconds between writes",
    )

    parser.add_argument(
        "--exit-delay",
        type=float,
        default=defaults.EXIT_DELAY,
        help="Seconds to wait for metrics export before exiting",
    )

    parser.add_argument(
        "--skip-create",
        action="store_true",
        help="Use an existing table instead of creating it",
    )

    parser.add_argument(
        "--keep-table",
        action="store_true",
        help="Do not delete the table at the end",
    )

    parser.add_argument(
        "--no-cloud-export",
        action="store_true",
        help="Report metrics to the console only",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace, base: Settings = None) -> Settings:
    """
    Overlay command line arguments on the base settings.

    Parse args with parse_args(argv, base) so unset options keep base values.
    """
    base = base if base is not None else settings
    return dataclasses.replace(
        base,
        PROJECT_ID=args.project,
        INSTANCE_ID=args.instance,
        TABLE_NAME=args.table,
        ROWS=args.rows,
        PACING_MS=args.pacing_ms,
        EXIT_DELAY=args.exit_delay,
        CREATE_TABLE=base.CREATE_TABLE and not args.skip_create,
        DELETE_TABLE=base.DELETE_TABLE and not args.keep_table,
        CLOUD_EXPORT=base.CLOUD_EXPORT and not args.no_cloud_export,
        DEBUG=base.DEBUG or args.debug,
    )


def setup_logging(debug: bool = False, level: str = None) -> None:
    """Configure logging based on debug flag."""
    if debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
        ]
    )


async def run(config: Settings, registry: MetricRegistry) -> int:
    """
    Connect, run the sequence and close the connection.

    Returns:
        Process exit status: 0 on success, 1 if an I/O error occurred
    """
    connection = BigtableConnection(
        config.PROJECT_ID,
        config.INSTANCE_ID,
        metrics=ClientMetrics(registry),
    )

    try:
        async with connection:
            summary = await HelloBigtable(connection, config).run()
    except (GoogleAPIError, GoogleAuthError, OSError) as e:
        logger.exception(f"Exception while running hello-bigtable: {e}")
        return 1

    logger.info(
        f"Wrote {summary.rows_written} rows, scanned {len(summary.scanned)}"
    )
    return 0


async def run_and_wait(config: Settings, registry: MetricRegistry) -> int:
    """Run the sequence, then give the reporters time to export."""
    status = await run(config, registry)
    if status == 0 and config.EXIT_DELAY > 0:
        logger.info(f"Waiting {config.EXIT_DELAY}s for metrics export")
        await asyncio.sleep(config.EXIT_DELAY)
    return status


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the program."""
    args = parse_args(argv, settings)
    config = build_settings(args)

    # Setup logging
    setup_logging(debug=config.DEBUG, level=config.LOG_LEVEL)

    logger.info("Starting hello-bigtable")
    logger.info(f"  Project: {config.PROJECT_ID}")
    logger.info(f"  Instance: {config.INSTANCE_ID}")
    logger.info(f"  Table: {config.TABLE_NAME}")
    logger.info(f"  Rows: {config.ROWS}")

    registry = enable_observability(config)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    task = loop.create_task(run_and_wait(config, registry))

    # Register signal handlers (Unix only)
    if sys.platform != 'win32':
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, task.cancel)

    status = 1
    try:
        status = loop.run_until_complete(task)
    except asyncio.CancelledError:
        logger.info("Interrupted, shutting down")
        status = 130
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()
        asyncio.set_event_loop(None)
        registry.shutdown()
        logger.info("hello-bigtable finished")

    sys.exit(status)


if __name__ == "__main__":
    main()
