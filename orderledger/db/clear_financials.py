"""
Clear financial records from the command line.

Defaults wipe ledger entries, party payments, activity logs and investment,
and reset payments on orders while keeping the orders themselves.

Usage examples:
    python -m orderledger.db.clear_financials
    python -m orderledger.db.clear_financials --clear-orders
    python -m orderledger.db.clear_financials --no-clear-ledger --no-clear-investment
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from orderledger.core.logging import configure_logging
from orderledger.core.settings import get_app_settings
from orderledger.db.session import open_document_store
from orderledger.schemas.maintenance import ClearOptions
from orderledger.services.maintenance import MAX_BATCH_SIZE, MaintenanceService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    batch_size = get_app_settings().CLEAR_BATCH_SIZE
    parser = argparse.ArgumentParser(
        prog="python -m orderledger.db.clear_financials",
        description="Delete or reset financial records in batches.",
    )
    for name, info in ClearOptions.model_fields.items():
        parser.add_argument(
            "--" + name.replace("_", "-"),
            dest=name,
            action=argparse.BooleanOptionalAction,
            default=info.default,
            help=info.description,
        )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=batch_size,
        help=f"Operations per committed batch, at most {MAX_BATCH_SIZE} (default {batch_size})",
    )
    return parser


async def _run(options: ClearOptions, batch_size: int) -> int:
    store, engine = open_document_store(get_app_settings().DOCUMENT_STORE_BACKEND)
    try:
        summary = await MaintenanceService(store, batch_size).clear_financials(options)
    finally:
        if engine is not None:
            await engine.dispose()
    if summary is None:
        return 1
    print(summary.model_dump_json(by_alias=True, indent=2))
    return 0


# PUBLIC_INTERFACE
def main(argv: Optional[List[str]] = None) -> int:
    """Parse switches, run one sweep and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not 1 <= args.batch_size <= MAX_BATCH_SIZE:
        parser.error(f"--batch-size must be between 1 and {MAX_BATCH_SIZE}")
    configure_logging(get_app_settings().LOG_LEVEL)
    options = ClearOptions(**{name: getattr(args, name) for name in ClearOptions.model_fields})
    logger.info("Clearing financial data with %s", options.model_dump(by_alias=True))
    return asyncio.run(_run(options, args.batch_size))


if __name__ == "__main__":
    sys.exit(main())
