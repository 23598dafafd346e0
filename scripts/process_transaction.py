"""
Run the fan-out of one paid transaction.

Usage:
    python -m scripts.process_transaction 8
    python -m scripts.process_transaction 8 --resubmit
"""
import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from core.infrastructure.database.config import close_database, get_session_factory, init_database
from core.infrastructure.logging import configure_logging
from orchestration import create_default_coordinator


configure_logging(logging.INFO)
logger = logging.getLogger(__name__)


async def run(transaction_id: int, resubmit: bool) -> int:
    await init_database()
    coordinator = create_default_coordinator(get_session_factory())
    try:
        if resubmit:
            result = await coordinator.resubmit(transaction_id)
        else:
            result = await coordinator.process(transaction_id)
    finally:
        await coordinator.shutdown()
        await close_database()

    logger.info("=" * 80)
    if result.rejected:
        logger.error(f"Transaction {transaction_id} rejected: {result.error}")
        return 1

    for store_result in result.store_results:
        outcome = store_result.remote_order_number or store_result.error_message or ""
        logger.info(
            f"{store_result.store_domain}: {store_result.status.value} "
            f"(attempts={store_result.attempts}) {outcome}"
        )
    logger.info(f"Transaction {transaction_id}: {result.status.value} (settled={result.settled})")
    logger.info("=" * 80)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Fan a paid transaction out to its stores")
    parser.add_argument("transaction_id", type=int)
    parser.add_argument(
        "--resubmit",
        action="store_true",
        help="Re-submit the non-confirmed stores of a settled transaction",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args.transaction_id, args.resubmit)))


if __name__ == "__main__":
    main()
