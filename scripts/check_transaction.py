"""
Print the state of a transaction and its store orders.

Usage:
    python -m scripts.check_transaction 8
    python -m scripts.check_transaction --errors
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

from core.application.services.diagnostics_service import DiagnosticsService
from core.infrastructure.database.config import close_database, get_session_factory
from core.infrastructure.logging import configure_logging


configure_logging(logging.INFO)
logger = logging.getLogger(__name__)


async def check_transaction(service: DiagnosticsService, transaction_id: int) -> int:
    transaction = await service.get_transaction(transaction_id)
    if transaction is None:
        logger.error(f"Transaction {transaction_id} not found")
        return 1

    logger.info("=" * 80)
    logger.info(f"TRANSACTION #{transaction.id}")
    logger.info("=" * 80)
    logger.info(f"Status:  {transaction.status}")
    logger.info(f"Derived: {transaction.derived_status or 'unsettled'}")
    logger.info(f"Total:   {transaction.total_amount} {transaction.currency}")
    logger.info(f"Buyer:   {transaction.buyer_name} <{transaction.buyer_email}>")
    logger.info(f"Payment: {transaction.payment_reference or '-'}")

    readiness = {s.domain: s for s in await service.store_readiness(transaction.store_domains)}
    orders = {o.store_domain: o for o in transaction.store_orders}

    for domain in transaction.store_domains:
        store = readiness.get(domain)
        credentials = "unknown store" if store is None else (
            "admin token" if store.has_admin_token else "NO admin token"
        )
        order = orders.get(domain)
        if order is None:
            logger.info(f"  {domain} [{credentials}]: no store order")
            continue
        detail = order.remote_order_number or order.error_message or ""
        logger.info(
            f"  {domain} [{credentials}]: {order.status} "
            f"(attempts={order.attempt_count}) {detail}"
        )

    if not transaction.consistent:
        logger.warning(
            f"Stored status {transaction.status} disagrees with ledger ({transaction.derived_status})"
        )
    return 0


async def show_errors(service: DiagnosticsService, limit: int) -> int:
    errors = await service.recent_errors(limit=limit)
    logger.info(f"Latest {len(errors)} store order error(s)")
    for entry in errors:
        logger.info(f"  #{entry.transaction_id} {entry.store_domain}: {entry.error_message}")
    return 0


async def run(transaction_id: Optional[int], errors: bool, limit: int) -> int:
    service = DiagnosticsService(session_factory=get_session_factory())
    try:
        if errors:
            return await show_errors(service, limit)
        return await check_transaction(service, transaction_id)
    finally:
        await close_database()


def main() -> None:
    parser = argparse.ArgumentParser(description="Diagnose a transaction fan-out")
    parser.add_argument("transaction_id", type=int, nargs="?")
    parser.add_argument("--errors", action="store_true", help="Show latest store order errors")
    parser.add_argument("--limit", type=int, default=20)
    args = parser.parse_args()

    if args.transaction_id is None and not args.errors:
        parser.error("transaction_id is required unless --errors is given")
    sys.exit(asyncio.run(run(args.transaction_id, args.errors, args.limit)))


if __name__ == "__main__":
    main()
