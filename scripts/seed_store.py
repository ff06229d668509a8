"""
Seed the configured store with synthetic products, customers and orders
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.config import settings, usage
from core.exceptions import ConfigurationError
from core.logging import setup_logging
from sync.client import ShopifyClient
from sync.seeder import Seeder

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--products", type=int, default=settings.SEED_PRODUCTS)
    parser.add_argument("--customers", type=int, default=settings.SEED_CUSTOMERS)
    parser.add_argument("--orders", type=int, default=settings.SEED_ORDERS)
    return parser.parse_args(argv)


async def main(args) -> int:
    try:
        config = settings.store_config()
    except ConfigurationError as e:
        logger.error(e.message)
        logger.error(usage("seed_store.py"))
        return 1

    try:
        async with ShopifyClient(config) as client:
            seeder = Seeder(
                client,
                request_delay=settings.SEED_REQUEST_DELAY,
                order_delay=settings.SEED_ORDER_DELAY,
            )
            await seeder.seed(args.products, args.customers, args.orders)
    except Exception as e:
        logger.error(f"Unexpected error during seeding: {e}")
        return 1

    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(asyncio.run(main(parse_args())))
