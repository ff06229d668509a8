"""
Store synchronization components.

Modules:
    retry: Retry with exponential backoff for 5xx and 429 responses
    client: Shopify Admin API client (page reads, entity creates)
    mappers: Remote JSON to local record schemas
    gateway: Local store upserts, relation lookups, event rows, run ledger
    reconciler: Products → customers → orders reconciliation run
    seeder: Synthetic data generator writing through the client
    scheduler: APScheduler cron job firing reconciliation runs

Architecture:
    Scheduler → Reconciler → (ShopifyClient, StoreGateway)
    Seeder → ShopifyClient
    Webhook API → StoreGateway

    The reconciler processes records strictly one after another and
    commits each record on its own. An error aborts the rest of the run;
    rows committed before it stay.

Usage:
    from sync.client import ShopifyClient
    from sync.gateway import StoreGateway
    from sync.reconciler import Reconciler, run_reconciliation

Example:
    config = settings.store_config()
    stats = await run_reconciliation(config, settings.DATABASE_URL)
    print(f"Synced {stats.orders_synced} orders")
"""

__all__ = [
    "RetryPolicy",
    "ShopifyClient",
    "EntityType",
    "RecordMapper",
    "StoreGateway",
    "Reconciler",
    "SyncStats",
    "run_reconciliation",
    "Seeder",
    "SeedReport",
    "SyncScheduler",
]
