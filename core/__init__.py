"""
Core utilities and configuration for the store sync system.

Modules:
    config: Application settings and the per-store connection config
    database: Engine and session factories, scoped sessions per run
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration

Usage:
    from core.config import settings
    from core.database import session_scope
    from core.exceptions import RemoteAPIError, UpsertError
    from core.logging import setup_logging

Example:
    setup_logging()
    config = settings.store_config()

    async with session_scope(settings.DATABASE_URL) as session:
        ...
"""

__all__ = [
    "settings",
    "StoreConfig",
    "session_scope",
    "setup_logging",
    # Exceptions
    "SyncException",
    "ConfigurationError",
    "RemoteAPIError",
    "ServerError",
    "RateLimitError",
    "AuthenticationError",
    "ResourceNotFoundError",
    "ClientRequestError",
    "TransportError",
    "NormalizationError",
    "StoreError",
    "UpsertError",
    "EventPersistenceError",
    "ReconciliationError",
    "RetryableError",
    "NonRetryableError",
]
