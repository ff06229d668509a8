"""
Pydantic schemas for data validation and serialization.

Schemas:
    records: Remote records mapped to local fields (products, customers,
             orders with their line items)
    api: HTTP response models for the webhook service

Usage:
    from schemas.records import ProductRecord, OrderRecord
    from schemas.api import HealthCheckResponse
"""

__all__ = [
    "ProductRecord",
    "CustomerRecord",
    "LineItemRecord",
    "OrderRecord",
    "HealthCheckResponse",
    "SyncRunSummary",
]
