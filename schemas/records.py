"""
Pydantic schemas for remote records mapped to the local data model
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


class ProductRecord(BaseModel):
    """Product fields written on upsert"""

    shopify_id: str = Field(..., min_length=1, max_length=64)
    title: str = Field(..., max_length=500)
    vendor: Optional[str] = Field(None, max_length=255)
    price: Decimal = Decimal("0")

    @field_validator("title")
    @classmethod
    def clean_title(cls, v):
        return v.strip()


class CustomerRecord(BaseModel):
    """Customer fields written on upsert or inline creation"""

    shopify_id: str = Field(..., min_length=1, max_length=64)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class LineItemRecord(BaseModel):
    """
    One order line.

    product_shopify_id is None for custom lines that reference no
    product; such lines never resolve locally.
    """

    product_shopify_id: Optional[str] = None
    quantity: int = Field(1, ge=0)
    price: Decimal = Decimal("0")


class OrderRecord(BaseModel):
    """Order fields plus the embedded customer and line items"""

    shopify_id: str = Field(..., min_length=1, max_length=64)
    total_price: Decimal = Decimal("0")
    created_at: Optional[datetime] = None
    customer: Optional[CustomerRecord] = None
    line_items: List[LineItemRecord] = Field(default_factory=list)
