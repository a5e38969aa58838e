"""
Response / request bodies for the JSON API.

Table classes live in ``app.models``; everything here is a plain (non-table)
SQLModel so it can carry joined or computed columns.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel

from app.models import StockRequestStatus


# ----------------------------- product -----------------------------------
class ProductRead(SQLModel):
    id: Optional[int] = None
    product_number: str
    location_number: str
    box_type: Optional[str] = None
    location_capacity: int = 0


# --------------------------- stock request -------------------------------
class StockRequestCreate(SQLModel):
    product_number: str


class StockRequestAnswer(SQLModel):
    stock_quantity: int


class StockRequestRead(SQLModel):
    id: int
    product_number: str
    requested_at: datetime
    requested_by: str
    status: StockRequestStatus
    stock_quantity: Optional[int] = None
    checked_at: Optional[datetime] = None
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None

    # joined / computed
    location_capacity: Optional[int] = None
    stock_ratio: Optional[float] = None
    ratio_level: Optional[str] = None


# ----------------------------- overflow ----------------------------------
class OverflowCreate(SQLModel):
    product_number: str
    quantity: int
    reason: str
    custom_text: Optional[str] = None
    location_number: Optional[str] = None


class OverflowRead(SQLModel):
    id: int
    product_number: str
    location_number: str
    box_type: Optional[str] = None
    overflow_quantity: int
    overflow_reason: str
    reason_label: Optional[str] = None
    created_at: datetime
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None


class OverflowStat(SQLModel):
    product_number: str
    location_number: Optional[str] = None
    total_quantity: int
    overflow_count: int


class OverflowDetail(SQLModel):
    id: int
    product_number: str
    location_number: str
    overflow_quantity: int
    overflow_reason: str
    reason_label: Optional[str] = None
    created_at: datetime
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    # None = 未解消
    deleted_after_days: Optional[int] = None
