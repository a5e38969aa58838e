"""Stock-count request (在庫確認依頼).

State machine::

    pending --answer--> completed --delete--> (soft deleted)

``stock_quantity`` / ``checked_at`` are NULL exactly while pending and set
exactly when completed; ``deleted_at`` is set exactly when ``is_deleted``.
The check constraints below mirror what the service layer enforces.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKeyConstraint
from sqlmodel import Field, SQLModel


class StockRequestStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"
    cancelled = "cancelled"


class StockRequest(SQLModel, table=True):
    __tablename__ = "stock_requests"
    __table_args__ = (
        ForeignKeyConstraint(
            ["product_number"], ["product.product_number"], name="fk_stockreq_product"
        ),
        CheckConstraint(
            "status <> 'pending' OR (stock_quantity IS NULL AND checked_at IS NULL)",
            name="ck_stockreq_pending_unanswered",
        ),
        CheckConstraint(
            "status <> 'completed' OR (stock_quantity IS NOT NULL AND checked_at IS NOT NULL)",
            name="ck_stockreq_completed_answered",
        ),
        CheckConstraint(
            "(is_deleted AND deleted_at IS NOT NULL) OR (NOT is_deleted AND deleted_at IS NULL)",
            name="ck_stockreq_deleted_at",
        ),
    )

    # primary key (surrogate)
    id: Optional[int] = Field(default=None, primary_key=True)

    product_number: str = Field(index=True, description="品番")
    requested_at: datetime = Field(index=True, sa_type=DateTime(), description="依頼日時")
    requested_by: str = Field(description="依頼者（表示名）")

    status: StockRequestStatus = Field(
        default=StockRequestStatus.pending, index=True, description="ステータス"
    )

    # answer
    stock_quantity: Optional[int] = Field(default=None, description="在庫量(個)")
    checked_at: Optional[datetime] = Field(default=None, sa_type=DateTime(), description="確認日時")

    # soft delete
    is_deleted: bool = Field(default=False, index=True)
    deleted_at: Optional[datetime] = Field(default=None, sa_type=DateTime())
