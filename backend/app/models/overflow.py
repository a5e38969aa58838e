"""Overflow ledger (オーバーフロー管理).

One row per logged overflow occurrence.  Rows are never updated except for
the soft-delete flag pair.  ``(product_number, created_at)`` is unique and is
the identity the floor UI deletes by; ``id`` is the surrogate key.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKeyConstraint, UniqueConstraint
from sqlmodel import Field, SQLModel


class OverflowReason(str, enum.Enum):
    over_production = "over_production"                    # 生産過多
    output_too_fast = "output_too_fast"                    # 出力が速すぎる
    stock_low_slot_too_small = "stock_low_slot_too_small"  # 在庫は少ないが棚が小さい
    other = "other"                                        # その他（自由記述）


REASON_LABELS: dict[OverflowReason, str] = {
    OverflowReason.over_production: "生産過多",
    OverflowReason.output_too_fast: "出力が速すぎる",
    OverflowReason.stock_low_slot_too_small: "在庫少・ロケーション小",
    OverflowReason.other: "その他",
}


class OverflowEvent(SQLModel, table=True):
    __tablename__ = "overflow_management"
    __table_args__ = (
        ForeignKeyConstraint(
            ["product_number"], ["product.product_number"], name="fk_overflow_product"
        ),
        UniqueConstraint("product_number", "created_at", name="uq_overflow_identity"),
        CheckConstraint("overflow_quantity > 0", name="ck_overflow_qty_positive"),
        CheckConstraint(
            "(is_deleted AND deleted_at IS NOT NULL) OR (NOT is_deleted AND deleted_at IS NULL)",
            name="ck_overflow_deleted_at",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    product_number: str = Field(index=True, description="品番")
    location_number: str = Field(description="発生時のロケーション番号")

    overflow_quantity: int = Field(description="オーバーフロー数量")
    # 列挙値、または reason=other の場合は自由記述そのもの
    overflow_reason: str = Field(description="オーバーフロー理由")

    created_at: datetime = Field(index=True, sa_type=DateTime(), description="登録日時")

    is_deleted: bool = Field(default=False, index=True)
    deleted_at: Optional[datetime] = Field(default=None, sa_type=DateTime())
