from __future__ import annotations
from typing import Optional

from sqlalchemy import CheckConstraint
from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """品番マスタ（参照専用。取り込みは /v1/products/upload のみ）"""

    __tablename__ = "product"
    __table_args__ = (
        CheckConstraint("location_capacity >= 0", name="ck_product_capacity_nonneg"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    product_number: str = Field(unique=True, index=True, description="品番")
    location_number: str = Field(index=True, description="ロケーション番号")
    box_type: Optional[str] = Field(default=None, description="箱種")

    # ロケーション収容能力（個）。在庫比率の分母
    location_capacity: int = Field(default=0, description="収容能力(個)")
