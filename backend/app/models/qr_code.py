from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class QRCode(SQLModel, table=True):
    """ハンディで読み取った QR コード（内容は品番を含む文字列）。"""

    __tablename__ = "qr_codes"

    id: Optional[int] = Field(default=None, primary_key=True)
    content: str = Field(index=True, description="QRコード内容")
    quantity: int = Field(default=0, description="数量")
    scanned_at: Optional[datetime] = Field(
        default=None, index=True, sa_type=DateTime(), description="スキャン日時"
    )
