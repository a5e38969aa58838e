from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class UserSession(SQLModel, table=True):
    """ログインセッション。token → 表示名（依頼者名）の解決にのみ使う。"""

    __tablename__ = "user_sessions"

    token: str = Field(primary_key=True, max_length=64)
    display_name: str = Field(description="表示名")
    email: Optional[str] = Field(default=None)

    # naive UTC（app.core.clock.utcnow）
    created_at: datetime = Field(nullable=False, sa_type=DateTime())
    expires_at: datetime = Field(nullable=False, index=True, sa_type=DateTime())
    revoked_at: Optional[datetime] = Field(default=None, sa_type=DateTime())
