"""
QR scan list: read-only view over ``qr_codes``.

Rows are written by the handheld scanners, never by this API.
"""

from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from app.core.errors import ValidationError
from app.models import QRCode

SORT_ORDERS = ("asc", "desc")


def list_codes(session: Session, order: str = "desc", q: Optional[str] = None) -> list[QRCode]:
    """
    スキャン日時順に一覧。``q`` は content の部分一致（大文字小文字を区別しない）。

    未スキャン（scanned_at が NULL）は asc では末尾、desc では先頭
    （PostgreSQL の既定と同じ）。
    """
    if order not in SORT_ORDERS:
        raise ValidationError(f"order must be 'asc' or 'desc', got {order!r}", order=order)

    stmt = select(QRCode)
    if q and q.strip():
        stmt = stmt.where(QRCode.content.ilike(f"%{q.strip()}%"))
    if order == "asc":
        stmt = stmt.order_by(QRCode.scanned_at.asc().nullslast(), QRCode.id.asc())
    else:
        stmt = stmt.order_by(QRCode.scanned_at.desc().nullsfirst(), QRCode.id.desc())
    return list(session.exec(stmt).all())
