"""
Overflow ledger: record / soft-delete / list.

Events are append-only.  The only mutation is the soft-delete flag pair, done
as a conditional UPDATE on ``is_deleted = false`` so two concurrent deletes
cannot both succeed.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Union

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.core.clock import as_naive_utc, utcnow
from app.core.errors import NotFoundError, StateError, ValidationError
from app.models import REASON_LABELS, OverflowEvent, OverflowReason, Product
from app.schemas import OverflowRead
from app.services import catalog

logger = logging.getLogger(__name__)

_REASON_VALUES = frozenset(r.value for r in OverflowReason)


def parse_reason(reason: Union[OverflowReason, str, None]) -> OverflowReason:
    if isinstance(reason, OverflowReason):
        return reason
    try:
        return OverflowReason(str(reason or "").strip())
    except ValueError:
        allowed = ", ".join(r.value for r in OverflowReason)
        raise ValidationError(
            f"Unknown overflow reason {reason!r} (expected one of: {allowed})", reason=reason
        ) from None


def reason_label(stored: str) -> str:
    """保存値 → 表示ラベル。自由記述（reason=other）はそのまま返す。"""
    try:
        return REASON_LABELS[OverflowReason(stored)]
    except ValueError:
        return stored


def record_overflow(
    session: Session,
    product_number: str,
    quantity: int,
    reason: Union[OverflowReason, str],
    custom_text: Optional[str] = None,
    *,
    location_number: Optional[str] = None,
    now: Optional[datetime] = None,
) -> OverflowEvent:
    """
    オーバーフローを 1 件登録する。

    * ``quantity`` は 1 以上
    * ``reason=other`` のときは ``custom_text`` 必須。保存されるのは
      列挙ラベルではなく自由記述そのもの
    * ``location_number`` 省略時は品番マスタのロケーション
    """
    if quantity is None or quantity <= 0:
        raise ValidationError("overflow quantity must be greater than zero", quantity=quantity)

    parsed = parse_reason(reason)
    if parsed is OverflowReason.other:
        if not (custom_text or "").strip():
            raise ValidationError("custom_text is required when reason is 'other'")
        if custom_text.strip() in _REASON_VALUES:
            # 保存値が列挙値と区別できなくなる
            raise ValidationError(
                f"custom_text must not be a reason code: {custom_text!r}", custom_text=custom_text
            )
        stored_reason = custom_text
    else:
        stored_reason = parsed.value

    product = catalog.lookup(session, product_number)
    if product is None:
        raise ValidationError(f"Unknown product: {product_number}", product_number=product_number)

    created_at = as_naive_utc(now) if now else utcnow()
    event = OverflowEvent(
        product_number=product_number,
        location_number=location_number or product.location_number,
        overflow_quantity=quantity,
        overflow_reason=stored_reason,
        created_at=created_at,
    )
    session.add(event)
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        # 識別キーの重複だけを StateError に。FK 違反などはそのまま上げる
        if not _identity_taken(session, product_number, created_at):
            raise
        raise StateError(
            f"An overflow event for {product_number} at {created_at} already exists",
            product_number=product_number,
        ) from exc
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(event)
    logger.info(
        "overflow recorded id=%s product=%s qty=%s reason=%s",
        event.id, product_number, quantity, parsed.value,
    )
    return event


def soft_delete(
    session: Session,
    product_number: str,
    created_at: datetime,
    *,
    now: Optional[datetime] = None,
) -> None:
    """識別タプル (product_number, created_at) で論理削除する。"""
    created_at = as_naive_utc(created_at)
    stmt = (
        update(OverflowEvent)
        .where(
            OverflowEvent.product_number == product_number,
            OverflowEvent.created_at == created_at,
            OverflowEvent.is_deleted == False,  # noqa: E712
        )
        .values(is_deleted=True, deleted_at=now or utcnow())
        .execution_options(synchronize_session=False)
    )
    _apply_delete(session, stmt, f"{product_number}@{created_at.isoformat()}")


def soft_delete_by_id(
    session: Session,
    event_id: int,
    *,
    now: Optional[datetime] = None,
) -> None:
    stmt = (
        update(OverflowEvent)
        .where(
            OverflowEvent.id == event_id,
            OverflowEvent.is_deleted == False,  # noqa: E712
        )
        .values(is_deleted=True, deleted_at=now or utcnow())
        .execution_options(synchronize_session=False)
    )
    _apply_delete(session, stmt, f"id={event_id}")


def list_active(session: Session) -> list[OverflowRead]:
    """未削除イベントを新しい順に。箱種は品番マスタから join。"""
    stmt = (
        select(OverflowEvent, Product.box_type)
        .join(Product, Product.product_number == OverflowEvent.product_number, isouter=True)
        .where(OverflowEvent.is_deleted == False)  # noqa: E712
        .order_by(OverflowEvent.created_at.desc(), OverflowEvent.id.desc())
    )
    return [
        OverflowRead(
            **event.model_dump(),
            box_type=box_type,
            reason_label=reason_label(event.overflow_reason),
        )
        for event, box_type in session.exec(stmt).all()
    ]


def _identity_taken(session: Session, product_number: str, created_at: datetime) -> bool:
    return session.exec(
        select(OverflowEvent.id).where(
            OverflowEvent.product_number == product_number,
            OverflowEvent.created_at == created_at,
        )
    ).first() is not None


def _apply_delete(session: Session, stmt, key: str) -> None:
    try:
        result = session.execute(stmt)
    except SQLAlchemyError:
        session.rollback()
        raise
    if result.rowcount != 1:
        session.rollback()
        logger.warning("overflow delete refused %s (missing or already deleted)", key)
        raise NotFoundError(f"No active overflow event {key}")
    session.commit()
    logger.info("overflow soft-deleted %s", key)
