"""
Stock-request ledger (在庫確認依頼).

::

    [pending] --answer_request--> [completed] --delete_request--> [deleted(soft)]

Every transition is a single conditional UPDATE whose WHERE clause carries the
expected current state (compare-and-set).  A rowcount of 0 means the row is
missing or another caller already moved it; the loser gets ``StateError``
instead of overwriting the winner's answer.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.auth import Actor
from app.core.clock import utcnow
from app.core.errors import AuthError, NotFoundError, StateError, ValidationError
from app.models import Product, StockRequest, StockRequestStatus
from app.schemas import StockRequestRead
from app.services import catalog

logger = logging.getLogger(__name__)

# 在庫比率の閾値（以上）
HIGH_RATIO = 0.8
MEDIUM_RATIO = 0.5


# --------------------------------------------------------------------------- #
# ratio helpers                                                               #
# --------------------------------------------------------------------------- #
def stock_ratio(stock_quantity: Optional[int], location_capacity: Optional[int]) -> Optional[float]:
    """在庫量 ÷ 収容能力。どちらかが無い / 能力 0 以下なら None。"""
    if stock_quantity is None or location_capacity is None or location_capacity <= 0:
        return None
    return stock_quantity / location_capacity


def classify_ratio(ratio: Optional[float]) -> Optional[str]:
    if ratio is None:
        return None
    if ratio >= HIGH_RATIO:
        return "high"
    if ratio >= MEDIUM_RATIO:
        return "medium"
    return "low"


def to_read(req: StockRequest, location_capacity: Optional[int]) -> StockRequestRead:
    ratio = stock_ratio(req.stock_quantity, location_capacity)
    return StockRequestRead(
        **req.model_dump(),
        location_capacity=location_capacity,
        stock_ratio=ratio,
        ratio_level=classify_ratio(ratio),
    )


# --------------------------------------------------------------------------- #
# operations                                                                  #
# --------------------------------------------------------------------------- #
def get_request(session: Session, request_id: int) -> StockRequest:
    req = session.get(StockRequest, request_id)
    if req is None:
        raise NotFoundError(f"Stock request {request_id} not found", id=request_id)
    return req


def create_request(
    session: Session,
    product_number: str,
    actor: Optional[Actor],
    *,
    now: Optional[datetime] = None,
) -> StockRequest:
    if actor is None or not (actor.display_name or "").strip():
        raise AuthError("A signed-in user is required to request a stock count")
    if catalog.lookup(session, product_number) is None:
        raise ValidationError(
            f"Unknown product: {product_number}", product_number=product_number
        )

    req = StockRequest(
        product_number=product_number,
        requested_at=now or utcnow(),
        requested_by=actor.display_name,
        status=StockRequestStatus.pending,
    )
    session.add(req)
    try:
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        raise
    session.refresh(req)
    logger.info(
        "stock request created id=%s product=%s by=%s", req.id, product_number, actor.display_name
    )
    return req


def answer_request(
    session: Session,
    request_id: int,
    stock_quantity: int,
    *,
    now: Optional[datetime] = None,
) -> StockRequest:
    if stock_quantity is None or stock_quantity < 0:
        raise ValidationError(
            "stock_quantity must be zero or greater", stock_quantity=stock_quantity
        )

    stmt = (
        update(StockRequest)
        .where(
            StockRequest.id == request_id,
            StockRequest.status == StockRequestStatus.pending,
            StockRequest.is_deleted == False,  # noqa: E712
        )
        .values(
            status=StockRequestStatus.completed,
            stock_quantity=stock_quantity,
            checked_at=now or utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    _apply_transition(session, stmt, request_id, "answer")
    logger.info("stock request answered id=%s qty=%s", request_id, stock_quantity)
    return get_request(session, request_id)


def delete_request(
    session: Session,
    request_id: int,
    *,
    now: Optional[datetime] = None,
) -> None:
    stmt = (
        update(StockRequest)
        .where(
            StockRequest.id == request_id,
            StockRequest.status == StockRequestStatus.completed,
            StockRequest.is_deleted == False,  # noqa: E712
        )
        .values(is_deleted=True, deleted_at=now or utcnow())
        .execution_options(synchronize_session=False)
    )
    _apply_transition(session, stmt, request_id, "delete")
    logger.info("stock request deleted id=%s", request_id)


def list_active(session: Session) -> list[StockRequestRead]:
    """未削除の依頼を新しい順に。収容能力は品番マスタから left join。"""
    stmt = (
        select(StockRequest, Product.location_capacity)
        .join(Product, Product.product_number == StockRequest.product_number, isouter=True)
        .where(StockRequest.is_deleted == False)  # noqa: E712
        .order_by(StockRequest.requested_at.desc(), StockRequest.id.desc())
    )
    return [to_read(req, cap) for req, cap in session.exec(stmt).all()]


# --------------------------------------------------------------------------- #
# helpers                                                                     #
# --------------------------------------------------------------------------- #
def _apply_transition(session: Session, stmt, request_id: int, action: str) -> None:
    """条件付き UPDATE を実行し、1 行も更新されなければ理由を分類して送出する。"""
    try:
        result = session.execute(stmt)
    except SQLAlchemyError:
        session.rollback()
        raise
    if result.rowcount == 1:
        session.commit()
        return

    session.rollback()
    current = session.get(StockRequest, request_id)
    if current is None:
        raise NotFoundError(f"Stock request {request_id} not found", id=request_id)
    logger.warning(
        "stock request %s refused id=%s status=%s deleted=%s",
        action, request_id, current.status, current.is_deleted,
    )
    if current.is_deleted:
        raise StateError(f"Stock request {request_id} is already deleted", id=request_id)
    raise StateError(
        f"Cannot {action} stock request {request_id} in status {current.status.value}",
        id=request_id,
        status=current.status.value,
    )
