"""
Stock-request router (在庫確認依頼).

Domain errors propagate to the handler registered in ``app.main``.
"""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlmodel import Session

from app.core.auth import Actor, current_actor
from app.core.database import get_session
from app.schemas import StockRequestAnswer, StockRequestCreate, StockRequestRead
from app.services import catalog
from app.services import stock_requests as svc

router = APIRouter(prefix="/v1/stock_requests", tags=["stock_requests"])


def _read(session: Session, req) -> StockRequestRead:
    product = catalog.lookup(session, req.product_number)
    return svc.to_read(req, product.location_capacity if product else None)


@router.get("", response_model=List[StockRequestRead])
def list_stock_requests(session: Session = Depends(get_session)):
    return svc.list_active(session)


@router.post("", response_model=StockRequestRead, status_code=201)
def create_stock_request(
    body: StockRequestCreate,
    actor: Actor = Depends(current_actor),
    session: Session = Depends(get_session),
):
    req = svc.create_request(session, body.product_number, actor)
    return _read(session, req)


@router.post(
    "/{request_id}/answer",
    response_model=StockRequestRead,
    dependencies=[Depends(current_actor)],
)
def answer_stock_request(
    request_id: int,
    body: StockRequestAnswer,
    session: Session = Depends(get_session),
):
    req = svc.answer_request(session, request_id, body.stock_quantity)
    return _read(session, req)


@router.delete("/{request_id}", status_code=204, dependencies=[Depends(current_actor)])
def delete_stock_request(request_id: int, session: Session = Depends(get_session)):
    svc.delete_request(session, request_id)
    return Response(status_code=204)
