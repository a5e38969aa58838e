"""
Overflow router: ledger writes, statistics and per-product drill-down.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import List

from fastapi import APIRouter, Depends, Query, Response
from sqlmodel import Session

from app.core.auth import current_actor
from app.core.database import get_session
from app.schemas import OverflowCreate, OverflowRead, OverflowStat
from app.services import catalog
from app.services import overflow as ledger
from app.services import overflow_stats as stats_svc

router = APIRouter(prefix="/v1/overflow", tags=["overflow"])


@router.get("", response_model=List[OverflowRead])
def list_overflow(session: Session = Depends(get_session)):
    return ledger.list_active(session)


@router.post(
    "", response_model=OverflowRead, status_code=201, dependencies=[Depends(current_actor)]
)
def record_overflow(body: OverflowCreate, session: Session = Depends(get_session)):
    event = ledger.record_overflow(
        session,
        body.product_number,
        body.quantity,
        body.reason,
        body.custom_text,
        location_number=body.location_number,
    )
    product = catalog.lookup(session, event.product_number)
    return OverflowRead(
        **event.model_dump(),
        box_type=product.box_type if product else None,
        reason_label=ledger.reason_label(event.overflow_reason),
    )


@router.delete("", status_code=204, dependencies=[Depends(current_actor)])
def delete_overflow(
    product_number: str = Query(...),
    created_at: datetime = Query(..., description="登録日時（識別キー）"),
    session: Session = Depends(get_session),
):
    ledger.soft_delete(session, product_number, created_at)
    return Response(status_code=204)


@router.delete("/{event_id}", status_code=204, dependencies=[Depends(current_actor)])
def delete_overflow_by_id(event_id: int, session: Session = Depends(get_session)):
    ledger.soft_delete_by_id(session, event_id)
    return Response(status_code=204)


@router.get("/stats", response_model=List[OverflowStat])
def overflow_stats(
    start_date: date = Query(...),
    end_date: date = Query(..., description="終了日(含む)"),
    order: str = Query("desc", description="asc | desc（回数）"),
    session: Session = Depends(get_session),
):
    rows = stats_svc.compute_stats(session, start_date, end_date)
    return stats_svc.sort_stats(rows, order)


@router.get("/stats.csv")
def overflow_stats_csv(
    start_date: date = Query(...),
    end_date: date = Query(...),
    order: str = Query("desc"),
    session: Session = Depends(get_session),
):
    rows = stats_svc.sort_stats(stats_svc.compute_stats(session, start_date, end_date), order)
    body = stats_svc.stats_to_csv(rows).encode("utf-8-sig")
    fname = f"overflow_stats_{start_date:%Y%m%d}_{end_date:%Y%m%d}.csv"
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{fname}"'},
    )


@router.get("/detail/{product_number}")
def overflow_detail(
    product_number: str,
    page: int = Query(0, description="0 始まり。範囲外は丸める"),
    page_size: int = Query(stats_svc.DETAIL_PAGE_SIZE, ge=1, le=100),
    session: Session = Depends(get_session),
):
    details = stats_svc.compute_detail(session, product_number)
    p = stats_svc.paginate(details, page, page_size)
    return {
        "product_number": product_number,
        "rows": [d.model_dump(mode="json") for d in p.items],
        "page": p.page,
        "page_size": p.page_size,
        "total": p.total,
        "total_pages": p.total_pages,
    }
