from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.core.database import get_session
from app.models import QRCode
from app.services import qr_codes as svc

router = APIRouter(prefix="/v1/qr_codes", tags=["qr_codes"])


@router.get("", response_model=List[QRCode])
def list_qr_codes(
    order: str = Query("desc", description="asc | desc（スキャン日時）"),
    q: Optional[str] = Query(None, description="QRコード内容の部分一致"),
    session: Session = Depends(get_session),
):
    return svc.list_codes(session, order, q)
