"""
Product catalog router.

* GET  /v1/products                  – 品番の部分一致検索（10 件 / ページ）
* GET  /v1/products/{product_number} – 品番詳細
* POST /v1/products/upload           – 品番マスタ CSV / Excel の取り込み
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlmodel import Session

from app.core.database import get_session
from app.schemas import ProductRead
from app.services import catalog

router = APIRouter(prefix="/v1/products", tags=["products"])


@router.get("")
def search_products(
    q: Optional[str] = Query(None, description="部分一致検索: 品番"),
    page: int = Query(1, description="1 始まり"),
    session: Session = Depends(get_session),
):
    result = catalog.search_products(session, q=q, page=page)
    return {
        **result,
        "rows": [ProductRead.model_validate(p, from_attributes=True) for p in result["rows"]],
    }


@router.post("/upload")
def upload_products(
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
):
    try:
        return catalog.import_products(file, session)
    except ValueError as exc:
        # 空ファイル / 非対応形式 / デコード失敗
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/{product_number}", response_model=ProductRead)
def get_product(product_number: str, session: Session = Depends(get_session)):
    return catalog.get_product(session, product_number)
