"""
Product catalog accessor.

* ``lookup``          – product_number → Product | None（読み取り専用）
* ``search_products`` – 品番の部分一致検索（1 ページ 10 件）
* ``import_products`` – CSV / Excel の品番マスタを upsert

Ledger services only ever call ``lookup``; the catalog is never written from
the stock-request or overflow paths.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import pandas as pd
from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import Session, select

from app.core.errors import NotFoundError, ValidationError
from app.models import Product
from app.utils.file_parser import read_dataframe

logger = logging.getLogger(__name__)

SEARCH_PAGE_SIZE = 10


def lookup(session: Session, product_number: str) -> Optional[Product]:
    if not product_number:
        return None
    return session.exec(
        select(Product).where(Product.product_number == product_number)
    ).first()


def get_product(session: Session, product_number: str) -> Product:
    product = lookup(session, product_number)
    if product is None:
        raise NotFoundError(
            f"Unknown product: {product_number}", product_number=product_number
        )
    return product


def search_products(
    session: Session,
    q: Optional[str] = None,
    page: int = 1,
    page_size: int = SEARCH_PAGE_SIZE,
) -> dict:
    """
    品番の部分一致（大文字小文字を区別しない）で検索する。

    ``page`` は 1 始まり。範囲外は 1..total_pages に丸める。
    """
    conds = []
    if q:
        conds.append(Product.product_number.ilike(f"%{q}%"))

    total = int(session.exec(select(func.count()).select_from(Product).where(*conds)).one())
    total_pages = math.ceil(total / page_size) if total else 0
    page = min(max(page, 1), max(total_pages, 1))

    rows = session.exec(
        select(Product)
        .where(*conds)
        .order_by(Product.product_number)
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).all()
    return {
        "rows": list(rows),
        "total": total,
        "page": page,
        "total_pages": total_pages,
    }


# --------------------------------------------------------------------------- #
# 品番マスタ取り込み                                                           #
# --------------------------------------------------------------------------- #
def _product_mapper(row: pd.Series) -> dict:
    """DataFrame の 1 行 → product テーブルの行 dict"""
    number = str(row.get("品番", "")).strip()
    if not number:
        raise ValueError("品番 is empty")
    location = str(row.get("ロケーション番号", "")).strip()
    if not location:
        raise ValueError("ロケーション番号 is empty")

    raw_cap = str(row.get("収容能力", "") or "").strip().replace(",", "")
    capacity = int(float(raw_cap)) if raw_cap else 0
    if capacity < 0:
        raise ValueError(f"収容能力 must be >= 0 (got {capacity})")

    box_type = str(row.get("箱種", "") or "").strip() or None
    return {
        "product_number": number,
        "location_number": location,
        "box_type": box_type,
        "location_capacity": capacity,
    }


def import_products(src, session: Session) -> dict:
    """
    品番マスタを upsert する（同一ファイル内の重複は最後の行を採用）。

    戻り値: ``{"total_rows", "success_rows", "errors": [{"row", "message"}]}``
    """
    df = src if isinstance(src, pd.DataFrame) else read_dataframe(src)
    if "品番" not in df.columns:
        raise ValidationError("品番 column not found", columns=list(df.columns))

    rows: dict[str, dict] = {}
    errors: list[dict] = []
    for idx, row in df.iterrows():
        try:
            data = _product_mapper(row)
        except ValueError as exc:
            errors.append({"row": int(idx) + 2, "message": str(exc)})
            continue
        rows[data["product_number"]] = data

    if rows:
        dialect = session.get_bind().dialect.name
        insert = pg_insert if dialect == "postgresql" else sqlite_insert
        stmt = insert(Product).values(list(rows.values()))
        stmt = stmt.on_conflict_do_update(
            index_elements=["product_number"],
            set_={
                "location_number": stmt.excluded.location_number,
                "box_type": stmt.excluded.box_type,
                "location_capacity": stmt.excluded.location_capacity,
            },
        )
        try:
            session.execute(stmt)
            session.commit()
        except Exception:
            session.rollback()
            raise

    logger.info(
        "import_products: rows=%d upserted=%d errors=%d", len(df), len(rows), len(errors)
    )
    return {"total_rows": int(len(df)), "success_rows": len(rows), "errors": errors}
