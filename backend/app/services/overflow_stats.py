"""
Overflow aggregation.

* ``compute_stats``  – 期間内（両端含む）の未削除イベントを品番ごとに集計
* ``compute_detail`` – 品番ごとの全イベント（期間・削除フラグで絞らない）と
  解消までの日数 ``deleted_after_days``

Sorting (``sort_stats``) and page slicing (``paginate``) are presentation
transforms over the aggregated rows and never touch the database.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Generic, List, Optional, Sequence, TypeVar

import pandas as pd
from sqlmodel import Session, func, select

from app.core.errors import ValidationError
from app.models import OverflowEvent, Product
from app.schemas import OverflowDetail, OverflowStat
from app.services.overflow import reason_label

logger = logging.getLogger(__name__)

DETAIL_PAGE_SIZE = 5

CSV_COLUMNS = {
    "product_number": "品番",
    "location_number": "ロケーション番号",
    "total_quantity": "オーバーフロー数量",
    "overflow_count": "オーバーフロー回数",
}

T = TypeVar("T")


# --------------------------------------------------------------------------- #
# 集計                                                                         #
# --------------------------------------------------------------------------- #
def compute_stats(session: Session, start_date: date, end_date: date) -> List[OverflowStat]:
    """
    ``[start_date 00:00, end_date + 1 日 00:00)`` の未削除イベントを集計する。

    並びは品番昇順で固定（同じ引数なら同じ結果）。該当なしは空リスト。
    """
    if start_date > end_date:
        raise ValidationError(
            "start_date must not be after end_date", start_date=start_date, end_date=end_date
        )
    window_start = datetime.combine(start_date, time.min)
    window_end = datetime.combine(end_date + timedelta(days=1), time.min)

    stmt = (
        select(
            OverflowEvent.product_number,
            Product.location_number,
            func.sum(OverflowEvent.overflow_quantity).label("total_quantity"),
            func.count(OverflowEvent.id).label("overflow_count"),
        )
        .join(Product, Product.product_number == OverflowEvent.product_number, isouter=True)
        .where(
            OverflowEvent.is_deleted == False,  # noqa: E712
            OverflowEvent.created_at >= window_start,
            OverflowEvent.created_at < window_end,
        )
        .group_by(OverflowEvent.product_number, Product.location_number)
        .order_by(OverflowEvent.product_number)
    )
    stats = [
        OverflowStat(
            product_number=product_number,
            location_number=location_number,
            total_quantity=int(total or 0),
            overflow_count=int(count or 0),
        )
        for product_number, location_number, total, count in session.exec(stmt).all()
    ]
    logger.debug("compute_stats %s..%s -> %d products", start_date, end_date, len(stats))
    return stats


def deleted_after_days(created_at: datetime, deleted_at: Optional[datetime]) -> Optional[int]:
    """登録から削除（＝解消）までの経過日数（切り捨て）。未解消は None。"""
    if deleted_at is None:
        return None
    return (deleted_at - created_at) // timedelta(days=1)


def compute_detail(session: Session, product_number: str) -> List[OverflowDetail]:
    stmt = (
        select(OverflowEvent)
        .where(OverflowEvent.product_number == product_number)
        .order_by(OverflowEvent.created_at.desc(), OverflowEvent.id.desc())
    )
    return [
        OverflowDetail(
            **ev.model_dump(),
            reason_label=reason_label(ev.overflow_reason),
            deleted_after_days=(
                deleted_after_days(ev.created_at, ev.deleted_at) if ev.is_deleted else None
            ),
        )
        for ev in session.exec(stmt).all()
    ]


# --------------------------------------------------------------------------- #
# presentation transforms                                                     #
# --------------------------------------------------------------------------- #
def sort_stats(stats: Sequence[OverflowStat], order: str = "desc") -> List[OverflowStat]:
    """overflow_count で安定ソート（同数は元の並びを保持）。"""
    if order not in ("asc", "desc"):
        raise ValidationError(f"order must be 'asc' or 'desc' (got {order!r})", order=order)
    return sorted(stats, key=lambda s: s.overflow_count, reverse=(order == "desc"))


@dataclass
class Page(Generic[T]):
    items: List[T] = field(default_factory=list)
    page: int = 0
    page_size: int = DETAIL_PAGE_SIZE
    total: int = 0
    total_pages: int = 0


def page_count(total: int, page_size: int = DETAIL_PAGE_SIZE) -> int:
    return math.ceil(total / page_size) if total > 0 else 0


def clamp_page(page: int, total_pages: int) -> int:
    """0 未満は 0、最終ページ超は最終ページへ。"""
    return min(max(page, 0), max(total_pages - 1, 0))


def paginate(items: Sequence[T], page: int, page_size: int = DETAIL_PAGE_SIZE) -> Page[T]:
    """0 始まりのページ切り出し。範囲外のページ番号は丸める。"""
    if page_size <= 0:
        raise ValidationError("page_size must be positive", page_size=page_size)
    total = len(items)
    pages = page_count(total, page_size)
    current = clamp_page(page, pages)
    start = current * page_size
    return Page(
        items=list(items[start:start + page_size]),
        page=current,
        page_size=page_size,
        total=total,
        total_pages=pages,
    )


def stats_to_csv(stats: Sequence[OverflowStat]) -> str:
    """統計行を日本語ヘッダー付き CSV 文字列へ（Excel 用の BOM は呼び出し側で付与）。"""
    df = pd.DataFrame([s.model_dump() for s in stats], columns=list(CSV_COLUMNS))
    return df.rename(columns=CSV_COLUMNS).to_csv(index=False)
